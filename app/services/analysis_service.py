"""
LLM-backed analysis service.

`AnthropicClient` wraps a single call to the Anthropic Messages API through
the `anthropic` SDK and returns the first text block of the reply.
`AnalysisService` builds the solar adoption prompt around the supplied text,
sends exactly one request, and reports every failure as `AnalysisError`.
"""

import logging
from typing import Optional

import anthropic
import httpx
from pydantic import ValidationError as PayloadValidationError

from app.exceptions import AnalysisError, PipelineError, ProviderError, TransportError
from app.schemas import MessagesResponse
from app.services.prompt import build_analysis_prompt

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Single-turn, text-only Messages API client with retries disabled."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        api_key: str,
        model: str,
        max_tokens: int,
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout_seconds: float = 300.0,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            http_client=http_client,
            max_retries=0,
            timeout=timeout_seconds,
            default_headers={"anthropic-version": api_version},
        )
        self._model = model
        self._max_tokens = max_tokens

    async def create_message(self, prompt: str) -> str:
        try:
            raw = await self._client.messages.with_raw_response.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[
                    {"role": "user", "content": [{"type": "text", "text": prompt}]},
                ],
            )
        except anthropic.APIConnectionError as exc:
            # the SDK's own message is generic; the httpx cause names the failure
            raise TransportError(f"LLM provider unreachable: {exc.__cause__ or exc}") from exc
        except anthropic.APIStatusError as exc:
            raise ProviderError(
                f"LLM provider returned HTTP {exc.status_code}: {exc.message}"
            ) from exc
        except anthropic.APIError as exc:
            raise ProviderError(f"LLM provider error: {exc}") from exc

        # validated against our own envelope so missing fields fail closed
        try:
            payload = MessagesResponse.model_validate(raw.http_response.json())
        except (ValueError, PayloadValidationError) as exc:
            raise ProviderError(f"Unexpected LLM provider response: {exc}") from exc

        text: Optional[str] = next(
            (block.text for block in payload.content if block.type == "text" and block.text is not None),
            None,
        )
        if text is None:
            raise ProviderError("LLM provider response contained no text block")
        return text


class AnalysisService:
    """Runs the fixed solar adoption analysis over a piece of text."""

    def __init__(self, client: AnthropicClient) -> None:
        self._client = client

    async def analyze(self, text: str) -> str:
        prompt = build_analysis_prompt(text)
        logger.info("Requesting analysis for %d chars of input", len(text))
        try:
            analysis = await self._client.create_message(prompt)
        except PipelineError as exc:
            raise AnalysisError(str(exc)) from exc
        logger.info("Received analysis of %d chars", len(analysis))
        return analysis
