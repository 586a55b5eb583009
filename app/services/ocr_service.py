"""
OCR-based text extraction service.

Sends a stored upload to the OCR.space parse endpoint and turns the response
into a single text string. The request is configured for English, table-aware
PDF parsing. Recognized segments are joined with newlines in the order the
provider returns them; when nothing is recognized the placeholder
`NO_TEXT_PLACEHOLDER` is returned instead of an empty string.
"""

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError as PayloadValidationError
from starlette.concurrency import run_in_threadpool

from app.exceptions import OcrProcessingError, ProviderError, TransportError
from app.schemas import OcrParsedResult, OcrSpaceResponse
from app.services.storage_service import StoredUpload

logger = logging.getLogger(__name__)

NO_TEXT_PLACEHOLDER = "No text extracted"


def join_parsed_text(results: Optional[List[OcrParsedResult]]) -> str:
    """Concatenate parsed segments, falling back to the placeholder."""
    text = "\n".join(r.ParsedText for r in results or [])
    return text or NO_TEXT_PLACEHOLDER


class OcrSpaceClient:
    """Thin async client for the OCR.space `parse/image` endpoint."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        api_key: str,
        url: str = "https://api.ocr.space/parse/image",
        language: str = "eng",
        filetype: str = "pdf",
        is_table: bool = True,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._url = url
        self._language = language
        self._filetype = filetype
        self._is_table = is_table

    def _form_fields(self) -> dict:
        return {
            "apikey": self._api_key,
            "language": self._language,
            "isTable": "true" if self._is_table else "false",
            "filetype": self._filetype,
        }

    async def extract_text(self, upload: StoredUpload) -> str:
        """
        Run OCR on a stored upload.

        Raises:
            OcrProcessingError: the provider flagged the document as failed.
            TransportError: the provider could not be reached.
            ProviderError: non-success status or an unexpected payload.
        """
        content = await run_in_threadpool(upload.read_bytes)
        files = {"file": (upload.filename, content, "application/pdf")}

        try:
            response = await self._http.post(self._url, data=self._form_fields(), files=files)
        except httpx.TransportError as exc:
            raise TransportError(f"OCR provider unreachable: {exc}") from exc

        if response.is_error:
            raise ProviderError(
                f"OCR provider returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = OcrSpaceResponse.model_validate(response.json())
        except (ValueError, PayloadValidationError) as exc:
            raise ProviderError(f"Unexpected OCR provider response: {exc}") from exc

        if payload.IsErroredOnProcessing:
            logger.warning("OCR provider reported a processing error: %s", payload.ErrorMessage)
            raise OcrProcessingError(payload.ErrorMessage)

        text = join_parsed_text(payload.ParsedResults)
        logger.info(
            "OCR extracted %d chars from %d segment(s)",
            len(text),
            len(payload.ParsedResults or []),
        )
        return text
