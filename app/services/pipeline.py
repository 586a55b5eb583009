import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import Settings
from app.services.analysis_service import AnalysisService, AnthropicClient
from app.services.ocr_service import OcrSpaceClient
from app.services.storage_service import StoredUpload

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Request-scoped state carried from one step to the next."""

    text: str = ""
    upload: Optional[StoredUpload] = None
    extracted_text: Optional[str] = None
    analysis: str = ""


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError


class ExtractTextStep(PipelineStep):
    """Runs OCR on the stored upload and releases it once the call is over."""

    def __init__(self, ocr_client: OcrSpaceClient) -> None:
        self._ocr_client = ocr_client

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.upload is None:
            raise ValueError("PipelineContext.upload must be set before extraction")
        try:
            context.extracted_text = await self._ocr_client.extract_text(context.upload)
        finally:
            context.upload.release()
        context.text = context.extracted_text
        return context


class AnalyzeStep(PipelineStep):
    def __init__(self, analysis_service: AnalysisService) -> None:
        self._analysis_service = analysis_service

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.analysis = await self._analysis_service.analyze(context.text)
        return context


class AnalysisPipeline:
    """
    Orchestrates the two stages.

    Extraction path: extract -> analyze. Text path: analyze only.
    Any step failure propagates to the caller unchanged.
    """

    def __init__(self, extract_step: PipelineStep, analyze_step: PipelineStep) -> None:
        self._extract_step = extract_step
        self._analyze_step = analyze_step

    async def extract_and_analyze(self, upload: StoredUpload) -> PipelineContext:
        logger.info("Running extract-and-analyze for %r", upload.filename)
        context = PipelineContext(upload=upload)
        context = await self._extract_step.run(context)
        return await self._analyze_step.run(context)

    async def analyze_text(self, text: str) -> PipelineContext:
        logger.info("Running text analysis")
        return await self._analyze_step.run(PipelineContext(text=text))


def build_pipeline(settings: Settings, http_client: httpx.AsyncClient) -> AnalysisPipeline:
    """Wire the provider clients from settings into a ready pipeline."""
    ocr_client = OcrSpaceClient(
        http_client=http_client,
        api_key=settings.OCR_API_KEY,
        url=settings.OCR_API_URL,
        language=settings.OCR_LANGUAGE,
        filetype=settings.OCR_FILETYPE,
        is_table=settings.OCR_IS_TABLE,
    )
    anthropic_client = AnthropicClient(
        http_client=http_client,
        api_key=settings.CLAUDE_API_KEY,
        model=settings.CLAUDE_MODEL,
        max_tokens=settings.CLAUDE_MAX_TOKENS,
        base_url=settings.ANTHROPIC_BASE_URL,
        api_version=settings.ANTHROPIC_VERSION,
        timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
    )
    return AnalysisPipeline(
        extract_step=ExtractTextStep(ocr_client),
        analyze_step=AnalyzeStep(AnalysisService(anthropic_client)),
    )
