import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status

from app.dependencies import get_pipeline
from app.exceptions import ValidationError
from app.routers.responses import ERROR_RESPONSES, error_response

# API schemas define request and response payloads for the endpoint
from app.schemas import AnalyzeTextRequest, AnalyzeTextResponse
from app.services.pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

# Router for direct text analysis without OCR
router = APIRouter()

# The body is parsed by hand below, so document it explicitly
_REQUEST_BODY_DOC = {
    "requestBody": {
        "content": {"application/json": {"schema": AnalyzeTextRequest.model_json_schema()}},
    }
}


def _as_text(value: Any) -> str:
    """Strings pass through; numbers, booleans, lists and objects are sent as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


async def _require_text(request: Request) -> str:
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except ValueError:
        body = None

    # Missing or unparsable body, missing field, null, empty or falsy value
    if not isinstance(body, dict):
        raise ValidationError("No text provided for analysis")
    req = AnalyzeTextRequest.model_validate(body)
    if not req.text:
        raise ValidationError("No text provided for analysis")
    return _as_text(req.text)


@router.post(
    "/analyze-text",
    response_model=AnalyzeTextResponse,
    responses=ERROR_RESPONSES,
    openapi_extra=_REQUEST_BODY_DOC,
)
async def analyze_text(
    request: Request,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """
    Runs the solar adoption analysis over text the client already has,
    e.g. OCR output from an earlier call.
    """

    try:
        text = await _require_text(request)
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        result = await pipeline.analyze_text(text)
    except Exception as e:
        logger.error("Analysis failed: %s", e)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Analysis failed",
            details=str(e),
        )

    return AnalyzeTextResponse(analysis=result.analysis)
