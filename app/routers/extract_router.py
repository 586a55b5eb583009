import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, File, UploadFile, status
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.config import Settings, get_settings
from app.dependencies import get_pipeline
from app.exceptions import OcrProcessingError, ValidationError
from app.routers.responses import ERROR_RESPONSES, error_response

# Pydantic response schema for standardized API output
from app.schemas import ExtractAndAnalyzeResponse
from app.services.pipeline import AnalysisPipeline
from app.services.storage_service import StoredUpload, save_upload

logger = logging.getLogger(__name__)

# Router dedicated to the document extraction + analysis flow
router = APIRouter()


def _require_file(file: Union[UploadFile, str, None]) -> UploadFile:
    # a plain form field named `file` is not an upload
    if not isinstance(file, StarletteUploadFile) or not file.filename or file.size == 0:
        raise ValidationError("No file uploaded")
    return file


@router.post(
    "/extract-and-analyze",
    response_model=ExtractAndAnalyzeResponse,
    responses=ERROR_RESPONSES,
)
async def extract_and_analyze(
    file: Union[UploadFile, str, None] = File(None),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    """
    Accepts an uploaded PDF bill, extracts its text through OCR, runs the
    solar adoption analysis over that text and returns both.

    Flow:
    1. Store the upload under a unique temporary name.
    2. OCR the stored file; the file is deleted as soon as the call is over.
    3. Send the extracted text to the LLM for analysis.
    """

    # Reject requests without a usable upload before touching any provider
    try:
        file = _require_file(file)
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    upload: Optional[StoredUpload] = None
    try:
        upload = await save_upload(file, settings.UPLOAD_DIR)
        result = await pipeline.extract_and_analyze(upload)
    except OcrProcessingError as e:
        logger.error("OCR processing failed: %s", e.details)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "OCR processing failed",
            details=e.details,
        )
    except Exception as e:
        # Network, provider and parsing failures all end the request here
        logger.error("Processing failed: %s", e)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Processing failed",
            details=str(e),
        )
    finally:
        # No-op when the extraction step already released the file
        if upload is not None:
            upload.release()

    return ExtractAndAnalyzeResponse(extracted_text=result.extracted_text, analysis=result.analysis)
