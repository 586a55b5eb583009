from typing import List, Optional, Union

from fastapi import status
from fastapi.responses import JSONResponse

from app.schemas import ErrorResponse

# OpenAPI documentation for the error bodies both routers return
ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def error_response(
    status_code: int,
    error: str,
    details: Optional[Union[str, List[str]]] = None,
) -> JSONResponse:
    """Build the `{error, details}` body; `details` is omitted when absent."""
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
