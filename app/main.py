import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, get_settings
from app.logging_config import configure_logging, set_request_id
from app.routers import analyze_router, extract_router
from app.services.pipeline import build_pipeline
from app.services.storage_service import ensure_upload_dir

logger = logging.getLogger(__name__)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """The one pooled client shared by both provider clients."""
    return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build process-wide dependencies once: settings, the upload directory,
    one pooled HTTP client and the pipeline that uses it.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    settings.validate_credentials()
    ensure_upload_dir(settings.UPLOAD_DIR)

    async with build_http_client(settings) as http_client:
        app.state.pipeline = build_pipeline(settings, http_client)
        logger.info("Solar analysis relay ready, uploads in %s", settings.UPLOAD_DIR)
        yield


app = FastAPI(
    title="Solar Bill Analysis Relay",
    version="1.0.0",
    description="Extracts text from electricity bills via OCR and returns an LLM solar adoption analysis.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = set_request_id(request.headers.get("x-request-id"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# include routers
app.include_router(extract_router.router, tags=["extract"])
app.include_router(analyze_router.router, tags=["analyze"])


@app.get("/", tags=["root"])
async def root():
    """
    Quick health-check endpoint to confirm the service is running.
    """
    return {"message": "Solar analysis relay is live."}


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
