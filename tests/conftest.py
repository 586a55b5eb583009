import logging
import os

import httpx
import pytest

from app.config import Settings, get_settings
from app.dependencies import get_pipeline
from app.main import app
from app.services.pipeline import build_pipeline


class ProviderStub:
    """
    Stands in for both remote providers behind an httpx.MockTransport.

    Tests tweak the canned payloads (or set an exception to raise) and then
    inspect the recorded requests.
    """

    def __init__(self):
        self.ocr_status = 200
        self.ocr_payload = {
            "IsErroredOnProcessing": False,
            "ParsedResults": [{"ParsedText": "EASTERN POWER DISTRIBUTION COMPANY"}],
        }
        self.ocr_error = None
        self.llm_status = 200
        self.llm_payloads = [{"content": [{"type": "text", "text": "<analysis_report>Adopt solar.</analysis_report>"}]}]
        self.llm_error = None
        self.ocr_requests = []
        self.llm_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.ocr.space":
            self.ocr_requests.append(request)
            if self.ocr_error is not None:
                raise self.ocr_error
            return httpx.Response(self.ocr_status, json=self.ocr_payload)

        self.llm_requests.append(request)
        if self.llm_error is not None:
            raise self.llm_error
        payload = self.llm_payloads[min(len(self.llm_requests), len(self.llm_payloads)) - 1]
        return httpx.Response(self.llm_status, json=payload)

@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path

@pytest.fixture
def settings(upload_dir):
    return Settings(
        OCR_API_KEY="test-ocr-key",
        CLAUDE_API_KEY="test-claude-key",
        UPLOAD_DIR=str(upload_dir),
    )

@pytest.fixture
def providers():
    return ProviderStub()

@pytest.fixture
def http_client(providers):
    return httpx.AsyncClient(transport=httpx.MockTransport(providers))

@pytest.fixture
def wired_app(settings, http_client):
    """Point the app at the stubbed providers for the duration of a test."""
    pipeline = build_pipeline(settings, http_client)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield app
    app.dependency_overrides.clear()

@pytest.fixture
def removed_paths(monkeypatch):
    """Record every path passed to os.remove while still deleting it."""
    removed = []
    real_remove = os.remove

    def tracking_remove(path, *args, **kwargs):
        removed.append(str(path))
        return real_remove(path, *args, **kwargs)

    monkeypatch.setattr(os, "remove", tracking_remove)
    return removed

@pytest.fixture
def isolated_loggers(monkeypatch):
    """Give root and the uvicorn loggers fresh handler lists for one test."""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        monkeypatch.setattr(logging.getLogger(name), "handlers", [])
