import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.prompt import ANALYSIS_INSTRUCTIONS

client = TestClient(app)


def test_analyze_text_returns_analysis(wired_app, providers):
    """
    Text is sent straight to the LLM, followed by a blank line and the
    fixed instructions; no OCR call is made.
    """
    response = client.post("/analyze-text", json={"text": "Units consumed: 12,400 kWh"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "analysis": "<analysis_report>Adopt solar.</analysis_report>",
    }
    assert providers.ocr_requests == []
    assert len(providers.llm_requests) == 1

    sent = json.loads(providers.llm_requests[0].content)
    assert sent["messages"] == [
        {
            "role": "user",
            "content": [{"type": "text", "text": f"Units consumed: 12,400 kWh\n\n{ANALYSIS_INSTRUCTIONS}"}],
        }
    ]


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"json": {}},
        {"json": {"text": ""}},
        {"json": {"text": None}},
        {"json": {"other": "field"}},
    ],
)
def test_analyze_text_without_text_returns_400(wired_app, providers, kwargs):
    response = client.post("/analyze-text", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "No text provided for analysis"}
    assert providers.llm_requests == []


def test_same_request_twice_calls_provider_twice(wired_app, providers):
    providers.llm_payloads = [
        {"content": [{"type": "text", "text": "first report"}]},
        {"content": [{"type": "text", "text": "second report"}]},
    ]

    first = client.post("/analyze-text", json={"text": "bill"})
    second = client.post("/analyze-text", json={"text": "bill"})

    assert len(providers.llm_requests) == 2
    assert first.json() == {"success": True, "analysis": "first report"}
    assert second.json() == {"success": True, "analysis": "second report"}


def test_llm_transport_failure_returns_analysis_failed(wired_app, providers):
    providers.llm_error = httpx.ConnectError("Connection refused")

    response = client.post("/analyze-text", json={"text": "bill"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Analysis failed"
    assert "Connection refused" in body["details"]


def test_llm_error_status_surfaces_provider_message(wired_app, providers):
    providers.llm_status = 401
    providers.llm_payloads = [
        {"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}
    ]

    response = client.post("/analyze-text", json={"text": "bill"})

    assert response.status_code == 500
    assert response.json()["error"] == "Analysis failed"
    assert "invalid x-api-key" in response.json()["details"]


def test_root_health_check():
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Solar analysis relay is live."}


def test_non_string_text_is_analysed_as_its_json_text(wired_app, providers):
    response = client.post("/analyze-text", json={"text": 123})

    assert response.status_code == 200
    assert response.json()["success"] is True
    sent = json.loads(providers.llm_requests[0].content)
    assert sent["messages"][0]["content"][0]["text"] == f"123\n\n{ANALYSIS_INSTRUCTIONS}"


@pytest.mark.parametrize(
    "content",
    [b'{"text": "unterminated', b"not json at all", b'["a list", "not an object"]'],
)
def test_unusable_json_body_returns_400(wired_app, providers, content):
    response = client.post(
        "/analyze-text",
        content=content,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "No text provided for analysis"}
    assert providers.llm_requests == []
