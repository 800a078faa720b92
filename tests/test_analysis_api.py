"""Integration-style tests for the /calls endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider, analysis_payload, chat_reply, error_reply, json_reply
from callinsights.controllers.dependencies import get_analysis_pipeline
from callinsights.main import app

AUDIO = ("call.mp3", b"ID3\x03fake-mp3-bytes", "audio/mpeg")


@pytest.fixture
def use_provider():
    """Route the pipeline dependency to a scripted provider."""

    def install(provider: FakeProvider) -> TestClient:
        app.dependency_overrides[get_analysis_pipeline] = lambda: provider.pipeline()
        return TestClient(app)

    yield install

    app.dependency_overrides.clear()


def test_analyze_returns_primary_analysis(use_provider):
    provider = FakeProvider(chat=[json_reply(analysis_payload())])
    client = use_provider(provider)

    response = client.post(
        "/calls/analyze",
        files={"audio_file": AUDIO},
        data={"custom_metrics": ["empathy", "Rapport, empathy"]},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["source"] == "primary"
    assert payload["degraded"] is False
    assert payload["metrics"] == ["tension", "tonality", "relevance", "empathy", "rapport"]
    assert payload["analysis"]["summary"] == "The customer reports a missing order."
    assert len(payload["analysis"]["segments"]) == 2


def test_analyze_flags_degraded_result(use_provider):
    provider = FakeProvider(chat=[chat_reply("nope"), chat_reply("still nope")])
    client = use_provider(provider)

    response = client.post("/calls/analyze", files={"audio_file": AUDIO})

    assert response.status_code == 200
    payload = response.json()
    assert payload["degraded"] is True
    assert payload["source"] == "degraded"
    assert payload["analysis"]["segments"][0]["end_time"] == 60


@pytest.mark.parametrize(
    ("transcription_status", "status_code", "code"),
    [(401, 503, "credentials"), (429, 429, "rate_limit"), (500, 502, "transcription")],
)
def test_transcription_errors_are_classified(use_provider, transcription_status, status_code, code):
    provider = FakeProvider(transcription=error_reply(transcription_status))
    client = use_provider(provider)

    response = client.post("/calls/analyze", files={"audio_file": AUDIO})

    assert response.status_code == status_code
    assert response.json()["code"] == code
    assert provider.chat_requests == []


def test_exhausted_analysis_is_reported_as_analysis_failure(use_provider):
    provider = FakeProvider(chat=[error_reply(500), error_reply(500)])
    client = use_provider(provider)

    response = client.post("/calls/analyze", files={"audio_file": AUDIO})

    assert response.status_code == 502
    assert response.json() == {
        "detail": "Analysis failed. The AI model couldn't process your request.",
        "code": "analysis",
    }


def test_non_audio_upload_is_rejected(use_provider):
    provider = FakeProvider()
    client = use_provider(provider)

    response = client.post(
        "/calls/analyze",
        files={"audio_file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert provider.requests == []


def test_content_type_is_guessed_from_filename(use_provider):
    provider = FakeProvider(chat=[json_reply(analysis_payload())])
    client = use_provider(provider)

    response = client.post(
        "/calls/analyze",
        files={"audio_file": ("call.wav", b"RIFFfake", "application/octet-stream")},
    )

    assert response.status_code == 200
    (request,) = provider.transcription_requests
    assert b"audio/" in request.content


def test_empty_upload_is_rejected(use_provider):
    client = use_provider(FakeProvider())

    response = client.post("/calls/analyze", files={"audio_file": ("call.mp3", b"", "audio/mpeg")})

    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded audio file is empty"


def test_too_many_custom_metrics_is_rejected(use_provider):
    client = use_provider(FakeProvider())
    names = ",".join(f"metric{i}" for i in range(21))

    response = client.post(
        "/calls/analyze",
        files={"audio_file": AUDIO},
        data={"custom_metrics": names},
    )

    assert response.status_code == 422


def test_default_metrics_endpoint():
    client = TestClient(app)

    response = client.get("/calls/metrics/defaults")

    assert response.status_code == 200
    assert response.json() == {"metrics": ["tension", "tonality", "relevance"]}


def test_health_endpoint():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_repeated_custom_metrics_count_once_against_the_limit(use_provider):
    provider = FakeProvider(chat=[json_reply(analysis_payload())])
    client = use_provider(provider)
    names = ",".join("Empathy" if i % 2 else "empathy" for i in range(21))

    response = client.post(
        "/calls/analyze",
        files={"audio_file": AUDIO},
        data={"custom_metrics": names},
    )

    assert response.status_code == 200
    assert response.json()["metrics"] == ["tension", "tonality", "relevance", "empathy"]
