"""Wire format and error mapping of the transcription call."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import FakeProvider, error_reply
from callinsights.services import TranscribeService, TranscriptionError


def test_transcription_posts_multipart_audio_with_bearer_token(upload):
    provider = FakeProvider(transcription=httpx.Response(200, json={"text": "  Hi there.  "}))
    service = TranscribeService(provider.client(), model="whisper-1")

    result = asyncio.run(service.transcribe(upload))

    assert result.transcript == "Hi there."
    assert result.model == "whisper-1"
    (request,) = provider.transcription_requests
    assert str(request.url) == "https://api.test/v1/audio/transcriptions"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="model"' in request.content
    assert b"whisper-1" in request.content
    assert b'filename="call.mp3"' in request.content
    assert upload.audio_bytes in request.content


def test_success_body_without_text_is_an_error(upload):
    provider = FakeProvider(transcription=httpx.Response(200, json={"task": "transcribe"}))

    with pytest.raises(TranscriptionError, match="text field"):
        asyncio.run(TranscribeService(provider.client()).transcribe(upload))


def test_quota_errors_mention_billing(upload):
    provider = FakeProvider(
        transcription=error_reply(429, "You exceeded your current quota", code="insufficient_quota")
    )

    with pytest.raises(TranscriptionError) as excinfo:
        asyncio.run(TranscribeService(provider.client()).transcribe(upload))

    assert "billing" in str(excinfo.value)
    assert "You exceeded your current quota" in str(excinfo.value)


def test_unsupported_format_rejection_is_surfaced(upload):
    provider = FakeProvider(
        transcription=error_reply(400, "Invalid file format. Supported formats: ['mp3', 'wav']")
    )

    with pytest.raises(TranscriptionError, match="Invalid file format"):
        asyncio.run(TranscribeService(provider.client()).transcribe(upload))


def test_non_json_error_body_keeps_status_reason(upload):
    provider = FakeProvider(transcription=httpx.Response(502, text="<html>bad gateway</html>"))

    with pytest.raises(TranscriptionError, match="Transcription failed: Bad Gateway"):
        asyncio.run(TranscribeService(provider.client()).transcribe(upload))
