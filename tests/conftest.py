"""Shared fakes for the provider endpoints used across the test modules."""

from __future__ import annotations

import copy
import json
from pathlib import Path
import sys
from typing import Any, Iterable

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from callinsights.pipelines.analysis import AnalysisPipeline, Analyzer  # noqa: E402
from callinsights.services import AudioUpload, OpenAIClient, TranscribeService  # noqa: E402

TRANSCRIPT = "Hello, how can I help?"

VALID_ANALYSIS: dict[str, Any] = {
    "segments": [
        {
            "speaker": "agent",
            "text": "Hello, how can I help?",
            "start_time": 0,
            "end_time": 3,
            "metrics": {"tension": 2, "tonality": 8, "relevance": 9},
        },
        {
            "speaker": "customer",
            "text": "My order never arrived.",
            "start_time": 3,
            "end_time": 6,
            "metrics": {"tension": 6, "tonality": 5, "relevance": 9},
        },
    ],
    "summary": "The customer reports a missing order.",
    "key_moments": [
        {"description": "Customer raises the issue", "timestamp": 3, "importance": 8}
    ],
    "customer_info": {
        "sentiment": "Frustrated but polite",
        "needs": ["Locate the order"],
        "satisfaction_level": 4,
    },
    "agent_info": {
        "performance": 7,
        "strengths": ["Friendly greeting"],
        "improvement_areas": ["Offer a timeline"],
    },
}


def analysis_payload(**overrides: Any) -> dict[str, Any]:
    payload = copy.deepcopy(VALID_ANALYSIS)
    payload.update(overrides)
    return payload


def chat_reply(content: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]},
    )


def json_reply(data: Any) -> httpx.Response:
    return chat_reply(json.dumps(data))


def error_reply(status_code: int, message: str = "upstream error", code: str | None = None) -> httpx.Response:
    error: dict[str, Any] = {"message": message, "type": "api_error"}
    if code:
        error["code"] = code
    return httpx.Response(status_code, json={"error": error})


class FakeProvider:
    """Scripted provider served through `httpx.MockTransport`.

    Chat replies are consumed in order; an exception in the script is raised
    from the transport instead of returning a response.
    """

    def __init__(
        self,
        *,
        transcription: httpx.Response | Exception | None = None,
        chat: Iterable[httpx.Response | Exception] = (),
    ) -> None:
        self.transcription = transcription if transcription is not None else httpx.Response(
            200, json={"text": TRANSCRIPT}
        )
        self.chat = list(chat)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/audio/transcriptions"):
            reply = self.transcription
        else:
            assert self.chat, "unexpected chat completion request"
            reply = self.chat.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/chat/completions")]

    @property
    def transcription_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/audio/transcriptions")]

    def chat_payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.chat_requests]

    def client(self, api_key: str | None = "test-key") -> OpenAIClient:
        return OpenAIClient(
            api_key=api_key,
            base_url="https://api.test/v1",
            timeout=5.0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )

    def pipeline(self, *, structured_output: bool = True, api_key: str | None = "test-key") -> AnalysisPipeline:
        client = self.client(api_key)
        return AnalysisPipeline(
            TranscribeService(client),
            Analyzer(client, structured_output=structured_output),
        )


@pytest.fixture
def upload() -> AudioUpload:
    return AudioUpload(audio_bytes=b"ID3\x03fake-mp3-bytes", filename="call.mp3", content_type="audio/mpeg")
