"""Speech-to-text integration backed by the provider's transcription endpoint."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from callinsights.services.errors import CallAnalysisError
from callinsights.services.openai_client import OpenAIClient, OpenAIError
from callinsights.telemetry import observe_remote_call

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioUpload:
    """Raw recording handed to the pipeline by the caller."""

    audio_bytes: bytes
    filename: str = "recording.mp3"
    content_type: str = "audio/mpeg"


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipeline."""

    transcript: str
    model: str


class TranscriptionError(CallAnalysisError):
    """Raised when the provider fails to transcribe the recording."""


class TranscribeService:
    """High-level facade over the multipart transcription call."""

    def __init__(self, client: OpenAIClient, *, model: str = "whisper-1") -> None:
        self._client = client
        self._model = model

    async def transcribe(self, upload: AudioUpload) -> TranscriptionResult:
        """Send the audio bytes as-is and return the transcript text.

        Codec support is decided by the provider; a rejected container comes
        back as a non-success response and is surfaced unchanged.
        """

        started = time.perf_counter()
        try:
            body = await self._client.create_transcription(
                audio_bytes=upload.audio_bytes,
                filename=upload.filename,
                content_type=upload.content_type,
                model=self._model,
            )
        except OpenAIError as exc:
            logger.error("Transcription request failed file=%s: %s", upload.filename, exc)
            raise TranscriptionError(f"Transcription failed: {exc}") from exc
        finally:
            observe_remote_call("transcription", time.perf_counter() - started)

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise TranscriptionError(
                "Transcription failed: response did not include a text field"
            )

        logger.info(
            "Transcription complete file=%s bytes=%s chars=%s",
            upload.filename,
            len(upload.audio_bytes),
            len(text),
        )
        return TranscriptionResult(transcript=text.strip(), model=self._model)


__all__ = [
    "AudioUpload",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
]
