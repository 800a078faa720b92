"""Request ingestion helpers used by the HTTP layer before the pipeline runs."""

from __future__ import annotations

import mimetypes
from typing import Final, Iterable

from fastapi import HTTPException, UploadFile, status

# Containers the provider accepts that browsers may label as video.
_VIDEO_CONTAINERS: Final[set[str]] = {
    "video/mp4",
    "video/mpeg",
    "video/webm",
}
_GENERIC_CONTENT_TYPES: Final[set[str]] = {"", "application/octet-stream"}


def resolve_content_type(audio_file: UploadFile) -> str:
    """Accept any audio upload, guessing the type from the filename when missing."""

    content_type = (audio_file.content_type or "").split(";")[0].strip().lower()
    if content_type in _GENERIC_CONTENT_TYPES and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type

    if not content_type.startswith("audio/") and content_type not in _VIDEO_CONTAINERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only audio files are supported (mp3, mp4, mpeg, mpga, m4a, wav, webm)",
        )
    return content_type


async def read_audio_bytes(audio_file: UploadFile, *, max_bytes: int) -> bytes:
    """Load the upload fully into memory, rejecting empty or oversized payloads."""

    audio_bytes = await audio_file.read(max_bytes + 1)
    await audio_file.close()

    if not audio_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded audio file is empty",
        )
    if len(audio_bytes) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Uploaded audio file exceeds {max_bytes} bytes",
        )
    return audio_bytes


def parse_custom_metrics(values: Iterable[str] | None, *, limit: int) -> list[str]:
    """Flatten repeated and comma-separated form values into distinct metric names."""

    names: list[str] = []
    seen: set[str] = set()
    for value in values or ():
        for part in value.split(","):
            name = part.strip()
            if name and name.lower() not in seen:
                seen.add(name.lower())
                names.append(name)

    if len(names) > limit:
        raise HTTPException(
            status_code=422,
            detail=f"At most {limit} custom metrics can be requested",
        )
    return names


__all__ = ["parse_custom_metrics", "read_audio_bytes", "resolve_content_type"]
