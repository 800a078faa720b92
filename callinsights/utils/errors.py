"""Map pipeline error messages to user-facing categories.

Classification is by substring so it keeps working for any error whose text
carries the stable phrases emitted by the services (``API key``,
``rate limit``, ``billing``, ``Transcription failed``, ``Analysis failed``).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorCategory:
    code: str
    status_code: int
    message: str


CREDENTIALS = ErrorCategory(
    "credentials",
    503,
    "Invalid or missing API key. Please check your .env file.",
)
RATE_LIMIT = ErrorCategory(
    "rate_limit",
    429,
    "Rate limit exceeded. Please try again later.",
)
BILLING = ErrorCategory(
    "billing",
    402,
    "Billing issue with your OpenAI account. Please check your account status.",
)
TRANSCRIPTION = ErrorCategory(
    "transcription",
    502,
    "Failed to transcribe audio. Please ensure your file is a clear audio recording.",
)
ANALYSIS = ErrorCategory(
    "analysis",
    502,
    "Analysis failed. The AI model couldn't process your request.",
)
UNKNOWN = ErrorCategory("unknown", 500, "An unknown error occurred")

# Checked in order; the first matching phrase wins.
_RULES: tuple[tuple[str, ErrorCategory], ...] = (
    ("API key", CREDENTIALS),
    ("rate limit", RATE_LIMIT),
    ("billing", BILLING),
    ("Transcription failed", TRANSCRIPTION),
    ("Analysis failed", ANALYSIS),
    ("Fallback analysis failed", ANALYSIS),
)


def classify_error(message: str | None) -> ErrorCategory:
    """Return the category for an error message, or a passthrough `unknown`."""

    text = message or ""
    for phrase, category in _RULES:
        if phrase in text:
            return category
    if text:
        return ErrorCategory(UNKNOWN.code, UNKNOWN.status_code, text)
    return UNKNOWN


__all__ = [
    "ANALYSIS",
    "BILLING",
    "CREDENTIALS",
    "RATE_LIMIT",
    "TRANSCRIPTION",
    "UNKNOWN",
    "ErrorCategory",
    "classify_error",
]
