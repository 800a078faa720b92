"""Thin async wrapper around the OpenAI-compatible REST endpoints."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)

_STATUS_HINTS = {
    401: "invalid or missing API key",
    402: "billing issue with the provider account",
    429: "rate limit exceeded",
}


class OpenAIError(RuntimeError):
    """Base class for provider failures."""


class OpenAIConfigurationError(OpenAIError):
    """Raised before any request when the client cannot authenticate."""


class OpenAIConnectionError(OpenAIError):
    """Raised when the request never produced an HTTP response."""


class OpenAIRequestError(OpenAIError):
    """Raised when the provider answers with a non-success status."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        message: str | None = None,
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.message = message
        self.code = code
        super().__init__(self.describe())

    def describe(self) -> str:
        """Render ``<reason> - <remote message>`` with a stable hint phrase."""

        hint = _STATUS_HINTS.get(self.status_code)
        if self.code == "insufficient_quota":
            hint = _STATUS_HINTS[402]
        label = self.reason or "Unknown error"
        if hint:
            label = f"{label} ({hint})"
        if self.message:
            return f"{label} - {self.message}"
        return label


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """Pull ``error.message`` / ``error.code`` from a provider error body."""

    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, Mapping):
        return None, None
    error = body.get("error")
    if not isinstance(error, Mapping):
        return None, None
    message = error.get("message")
    code = error.get("code") or error.get("type")
    return (
        message if isinstance(message, str) else None,
        code if isinstance(code, str) else None,
    )


class OpenAIClient:
    """Issue transcription and chat-completion requests over a shared client."""

    def __init__(
        self,
        *,
        api_key: SecretStr | str | None,
        base_url: str,
        timeout: float,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if isinstance(api_key, str):
            api_key = SecretStr(api_key)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()

    def _headers(self) -> dict[str, str]:
        if self._api_key is None or not self._api_key.get_secret_value().strip():
            raise OpenAIConfigurationError(
                "OpenAI API key is not configured (set OPENAI_API_KEY)."
            )
        return {"Authorization": f"Bearer {self._api_key.get_secret_value()}"}

    async def _post(self, path: str, **kwargs: Any) -> Any:
        headers = self._headers()
        url = f"{self._base_url}{path}"
        try:
            response = await self._http_client.post(
                url,
                headers=headers,
                timeout=self._timeout,
                **kwargs,
            )
        except httpx.TimeoutException as exc:
            raise OpenAIConnectionError(
                f"Request to {path} timed out after {self._timeout:.0f}s"
            ) from exc
        except httpx.RequestError as exc:
            raise OpenAIConnectionError(
                f"Unable to reach the provider at {path}: {exc}"
            ) from exc

        if response.is_error:
            message, code = _error_details(response)
            logger.warning(
                "Provider rejected %s status=%s code=%s",
                path,
                response.status_code,
                code,
            )
            raise OpenAIRequestError(
                response.status_code,
                response.reason_phrase,
                message,
                code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise OpenAIRequestError(
                response.status_code,
                response.reason_phrase,
                "Response body was not valid JSON",
            ) from exc

    async def create_transcription(
        self,
        *,
        audio_bytes: bytes,
        filename: str,
        content_type: str,
        model: str,
    ) -> Any:
        """POST multipart audio to ``/audio/transcriptions``."""

        return await self._post(
            "/audio/transcriptions",
            files={"file": (filename, audio_bytes, content_type)},
            data={"model": model},
        )

    async def create_chat_completion(self, payload: Mapping[str, Any]) -> Any:
        """POST a chat payload to ``/chat/completions``."""

        return await self._post("/chat/completions", json=dict(payload))


__all__ = [
    "OpenAIClient",
    "OpenAIError",
    "OpenAIConfigurationError",
    "OpenAIConnectionError",
    "OpenAIRequestError",
]
