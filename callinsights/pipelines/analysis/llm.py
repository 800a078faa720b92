"""Analysis LLM stage: one chat-completion call per attempt."""

from __future__ import annotations

import logging
import time
from typing import Any

from callinsights.services.errors import CallAnalysisError
from callinsights.services.openai_client import OpenAIClient, OpenAIError
from callinsights.telemetry import observe_remote_call

from .prompts import build_prose_prompt, build_structured_prompt
from .types import AnalysisMode, AnalysisRequest, AnalyzerOutcome

logger = logging.getLogger("callinsights.services.analysis_pipeline")

_FAILURE_PREFIX = {
    AnalysisMode.PRIMARY: "Analysis failed",
    AnalysisMode.FALLBACK: "Fallback analysis failed",
}


class AnalysisError(CallAnalysisError):
    """Raised when the analysis call fails and no retry is left."""


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def _extract_content(body: Any) -> str | None:
    """Return ``choices[0].message.content`` or None when the path is missing."""

    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else None


class Analyzer:
    """Send the transcript and metric names to the chat-completion endpoint."""

    def __init__(
        self,
        client: OpenAIClient,
        *,
        model: str = "gpt-3.5-turbo",
        structured_output: bool = True,
        log_prompts: bool = False,
    ) -> None:
        self._client = client
        self._model = model
        self._structured_output = structured_output
        self._log_prompts = log_prompts

    @property
    def structured_output(self) -> bool:
        return self._structured_output

    def build_payload(self, request: AnalysisRequest, mode: AnalysisMode) -> dict[str, Any]:
        if mode is AnalysisMode.PRIMARY and self._structured_output:
            return build_structured_prompt(request.transcript, request.metrics, model=self._model)
        return build_prose_prompt(request.transcript, request.metrics, model=self._model)

    async def request(self, request: AnalysisRequest, mode: AnalysisMode) -> AnalyzerOutcome:
        """Run a single attempt; transport and HTTP failures become `AnalysisError`."""

        payload = self.build_payload(request, mode)
        if self._log_prompts:
            logger.info(
                "Analysis prompt mode=%s\nSYSTEM> %s",
                mode.value,
                _truncate(payload["messages"][0]["content"]),
            )

        started = time.perf_counter()
        try:
            body = await self._client.create_chat_completion(payload)
        except OpenAIError as exc:
            logger.warning("Analysis call failed mode=%s: %s", mode.value, exc)
            raise AnalysisError(f"{_FAILURE_PREFIX[mode]}: {exc}") from exc
        finally:
            observe_remote_call("analysis", time.perf_counter() - started)

        content = _extract_content(body)
        logger.info(
            "Raw analysis response mode=%s metrics=%s: %s",
            mode.value,
            ",".join(request.metrics),
            _truncate(content) if content is not None else "<missing content>",
        )
        return AnalyzerOutcome(mode=mode, content=content)


__all__ = ["AnalysisError", "Analyzer"]
