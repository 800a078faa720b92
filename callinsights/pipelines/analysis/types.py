"""Typed containers shared across the call analysis pipeline.

These live in their own module so the stages (`prompts`, `llm`, `validation`,
`flow`) can import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from callinsights.services.response_contract import CallAnalysis


class AnalysisMode(str, Enum):
    """Which of the two analysis requests produced a response."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class AnalysisSource(str, Enum):
    """Where the returned `CallAnalysis` came from."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    DEGRADED = "degraded"


class PipelineState(str, Enum):
    START = "start"
    TRANSCRIBING = "transcribing"
    ANALYZING_PRIMARY = "analyzing_primary"
    VALIDATING_PRIMARY = "validating_primary"
    ANALYZING_FALLBACK = "analyzing_fallback"
    VALIDATING_FALLBACK = "validating_fallback"
    DONE = "done"
    DEGRADED_DONE = "degraded_done"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisRequest:
    """Transcript plus the normalized metric names sent to the LLM."""

    transcript: str
    metrics: tuple[str, ...]


@dataclass(frozen=True)
class AnalyzerOutcome:
    """Raw message content returned by one chat-completion call."""

    mode: AnalysisMode
    content: str | None


@dataclass
class PipelineReport:
    """Per-run record of the visited states and the final result."""

    metrics: tuple[str, ...]
    transcript: str = ""
    analysis: CallAnalysis | None = None
    source: AnalysisSource | None = None
    states: list[PipelineState] = field(default_factory=lambda: [PipelineState.START])

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    @property
    def degraded(self) -> bool:
        return self.source is AnalysisSource.DEGRADED

    def advance(self, state: PipelineState) -> None:
        self.states.append(state)


__all__ = [
    "AnalysisMode",
    "AnalysisRequest",
    "AnalysisSource",
    "AnalyzerOutcome",
    "PipelineReport",
    "PipelineState",
]
