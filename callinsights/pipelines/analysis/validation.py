"""Validation stage and degraded-result synthesis."""

from __future__ import annotations

from callinsights.services.response_contract import (
    AgentInfo,
    CallAnalysis,
    CustomerInfo,
    DialogueSegment,
)

from .types import AnalyzerOutcome

DEGRADED_SUMMARY_NOTICE = (
    "Analysis could not be properly generated. Here is the raw transcript: "
)
NO_TRANSCRIPT = "No transcript available"
NEUTRAL_SCORE = 5.0
SUMMARY_EXCERPT_CHARS = 200


def validate_outcome(outcome: AnalyzerOutcome) -> CallAnalysis:
    """Parse and check one analyzer response; raises `AnalysisValidationError`."""

    return CallAnalysis.from_json(outcome.content)


def build_minimal_analysis(transcript: str | None) -> CallAnalysis:
    """Fixed placeholder analysis used when neither attempt produced valid JSON."""

    text = transcript or ""
    # An empty transcript gets the placeholder instead of a bare "...".
    excerpt = f"{text[:SUMMARY_EXCERPT_CHARS]}..." if text else NO_TRANSCRIPT
    return CallAnalysis(
        segments=[
            DialogueSegment(
                speaker="agent",
                text=text or NO_TRANSCRIPT,
                start_time=0.0,
                end_time=60.0,
                metrics={
                    "tension": NEUTRAL_SCORE,
                    "tonality": NEUTRAL_SCORE,
                    "relevance": NEUTRAL_SCORE,
                },
            )
        ],
        summary=DEGRADED_SUMMARY_NOTICE + excerpt,
        key_moments=[],
        customer_info=CustomerInfo(
            sentiment="Could not analyze sentiment",
            needs=["Could not identify needs"],
            satisfaction_level=NEUTRAL_SCORE,
        ),
        agent_info=AgentInfo(
            performance=NEUTRAL_SCORE,
            strengths=["Could not identify strengths"],
            improvement_areas=["Could not identify improvement areas"],
        ),
    )


__all__ = [
    "DEGRADED_SUMMARY_NOTICE",
    "NO_TRANSCRIPT",
    "build_minimal_analysis",
    "validate_outcome",
]
