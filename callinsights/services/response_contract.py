"""Pydantic models for validating the analysis JSON returned by the LLM.

The structural check (`validate_analysis_structure`) only looks at the top-level
fields. Nested values are coerced so that any response passing that check is
accepted: unusable numbers fall back to defaults, unknown speaker labels map to
``agent`` and non-object list entries are dropped.
"""

from __future__ import annotations

import json
import math
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from callinsights.services.errors import CallAnalysisError

BUILTIN_METRICS: tuple[str, ...] = ("tension", "tonality", "relevance")

Speaker = Literal["agent", "customer"]

_CUSTOMER_LABELS: tuple[str, ...] = ("customer", "client", "caller")


class AnalysisValidationError(CallAnalysisError):
    """Raised when a model response does not match the analysis contract."""


def _drop_nulls(values: Any) -> Any:
    # Null fields fall back to their declared defaults.
    if isinstance(values, Mapping):
        return {key: value for key, value in values.items() if value is not None}
    return values


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [_text(item) for item in value if item is not None]
    return []


def _objects(value: Any) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, str):
        try:
            score = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return score if math.isfinite(score) else None


def _as_seconds(value: Any) -> float:
    """Numbers, numeric strings and ``[hh:]mm:ss`` clock strings; 0 otherwise."""

    seconds = _as_score(value)
    if seconds is not None:
        return seconds
    if isinstance(value, str) and ":" in value:
        total = 0.0
        for part in value.strip().split(":"):
            number = _as_score(part)
            if number is None:
                return 0.0
            total = total * 60 + number
        return total
    return 0.0


def _as_speaker(value: Any) -> str:
    label = value.strip().lower() if isinstance(value, str) else ""
    if "agent" not in label and any(name in label for name in _CUSTOMER_LABELS):
        return "customer"
    return "agent"


StringList = Annotated[List[str], BeforeValidator(_string_list)]
Text = Annotated[str, BeforeValidator(_text)]
Seconds = Annotated[float, BeforeValidator(_as_seconds)]
Score = Annotated[Optional[float], BeforeValidator(_as_score)]


class _ContractModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def defaults_for_nulls(cls, values: Any) -> Any:
        return _drop_nulls(values)


class DialogueSegment(_ContractModel):
    speaker: Annotated[Speaker, BeforeValidator(_as_speaker)] = "agent"
    text: Text = ""
    start_time: Seconds = 0.0
    end_time: Seconds = 0.0
    metrics: Dict[str, float] = Field(default_factory=dict)

    @field_validator("metrics", mode="before")
    @classmethod
    def keep_numeric_scores(cls, value: Any) -> Dict[str, float]:
        """Open metric map: numeric scores are kept as-is, anything else is dropped."""

        if not isinstance(value, Mapping):
            return {}
        scores: Dict[str, float] = {}
        for name, raw_score in value.items():
            score = _as_score(raw_score)
            if score is None:
                continue
            scores.setdefault(str(name).strip().lower(), score)
        return scores

    def metric(self, name: str, default: float = 5.0) -> float:
        """Return a score by name, falling back to the neutral mid-scale value."""

        return self.metrics.get(name.lower(), default)


class KeyMoment(_ContractModel):
    description: Text = ""
    timestamp: Seconds = 0.0
    importance: Score = None


class CustomerInfo(_ContractModel):
    sentiment: Text = ""
    needs: StringList = Field(default_factory=list)
    satisfaction_level: Score = None


class AgentInfo(_ContractModel):
    performance: Score = None
    strengths: StringList = Field(default_factory=list)
    improvement_areas: StringList = Field(default_factory=list)


class CallAnalysis(_ContractModel):
    segments: Annotated[List[DialogueSegment], BeforeValidator(_objects)]
    summary: str
    key_moments: Annotated[List[KeyMoment], BeforeValidator(_objects)]
    customer_info: CustomerInfo
    agent_info: AgentInfo

    @classmethod
    def from_payload(cls, data: Any) -> "CallAnalysis":
        """Run the structural check, then build the typed model."""

        validate_analysis_structure(data)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0] if exc.errors() else {}
            location = ".".join(str(part) for part in first.get("loc", ())) or "analysis"
            raise AnalysisValidationError(
                f"Invalid {location}: {first.get('msg', 'unexpected value')}"
            ) from exc

    @classmethod
    def from_json(cls, payload: str | None) -> "CallAnalysis":
        cleaned = _clean_json_payload(payload or "")
        if not cleaned:
            raise AnalysisValidationError("Analysis response was empty")
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise AnalysisValidationError(f"Invalid JSON: {exc}") from exc
        return cls.from_payload(data)


def validate_analysis_structure(data: Any) -> None:
    """Fail fast on the first missing or mistyped top-level field."""

    if not isinstance(data, Mapping):
        raise AnalysisValidationError("Analysis response must be a JSON object")
    if not isinstance(data.get("segments"), list):
        raise AnalysisValidationError("Missing or invalid segments array")
    if not isinstance(data.get("summary"), str):
        raise AnalysisValidationError("Missing or invalid summary")
    if not isinstance(data.get("key_moments"), list):
        raise AnalysisValidationError("Missing or invalid key_moments array")
    if not isinstance(data.get("customer_info"), Mapping):
        raise AnalysisValidationError("Missing or invalid customer_info")
    if not isinstance(data.get("agent_info"), Mapping):
        raise AnalysisValidationError("Missing or invalid agent_info")


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "AgentInfo",
    "AnalysisValidationError",
    "BUILTIN_METRICS",
    "CallAnalysis",
    "CustomerInfo",
    "DialogueSegment",
    "KeyMoment",
    "Speaker",
    "validate_analysis_structure",
]
