"""Prompt construction stage for the call analysis pipeline.

Both request builders share `build_instruction`; they differ only in how
verbosely the JSON contract is restated and whether JSON response mode is
requested from the provider.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from callinsights.services.response_contract import BUILTIN_METRICS

_ANALYST_INTRO = (
    "You are an expert call center analyst. Analyze this customer service call "
    "transcript and provide a structured JSON output.\n"
    "Break the conversation into segments by speaker (agent or customer).\n"
    "For each segment, provide metrics on a scale of 1-10 for: {metrics}.\n"
    "Also identify key moments, summarize the call, and provide insights about "
    "both the customer and agent."
)


def resolve_metrics(custom_metrics: Iterable[str] | None = None) -> tuple[str, ...]:
    """Built-ins first, then custom names lowercased and de-duplicated in order."""

    ordered: list[str] = list(BUILTIN_METRICS)
    for name in custom_metrics or ():
        if not isinstance(name, str):
            continue
        token = name.strip().lower()
        if token and token not in ordered:
            ordered.append(token)
    return tuple(ordered)


def _target_shape(metrics: tuple[str, ...], *, verbose: bool) -> dict[str, Any]:
    score = "number from 1-10" if verbose else "1-10"
    seconds = "number in seconds" if verbose else "estimated time in seconds"
    return {
        "segments": [
            {
                "speaker": "agent|customer",
                "text": "spoken text" if verbose else "what was said",
                "start_time": seconds,
                "end_time": seconds,
                "metrics": {name: score for name in metrics},
            }
        ],
        "summary": "summary text" if verbose else "summarize the call content",
        "key_moments": [
            {
                "description": "moment description",
                "timestamp": seconds,
                "importance": score,
            }
        ],
        "customer_info": {
            "sentiment": "sentiment description",
            "needs": ["need1", "need2"],
            "satisfaction_level": score,
        },
        "agent_info": {
            "performance": score,
            "strengths": ["strength1", "strength2"],
            "improvement_areas": ["area1", "area2"],
        },
    }


def build_instruction(metrics: tuple[str, ...], *, verbose: bool = False) -> str:
    """Render the analyst system prompt for the given metric names."""

    intro = _ANALYST_INTRO.format(metrics=", ".join(metrics))
    shape = json.dumps(_target_shape(metrics, verbose=verbose), indent=2)
    if not verbose:
        return f"{intro}\nReturn your analysis as a JSON object with this exact structure:\n{shape}"

    return (
        f"{intro}\n"
        "Return your response as a valid JSON object with the structure exactly as follows:\n"
        f"{shape}\n"
        "Rules:\n"
        "- Respond with the JSON object only, without Markdown fences or commentary.\n"
        "- \"segments\" is an array; every segment has \"speaker\" set to \"agent\" or "
        "\"customer\", \"text\", numeric \"start_time\" and \"end_time\", and a "
        "\"metrics\" object with one numeric score per metric listed above.\n"
        "- \"summary\" is a string.\n"
        "- \"key_moments\" is an array of objects with \"description\", numeric "
        "\"timestamp\" and numeric \"importance\".\n"
        "- \"customer_info\" is an object with \"sentiment\", a \"needs\" array of "
        "strings and a numeric \"satisfaction_level\".\n"
        "- \"agent_info\" is an object with a numeric \"performance\", and "
        "\"strengths\" and \"improvement_areas\" arrays of strings."
    )


def _messages(system_prompt: str, transcript: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": transcript},
    ]


def build_structured_prompt(
    transcript: str,
    metrics: tuple[str, ...],
    *,
    model: str,
) -> dict[str, Any]:
    """Chat payload for the first attempt, with JSON response mode enabled."""

    return {
        "model": model,
        "response_format": {"type": "json_object"},
        "messages": _messages(build_instruction(metrics), transcript),
    }


def build_prose_prompt(
    transcript: str,
    metrics: tuple[str, ...],
    *,
    model: str,
) -> dict[str, Any]:
    """Chat payload for the retry: no response mode, contract restated in prose."""

    return {
        "model": model,
        "messages": _messages(build_instruction(metrics, verbose=True), transcript),
    }


__all__ = [
    "build_instruction",
    "resolve_metrics",
    "build_prose_prompt",
    "build_structured_prompt",
]
