"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from callinsights.config.settings import settings
from callinsights.pipelines.analysis import AnalysisPipeline
from callinsights.services import OpenAIClient

_openai_client: OpenAIClient | None = None


def get_openai_client() -> OpenAIClient:
    """Return the process-wide provider client, creating it on first use."""

    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient(
            api_key=settings.openai.api_key,
            base_url=settings.openai.base_url,
            timeout=settings.openai.timeout_seconds,
        )
    return _openai_client


async def close_openai_client() -> None:
    global _openai_client
    if _openai_client is not None:
        await _openai_client.aclose()
        _openai_client = None


OpenAIClientDep = Annotated[OpenAIClient, Depends(get_openai_client)]


def get_analysis_pipeline(client: OpenAIClientDep) -> AnalysisPipeline:
    """Build a fresh pipeline per request so uploads never share run state."""

    return AnalysisPipeline.from_config(client, settings.openai, settings.pipeline)


AnalysisPipelineDep = Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)]


__all__ = [
    "AnalysisPipelineDep",
    "OpenAIClientDep",
    "close_openai_client",
    "get_analysis_pipeline",
    "get_openai_client",
]
