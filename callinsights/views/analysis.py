"""Schemas returned by the call analysis endpoints."""

from typing import List

from pydantic import BaseModel

from callinsights.pipelines.analysis import AnalysisSource
from callinsights.services import CallAnalysis


class AnalysisResponse(BaseModel):
    analysis: CallAnalysis
    source: AnalysisSource
    degraded: bool
    metrics: List[str]


class DefaultMetricsResponse(BaseModel):
    metrics: List[str]
