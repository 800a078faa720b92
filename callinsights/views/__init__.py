"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import AnalysisResponse, DefaultMetricsResponse
from .common import ErrorResponse

__all__ = [
    "AnalysisResponse",
    "DefaultMetricsResponse",
    "ErrorResponse",
]
