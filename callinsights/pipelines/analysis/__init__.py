"""Call analysis pipeline package.

Modules are organised by the order in which `/calls/analyze` executes:

1. `ingestion` – validate the upload and custom metric form fields.
2. `prompts` – build the metric list and the two chat payloads.
3. `llm` – call the chat-completion endpoint (primary, then fallback).
4. `validation` – enforce the response contract or synthesize a placeholder.
5. `flow` – `AnalysisPipeline`, which runs transcription and the stages above.

The FastAPI controller imports from here so contributors can jump straight
to the relevant stage without wading through a single monolithic file.
"""

from .flow import AnalysisPipeline, PipelineBusyError, PipelineStage
from .ingestion import parse_custom_metrics, read_audio_bytes, resolve_content_type
from .llm import AnalysisError, Analyzer
from .prompts import (
    build_instruction,
    resolve_metrics,
    build_prose_prompt,
    build_structured_prompt,
)
from .types import (
    AnalysisMode,
    AnalysisRequest,
    AnalysisSource,
    AnalyzerOutcome,
    PipelineReport,
    PipelineState,
)
from .validation import build_minimal_analysis, validate_outcome

__all__ = [
    "AnalysisError",
    "AnalysisMode",
    "AnalysisPipeline",
    "AnalysisRequest",
    "AnalysisSource",
    "Analyzer",
    "AnalyzerOutcome",
    "PipelineBusyError",
    "PipelineReport",
    "PipelineStage",
    "PipelineState",
    "build_instruction",
    "resolve_metrics",
    "build_minimal_analysis",
    "build_prose_prompt",
    "build_structured_prompt",
    "parse_custom_metrics",
    "read_audio_bytes",
    "resolve_content_type",
    "validate_outcome",
]
