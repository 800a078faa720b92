"""Service layer helpers for external integrations."""

from .errors import CallAnalysisError
from .openai_client import (
    OpenAIClient,
    OpenAIConfigurationError,
    OpenAIConnectionError,
    OpenAIError,
    OpenAIRequestError,
)
from .response_contract import (
    BUILTIN_METRICS,
    AgentInfo,
    AnalysisValidationError,
    CallAnalysis,
    CustomerInfo,
    DialogueSegment,
    KeyMoment,
    validate_analysis_structure,
)
from .transcribe import (
    AudioUpload,
    TranscribeService,
    TranscriptionError,
    TranscriptionResult,
)

__all__ = [
    "BUILTIN_METRICS",
    "AgentInfo",
    "AnalysisValidationError",
    "AudioUpload",
    "CallAnalysis",
    "CallAnalysisError",
    "CustomerInfo",
    "DialogueSegment",
    "KeyMoment",
    "OpenAIClient",
    "OpenAIConfigurationError",
    "OpenAIConnectionError",
    "OpenAIError",
    "OpenAIRequestError",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
    "validate_analysis_structure",
]
