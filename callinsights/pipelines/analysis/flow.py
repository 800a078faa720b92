"""End-to-end orchestration of the call analysis pipeline.

Execution order for one upload:

1. ``transcription`` – send the recording to the speech-to-text endpoint.
2. ``prompts`` – normalize the metric names and build the chat payload.
3. ``llm`` – primary attempt with JSON response mode.
4. ``validation`` – check the response; on any primary failure retry once
   with the prose prompt, and fall back to a placeholder analysis if the
   retry's content is still unusable.

`AnalysisPipeline.describe()` exposes the same map for debugging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from callinsights.config.settings import OpenAIConfig, PipelineConfig
from callinsights.services.errors import CallAnalysisError
from callinsights.services.openai_client import OpenAIClient
from callinsights.services.response_contract import AnalysisValidationError, CallAnalysis
from callinsights.services.transcribe import AudioUpload, TranscribeService
from callinsights.telemetry import record_fallback, record_run

from .llm import AnalysisError, Analyzer
from .prompts import resolve_metrics
from .types import (
    AnalysisMode,
    AnalysisRequest,
    AnalysisSource,
    PipelineReport,
    PipelineState,
)
from .validation import build_minimal_analysis, validate_outcome

logger = logging.getLogger("callinsights.services.analysis_pipeline")
transcript_logger = logging.getLogger("callinsights.logs.transcript")


class PipelineBusyError(CallAnalysisError):
    """Raised when a pipeline instance is asked to run while already running."""


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the pipeline."""

    order: int
    name: str
    module: str
    summary: str


class AnalysisPipeline:
    """Turn an uploaded recording into a validated `CallAnalysis`.

    One instance serves one analysis session: a second `run` issued while the
    first is still awaiting the provider is rejected with `PipelineBusyError`.
    """

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Transcription",
            "callinsights.services.transcribe",
            "Upload the audio bytes to the speech-to-text endpoint.",
        ),
        PipelineStage(
            2,
            "Prompt Assembly",
            "callinsights.pipelines.analysis.prompts",
            "Merge built-in and custom metrics and render the analyst instructions.",
        ),
        PipelineStage(
            3,
            "Primary Analysis",
            "callinsights.pipelines.analysis.llm",
            "Request the analysis JSON with structured-output mode enabled.",
        ),
        PipelineStage(
            4,
            "Fallback Analysis",
            "callinsights.pipelines.analysis.llm",
            "Retry once with the prose prompt when the primary attempt fails.",
        ),
        PipelineStage(
            5,
            "Validation",
            "callinsights.pipelines.analysis.validation",
            "Check the top-level shape; synthesize a placeholder if the retry is unusable.",
        ),
    ]

    def __init__(self, transcriber: TranscribeService, analyzer: Analyzer) -> None:
        self._transcriber = transcriber
        self._analyzer = analyzer
        self._in_flight = False

    @classmethod
    def from_config(
        cls,
        client: OpenAIClient,
        openai: OpenAIConfig,
        pipeline: PipelineConfig | None = None,
    ) -> "AnalysisPipeline":
        return cls(
            TranscribeService(client, model=openai.transcription_model),
            Analyzer(
                client,
                model=openai.chat_model,
                structured_output=openai.structured_output,
                log_prompts=pipeline.log_prompts if pipeline else False,
            ),
        )

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def run(
        self,
        upload: AudioUpload,
        custom_metrics: Iterable[str] | None = None,
    ) -> CallAnalysis:
        """Return the analysis, or raise `TranscriptionError` / `AnalysisError`."""

        report = await self.run_with_report(upload, custom_metrics)
        return report.analysis

    async def run_with_report(
        self,
        upload: AudioUpload,
        custom_metrics: Iterable[str] | None = None,
    ) -> PipelineReport:
        """Like `run`, but also return the visited states and the result source."""

        if self._in_flight:
            raise PipelineBusyError("An analysis is already in progress for this session.")

        self._in_flight = True
        report = PipelineReport(metrics=resolve_metrics(custom_metrics))
        try:
            report.advance(PipelineState.TRANSCRIBING)
            transcription = await self._transcriber.transcribe(upload)
            report.transcript = transcription.transcript
            transcript_logger.info(
                "file=%s | metrics=%s | text=%s",
                upload.filename,
                ",".join(report.metrics),
                report.transcript,
            )

            request = AnalysisRequest(transcript=report.transcript, metrics=report.metrics)
            report.analysis, report.source = await self._analyze(request, report)
        except CallAnalysisError as exc:
            report.advance(PipelineState.FAILED)
            record_run("failed")
            logger.error("Pipeline failed file=%s states=%s: %s", upload.filename, _trail(report), exc)
            raise
        finally:
            self._in_flight = False

        record_run(report.source.value)
        logger.info(
            "Pipeline finished file=%s source=%s states=%s",
            upload.filename,
            report.source.value,
            _trail(report),
        )
        return report

    async def _analyze(
        self,
        request: AnalysisRequest,
        report: PipelineReport,
    ) -> tuple[CallAnalysis, AnalysisSource]:
        report.advance(PipelineState.ANALYZING_PRIMARY)
        try:
            outcome = await self._analyzer.request(request, AnalysisMode.PRIMARY)
            report.advance(PipelineState.VALIDATING_PRIMARY)
            analysis = validate_outcome(outcome)
        except (AnalysisError, AnalysisValidationError) as exc:
            if not self._analyzer.structured_output:
                if isinstance(exc, AnalysisValidationError):
                    raise AnalysisError(
                        f"Analysis failed: could not parse analysis results: {exc}"
                    ) from exc
                raise
            logger.warning("Primary analysis unusable, retrying with prose prompt: %s", exc)
        else:
            report.advance(PipelineState.DONE)
            return analysis, AnalysisSource.PRIMARY

        record_fallback()
        report.advance(PipelineState.ANALYZING_FALLBACK)
        outcome = await self._analyzer.request(request, AnalysisMode.FALLBACK)
        report.advance(PipelineState.VALIDATING_FALLBACK)
        try:
            analysis = validate_outcome(outcome)
        except AnalysisValidationError as exc:
            logger.warning(
                "Fallback analysis unusable, returning degraded analysis: %s", exc
            )
            report.advance(PipelineState.DEGRADED_DONE)
            return build_minimal_analysis(request.transcript), AnalysisSource.DEGRADED

        report.advance(PipelineState.DONE)
        return analysis, AnalysisSource.FALLBACK


def _trail(report: PipelineReport) -> str:
    return ">".join(state.value for state in report.states)


__all__ = ["AnalysisPipeline", "PipelineBusyError", "PipelineStage"]
