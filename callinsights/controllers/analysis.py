"""Call analysis endpoints.

For a stage-by-stage map see `callinsights.pipelines.analysis.flow`. The POST
`/calls/analyze` endpoint performs:

1. Validation of the uploaded recording and the custom metric names.
2. Transcription followed by the primary/fallback analysis requests.
3. Serialization of the `CallAnalysis` plus whether it was synthesized.

Pipeline errors are not caught here; the application-level handler in
`callinsights.main` classifies them into user-facing categories.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from callinsights.config.settings import settings
from callinsights.controllers.dependencies import AnalysisPipelineDep
from callinsights.pipelines.analysis import (
    AnalysisPipeline,
    parse_custom_metrics,
    read_audio_bytes,
    resolve_content_type,
)
from callinsights.services import BUILTIN_METRICS, AudioUpload
from callinsights.views import AnalysisResponse, DefaultMetricsResponse

router = APIRouter(prefix="/calls", tags=["calls"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(AnalysisPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

_AUDIO_FILE_UPLOAD = File(...)
_CUSTOM_METRICS_FORM = Form(default=None)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_call(
    pipeline: AnalysisPipelineDep,
    audio_file: UploadFile = _AUDIO_FILE_UPLOAD,
    custom_metrics: Optional[List[str]] = _CUSTOM_METRICS_FORM,
) -> AnalysisResponse:
    """Transcribe and analyze an uploaded customer-service call recording."""

    content_type = resolve_content_type(audio_file)
    audio_bytes = await read_audio_bytes(
        audio_file,
        max_bytes=settings.pipeline.max_upload_bytes,
    )
    metric_names = parse_custom_metrics(
        custom_metrics,
        limit=settings.pipeline.max_custom_metrics,
    )

    upload = AudioUpload(
        audio_bytes=audio_bytes,
        filename=audio_file.filename or "recording",
        content_type=content_type,
    )
    logger.info(
        "Analysis requested file=%s type=%s bytes=%s custom_metrics=%s",
        upload.filename,
        content_type,
        len(audio_bytes),
        metric_names,
    )

    report = await pipeline.run_with_report(upload, metric_names)

    return AnalysisResponse(
        analysis=report.analysis,
        source=report.source,
        degraded=report.degraded,
        metrics=list(report.metrics),
    )


@router.get("/metrics/defaults", response_model=DefaultMetricsResponse)
async def default_metrics() -> DefaultMetricsResponse:
    """List the metrics every segment is scored on."""

    return DefaultMetricsResponse(metrics=list(BUILTIN_METRICS))
