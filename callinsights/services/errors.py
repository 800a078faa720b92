"""Base exception shared by every caller-visible pipeline failure."""


class CallAnalysisError(RuntimeError):
    """Root of the errors raised while turning a recording into an analysis."""


__all__ = ["CallAnalysisError"]
