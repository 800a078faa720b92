"""Utility helpers for the call insights backend."""

from .errors import ErrorCategory, classify_error

__all__ = ["ErrorCategory", "classify_error"]
