"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Failure body; ``code`` is the category from `callinsights.utils.classify_error`."""

    detail: str
    code: Optional[str] = None
