from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Standard success envelope shared with the frontend."""

    success: bool = True
    message: str
    data: T | None = None


class ErrorEnvelope(BaseModel):
    """Standard error envelope; ``error`` is the machine-checkable kind."""

    success: bool = False
    message: str
    error: str
    data: Any = None
