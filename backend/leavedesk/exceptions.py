from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from leavedesk.config import get_settings
from leavedesk.schemas.common import ErrorEnvelope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single broken business rule: a stable code plus a readable message."""

    code: str
    message: str


class AppError(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        data: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.data = data
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(AppError):
    """Malformed input shape, detected before any business logic runs."""

    def __init__(self, message: str = "Validation failed", data: Any = None) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, data=data)


class UnauthorizedError(AppError):
    """Caller lacks permission for the action."""

    def __init__(self, message: str = "Not authorized", status_code: int = status.HTTP_403_FORBIDDEN) -> None:
        super().__init__(message, status_code=status_code)


class NotFoundError(AppError):
    """Referenced employee, approver or leave request does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class BusinessRuleError(AppError):
    """One or more domain constraints were violated."""

    http_status = 422

    def __init__(self, violations: list[Violation] | Violation | str, code: str = "business_rule") -> None:
        if isinstance(violations, str):
            violations = [Violation(code, violations)]
        elif isinstance(violations, Violation):
            violations = [violations]
        self.violations = violations
        message = "; ".join(v.message for v in violations)
        super().__init__(
            message,
            status_code=self.http_status,
            data={"violations": [asdict(v) for v in violations]},
        )

    @property
    def codes(self) -> list[str]:
        return [v.code for v in self.violations]


class ConflictError(BusinessRuleError):
    """A uniqueness rule was violated (e.g. duplicate email)."""

    http_status = status.HTTP_409_CONFLICT


class TransientError(AppError):
    """Persistence or connectivity failure; the caller may retry."""

    def __init__(self, message: str = "Service temporarily unavailable", status_code: int = 503) -> None:
        super().__init__(message, status_code=status_code)


class StaleWriteError(TransientError):
    """A concurrent writer changed the row between read and write."""

    def __init__(self, message: str = "The record was modified concurrently, please retry") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


def _envelope(status_code: int, message: str, error: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(message=message, error=error, data=data).model_dump(exclude_none=True),
    )


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, BusinessRuleError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message, exc.kind, exc.data)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return _envelope(status.HTTP_400_BAD_REQUEST, "Validation failed", "ValidationError", errors)


async def _integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _envelope(
        status.HTTP_409_CONFLICT, "A record with this information already exists", "ConflictError"
    )


async def _transient_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Persistence failure on %s %s", request.method, request.url.path)
    return _envelope(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Service temporarily unavailable, please retry",
        "TransientError",
    )


async def _rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _envelope(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please try again later.",
        "RateLimitExceeded",
        {"limit": str(exc.detail)},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = get_settings()
    data = {"original_message": str(exc)} if settings.debug else None
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Something went wrong on our end. Please try again later.",
        "InternalError",
        data,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(OperationalError, _transient_exception_handler)
    app.add_exception_handler(DBAPIError, _transient_exception_handler)
    app.add_exception_handler(TimeoutError, _transient_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
