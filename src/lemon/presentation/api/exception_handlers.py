"""Centralized exception handling for the FastAPI application.

Every failure leaves the API in the same versioned shape:

    {
        "version": 1,
        "status": 404,
        "error": "Not Found",
        "code": "USER_NOT_FOUND",
        "detail": "User not found: ...",
        "errors": [{"field": "email", "code": "value_error", "message": "..."}]
    }

``errors`` is only filled for request validation failures.

Handlers are looked up by exception type along the exception's MRO, so the
most specific registration wins and ``Exception`` is the catch-all.

Usage:
    from lemon.presentation.api.exception_handlers import setup_exception_handlers

    app = FastAPI()
    setup_exception_handlers(app)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lemon.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from lemon_auth.exceptions import (
    AccountBlockedError,
    AccountLockedError,
    AuthError,
    InvalidCredentialsError,
    InvalidRememberMeTokenError,
    InvalidTokenError,
    InvalidUserTokenError,
    WeakPasswordError,
)

logger = logging.getLogger(__name__)

ERROR_FORMAT_VERSION = 1

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    # 400 Bad Request - validation errors
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PASSWORD_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CAPTCHA_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CODE: status.HTTP_400_BAD_REQUEST,
    # 401 Unauthorized
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    # 403 Forbidden
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.ACCOUNT_BLOCKED: status.HTTP_403_FORBIDDEN,
    # 404 Not Found
    ErrorCode.ENTITY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # 409 Conflict - already exists
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.EMAIL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    # 422 Unprocessable Entity - business rule violations
    ErrorCode.BUSINESS_RULE_VIOLATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.ALREADY_VERIFIED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    # 423 / 429
    ErrorCode.ACCOUNT_LOCKED: status.HTTP_423_LOCKED,
    ErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    # 500 Internal Server Error
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

AUTH_ERROR_CODES: dict[type[AuthError], ErrorCode] = {
    AuthError: ErrorCode.UNAUTHORIZED,
    InvalidCredentialsError: ErrorCode.INVALID_CREDENTIALS,
    InvalidTokenError: ErrorCode.INVALID_TOKEN,
    InvalidRememberMeTokenError: ErrorCode.INVALID_TOKEN,
    WeakPasswordError: ErrorCode.WEAK_PASSWORD,
    AccountLockedError: ErrorCode.ACCOUNT_LOCKED,
    AccountBlockedError: ErrorCode.ACCOUNT_BLOCKED,
    InvalidUserTokenError: ErrorCode.INVALID_CODE,
}

HTTP_STATUS_TO_CODE: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.ENTITY_NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMITED,
    status.HTTP_500_INTERNAL_SERVER_ERROR: ErrorCode.INTERNAL_ERROR,
}

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


@dataclass(frozen=True)
class FieldError:
    field: str
    code: str
    message: str


@dataclass(frozen=True)
class NormalizedError:
    """A failure, ready to be rendered as the error payload."""

    status: int
    code: str
    detail: str
    errors: list[FieldError] = field(default_factory=list)
    headers: dict[str, str] | None = None

    def to_payload(self) -> dict[str, Any]:
        try:
            reason = HTTPStatus(self.status).phrase
        except ValueError:
            reason = "Error"
        return {
            "version": ERROR_FORMAT_VERSION,
            "status": self.status,
            "error": reason,
            "code": self.code,
            "detail": self.detail,
            "errors": [
                {"field": e.field, "code": e.code, "message": e.message}
                for e in self.errors
            ],
        }


ErrorHandler = Callable[[Any], NormalizedError]


def _get_status_for_exception(exc: DomainException) -> int:
    """Determine HTTP status code for a domain exception.

    Uses the error code mapping, with fallback based on exception type.
    """
    if exc.code in ERROR_CODE_TO_STATUS:
        return ERROR_CODE_TO_STATUS[exc.code]

    if isinstance(exc, EntityNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, BusinessRuleViolation):
        return status.HTTP_422_UNPROCESSABLE_ENTITY

    return status.HTTP_400_BAD_REQUEST


def handle_domain_exception(exc: DomainException) -> NormalizedError:
    return NormalizedError(
        status=_get_status_for_exception(exc),
        code=exc.code.value,
        detail=exc.message,
    )


def handle_auth_error(exc: AuthError) -> NormalizedError:
    code = ErrorCode.UNAUTHORIZED
    for klass in type(exc).__mro__:
        if klass in AUTH_ERROR_CODES:
            code = AUTH_ERROR_CODES[klass]
            break

    status_code = ERROR_CODE_TO_STATUS[code]
    return NormalizedError(
        status=status_code,
        code=code.value,
        detail=exc.message,
        headers=BEARER_CHALLENGE if code == ErrorCode.INVALID_TOKEN else None,
    )


def handle_http_exception(exc: StarletteHTTPException) -> NormalizedError:
    code = HTTP_STATUS_TO_CODE.get(exc.status_code, ErrorCode.HTTP_ERROR)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return NormalizedError(
        status=exc.status_code,
        code=code.value,
        detail=detail,
        headers=dict(exc.headers) if exc.headers else None,
    )


def _field_name(loc: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts)


def handle_validation_error(exc: RequestValidationError) -> NormalizedError:
    errors = [
        FieldError(
            field=_field_name(err.get("loc", ())),
            code=str(err.get("type", "value_error")),
            message=str(err.get("msg", "")),
        )
        for err in exc.errors()
    ]
    return NormalizedError(
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code=ErrorCode.VALIDATION_ERROR.value,
        detail="Validation failed",
        errors=errors,
    )


def handle_unexpected_error(exc: Exception) -> NormalizedError:  # NOQA: ARG001
    return NormalizedError(
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.INTERNAL_ERROR.value,
        detail="An internal error occurred",
    )


class ErrorNormalizer:
    """Registry of exception handlers keyed by exception type.

    Examples
    --------
    >>> normalizer = ErrorNormalizer.default()
    >>> normalizer.register(MyError, lambda exc: NormalizedError(418, "TEAPOT", "..."))
    >>> normalizer.normalize(MyError()).status
    418
    """

    def __init__(self) -> None:
        self._handlers: dict[type[BaseException], ErrorHandler] = {}

    @classmethod
    def default(cls) -> "ErrorNormalizer":
        normalizer = cls()
        normalizer.register(Exception, handle_unexpected_error)
        normalizer.register(DomainException, handle_domain_exception)
        normalizer.register(AuthError, handle_auth_error)
        normalizer.register(StarletteHTTPException, handle_http_exception)
        normalizer.register(RequestValidationError, handle_validation_error)
        return normalizer

    def register(self, exc_type: type[BaseException], handler: ErrorHandler) -> None:
        self._handlers[exc_type] = handler

    @property
    def handled_types(self) -> list[type[BaseException]]:
        return list(self._handlers)

    def resolve(self, exc_type: type[BaseException]) -> ErrorHandler:
        """Find the handler for the closest registered base class."""
        for klass in exc_type.__mro__:
            handler = self._handlers.get(klass)
            if handler is not None:
                return handler
        return handle_unexpected_error

    def normalize(self, exc: Exception) -> NormalizedError:
        return self.resolve(type(exc))(exc)


def setup_exception_handlers(
    app: FastAPI,
    normalizer: ErrorNormalizer | None = None,
    response_class: type[JSONResponse] = JSONResponse,
) -> ErrorNormalizer:
    """Register the normalizer for every type it knows on the application.

    Parameters
    ----------
    app
        The FastAPI application instance
    normalizer
        Custom registry; ``ErrorNormalizer.default()`` when omitted
    response_class
        Response class for error payloads (prefixed or plain JSON)
    """
    if normalizer is None:
        logger.info("Configuring ErrorNormalizer")
        normalizer = ErrorNormalizer.default()

    async def normalized_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        error = normalizer.normalize(exc)

        if error.status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.exception(
                "Unhandled exception on %s %s: %s",
                request.method,
                request.url.path,
                exc,
            )
        else:
            logger.warning(
                "%s on %s %s: %s (code=%s)",
                type(exc).__name__,
                request.method,
                request.url.path,
                error.detail,
                error.code,
            )

        return response_class(
            status_code=error.status,
            content=error.to_payload(),
            headers=error.headers,
        )

    for exc_type in normalizer.handled_types:
        app.add_exception_handler(exc_type, normalized_exception_handler)

    app.state.error_normalizer = normalizer
    return normalizer
