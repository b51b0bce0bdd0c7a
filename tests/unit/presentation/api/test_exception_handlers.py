"""Tests for error normalization."""

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError

from lemon.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    ErrorCode,
    PermissionDeniedError,
)
from lemon.domain.user import EmailAlreadyExistsError, UserNotFoundError
from lemon.infrastructure.captcha import CaptchaFailedError
from lemon.presentation.api.exception_handlers import (
    ErrorNormalizer,
    NormalizedError,
)
from lemon_auth import (
    AccountBlockedError,
    AccountLockedError,
    AuthError,
    InvalidCredentialsError,
    InvalidRememberMeTokenError,
    InvalidTokenError,
    InvalidUserTokenError,
    WeakPasswordError,
)


class TeapotError(Exception):
    pass


class SpecialNotFound(UserNotFoundError):
    pass


class TestDefaultNormalizer:
    def setup_method(self):
        self.normalizer = ErrorNormalizer.default()

    def test_domain_exceptions(self):
        not_found = self.normalizer.normalize(UserNotFoundError("42"))
        conflict = self.normalizer.normalize(EmailAlreadyExistsError("a@example.com"))
        denied = self.normalizer.normalize(PermissionDeniedError())
        captcha = self.normalizer.normalize(CaptchaFailedError())

        assert (not_found.status, not_found.code) == (404, "USER_NOT_FOUND")
        assert (conflict.status, conflict.code) == (409, "EMAIL_ALREADY_EXISTS")
        assert (denied.status, denied.code) == (403, "FORBIDDEN")
        assert (captcha.status, captcha.code) == (400, "CAPTCHA_FAILED")

    def test_domain_fallback_by_type(self):
        assert self.normalizer.normalize(ConflictError("x")).status == 409
        assert self.normalizer.normalize(
            BusinessRuleViolation("x", ErrorCode.ALREADY_VERIFIED),
        ).status == 422
        assert self.normalizer.normalize(DomainException("x")).status == 500

    def test_auth_errors(self):
        cases = {
            InvalidCredentialsError(): (401, "INVALID_CREDENTIALS"),
            InvalidTokenError(): (401, "INVALID_TOKEN"),
            InvalidRememberMeTokenError(): (401, "INVALID_TOKEN"),
            WeakPasswordError(): (400, "WEAK_PASSWORD"),
            AccountLockedError(): (423, "ACCOUNT_LOCKED"),
            AccountBlockedError(): (403, "ACCOUNT_BLOCKED"),
            InvalidUserTokenError(): (400, "INVALID_CODE"),
            AuthError(): (401, "UNAUTHORIZED"),
        }
        for exc, expected in cases.items():
            error = self.normalizer.normalize(exc)
            assert (error.status, error.code) == expected, type(exc).__name__

    def test_invalid_token_carries_bearer_challenge(self):
        error = self.normalizer.normalize(InvalidTokenError())

        assert error.headers == {"WWW-Authenticate": "Bearer"}

    def test_credentials_error_message_is_uniform(self):
        error = self.normalizer.normalize(InvalidCredentialsError())

        assert error.detail == "Invalid email or password"

    def test_http_exception(self):
        error = self.normalizer.normalize(
            HTTPException(status_code=401, detail="Authentication required"),
        )

        assert error.status == 401
        assert error.code == "UNAUTHORIZED"
        assert error.detail == "Authentication required"

    def test_http_exception_with_unmapped_status(self):
        error = self.normalizer.normalize(HTTPException(status_code=405))

        assert error.code == "HTTP_ERROR"
        assert error.detail == "Method Not Allowed"

    def test_validation_error_lists_fields(self):
        exc = RequestValidationError(
            [
                {
                    "loc": ("body", "email"),
                    "type": "value_error",
                    "msg": "value is not a valid email address",
                },
            ],
        )

        error = self.normalizer.normalize(exc)

        assert error.status == 422
        assert error.code == "VALIDATION_ERROR"
        assert error.errors[0].field == "email"
        assert error.errors[0].code == "value_error"

    def test_unexpected_error_hides_details(self):
        error = self.normalizer.normalize(RuntimeError("database password is hunter2"))

        assert error.status == 500
        assert error.code == "INTERNAL_ERROR"
        assert "hunter2" not in error.detail


class TestRegistry:
    def test_most_specific_handler_wins(self):
        normalizer = ErrorNormalizer.default()
        normalizer.register(
            SpecialNotFound,
            lambda exc: NormalizedError(status=410, code="GONE", detail="gone"),
        )

        assert normalizer.normalize(SpecialNotFound("1")).status == 410
        assert normalizer.normalize(UserNotFoundError("1")).status == 404

    def test_custom_exception_type(self):
        normalizer = ErrorNormalizer.default()
        normalizer.register(
            TeapotError,
            lambda exc: NormalizedError(status=418, code="TEAPOT", detail="short and stout"),
        )

        assert normalizer.normalize(TeapotError()).code == "TEAPOT"
        assert TeapotError in normalizer.handled_types

    def test_empty_registry_falls_back_to_internal_error(self):
        assert ErrorNormalizer().normalize(ValueError("x")).status == 500


class TestPayload:
    def test_payload_shape(self):
        payload = NormalizedError(status=404, code="USER_NOT_FOUND", detail="nope").to_payload()

        assert payload == {
            "version": 1,
            "status": 404,
            "error": "Not Found",
            "code": "USER_NOT_FOUND",
            "detail": "nope",
            "errors": [],
        }

    def test_unknown_status_reason(self):
        payload = NormalizedError(status=599, code="X", detail="x").to_payload()

        assert payload["error"] == "Error"
