"""Tests for request and response schemas."""

import pytest
from pydantic import ValidationError

from lemon.application.services import UserView
from lemon.domain.user import User, UserRole
from lemon.presentation.api.schemas import (
    ChangePasswordRequest,
    EmailChangeRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    UserResponse,
)


class TestRetypedPassword:
    def test_matching_passwords(self):
        request = ChangePasswordRequest(
            current_password="old_password",
            new_password="new_password_1",
            retype_password="new_password_1",
        )

        assert request.new_password == "new_password_1"

    def test_mismatch_is_reported_on_retype_field(self):
        with pytest.raises(ValidationError) as exc_info:
            ResetPasswordRequest(
                code="abc",
                new_password="new_password_1",
                retype_password="new_password_2",
            )

        errors = exc_info.value.errors()
        assert len(errors) == 1
        assert errors[0]["loc"] == ("retype_password",)
        assert "Passwords do not match" in errors[0]["msg"]

    def test_short_password_is_not_also_a_mismatch(self):
        with pytest.raises(ValidationError) as exc_info:
            ChangePasswordRequest(
                current_password="old_password",
                new_password="short",
                retype_password="different",
            )

        locs = [e["loc"] for e in exc_info.value.errors()]
        assert locs == [("new_password",)]


class TestAliases:
    def test_signup_accepts_camel_case_captcha(self):
        request = SignupRequest.model_validate(
            {
                "email": "user@example.com",
                "password": "password123",
                "captchaResponse": "token",
            },
        )

        assert request.captcha_response == "token"
        assert request.name == ""

    def test_signup_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            SignupRequest(email="not-an-email", password="password123")

    def test_login_remember_me_alias(self):
        request = LoginRequest.model_validate(
            {"email": "x", "password": "y", "rememberMe": True},
        )

        assert request.remember_me is True

    def test_email_change_alias(self):
        request = EmailChangeRequest.model_validate(
            {"password": "secret", "newEmail": "new@example.com"},
        )

        assert request.new_email == "new@example.com"


class TestUserResponse:
    def test_from_user(self):
        user = User("admin@example.com", name="Ann", roles=(UserRole.ADMIN, UserRole.UNVERIFIED))

        response = UserResponse.from_user(user)

        assert response.email == "admin@example.com"
        assert response.roles == ["ADMIN", "UNVERIFIED"]
        assert response.is_admin is True
        assert response.is_verified is False

    def test_from_view_with_hidden_email(self):
        user = User("jane@example.com", name="Jane", roles=())

        response = UserResponse.from_view(UserView.of(user, email_visible=False))

        assert response.email is None
        assert response.roles == []
        assert response.is_verified is True
