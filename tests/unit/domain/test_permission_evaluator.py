"""Unit tests for PermissionEvaluator."""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from lemon.domain.security import PermissionEvaluator
from lemon.domain.shared.exceptions import ErrorCode, PermissionDeniedError
from lemon.domain.user import EDIT_PERMISSION, User, UserRole


@dataclass
class OwnedThing:
    owner_id: UUID


class SelfDecidingThing:
    def __init__(self, answer: bool):
        self.answer = answer
        self.calls = []

    def has_permission(self, subject, action):
        self.calls.append((subject, action))
        return self.answer


class TestPermissionEvaluator:
    def setup_method(self):
        self.evaluator = PermissionEvaluator()
        self.user = User("user@example.com", roles=())
        self.admin = User("admin@example.com", roles=(UserRole.ADMIN,))
        self.pending_admin = User(
            "pending@example.com",
            roles=(UserRole.ADMIN, UserRole.UNVERIFIED),
        )

    def test_no_resource_is_allowed(self):
        assert self.evaluator.has_permission(None, None, "read")
        assert self.evaluator.has_permission(self.user, None, "read")

    def test_anonymous_is_denied(self):
        assert not self.evaluator.has_permission(None, OwnedThing(uuid4()), "read")
        assert not self.evaluator.has_permission(None, SelfDecidingThing(True), "read")

    @pytest.mark.parametrize("answer", [True, False])
    def test_resource_decides_itself(self, answer):
        resource = SelfDecidingThing(answer)

        assert self.evaluator.has_permission(self.user, resource, "edit") is answer
        assert resource.calls == [(self.user, "edit")]

    def test_owner_is_allowed(self):
        assert self.evaluator.has_permission(self.user, OwnedThing(self.user.id), "edit")

    def test_good_admin_is_allowed_on_foreign_resource(self):
        assert self.evaluator.has_permission(self.admin, OwnedThing(uuid4()), "edit")

    def test_unverified_admin_is_denied_on_foreign_resource(self):
        assert not self.evaluator.has_permission(
            self.pending_admin,
            OwnedThing(uuid4()),
            "edit",
        )

    def test_other_user_is_denied(self):
        assert not self.evaluator.has_permission(self.user, OwnedThing(uuid4()), "edit")

    def test_resource_without_owner_is_admin_only(self):
        assert not self.evaluator.has_permission(self.user, object(), "edit")
        assert self.evaluator.has_permission(self.admin, object(), "edit")

    def test_users_are_permission_aware(self):
        other = User("other@example.com", roles=())

        assert self.evaluator.has_permission(other, other, EDIT_PERMISSION)
        assert not self.evaluator.has_permission(self.user, other, EDIT_PERMISSION)
        assert self.evaluator.has_permission(self.admin, other, EDIT_PERMISSION)


class TestEnsurePermission:
    def test_raises_permission_denied(self):
        evaluator = PermissionEvaluator()
        user = User("user@example.com", roles=())

        with pytest.raises(PermissionDeniedError) as exc_info:
            evaluator.ensure_permission(user, OwnedThing(uuid4()), "edit")

        assert exc_info.value.code == ErrorCode.FORBIDDEN
        assert exc_info.value.details["action"] == "edit"

    def test_passes_silently_when_allowed(self):
        evaluator = PermissionEvaluator()
        user = User("user@example.com", roles=())

        evaluator.ensure_permission(user, OwnedThing(user.id), "edit")
