"""Permission evaluation for (subject, resource, action) triples.

Decision order:

1. No resource: allowed.
2. Resources that know their own rules (``has_permission(subject,
   action)``) decide for themselves.
3. Anything else is allowed for its owner (``owner_id``) and for good
   admins.

A missing subject is denied in cases 2 and 3.
"""

import logging
from typing import Any, Protocol, runtime_checkable

from lemon.domain.shared.exceptions import PermissionDeniedError
from lemon.domain.user.aggregates import User

logger = logging.getLogger(__name__)


@runtime_checkable
class PermissionAware(Protocol):
    """A resource that decides its own permissions."""

    def has_permission(self, subject: User | None, action: str) -> bool: ...


class PermissionEvaluator:
    """Default permission evaluator.

    Replace it by overriding the ``get_permission_evaluator`` dependency.
    """

    def has_permission(
        self,
        subject: User | None,
        resource: Any,
        action: str,
    ) -> bool:
        if resource is None:
            return True

        if subject is None:
            return False

        if isinstance(resource, PermissionAware):
            return resource.has_permission(subject, action)

        owner_id = getattr(resource, "owner_id", None)
        if owner_id is not None and owner_id == subject.id:
            return True

        return subject.is_good_admin

    def ensure_permission(
        self,
        subject: User | None,
        resource: Any,
        action: str,
    ) -> None:
        """Raise PermissionDeniedError unless the action is allowed."""
        if not self.has_permission(subject, resource, action):
            logger.warning(
                "Permission '%s' denied for %s on %s",
                action,
                subject.id if subject else "anonymous",
                type(resource).__name__,
            )
            raise PermissionDeniedError(
                details={"action": action, "resource": type(resource).__name__},
            )
