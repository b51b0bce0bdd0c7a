from lemon.domain.security.permission_evaluator import (
    PermissionAware,
    PermissionEvaluator,
)

__all__ = ["PermissionAware", "PermissionEvaluator"]
