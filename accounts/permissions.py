from typing import Set

from rest_framework.permissions import BasePermission

from accounts.models import UserRole


ADMIN = "admin"
SCHOOL_ADMIN = "school_admin"
STUDENT = "student"
EVALUATOR = "evaluator"


def roles_for(user) -> Set[str]:
    """
    Roles held by ``user``. Staff and superusers always count as admin.
    """
    if user is None or not user.is_authenticated:
        return set()
    roles = set(UserRole.objects.filter(user=user).values_list("role", flat=True))
    if user.is_staff or user.is_superuser:
        roles.add(ADMIN)
    return roles


def grant_role(user, role: str) -> UserRole:
    obj, _ = UserRole.objects.get_or_create(user=user, role=role)
    return obj


def HasRole(*roles):
    """Build a DRF permission class accepting any of ``roles``."""

    class _HasRole(BasePermission):
        message = "Your role does not allow this action."

        def has_permission(self, request, view):
            held = getattr(request, "_cached_roles", None)
            if held is None:
                held = roles_for(request.user)
                request._cached_roles = held
            return bool(held & set(roles))

    _HasRole.__name__ = "HasRole_" + "_".join(roles)
    return _HasRole
