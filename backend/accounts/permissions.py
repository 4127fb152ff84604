from rest_framework.permissions import SAFE_METHODS, BasePermission

from accounts.models import User
from accounts.services import get_role


class IsAdminRole(BasePermission):
    """Allow access only to users holding the admin role. Superusers pass."""

    message = "Admin access required."

    def has_permission(self, request, view):
        return get_role(request.user) == User.ROLE_ADMIN


class IsAdminRoleOrReadOnly(IsAdminRole):
    """Anyone may read; only admins may write."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
