# users/permissions.py
from rest_framework import permissions


class HasRole(permissions.BasePermission):
    """
    Allows access to authenticated users whose ``role`` is listed in
    ``allowed_roles``. Superusers always pass.
    """
    allowed_roles = ()

    def has_permission(self, request, view):
        # 1. User must be logged in
        if not request.user or not request.user.is_authenticated:
            return False

        # 2. Check Role
        return (
            request.user.is_superuser or
            getattr(request.user, 'role', '') in self.allowed_roles
        )


class IsEditorOrAdmin(HasRole):
    allowed_roles = ('editor', 'admin')


class IsAdminRole(HasRole):
    allowed_roles = ('admin',)
