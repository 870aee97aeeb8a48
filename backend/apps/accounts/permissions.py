# FILE: /backend/apps/accounts/permissions.py
from rest_framework import permissions

from .models import User

ADMIN_ROLES = [User.Role.ADMIN, User.Role.SUPER_ADMIN]


def _is_authenticated(user):
    return bool(user and getattr(user, 'is_authenticated', False))


class IsAdmin(permissions.BasePermission):
    """
    Permission check for Admin users (includes Super Admins).
    """
    message = 'Access denied. Admins only.'

    def has_permission(self, request, view):
        user = request.user
        if not _is_authenticated(user):
            return False
        return getattr(user, 'role', None) in ADMIN_ROLES

