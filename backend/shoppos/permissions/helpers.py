# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS, DEFAULT_ROLE_PERMISSIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_role_permissions(role):
    """Permission codes granted to a role; unknown roles get nothing."""
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def has_permission(user, code):
    if user is None or not user.is_active:
        return False
    return code in get_role_permissions(user.role)


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()
