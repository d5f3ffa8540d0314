"""
Core utilities for Shopcore.
"""
from shopcore.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
    check_permission,
    PERMISSIONS,
)
from shopcore.core.deps import (
    get_current_user,
    get_current_active_user,
    require_permission,
    require_roles,
    ensure_can_manage_tenant,
    CurrentUser,
    SuperAdmin,
    TenantAdmin,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "check_permission",
    "PERMISSIONS",
    "get_current_user",
    "get_current_active_user",
    "require_permission",
    "require_roles",
    "ensure_can_manage_tenant",
    "CurrentUser",
    "SuperAdmin",
    "TenantAdmin",
]
