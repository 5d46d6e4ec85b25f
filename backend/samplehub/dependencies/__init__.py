"""
Dependencies for dependency injection in routes.
"""
from samplehub.dependencies.auth import (
    ClientIdentity,
    require_access,
    super_admin_access,
    admin_access,
    user_access,
    all_role_access,
    guest_access,
)

__all__ = [
    "ClientIdentity",
    "require_access",
    "super_admin_access",
    "admin_access",
    "user_access",
    "all_role_access",
    "guest_access",
]
