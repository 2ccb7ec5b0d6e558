"""
Models package: the value types shared by the store, the resolver and
the HTTP layer.
"""

from filebox.models.permission import (
    ANYONE,
    AccessRule,
    Action,
    PermissionRecord,
    RoleSet,
    Verdict,
)

__all__ = [
    "ANYONE",
    "AccessRule",
    "Action",
    "PermissionRecord",
    "RoleSet",
    "Verdict",
]
