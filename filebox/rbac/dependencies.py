"""
FastAPI dependencies shared by the controllers.

The Filebox, the settings and the optional auth provider live on
``app.state`` (set up in ``create_app``) so tests can build an app
around a temporary base directory.

`current_role_set` is the only place a request becomes a role set:
- no auth provider configured → anonymous (empty role set)
- provider configured         → whatever it resolves, or Unauthenticated

`require_role` guards administrative routes (permission management).
The core itself never authorizes those writes.
"""

import logging

from fastapi import Depends, HTTPException, Request, status

from filebox.core.config import Settings
from filebox.core.security import AuthProvider
from filebox.models.permission import RoleSet
from filebox.services.file_service import Filebox

logger = logging.getLogger("rbac")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_filebox(request: Request) -> Filebox:
    return request.app.state.filebox


def get_auth_provider(request: Request) -> AuthProvider | None:
    return request.app.state.auth


def current_role_set(
    request: Request,
    auth: AuthProvider | None = Depends(get_auth_provider),
) -> RoleSet:
    if auth is None:
        return frozenset()
    return auth.current_roles(request)


class require_role:
    """
    Dependency factory.  Passes when the caller holds ANY of the roles.

    Can be used as:
        Depends(require_role())            # settings.ADMIN_ROLE
        Depends(require_role("editor", "admin"))
    """

    def __init__(self, *role_names: str):
        self.role_names = set(role_names)

    async def __call__(
        self,
        request: Request,
        roles: RoleSet = Depends(current_role_set),
    ) -> RoleSet:
        required = self.role_names or {get_settings(request).ADMIN_ROLE}
        if roles.isdisjoint(required):
            logger.warning(
                "Role check failed on %s: required any of %s, granted %s",
                request.url.path,
                sorted(required),
                sorted(roles),
            )
            # Intentionally vague; do NOT reveal which roles are missing
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return roles
