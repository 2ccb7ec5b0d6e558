"""
JWT helpers & the identity provider boundary.

- Tokens carry ``sub`` and ``role_names``; nothing else is needed to
  answer a permission question.
- ``AuthProvider`` is the seam between an inbound request and a role
  set.  The core never sees a request, only the resulting roles.
- ``JWTAuthProvider`` reads a bearer token from the Authorization
  header or the ``access_token`` cookie.  No token means an anonymous
  caller (empty role set); a bad token raises Unauthenticated, which is
  deliberately different from a permission denial.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Protocol
from urllib.parse import urlencode

from fastapi import Request
from jose import JWTError, jwt

from filebox.core.config import Settings, settings
from filebox.core.errors import Unauthenticated
from filebox.models.permission import RoleSet

# ── JWT ──────────────────────────────────────────────────────────────


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
    *,
    secret_key: str | None = None,
    algorithm: str | None = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        secret_key or settings.SECRET_KEY,
        algorithm=algorithm or settings.JWT_ALGORITHM,
    )


def decode_access_token(
    token: str,
    *,
    secret_key: str | None = None,
    algorithm: str | None = None,
) -> dict[str, Any]:
    """Decode & validate a JWT.  Raises Unauthenticated on failure."""
    try:
        return jwt.decode(
            token,
            secret_key or settings.SECRET_KEY,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        raise Unauthenticated("Invalid or expired token") from exc


# ── Identity provider ────────────────────────────────────────────────


class AuthProvider(Protocol):
    def current_roles(self, request: Request) -> RoleSet: ...

    def login_url(self, request: Request) -> str: ...


class JWTAuthProvider:
    cookie_name = "access_token"

    def __init__(self, secret_key: str, algorithm: str = "HS256", login_url: str = "/login"):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self._login_url = login_url

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "JWTAuthProvider":
        return cls(
            secret_key=app_settings.SECRET_KEY,
            algorithm=app_settings.JWT_ALGORITHM,
            login_url=app_settings.LOGIN_URL,
        )

    def current_roles(self, request: Request) -> RoleSet:
        token = self._extract_token(request)
        if token is None:
            return frozenset()

        payload = decode_access_token(token, secret_key=self.secret_key, algorithm=self.algorithm)
        role_names = payload.get("role_names", [])
        if not isinstance(role_names, list) or not all(isinstance(r, str) for r in role_names):
            raise Unauthenticated("Invalid token payload: role_names must be a list of strings")
        return frozenset(role_names)

    def login_url(self, request: Request) -> str:
        return f"{self._login_url}?{urlencode({'next': request.url.path})}"

    def _extract_token(self, request: Request) -> str | None:
        header = request.headers.get("Authorization")
        if header:
            scheme, _, token = header.partition(" ")
            if scheme.lower() != "bearer" or not token.strip():
                raise Unauthenticated("Unsupported authorization header")
            return token.strip()
        return request.cookies.get(self.cookie_name)
