"""Security utilities - JWT bearer tokens and permission checks for the admin API."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from url_manager.config import settings
from url_manager.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    PermissionDeniedError,
    TokenExpiredError,
)
from url_manager.core.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================================
# JWT Utilities
# ============================================================================


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Tokens are issued by the operator (see ``scripts/issue_token.py``); the
    service keeps no user table.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(UTC),
        "type": "access",
        "jti": str(uuid4()),
    })

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()


class TokenPayload:
    """Parsed JWT token payload."""

    def __init__(self, payload: dict[str, Any]) -> None:
        self.subject: str = payload["sub"]
        self.permissions: list[str] = payload.get("permissions", [])
        self.token_type: str = payload.get("type", "access")
        self.exp: datetime = datetime.fromtimestamp(payload["exp"], tz=UTC)
        self.jti: str | None = payload.get("jti")

    def has_permission(self, permission: str) -> bool:
        # 'urls:*' grants every urls permission, '*' grants everything
        resource = permission.split(":")[0]
        return (
            permission in self.permissions
            or f"{resource}:*" in self.permissions
            or "*" in self.permissions
        )


# ============================================================================
# FastAPI Dependencies
# ============================================================================


async def get_current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenPayload:
    """Dependency returning the caller's token payload.

    Raises AuthenticationError without a bearer token and
    InvalidTokenError for anything that is not a valid access token.
    """
    if credentials is None:
        raise AuthenticationError("Authorization header required")

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access" or "sub" not in payload:
        raise InvalidTokenError("Invalid token type")

    return TokenPayload(payload)


class PermissionChecker:
    """Dependency class for checking token permissions.

    Usage:
        @router.post(
            "/admin/urls/redirects",
            dependencies=[Depends(PermissionChecker("urls:write"))],
        )
    """

    def __init__(self, required_permission: str) -> None:
        self.required_permission = required_permission

    async def __call__(
        self,
        token: TokenPayload = Depends(get_current_token),
    ) -> TokenPayload:
        if token.has_permission(self.required_permission):
            return token

        logger.warning(
            "permission_denied",
            subject=token.subject,
            required_permission=self.required_permission,
        )
        raise PermissionDeniedError(required_permission=self.required_permission)
