"""
FastAPI Authentication Dependencies for Microservices

Shared dependency functions used by every shiptrack service. A service makes
them available by setting on its app:

    app.state.jwt_manager = JWTManager(...)
    app.state.internal_service_secret = config.internal_service_secret
"""

from dataclasses import dataclass
from fastapi import Depends, Header, HTTPException, status, Request
from typing import Optional
import logging

from core.jwt_manager import JWTManager

logger = logging.getLogger(__name__)

INTERNAL_SERVICE_ID = "internal-service"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity extracted from a verified bearer token"""
    user_id: str
    username: str
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return self.username or self.user_id


def _get_jwt_manager(request: Request) -> JWTManager:
    jwt_manager = getattr(request.app.state, "jwt_manager", None)
    if jwt_manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured"
        )
    return jwt_manager


def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return authorization.strip() or None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AuthenticatedUser:
    """
    Authentication dependency: requires a valid bearer token.

    Raises:
        HTTPException 401: missing or invalid token
    """
    token = _extract_bearer(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = _get_jwt_manager(request).verify_token(token)
    if not result.get("valid"):
        logger.info(f"Rejected token on {request.url.path}: {result.get('error')}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(
        user_id=result["user_id"],
        username=result.get("username") or "",
        is_admin=result.get("is_admin", False),
    )


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """
    Authorization dependency: requires an authenticated administrator.

    Raises:
        HTTPException 403: authenticated but not an administrator
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required"
        )
    return user


async def require_internal_service(
    request: Request,
    x_internal_service: Optional[str] = Header(None, alias="X-Internal-Service"),
    x_internal_service_secret: Optional[str] = Header(None, alias="X-Internal-Service-Secret"),
) -> str:
    """
    Internal service authentication (X-Internal-Service + X-Internal-Service-Secret).

    Raises:
        HTTPException 401: headers missing or secret mismatch
    """
    expected = getattr(request.app.state, "internal_service_secret", None)
    if x_internal_service == "true" and expected and x_internal_service_secret == expected:
        logger.debug(f"Internal service request to {request.url.path}")
        return INTERNAL_SERVICE_ID

    if x_internal_service_secret:
        client_host = request.client.host if request.client else "unknown"
        logger.warning(f"Invalid internal service secret from {client_host}")

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Internal service authentication required"
    )


__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "require_admin",
    "require_internal_service",
    "INTERNAL_SERVICE_ID",
]
