"""
Session tokens for shiptrack

The identity provider signs a token at login; every other service checks it
with the same shared secret. Claims are the user id (``sub``), the username
and the admin flag, which is all the shipment API needs to attribute history
entries and gate admin-only routes.
"""

import jwt
import uuid
import secrets
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timedelta, timezone
from enum import Enum
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECONDS = 24 * 60 * 60


class TokenType(Enum):
    """Token types"""
    ACCESS = "access"


@dataclass
class TokenClaims:
    """Identity carried inside a session token"""
    user_id: str
    username: str
    is_admin: bool = False
    token_type: TokenType = TokenType.ACCESS

    @property
    def scope(self) -> str:
        return "admin" if self.is_admin else "user"


def _rejected(reason: str) -> Dict[str, Any]:
    return {"valid": False, "error": reason}


class JWTManager:
    """Issues and checks HS256 session tokens"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        issuer: str = "shiptrack",
        access_token_expiry: int = DEFAULT_SESSION_SECONDS,
    ):
        if not secret_key:
            # Each process would get its own key; tokens stop working across services
            logger.warning(
                "JWT_SECRET is not set - signing with a random per-process key. "
                "Use this only for local development."
            )
            secret_key = secrets.token_urlsafe(64)

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_token_expiry = access_token_expiry

    def create_access_token(
        self,
        claims: TokenClaims,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Sign a session token for ``claims``; ``expires_delta`` overrides the session length."""
        issued = datetime.now(tz=timezone.utc)
        lifetime = expires_delta if expires_delta is not None else timedelta(seconds=self.access_token_expiry)
        expires = issued + lifetime

        token = jwt.encode(
            {
                "iss": self.issuer,
                "sub": claims.user_id,
                "iat": int(issued.timestamp()),
                "exp": int(expires.timestamp()),
                "jti": uuid.uuid4().hex,
                "type": claims.token_type.value,
                "scope": claims.scope,
                "username": claims.username,
                "is_admin": claims.is_admin,
            },
            self.secret_key,
            algorithm=self.algorithm,
        )
        logger.debug(f"Issued session token for {claims.username} ({claims.user_id}) until {expires}")
        return token

    def verify_token(
        self,
        token: str,
        expected_type: Optional[TokenType] = TokenType.ACCESS,
        verify_exp: bool = True
    ) -> Dict[str, Any]:
        """
        Check signature, issuer and expiry of a session token.

        Never raises. The result always has ``valid``; a rejected token adds
        ``error``, an accepted one adds the identity claims and the
        ``issued_at``/``expires_at`` datetimes.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": verify_exp, "require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            return _rejected("Token has expired")
        except jwt.InvalidIssuerError:
            return _rejected("Invalid token issuer")
        except jwt.InvalidTokenError as e:
            return _rejected(f"Invalid token: {e}")

        token_type = payload.get("type")
        if expected_type and token_type != expected_type.value:
            return _rejected(f"Invalid token type. Expected {expected_type.value}, got {token_type}")

        return {
            "valid": True,
            "payload": payload,
            "user_id": payload["sub"],
            "username": payload.get("username"),
            "is_admin": bool(payload.get("is_admin", False)),
            "scope": payload.get("scope"),
            "token_type": token_type,
            "issued_at": datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            "expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            "jti": payload.get("jti"),
        }


__all__ = ["JWTManager", "TokenClaims", "TokenType", "DEFAULT_SESSION_SECONDS"]
