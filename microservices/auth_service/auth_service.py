"""
Authentication Service - Identity Provider

Username/password login issuing self-signed JWT session tokens, token
verification and user id -> identity resolution for other services.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from core.jwt_manager import JWTManager, TokenClaims

from .models import LoginResult, User, UserIdentity
from .password_utils import (
    DUMMY_PASSWORD_HASH,
    check_password_strength,
    hash_password,
    verify_password,
)
from .protocols import (
    AccountDisabledError,
    AuthRepositoryProtocol,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginValidationError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class AuthService:
    """Pure Authentication Service - custom JWT implementation"""

    def __init__(
        self,
        repository: Optional[AuthRepositoryProtocol] = None,
        jwt_manager: Optional[JWTManager] = None,
    ):
        """
        Initialize authentication service

        Args:
            repository: User repository (inject mock for testing)
            jwt_manager: Token issuer/verifier shared with the API layer
        """
        self.repo = repository
        self.jwt_manager = jwt_manager or JWTManager()

    async def authenticate(self, username: Optional[str], password: Optional[str]) -> LoginResult:
        """
        Check credentials and issue an access token.

        Unknown users, wrong passwords and disabled accounts all fail with
        the same message.

        Raises:
            LoginValidationError: username or password blank
            InvalidCredentialsError / AccountDisabledError: authentication failed
        """
        username = (username or "").strip()
        if not username or not password:
            raise LoginValidationError("Username and password are required")

        user = await self.repo.get_user_by_username(username)
        if user is None:
            await asyncio.to_thread(verify_password, password, DUMMY_PASSWORD_HASH)
            logger.info(f"Login failed for unknown user '{username}'")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        # bcrypt is CPU bound; keep it off the event loop
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info(f"Login failed for '{username}': wrong password")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not user.is_active:
            logger.info(f"Login refused for disabled account '{username}'")
            raise AccountDisabledError(INVALID_CREDENTIALS_MESSAGE)

        token = self.jwt_manager.create_access_token(
            TokenClaims(user_id=user.user_id, username=user.username, is_admin=user.is_admin)
        )
        verified = self.jwt_manager.verify_token(token)

        try:
            await self.repo.update_last_login(user.user_id)
        except Exception as e:
            # Login already succeeded
            logger.warning(f"Could not record last login for {user.user_id}: {e}")

        logger.info(f"User '{username}' logged in (admin={user.is_admin})")
        return LoginResult(
            token=token,
            user=UserIdentity.from_user(user),
            expires_at=verified.get("expires_at"),
        )

    async def resolve(self, user_id: str) -> UserIdentity:
        """
        Public identity for a user id.

        Raises:
            UserNotFoundError: no such user
        """
        user = await self.repo.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return UserIdentity.from_user(user)

    async def verify(self, token: str) -> UserIdentity:
        """
        Verify a token and return the identity it belongs to.

        Raises:
            InvalidTokenError: bad signature, expired, or user no longer active
        """
        result = self.jwt_manager.verify_token(token)
        if not result.get("valid"):
            raise InvalidTokenError(result.get("error") or "Invalid token")

        user = await self.repo.get_user_by_id(result["user_id"])
        if user is None or not user.is_active:
            raise InvalidTokenError("Token subject is not an active user")
        return UserIdentity.from_user(user)

    async def ensure_admin(self, username: Optional[str], password: Optional[str]) -> Optional[User]:
        """
        Create the initial administrator if no user with that name exists.

        Returns:
            The existing or created user, None when no credentials are configured
        """
        if not username or not password:
            logger.warning("ADMIN_USERNAME/ADMIN_PASSWORD not set - no administrator seeded")
            return None

        existing = await self.repo.get_user_by_username(username)
        if existing is not None:
            if not existing.is_admin:
                logger.warning(f"Configured admin '{username}' exists but is not an administrator")
            return existing

        strong, reason = check_password_strength(password)
        if not strong:
            logger.warning(f"Seeding administrator with a weak password ({reason})")

        password_hash = await asyncio.to_thread(hash_password, password)
        user = await self.repo.create_user(User(
            user_id=f"usr_{uuid.uuid4().hex[:16]}",
            username=username,
            password_hash=password_hash,
            is_admin=True,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        ))
        logger.info(f"Seeded administrator '{username}' ({user.user_id})")
        return user

    async def check_connection(self) -> bool:
        try:
            return await self.repo.check_connection()
        except Exception as e:
            logger.warning(f"User store health check failed: {e}")
            return False


__all__ = ["AuthService", "INVALID_CREDENTIALS_MESSAGE"]
