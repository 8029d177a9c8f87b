"""
Authentication Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import User


# Custom exceptions - defined here to avoid importing repository

class AuthServiceError(Exception):
    """Base exception for auth service errors"""
    pass


class AuthenticationError(AuthServiceError):
    """Base authentication error"""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid username or password"""
    pass


class AccountDisabledError(AuthenticationError):
    """Account is disabled"""
    pass


class InvalidTokenError(AuthenticationError):
    """Invalid or expired token"""
    pass


class LoginValidationError(AuthServiceError):
    """Login request is missing username or password"""
    pass


class UserNotFoundError(AuthServiceError):
    """User not found in auth system"""
    pass


class UserAlreadyExistsError(AuthServiceError):
    """Username already taken"""
    pass


@runtime_checkable
class AuthRepositoryProtocol(Protocol):
    """
    Interface for Auth Repository.

    Implementations must provide these methods.
    Used for dependency injection to enable testing.
    """

    async def initialize(self) -> None:
        """Prepare storage (schema bootstrap)"""
        ...

    async def close(self) -> None:
        ...

    async def check_connection(self) -> bool:
        """Check database connection"""
        ...

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        ...

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user (with password hash) by username"""
        ...

    async def create_user(self, user: User) -> User:
        """Create new user; UserAlreadyExistsError if the username is taken"""
        ...

    async def update_last_login(self, user_id: str) -> bool:
        """Update user's last login timestamp"""
        ...
