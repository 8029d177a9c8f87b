"""
Authentication Service Data Models

Users, public identities and the login / token verification payloads.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ====================
# Core Data Models
# ====================

class User(BaseModel):
    """Stored user (never serialized to clients)"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    password_hash: str
    is_admin: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class UserIdentity(BaseModel):
    """Public projection of a user: {id, username, isAdmin}"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    user_id: str = Field(..., alias="id")
    username: str
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "UserIdentity":
        return cls(user_id=user.user_id, username=user.username, is_admin=user.is_admin)


class LoginResult(BaseModel):
    """Successful authentication"""
    token: str
    user: UserIdentity
    expires_at: Optional[datetime] = None


# ====================
# Request Models
# ====================

class LoginRequest(BaseModel):
    """Login request; blank fields are rejected by the service"""
    username: Optional[str] = None
    password: Optional[str] = None


class TokenVerificationRequest(BaseModel):
    """Token verification request"""
    token: str = Field(..., description="JWT token")


# ====================
# Response Models
# ====================

class LoginResponse(BaseModel):
    """Login response"""
    success: bool
    token: Optional[str] = None
    user: Optional[UserIdentity] = None
    message: str


class TokenVerificationResponse(BaseModel):
    """Token verification response"""
    valid: bool
    user: Optional[UserIdentity] = None
    expires_at: Optional[datetime] = None
    error: Optional[str] = None
