"""Authentication request/response schemas."""

from typing import Literal

from pydantic import EmailStr, Field

from policyhub.api.schemas.base import CamelModel
from policyhub.auth.sessions import SessionUser


class UserResponse(CamelModel):
    """A signed-in user as returned to the browser."""

    id: int
    email: str
    display_name: str
    avatar_url: str | None = None
    role: Literal["admin", "user"] = "user"
    organization_id: int
    has_logged_in: bool
    oauth_provider: str | None = None

    @classmethod
    def from_session_user(cls, user: SessionUser) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            role=user.role,
            organization_id=user.organization_id,
            has_logged_in=user.has_logged_in,
            oauth_provider=user.oauth_provider,
        )


class EstablishSessionRequest(CamelModel):
    """Exchange a temporary token for a session."""

    temp_token: str = Field(..., min_length=1, description="Single-use temporary token")


class EstablishSessionResponse(CamelModel):
    user: UserResponse
    success: bool = True
    is_first_login: bool


class PasswordLoginRequest(CamelModel):
    """Sign in with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    organization_id: int | None = Field(
        default=None, description="Only accept members of this organization"
    )


class PasswordLoginResponse(CamelModel):
    user: UserResponse
    is_first_login: bool


class CurrentSessionResponse(CamelModel):
    user: UserResponse


class LogoutResponse(CamelModel):
    success: bool = True
