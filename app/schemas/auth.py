"""Authentication-related request and response schemas."""

from pydantic import BaseModel, Field

from app.schemas.user import EmailAddress, Password, UserRead


class LoginRequest(BaseModel):
    """Payload for user login."""

    email: str
    password: str


class InitAdminRequest(BaseModel):
    """Payload for first-time admin setup."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: EmailAddress
    password: Password


class FirstUserResponse(BaseModel):
    is_first_user: bool


class SessionResponse(BaseModel):
    """Current principal plus an optional status message."""

    message: str | None = None
    user: UserRead
