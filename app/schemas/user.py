"""User directory request and response schemas."""

import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from app.models.user import Role

PASSWORD_MIN_LENGTH = 8


def validate_email_format(value: str) -> str:
    value = value.strip()
    if "@" not in value:
        raise ValueError("Invalid email format")
    return value


def validate_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH or not re.search(r"[a-z]", value) or not re.search(r"[A-Z]", value):
        raise ValueError(
            "Password must be at least 8 characters long and contain both uppercase and lowercase letters"
        )
    return value


EmailAddress = Annotated[str, StringConstraints(max_length=255), AfterValidator(validate_email_format)]
Password = Annotated[str, AfterValidator(validate_password_strength)]


class UserCreate(BaseModel):
    """Payload for creating an account."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: EmailAddress
    password: Password
    role: Role = Role.USER


class UserUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: EmailAddress | None = None
    password: Password | None = None
    role: Role | None = None


class UserRead(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    users: list[UserRead]


class UserDetailResponse(BaseModel):
    user: UserRead
    assignable_roles: list[Role]


class UserMutationResponse(BaseModel):
    message: str
    user: UserRead


class MessageResponse(BaseModel):
    message: str
