"""User ORM model and role vocabulary."""

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Role(str, enum.Enum):
    """Closed set of account roles, most privileged first."""

    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


USER_ROLES = tuple(role.value for role in Role)
ROLE_RANK: dict[Role, int] = {Role.ADMIN: 3, Role.MODERATOR: 2, Role.USER: 1}


def normalize_user_role(role: str | Role | None) -> Role:
    """Parse a role value into the closed enumeration."""
    if isinstance(role, Role):
        return role
    candidate = str(role or "").strip().lower()
    try:
        return Role(candidate)
    except ValueError as exc:
        raise ValueError(f"Invalid role: {role!r}") from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Directory account; only ``id`` and ``role`` matter for authorization."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False, default=Role.USER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
