"""User repository operations."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailure
from app.models.user import Role, User, normalize_user_role

AUDITED_FIELDS: tuple[str, ...] = ("first_name", "last_name", "email", "role")
# Password changes are audited without exposing either hash.
PASSWORD_BEFORE = "[redacted]"
PASSWORD_AFTER = "[redacted:changed]"


def user_snapshot(user: User) -> dict[str, Any]:
    """Audited fields of ``user`` as plain values, used as pre/post images."""
    return {name: getattr(user, name) for name in AUDITED_FIELDS}


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id.asc())).all())


def count_users(db: Session) -> int:
    return db.scalar(select(func.count(User.id))) or 0


def create_user(
    db: Session,
    email: str,
    hashed_password: str,
    role: str | Role,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    canonical_role = normalize_user_role(role)
    if get_user_by_email(db=db, email=email) is not None:
        raise ValidationFailure("Email already registered")
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=hashed_password,
        role=canonical_role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailure("Email already registered") from exc
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user: User,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    role: Role | None = None,
    hashed_password: str | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Apply supplied fields and commit.

    Returns the ``(before, after)`` snapshots taken around the write so the
    caller can audit exactly what changed.
    """
    before = user_snapshot(user)
    if email is not None and email != user.email:
        existing = get_user_by_email(db=db, email=email)
        if existing is not None and existing.id != user.id:
            raise ValidationFailure("Email already registered")

    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    if email is not None:
        user.email = email
    if role is not None:
        user.role = role.value
    if hashed_password is not None:
        user.password_hash = hashed_password

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailure("Email already registered") from exc
    db.refresh(user)

    after = user_snapshot(user)
    if hashed_password is not None:
        before["password"] = PASSWORD_BEFORE
        after["password"] = PASSWORD_AFTER
    return before, after


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()
