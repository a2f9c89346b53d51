"""Role normalization tests for user creation."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from app.db.base import Base
from app.models.user import Role, normalize_user_role
from app.services.user_service import create_user


def test_create_user_normalizes_role_spelling() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)

    with Session(engine) as session:
        user = create_user(
            db=session,
            email="new-moderator@example.com",
            hashed_password="hash",
            role=" Moderator ",
        )

    assert user.role == "moderator"


def test_create_user_rejects_unknown_role() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)

    with Session(engine) as session:
        with pytest.raises(ValueError, match="Invalid role"):
            create_user(
                db=session,
                email="new-manager@example.com",
                hashed_password="hash",
                role="manager",
            )


@pytest.mark.parametrize(("raw", "expected"), [("ADMIN", Role.ADMIN), (Role.USER, Role.USER), ("user", Role.USER)])
def test_normalize_user_role(raw, expected) -> None:
    assert normalize_user_role(raw) is expected


def test_normalize_user_role_rejects_empty() -> None:
    with pytest.raises(ValueError):
        normalize_user_role(None)
