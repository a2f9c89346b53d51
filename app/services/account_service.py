"""Account provisioning helpers for first-run setup."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthorizationDenied
from app.core.security import get_password_hash
from app.models import Role, User
from app.services.user_service import count_users, create_user

logger = logging.getLogger(__name__)


def is_first_user(db: Session) -> bool:
    """True while the directory has no accounts at all."""
    return count_users(db) == 0


def create_initial_admin(
    db: Session,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Create the very first account as an admin; refused once any account exists."""
    if not is_first_user(db):
        raise AuthorizationDenied("Admin already exists")
    admin = create_user(
        db=db,
        email=email,
        hashed_password=get_password_hash(password),
        role=Role.ADMIN,
        first_name=first_name,
        last_name=last_name,
    )
    logger.info("[BOOTSTRAP] Initial admin created: user_id=%s", admin.id)
    return admin


def ensure_default_admin(db: Session) -> bool:
    """Seed an admin from ADMIN_EMAIL/ADMIN_PASS on an empty directory.

    Returns:
        bool: True when at least one account existed before this call.
    """
    if not is_first_user(db):
        logger.info("[BOOTSTRAP] Accounts exist; skipping default admin seed.")
        return True
    if not settings.admin_email or not settings.admin_pass:
        logger.warning("[BOOTSTRAP] Directory is empty; use /api/auth/init-admin to create the first admin.")
        return False

    create_initial_admin(db, email=settings.admin_email, password=settings.admin_pass)
    logger.warning("[SECURITY] Default admin account created from environment: %s. Rotate ADMIN_PASS.", settings.admin_email)
    return False
