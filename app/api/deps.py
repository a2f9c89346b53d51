"""Shared FastAPI dependencies for directory endpoints."""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.security import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.services.audit_service import AuditRecorder
from app.services.authorization import Principal


def get_audit_recorder(db: Session = Depends(get_db)) -> AuditRecorder:
    return AuditRecorder(db)


def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    """Authorization view of the authenticated account."""
    return Principal.from_user(current_user)
