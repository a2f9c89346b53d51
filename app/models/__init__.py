"""Application models package."""

from app.models.audit_log import AppendOnlyViolation, AuditLog
from app.models.user import ROLE_RANK, USER_ROLES, Role, User, normalize_user_role

__all__ = ["AppendOnlyViolation", "AuditLog", "ROLE_RANK", "USER_ROLES", "Role", "User", "normalize_user_role"]
