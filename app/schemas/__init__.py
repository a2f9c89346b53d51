"""Schema exports."""

from app.schemas.audit import AuditLogRead, AuditLogResponse, AuditPaginationRead, AuditUserSummary
from app.schemas.auth import FirstUserResponse, InitAdminRequest, LoginRequest, SessionResponse
from app.schemas.user import (
    MessageResponse,
    UserCreate,
    UserDetailResponse,
    UserListResponse,
    UserMutationResponse,
    UserRead,
    UserUpdate,
)

__all__ = [
    "AuditLogRead",
    "AuditLogResponse",
    "AuditPaginationRead",
    "AuditUserSummary",
    "FirstUserResponse",
    "InitAdminRequest",
    "LoginRequest",
    "SessionResponse",
    "MessageResponse",
    "UserCreate",
    "UserDetailResponse",
    "UserListResponse",
    "UserMutationResponse",
    "UserRead",
    "UserUpdate",
]
