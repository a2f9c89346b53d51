"""Audit log response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditUserSummary(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuditLogRead(BaseModel):
    id: int
    action_type: str
    actor_user_id: int
    target_user_id: int | None = None
    metadata: dict[str, Any]
    summary: str
    ip_address: str | None = None
    created_at: datetime
    actor: AuditUserSummary | None = None
    target: AuditUserSummary | None = None


class AuditPaginationRead(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    model_config = ConfigDict(from_attributes=True)


class AuditLogResponse(BaseModel):
    logs: list[AuditLogRead]
    pagination: AuditPaginationRead
