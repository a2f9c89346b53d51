"""Audit log endpoints (admin only)."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_audit_recorder, get_current_principal
from app.core.config import settings
from app.models import AuditLog
from app.schemas.audit import AuditLogRead, AuditLogResponse, AuditPaginationRead, AuditUserSummary
from app.services.audit_service import AuditActionType, AuditFilter, AuditRecorder, describe_metadata, parse_metadata
from app.services.authorization import Principal

router: APIRouter = APIRouter()


def _serialize(entry: AuditLog) -> AuditLogRead:
    return AuditLogRead(
        id=entry.id,
        action_type=entry.action_type,
        actor_user_id=entry.actor_user_id,
        target_user_id=entry.target_user_id,
        metadata=entry.details or {},
        summary=describe_metadata(parse_metadata(entry.details)),
        ip_address=entry.ip_address,
        created_at=entry.created_at,
        actor=AuditUserSummary.model_validate(entry.actor) if entry.actor is not None else None,
        target=AuditUserSummary.model_validate(entry.target) if entry.target is not None else None,
    )


@router.get("/logs", response_model=AuditLogResponse)
def list_audit_logs(
    from_time: datetime | None = Query(default=None, alias="from"),
    to_time: datetime | None = Query(default=None, alias="to"),
    action_type: AuditActionType | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=settings.audit_page_size, ge=1, le=settings.audit_max_page_size),
    actor: Principal = Depends(get_current_principal),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> AuditLogResponse:
    result = recorder.query(
        AuditFilter(from_time=from_time, to_time=to_time, action_type=action_type),
        page=page,
        page_size=limit,
        actor_role=actor.role,
    )
    return AuditLogResponse(
        logs=[_serialize(entry) for entry in result.entries],
        pagination=AuditPaginationRead.model_validate(result.pagination),
    )
