"""Audit trail: append-only writes and the admin query path."""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuditWriteFailure, AuthorizationDenied, ValidationFailure
from app.models import AuditLog, Role, normalize_user_role

logger = logging.getLogger(__name__)


class AuditActionType(str, enum.Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    LOGOUT = "LOGOUT"
    CREATE_USER = "CREATE_USER"
    EDIT_USER = "EDIT_USER"
    DELETE_USER = "DELETE_USER"


class FieldChange(BaseModel):
    field: str
    old_value: Any = None
    new_value: Any = None


class ChangesMetadata(BaseModel):
    kind: Literal["changes"] = "changes"
    changes: list[FieldChange]


class ReasonMetadata(BaseModel):
    kind: Literal["reason"] = "reason"
    reason: str


class UserDetailsMetadata(BaseModel):
    kind: Literal["userDetails"] = "userDetails"
    email: str
    role: str


class BrowserMetadata(BaseModel):
    kind: Literal["browser"] = "browser"
    browser: str


AuditMetadata = Annotated[
    Union[ChangesMetadata, ReasonMetadata, UserDetailsMetadata, BrowserMetadata],
    Field(discriminator="kind"),
]
_metadata_adapter: TypeAdapter[AuditMetadata] = TypeAdapter(AuditMetadata)


def parse_metadata(payload: Mapping[str, Any] | None) -> AuditMetadata | None:
    """Rebuild the typed metadata variant from a stored JSON payload."""
    if not payload:
        return None
    return _metadata_adapter.validate_python(dict(payload))


def describe_metadata(metadata: AuditMetadata | None) -> str:
    """Render a one-line, human readable summary of an entry's metadata."""
    if metadata is None:
        return "No details"
    if isinstance(metadata, ChangesMetadata):
        return ", ".join(f"{change.field}: {change.old_value} → {change.new_value}" for change in metadata.changes)
    if isinstance(metadata, ReasonMetadata):
        return f"Reason: {metadata.reason}"
    if isinstance(metadata, UserDetailsMetadata):
        return f"User: {metadata.email} ({metadata.role})"
    if isinstance(metadata, BrowserMetadata):
        return f"Browser: {metadata.browser}"
    raise TypeError(f"Unsupported audit metadata: {type(metadata).__name__}")


def diff_user_fields(before: Mapping[str, Any], after: Mapping[str, Any]) -> list[FieldChange]:
    """Field-level differences between two snapshots, in ``after`` key order."""
    return [
        FieldChange(field=key, old_value=before.get(key), new_value=value)
        for key, value in after.items()
        if before.get(key) != value
    ]


@dataclass(frozen=True)
class AuditFilter:
    """Conjunctive filter; every supplied bound must hold."""

    from_time: datetime | None = None
    to_time: datetime | None = None
    action_type: AuditActionType | None = None


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    pages: int


@dataclass(frozen=True)
class AuditPage:
    entries: list[AuditLog]
    pagination: Pagination


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AuditRecorder:
    """Writes and reads audit entries through one SQLAlchemy session.

    Entry ids come from the database sequence and ``created_at`` from the
    server clock at insert time; neither can be supplied by callers.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def record(
        self,
        actor_id: int,
        action_type: AuditActionType | str,
        target_id: int | None = None,
        metadata: AuditMetadata | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Append one entry and commit it immediately."""
        try:
            action = AuditActionType(action_type)
        except ValueError as exc:
            raise ValidationFailure(f"Unknown audit action type: {action_type}") from exc

        entry = AuditLog(
            actor_user_id=actor_id,
            action_type=action.value,
            target_user_id=target_id,
            details=metadata.model_dump(mode="json") if metadata is not None else {},
            ip_address=ip_address,
        )
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise AuditWriteFailure(f"Audit entry {action.value} could not be persisted") from exc
        return entry

    def record_user_edit(
        self,
        actor_id: int,
        target_id: int,
        before: Mapping[str, Any],
        after: Mapping[str, Any],
        ip_address: str | None = None,
    ) -> AuditLog | None:
        """Record EDIT_USER with the field diff; an edit that changes nothing is not recorded."""
        changes = diff_user_fields(before, after)
        if not changes:
            return None
        return self.record(
            actor_id,
            AuditActionType.EDIT_USER,
            target_id=target_id,
            metadata=ChangesMetadata(changes=changes),
            ip_address=ip_address,
        )

    def record_safely(self, *args: Any, **kwargs: Any) -> AuditLog | None:
        """Best-effort ``record`` used after a mutation has already been committed.

        A failed audit write never undoes or fails the mutation. It is rolled
        back, reported on the operator log and ``None`` is returned.
        """
        return self._best_effort(self.record, *args, **kwargs)

    def record_user_edit_safely(self, *args: Any, **kwargs: Any) -> AuditLog | None:
        return self._best_effort(self.record_user_edit, *args, **kwargs)

    def _best_effort(self, write: Callable[..., AuditLog | None], *args: Any, **kwargs: Any) -> AuditLog | None:
        try:
            return write(*args, **kwargs)
        except AuditWriteFailure:
            logger.exception("[AUDIT] Write failed after committed mutation; args=%s kwargs=%s", args, kwargs)
            return None

    def query(
        self,
        audit_filter: AuditFilter | None = None,
        page: int = 1,
        page_size: int | None = None,
        actor_role: Role | str | None = None,
    ) -> AuditPage:
        """Return one page of entries, newest first, with totals.

        Pages outside ``1..pages`` yield an empty list with accurate totals.
        ``page_size`` is capped at ``settings.audit_max_page_size``.
        """
        if actor_role is not None and normalize_user_role(actor_role) != Role.ADMIN:
            raise AuthorizationDenied("access denied")

        audit_filter = audit_filter or AuditFilter()
        limit = settings.audit_page_size if page_size is None else page_size
        if limit < 1:
            raise ValidationFailure("Page size must be at least 1")
        limit = min(limit, settings.audit_max_page_size)

        conditions = []
        if audit_filter.from_time is not None:
            conditions.append(AuditLog.created_at >= _as_utc(audit_filter.from_time))
        if audit_filter.to_time is not None:
            conditions.append(AuditLog.created_at <= _as_utc(audit_filter.to_time))
        if audit_filter.action_type is not None:
            conditions.append(AuditLog.action_type == AuditActionType(audit_filter.action_type).value)

        total = self.db.scalar(select(func.count(AuditLog.id)).where(*conditions)) or 0
        pages = math.ceil(total / limit)
        pagination = Pagination(total=total, page=page, limit=limit, pages=pages)
        if page < 1 or page > pages:
            return AuditPage(entries=[], pagination=pagination)

        entries = self.db.scalars(
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).unique().all()
        return AuditPage(entries=list(entries), pagination=pagination)
