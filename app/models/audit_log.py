"""Append-only audit log model for security-sensitive actions."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String, event
from sqlalchemy.orm import Mapped, foreign, mapped_column, relationship

from app.db.base import Base
from app.models.user import User


class AuditLog(Base):
    """Stores an immutable trail of authentication and user-management actions.

    Rows are inserted once and never updated or deleted; the mapper events
    below reject any flush that would do either.
    """

    __tablename__ = "audit_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    # Plain ids rather than foreign keys: entries outlive the accounts they mention.
    actor_user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    target_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    # "metadata" is reserved on declarative classes, so the attribute is named details.
    details: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    actor: Mapped[User | None] = relationship(
        primaryjoin=lambda: foreign(AuditLog.actor_user_id) == User.id,
        viewonly=True,
        lazy="joined",
    )
    target: Mapped[User | None] = relationship(
        primaryjoin=lambda: foreign(AuditLog.target_user_id) == User.id,
        viewonly=True,
        lazy="joined",
    )


class AppendOnlyViolation(RuntimeError):
    """Raised when code attempts to modify or remove an audit entry."""


@event.listens_for(AuditLog, "before_update")
def _reject_update(mapper, connection, target: AuditLog) -> None:
    raise AppendOnlyViolation(f"Audit log entry {target.id} is append-only and cannot be updated.")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(mapper, connection, target: AuditLog) -> None:
    raise AppendOnlyViolation(f"Audit log entry {target.id} is append-only and cannot be deleted.")
