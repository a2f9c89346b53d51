"""Centralized RBAC decisions for directory operations.

Every permission rule for viewing, creating, editing and deleting accounts
lives in :func:`decide`. It is a pure function of the acting principal, the
operation, the target principal and an optional requested role; request
handlers receive it through a dependency and never re-implement the rules.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from app.core.exceptions import AuthorizationDenied
from app.models.user import ROLE_RANK, Role, User, normalize_user_role

ACCESS_DENIED = "access denied"
ONLY_ADMIN_CREATES = "only admin can create users"
ADMIN_SELF_DELETE = "admins cannot delete their own account"
MODERATOR_DELETE_SCOPE = "moderators can only delete basic users"
USER_CANNOT_DELETE = "basic users cannot delete accounts"


class Operation(str, enum.Enum):
    VIEW_LIST = "VIEW_LIST"
    VIEW_ONE = "VIEW_ONE"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity as seen by the decision engine."""

    id: int
    role: Role

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(id=user.id, role=normalize_user_role(user.role))


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def _outranks(actor: Principal, target: Principal) -> bool:
    return ROLE_RANK[actor.role] > ROLE_RANK[target.role]


def _decide_view_one(actor: Principal, target: Principal) -> Decision:
    if actor.role in (Role.ADMIN, Role.MODERATOR):
        return ALLOW
    if target.id == actor.id:
        return ALLOW
    return deny(ACCESS_DENIED)


def _decide_create(actor: Principal) -> Decision:
    if actor.role == Role.ADMIN:
        return ALLOW
    return deny(ONLY_ADMIN_CREATES)


def _decide_role_change(actor: Principal, target: Principal, requested_role: Role) -> Decision:
    """Only admins assign elevated roles; moderators may only keep basic users basic."""
    if actor.role == Role.ADMIN:
        return ALLOW
    if actor.role == Role.MODERATOR and target.role == Role.USER and requested_role == Role.USER:
        return ALLOW
    return deny(ACCESS_DENIED)


def _decide_update(actor: Principal, target: Principal, requested_role: Role | None) -> Decision:
    if actor.role == Role.ADMIN:
        fields_allowed = True
    elif actor.role == Role.MODERATOR:
        fields_allowed = target.id == actor.id or _outranks(actor, target)
    else:
        fields_allowed = target.id == actor.id
    if not fields_allowed:
        return deny(ACCESS_DENIED)
    if requested_role is None:
        return ALLOW
    # A denied role change rejects the whole update; nothing is partially applied.
    return _decide_role_change(actor, target, requested_role)


def _decide_delete(actor: Principal, target: Principal) -> Decision:
    if actor.role == Role.ADMIN:
        if target.id == actor.id:
            return deny(ADMIN_SELF_DELETE)
        return ALLOW
    if actor.role == Role.MODERATOR:
        if _outranks(actor, target):
            return ALLOW
        return deny(MODERATOR_DELETE_SCOPE)
    return deny(USER_CANNOT_DELETE)


def decide(
    actor: Principal,
    operation: Operation,
    target: Principal | None = None,
    requested_role: Role | None = None,
) -> Decision:
    """Return ALLOW or DENY(reason) for ``actor`` performing ``operation`` on ``target``.

    ``target`` must already be resolved by the caller (missing accounts are a
    NotFound before this point); a missing target for an operation that needs
    one is denied. ``requested_role`` is only consulted for UPDATE.
    """
    if operation == Operation.VIEW_LIST:
        return ALLOW
    if operation == Operation.CREATE:
        return _decide_create(actor)
    if target is None:
        return deny(ACCESS_DENIED)
    if operation == Operation.VIEW_ONE:
        return _decide_view_one(actor, target)
    if operation == Operation.UPDATE:
        return _decide_update(actor, target, requested_role)
    if operation == Operation.DELETE:
        return _decide_delete(actor, target)
    return deny(ACCESS_DENIED)


def assignable_roles(actor: Principal, target: Principal | None = None) -> tuple[Role, ...]:
    """Roles ``actor`` may set on ``target`` (or on a new account when target is None)."""
    if target is None:
        return tuple(Role) if _decide_create(actor) else ()
    return tuple(role for role in Role if decide(actor, Operation.UPDATE, target, role))


def ensure_allowed(
    actor: Principal,
    operation: Operation,
    target: Principal | None = None,
    requested_role: Role | None = None,
) -> None:
    """Raise AuthorizationDenied when the decision is DENY."""
    decision = decide(actor, operation, target, requested_role)
    if not decision.allowed:
        raise AuthorizationDenied(decision.reason or ACCESS_DENIED)


AccessPolicy = Callable[[Principal, Operation, Principal | None, Role | None], None]


def get_access_policy() -> AccessPolicy:
    """FastAPI dependency handing request handlers the enforcing decision function."""
    return ensure_allowed
