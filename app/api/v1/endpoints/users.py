"""User directory endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_audit_recorder, get_current_principal
from app.core.exceptions import NotFound
from app.core.security import client_ip, get_password_hash
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import (
    MessageResponse,
    UserCreate,
    UserDetailResponse,
    UserListResponse,
    UserMutationResponse,
    UserRead,
    UserUpdate,
)
from app.services import user_service
from app.services.audit_service import AuditActionType, AuditRecorder, UserDetailsMetadata
from app.services.authorization import AccessPolicy, Operation, Principal, assignable_roles, get_access_policy

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _load_target(db: Session, user_id: int) -> User:
    user = user_service.get_user_by_id(db=db, user_id=user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/", response_model=UserListResponse, summary="List users")
def list_users(
    actor: Principal = Depends(get_current_principal),
    enforce: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
) -> UserListResponse:
    enforce(actor, Operation.VIEW_LIST, None, None)
    return UserListResponse(users=[UserRead.model_validate(user) for user in user_service.list_users(db)])


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: int,
    actor: Principal = Depends(get_current_principal),
    enforce: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
) -> UserDetailResponse:
    user = _load_target(db, user_id)
    target = Principal.from_user(user)
    enforce(actor, Operation.VIEW_ONE, target, None)
    return UserDetailResponse(user=UserRead.model_validate(user), assignable_roles=list(assignable_roles(actor, target)))


@router.post("/", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    request: Request,
    actor: Principal = Depends(get_current_principal),
    enforce: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> UserMutationResponse:
    enforce(actor, Operation.CREATE, None, payload.role)
    user = user_service.create_user(
        db=db,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=payload.role,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    logger.info("[USERS] user_id=%s created user_id=%s role=%s", actor.id, user.id, user.role)
    recorder.record_safely(
        actor.id,
        AuditActionType.CREATE_USER,
        target_id=user.id,
        metadata=UserDetailsMetadata(email=user.email, role=user.role),
        ip_address=client_ip(request),
    )
    return UserMutationResponse(message="User created successfully", user=UserRead.model_validate(user))


@router.put("/{user_id}", response_model=UserMutationResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    actor: Principal = Depends(get_current_principal),
    enforce: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> UserMutationResponse:
    user = _load_target(db, user_id)
    target = Principal.from_user(user)
    # Re-submitting the current role is not a role change.
    requested_role = payload.role if payload.role is not None and payload.role != target.role else None
    enforce(actor, Operation.UPDATE, target, requested_role)

    before, after = user_service.update_user(
        db,
        user,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        role=requested_role,
        hashed_password=get_password_hash(payload.password) if payload.password else None,
    )
    recorder.record_user_edit_safely(actor.id, user.id, before, after, ip_address=client_ip(request))
    return UserMutationResponse(message="User updated successfully", user=UserRead.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    actor: Principal = Depends(get_current_principal),
    enforce: AccessPolicy = Depends(get_access_policy),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> MessageResponse:
    user = _load_target(db, user_id)
    enforce(actor, Operation.DELETE, Principal.from_user(user), None)

    details = UserDetailsMetadata(email=user.email, role=user.role)
    deleted_id = user.id
    user_service.delete_user(db, user)
    logger.info("[USERS] user_id=%s deleted user_id=%s", actor.id, deleted_id)
    recorder.record_safely(
        actor.id,
        AuditActionType.DELETE_USER,
        target_id=deleted_id,
        metadata=details,
        ip_address=client_ip(request),
    )
    return MessageResponse(message="User deleted successfully")
