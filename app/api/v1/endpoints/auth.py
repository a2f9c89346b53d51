"""Authentication endpoints (cookie-carried JWT)."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_audit_recorder
from app.core.config import settings
from app.core.exceptions import AuthenticationFailed, DirectoryError
from app.core.security import (
    clear_auth_cookie,
    client_ip,
    get_current_user,
    resolve_user_from_token,
    set_auth_cookie,
    verify_password,
)
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import FirstUserResponse, InitAdminRequest, LoginRequest, SessionResponse
from app.schemas.user import MessageResponse, UserRead
from app.services.account_service import create_initial_admin, is_first_user
from app.services.audit_service import (
    AuditActionType,
    AuditRecorder,
    BrowserMetadata,
    ReasonMetadata,
    UserDetailsMetadata,
)
from app.services.user_service import get_user_by_email

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)
INVALID_CREDENTIALS = "Invalid credentials"


def _browser(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")[:255] or "unknown"


@router.get("/check-first-user", response_model=FirstUserResponse)
def check_first_user(db: Session = Depends(get_db)) -> FirstUserResponse:
    return FirstUserResponse(is_first_user=is_first_user(db))


@router.post("/init-admin", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def init_admin(
    payload: InitAdminRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> SessionResponse:
    admin = create_initial_admin(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    set_auth_cookie(response, admin)
    recorder.record_safely(
        admin.id,
        AuditActionType.CREATE_USER,
        target_id=admin.id,
        metadata=UserDetailsMetadata(email=admin.email, role=admin.role),
        ip_address=client_ip(request),
    )
    return SessionResponse(message="Admin user created successfully", user=UserRead.model_validate(admin))


@router.post("/login", response_model=SessionResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> SessionResponse:
    ip_address = client_ip(request)
    user: User | None = get_user_by_email(db=db, email=payload.email.strip())
    if user is None:
        # No account means no actor id, so this attempt only reaches the operator log.
        logger.warning("[AUTH] Login failed for unknown account from ip=%s", ip_address)
        raise AuthenticationFailed(INVALID_CREDENTIALS)
    if not verify_password(payload.password, user.password_hash):
        logger.info("[AUTH] Login failed for user_id=%s from ip=%s", user.id, ip_address)
        recorder.record_safely(
            user.id,
            AuditActionType.LOGIN_FAILURE,
            metadata=ReasonMetadata(reason="invalid password"),
            ip_address=ip_address,
        )
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    set_auth_cookie(response, user)
    recorder.record_safely(
        user.id,
        AuditActionType.LOGIN_SUCCESS,
        metadata=BrowserMetadata(browser=_browser(request)),
        ip_address=ip_address,
    )
    return SessionResponse(message="Login successful", user=UserRead.model_validate(user))


@router.get("/session", response_model=SessionResponse)
def session(current_user: User = Depends(get_current_user)) -> SessionResponse:
    return SessionResponse(user=UserRead.model_validate(current_user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> MessageResponse:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        try:
            user = resolve_user_from_token(db, token)
        except DirectoryError:
            logger.info("[AUTH] Logout with stale or invalid session cookie")
        else:
            recorder.record_safely(user.id, AuditActionType.LOGOUT, ip_address=client_ip(request))
    clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully")
