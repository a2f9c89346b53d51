"""Security utilities for password hashing and cookie-carried JWT auth."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationFailed
from app.db.session import get_db
from app.models.user import User
from app.services.user_service import get_user_by_id

pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed JWT access token from payload data."""
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(
        minutes=settings.jwt_expire_minutes
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token payload."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise AuthenticationFailed("Invalid or expired token") from exc

    return payload


def set_auth_cookie(response: Response, user: User) -> None:
    """Issue a token for ``user`` and attach it as an HttpOnly cookie."""
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        max_age=settings.jwt_expire_minutes * 60,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.auth_cookie_name)


def resolve_user_from_token(db: Session, token: str | None) -> User:
    """Map a cookie token to the stored user; the stored role wins over the claim."""
    if not token:
        raise AuthenticationFailed("Authentication required")
    payload: dict[str, Any] = verify_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationFailed("Invalid authentication token")

    try:
        parsed_user_id: int = int(user_id)
    except (TypeError, ValueError) as exc:
        raise AuthenticationFailed("Invalid authentication token") from exc

    user: User | None = get_user_by_id(db=db, user_id=parsed_user_id)
    if user is None:
        raise AuthenticationFailed("User not found")
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the authenticated user from the auth cookie."""
    return resolve_user_from_token(db, request.cookies.get(settings.auth_cookie_name))


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    candidate = forwarded or (request.client.host if request.client else "") or "unknown"
    return candidate.split(",")[0].strip()
