"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "User Directory API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./user_directory.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", str(24 * 60)))
    auth_cookie_name: str = getenv("AUTH_COOKIE_NAME", "token")
    auth_cookie_secure: bool = getenv("AUTH_COOKIE_SECURE", "1" if getenv("APP_ENV", "dev") == "prod" else "0") == "1"
    client_url: str = getenv("CLIENT_URL", "http://localhost:3000")
    audit_page_size: int = int(getenv("AUDIT_PAGE_SIZE", "20"))
    audit_max_page_size: int = int(getenv("AUDIT_MAX_PAGE_SIZE", "100"))
    admin_email: str = getenv("ADMIN_EMAIL", "")
    admin_pass: str = getenv("ADMIN_PASS", "")


settings: Settings = Settings()
