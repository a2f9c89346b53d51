"""FastAPI entrypoint for the role-gated user directory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import DirectoryError
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.account_service import ensure_default_admin

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def startup() -> None:
    if settings.jwt_secret_key.startswith("dev-only"):
        logger.warning("JWT_SECRET_KEY not set; using development fallback secret.")
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        try:
            ensure_default_admin(session)
        except Exception:
            logger.exception("[BOOTSTRAP] Default admin bootstrap failed; continuing startup.")


def _error_details(errors) -> list[dict[str, str]]:
    return [{"loc": ".".join(str(part) for part in error.get("loc", ())), "msg": str(error.get("msg", ""))} for error in errors]


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        message = str(errors[0].get("msg", message)).removeprefix("Value error, ")
    return JSONResponse(status_code=400, content={"message": message, "errors": _error_details(errors)})


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("[API] Persistence failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "An unexpected error occurred"})


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
