"""Audit log endpoint tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app import main as main_module
from app.core.security import get_password_hash
from app.db import session as db_session
from app.db.base import Base
from app.main import app
from app.models import AuditLog, User

PASSWORD = "Secret123"


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'audit_api.db'}", connect_args={"check_same_thread": False})
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", testing_session_local)
    return testing_session_local


def _seed(session_local) -> dict[str, int]:
    with session_local() as db:
        admin = User(first_name="Ada", email="admin@example.com", password_hash=get_password_hash(PASSWORD), role="admin")
        moderator = User(email="mod@example.com", password_hash=get_password_hash(PASSWORD), role="moderator")
        db.add_all([admin, moderator])
        db.flush()
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        for offset in range(25):
            db.add(
                AuditLog(
                    actor_user_id=admin.id,
                    action_type="EDIT_USER",
                    target_user_id=moderator.id,
                    details={"kind": "changes", "changes": [{"field": "first_name", "old_value": None, "new_value": f"v{offset}"}]},
                    created_at=start + timedelta(days=offset),
                )
            )
        db.commit()
        return {"admin": admin.id, "mod": moderator.id}


def test_audit_logs_are_admin_only(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        anonymous = client.get("/api/audit/logs")
        client.post("/api/auth/login", json={"email": "mod@example.com", "password": PASSWORD})
        moderator = client.get("/api/audit/logs")

    assert anonymous.status_code == 401
    assert moderator.status_code == 403
    assert moderator.json()["message"] == "access denied"


def test_audit_logs_paginate_newest_first(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
        first = client.get("/api/audit/logs", params={"action_type": "EDIT_USER", "page": 1, "limit": 20})
        second = client.get("/api/audit/logs", params={"action_type": "EDIT_USER", "page": 2, "limit": 20})
        third = client.get("/api/audit/logs", params={"action_type": "EDIT_USER", "page": 3, "limit": 20})

    assert first.status_code == 200
    body = first.json()
    assert len(body["logs"]) == 20
    assert body["pagination"] == {"total": 25, "page": 1, "limit": 20, "pages": 2}
    newest = body["logs"][0]
    assert newest["summary"] == "first_name: None → v24"
    assert newest["actor"]["email"] == "admin@example.com"
    assert newest["target"]["id"] == ids["mod"]
    stamps = [entry["created_at"] for entry in body["logs"]]
    assert stamps == sorted(stamps, reverse=True)

    assert len(second.json()["logs"]) == 5
    assert third.status_code == 200
    assert third.json()["logs"] == []
    assert third.json()["pagination"]["total"] == 25
    assert third.json()["pagination"]["pages"] == 2


def test_audit_logs_filter_by_window_and_type(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
        window = client.get(
            "/api/audit/logs",
            params={"from": "2025-01-05T00:00:00Z", "to": "2025-01-07T00:00:00Z", "action_type": "EDIT_USER"},
        )
        other_type = client.get(
            "/api/audit/logs",
            params={"from": "2025-01-05T00:00:00Z", "to": "2025-01-07T00:00:00Z", "action_type": "DELETE_USER"},
        )
        invalid = client.get("/api/audit/logs", params={"action_type": "SOMETHING_ELSE"})
        logins = client.get("/api/audit/logs", params={"action_type": "LOGIN_SUCCESS"})

    assert window.json()["pagination"]["total"] == 3
    assert other_type.json()["pagination"]["total"] == 0
    assert invalid.status_code == 400
    assert logins.json()["pagination"]["total"] == 1
    assert logins.json()["logs"][0]["summary"] == "Browser: testclient"
