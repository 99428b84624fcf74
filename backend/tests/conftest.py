import os
from contextlib import contextmanager
from types import SimpleNamespace

# Settings are read at import time; make sure tests never need Postgres, email, or a real secret.
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("EMAIL_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard.core import config as app_config
from jobboard.core.base import Base
from jobboard.core.security import hash_password

# Import models so they register with SQLAlchemy metadata.
from jobboard.models.user import User
from jobboard.models.job import Job
from jobboard.models.application import Application  # noqa: F401

from jobboard.core.database import get_db
from jobboard.dependencies.auth import get_current_user
from jobboard.dependencies.notifications import get_status_notifier


class RecordingNotifier:
    """
    Stand-in notification sink. Records every event; can be told to blow up.
    """

    def __init__(self) -> None:
        self.events = []
        self.fail = False

    def notify_status_change(self, event) -> None:
        self.events.append(event)
        if self.fail:
            raise RuntimeError("notification sink unavailable")


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def db_session(db_engine):
    # The in-memory DB persists across tests (StaticPool); reset schema per test.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings(tmp_path):
    """
    Tests tweak the process-global settings object; restore after each test.
    """
    keys = [
        "EMAIL_ENABLED",
        "EMAIL_PROVIDER",
        "FROM_EMAIL",
        "RESEND_API_KEY",
        "ENABLE_RATE_LIMITING",
        "RATE_LIMIT_AUTH",
        "RATE_LIMIT_DEFAULT",
        "MAX_UPLOAD_BYTES",
        "UPLOAD_DIR",
        "PASSWORD_MIN_LENGTH",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    app_config.settings.UPLOAD_DIR = str(tmp_path / "resumes")
    app_config.settings.EMAIL_ENABLED = False
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)
        app_config.settings.ENABLE_RATE_LIMITING = False


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def app(db_session, notifier):
    app_config.settings.JWT_SECRET = app_config.settings.JWT_SECRET or "test_jwt_secret"

    import jobboard.main as main

    fastapi_app = main.app

    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_status_notifier] = lambda: notifier
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def _make_user(email: str, name: str, role: str) -> User:
    return User(
        email=email,
        name=name,
        password_hash=hash_password("test_password_123"),
        role=role,
    )


@pytest.fixture()
def users(db_session):
    """
    Two employers and two employees for ownership / isolation tests.
    """
    employer = _make_user("m1@example.com", "Tech Solutions Inc.", "employer")
    other_employer = _make_user("m2@example.com", "Creative Marketing Agency", "employer")
    employee = _make_user("e1@example.com", "John Doe", "employee")
    other_employee = _make_user("e2@example.com", "Sarah Smith", "employee")

    people = [employer, other_employer, employee, other_employee]
    db_session.add_all(people)
    db_session.commit()
    for u in people:
        db_session.refresh(u)

    return SimpleNamespace(
        employer=employer,
        other_employer=other_employer,
        employee=employee,
        other_employee=other_employee,
    )


@pytest.fixture()
def make_job(db_session):
    def _make_job(employer: User, *, title: str = "Frontend Developer", is_active: bool = True) -> Job:
        job = Job(
            employer_id=employer.id,
            title=title,
            description="Build responsive web applications.",
            requirements="React, JavaScript",
            location="Remote",
            salary="$70,000 - $90,000",
            is_active=is_active,
        )
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make_job


@pytest.fixture()
def client_for(app):
    """
    Context manager to create a client authenticated as an arbitrary user.

    Usage:
        with client_for(user) as c:
            ...
    """

    @contextmanager
    def _client_for(user: User):
        app.dependency_overrides[get_current_user] = lambda: user
        with TestClient(app) as c:
            yield c
        app.dependency_overrides.pop(get_current_user, None)

    return _client_for


@pytest.fixture()
def anon_client(app):
    with TestClient(app) as c:
        yield c
