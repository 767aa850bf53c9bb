"""
Shared fixtures: an in-memory SQLite database per test, a TestClient with the
database and settings dependencies overridden, and small factories.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import mediecho.models  # noqa: F401
from mediecho.auth.utils import create_access_token, get_password_hash
from mediecho.config import Settings, get_settings
from mediecho.database import Base, get_db
from mediecho.main import app
from mediecho.models import Log, User

TEST_PASSWORD = "password123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        refresh_token_secret="test-refresh-secret",
        upload_dir=str(tmp_path / "uploads"),
        stripe_secret_key="sk_test_dummy",
        stripe_webhook_secret="whsec_dummy",
        stripe_price_pro_monthly="price_pro_monthly",
        stripe_price_pro_yearly="price_pro_yearly",
        stripe_price_coach_monthly="price_coach_monthly",
        stripe_price_coach_yearly="price_coach_yearly",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, settings):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email=None, plan="pro", status="active", password=TEST_PASSWORD, **fields):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=get_password_hash(password),
            subscription_plan=plan,
            subscription_status=status,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_log(db):
    def _make(user, created_at: datetime, type="symptom", text="Entry", tone=None, meta=None):
        log = Log(
            user_id=user.id,
            type=type,
            text=text,
            tone=tone,
            meta=meta,
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(log)
        db.commit()
        db.refresh(log)
        return log

    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        token = create_access_token(user.id, settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
