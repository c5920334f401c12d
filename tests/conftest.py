import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ADMIN_EMAILS", '["root@example.com"]')
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

import picito.models  # noqa: F401  registers tables on Base.metadata
from picito.db import Base, get_db, make_engine
from picito.main import create_app

@pytest.fixture()
def engine():
    engine = make_engine(os.environ["DATABASE_URL"])
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()

@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)

@pytest.fixture()
def db_session(session_factory) -> Session:
    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture()
def app(session_factory):
    app = create_app()

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    return app

@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)

@pytest.fixture()
def login(app):
    """Log `email` in and return a client carrying its session cookie."""

    def _login(email: str) -> TestClient:
        c = TestClient(app)
        r = c.post("/auth/login", json={"email": email})
        assert r.status_code == 200, r.text
        assert "token" in r.cookies
        return c

    return _login

@pytest.fixture()
def root(login) -> TestClient:
    # root@example.com is listed in ADMIN_EMAILS
    return login("root@example.com")
