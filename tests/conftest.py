import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.config import settings
from app.core.security import issue_token_for
from app.db.base import Base
from app.db.session import get_db
from app.models.user import Role
from app.services.credential_store import CredentialStore


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    return settings


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def store(db):
    return CredentialStore(db)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(account):
    return {"Authorization": f"Bearer {issue_token_for(account)}"}


@pytest.fixture()
def headers_for():
    return bearer


@pytest.fixture()
def admin(store):
    return store.create(name="Admin", email="admin@example.com", password="adminpass", role=Role.ADMIN)


@pytest.fixture()
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture()
def member(store):
    return store.create(name="Ava", email="ava@x.com", password="secret1")


@pytest.fixture()
def member_headers(member):
    return bearer(member)
