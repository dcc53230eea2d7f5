import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from blogapi.config import Settings
from blogapi.database import create_db_and_tables, create_db_engine
from blogapi.main import create_app

TEST_SECRET = "test-secret-long-enough-for-hs256-signing-keys"


@pytest.fixture()
def settings(tmp_path, monkeypatch):
    """Settings backed by a fresh SQLite file per test."""
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    for name in ("JWT_ALGORITHM", "JWT_EXPIRE_HOURS", "PASSWORD_SCHEMES", "PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    return Settings()


@pytest.fixture()
def client(settings):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def session(settings):
    engine = create_db_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.fixture()
def signup(client):
    """Return a helper that signs a user up and returns its auth headers."""
    def _signup(email: str, first_name: str = "Alex", last_name: str = "Bob", password: str = "pw123") -> dict:
        r = client.post('/auth/signup', json={
            'firstName': first_name,
            'lastName': last_name,
            'emailAddress': email,
            'password': password,
            'confirmPassword': password,
        })
        assert r.status_code == 201, r.text
        return {'Authorization': f"Bearer {r.json()['token']}"}
    return _signup
