import base64
import os

# Settings are read at import time; configure before the app is imported.
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-0123456789"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["REDACT_MODE"] = "true"
os.environ["AUDIT_REVEALS"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.codec import Envelope, decode_session_key, decrypt, generate_session_key  # noqa: E402
from core.redaction import RedactionPolicy, get_redaction_policy  # noqa: E402
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402

PASSWORD = "Password#123"


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redaction_policy] = lambda: RedactionPolicy(redact_mode=True)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def set_redact_mode():
    def _set(on: bool) -> None:
        app.dependency_overrides[get_redaction_policy] = lambda: RedactionPolicy(redact_mode=on)

    return _set


def register(client: TestClient, username: str, password: str = PASSWORD) -> dict:
    resp = client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture()
def auth_headers(client):
    return register(client, "alice")


@pytest.fixture()
def other_headers(client):
    return register(client, "bob")


@pytest.fixture()
def reveal_key():
    return generate_session_key()


@pytest.fixture()
def reveal_headers(auth_headers, reveal_key):
    return {**auth_headers, "x-reveal-key": reveal_key}


def open_envelope(key_b64: str, env: dict) -> str:
    return decrypt(decode_session_key(key_b64), Envelope.model_validate(env))


def flip_bit(b64: str, index: int = 0) -> str:
    raw = bytearray(base64.b64decode(b64))
    raw[index] ^= 0x01
    return base64.b64encode(bytes(raw)).decode("ascii")
