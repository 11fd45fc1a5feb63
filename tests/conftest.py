import pytest
from fastapi.testclient import TestClient

from booknotion.core.config import Settings
from booknotion.core.db import Database
from booknotion.core.security import CredentialStore
from booknotion.main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        environment="development",
        db_path=str(tmp_path / "booknotion.db"),
        database_url=None,
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def credentials(settings):
    return CredentialStore.from_settings(settings)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'repositories.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as db_session:
        yield db_session


def register_user(client, username="alice", email="alice@example.com", password="secret1"):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    return auth_headers(register_user(client)["token"])


@pytest.fixture
def bob(client):
    data = register_user(client, username="bob", email="bob@example.com", password="secret2")
    return auth_headers(data["token"])
