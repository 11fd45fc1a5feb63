import uvicorn
from fastapi.testclient import TestClient

from booknotion import main
from booknotion.core.config import Settings
from booknotion.main import create_app


def test_app_creates_database_directory_on_startup(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = Settings(
        _env_file=None,
        db_path="storage/nested/booknotion.db",
        database_url=None,
        bcrypt_rounds=4,
    )

    app = create_app(settings)
    assert not (tmp_path / "storage").exists()

    with TestClient(app) as client:
        assert client.get("/api/health").json()["database"] == "connected"

    assert (tmp_path / "storage" / "nested" / "booknotion.db").exists()


def test_run_uses_application_settings(monkeypatch, settings):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(
        main.app.state, "settings", settings.model_copy(update={"host": "127.0.0.1", "port": 4321})
    )

    main.run()

    assert calls == [(main.app, {"host": "127.0.0.1", "port": 4321})]
