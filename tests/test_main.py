import pytest

from eventhub import main
from eventhub.config import settings


def test_missing_secret_key_exits_with_code_1(monkeypatch, caplog):
    monkeypatch.setattr(settings, "SECRET_KEY", "")

    with pytest.raises(SystemExit) as excinfo:
        main.ensure_secret_key()

    assert excinfo.value.code == 1
    assert "FATAL ERROR: SECRET_KEY is not defined." in caplog.text


def test_secret_key_present(monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY", "configured")

    main.ensure_secret_key()


def test_root(client):
    assert client.get("/").json() == "Hello"


def test_cors_preflight_is_answered(client):
    response = client.options("/event/", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "GET",
        "Access-Control-Request-Headers": "x-auth-token",
    })

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:3000")
