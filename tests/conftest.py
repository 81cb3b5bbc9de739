import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import JsonStore
from repository import ShopRepository


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", platform_domain="example.com", port=3012)


@pytest.fixture
def store(settings):
    s = JsonStore(settings.db_path)
    s.init()
    return s


@pytest.fixture
def repo(store, settings):
    return ShopRepository(store, settings)


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PLATFORM_DOMAIN", "example.com")
    monkeypatch.setenv("PORT", "3012")
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("NODE_ENV", raising=False)

    from main import app

    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
