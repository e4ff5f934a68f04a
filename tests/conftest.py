import pytest
from fastapi.testclient import TestClient

from spicepos.config import Settings, get_settings
from spicepos.database import JsonFileStore
from spicepos.inventory import ProductStore
from spicepos.main import app
from spicepos.sales import SalesStore


@pytest.fixture
def settings(tmp_path):
    return Settings(DATA_DIR=tmp_path / "data", LOCK_TIMEOUT=2)


@pytest.fixture
def client(settings):
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def product_store(settings):
    return ProductStore(JsonFileStore(settings.products_path, settings.LOCK_TIMEOUT))


@pytest.fixture
def sales_store(settings):
    return SalesStore(JsonFileStore(settings.sales_path, settings.LOCK_TIMEOUT), settings.TIMEZONE)
