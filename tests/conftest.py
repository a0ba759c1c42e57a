import pytest
from fastapi.testclient import TestClient

from gatherly.database.supabase_client import get_supabase
from gatherly.main import app
from gatherly.modules.auth.service import clear_principal_cache
from tests.fakes import FakeSupabase


@pytest.fixture(autouse=True)
def _fresh_principal_cache():
    clear_principal_cache()
    yield
    clear_principal_cache()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
