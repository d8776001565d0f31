import pytest
from fastapi.testclient import TestClient

from restaurant_service.app.main import create_app
from restaurant_service.app.memdb import MemoryStorage
from restaurant_service.app.sqldb import SqlStorage

SEEDED_TABLES = 10


def make_memory_storage():
    storage = MemoryStorage(lock_timeout=5)
    storage.seed_tables(SEEDED_TABLES)
    return storage


def make_sql_storage(tmp_path):
    storage = SqlStorage.from_url(f"sqlite:///{tmp_path / 'orders.db'}")
    storage.setup()
    storage.seed_tables(SEEDED_TABLES)
    return storage


@pytest.fixture
def memory_storage():
    return make_memory_storage()


@pytest.fixture
def sql_storage(tmp_path):
    storage = make_sql_storage(tmp_path)
    yield storage
    storage.close()


@pytest.fixture(params=["memory", "sql"])
def storage(request, tmp_path):
    if request.param == "memory":
        yield make_memory_storage()
        return
    storage = make_sql_storage(tmp_path)
    yield storage
    storage.close()


@pytest.fixture
def client(storage):
    return TestClient(create_app(storage))


@pytest.fixture
def seeded_tables():
    return SEEDED_TABLES
