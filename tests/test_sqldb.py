import uuid

import pytest

from restaurant_service.app import sqldb
from restaurant_service.app.errors import OrderNotFound, StoreError, StoreUnavailable
from restaurant_service.app.models import OrderRecord, TableRecord
from restaurant_service.app.orders import MenuItemRequest, Order
from restaurant_service.app.sqldb import SqlStorage


def test_orders_survive_a_new_store_instance(tmp_path):
    url = f"sqlite:///{tmp_path / 'durable.db'}"
    first = SqlStorage.from_url(url)
    first.setup()
    first.seed_tables(3)
    [order_id] = first.add_orders(2, [MenuItemRequest("Pizza")])
    first.close()

    second = SqlStorage.from_url(url)
    second.setup()
    second.seed_tables(3)
    try:
        assert second.get_order(2, order_id).menu_item == "Pizza"
        assert len(second.list_tables()) == 3
    finally:
        second.close()


def test_seed_tables_is_idempotent(sql_storage):
    sql_storage.seed_tables(12)
    with sql_storage.SessionLocal() as database:
        assert database.query(TableRecord).count() == 12


def test_add_orders_is_all_or_nothing(sql_storage, monkeypatch):
    duplicate = uuid.uuid4()
    monkeypatch.setattr(sqldb, "new_orders", lambda items: [
        Order(id=duplicate, menu_item=item.menu_item, cooking_time="5 minutes") for item in items
    ])

    with pytest.raises(StoreError):
        sql_storage.add_orders(42, [MenuItemRequest("Pizza"), MenuItemRequest("Salad")])

    with sql_storage.SessionLocal() as database:
        assert database.query(OrderRecord).count() == 0
        assert database.query(TableRecord).filter(TableRecord.table_id == 42).first() is None


def test_unparsable_stored_id_is_a_store_error(sql_storage):
    with sql_storage.SessionLocal() as database:
        database.add(OrderRecord(order_id="garbage", table_id=1, menu_item="Pizza", cooking_time="5 minutes"))
        database.commit()

    with pytest.raises(StoreError):
        sql_storage.list_orders(1)


def test_unreachable_database_is_unavailable(tmp_path):
    storage = SqlStorage.from_url(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'orders.db'}")
    try:
        with pytest.raises(StoreUnavailable):
            storage.setup()
        with pytest.raises(StoreUnavailable):
            storage.list_tables()
    finally:
        storage.close()


def test_exhausted_pool_is_unavailable(tmp_path):
    storage = SqlStorage.from_url(f"sqlite:///{tmp_path / 'orders.db'}", pool_size=1, pool_timeout=0.1)
    storage.setup()
    storage.seed_tables(2)
    held = storage.engine.connect()
    try:
        with pytest.raises(StoreUnavailable):
            storage.list_orders(1)
        with pytest.raises(StoreUnavailable):
            storage.add_orders(1, [MenuItemRequest("Pizza")])
    finally:
        held.close()
        storage.close()


def test_connection_returned_after_each_call(tmp_path):
    storage = SqlStorage.from_url(f"sqlite:///{tmp_path / 'orders.db'}", pool_size=1, pool_timeout=0.1)
    storage.setup()
    storage.seed_tables(2)
    try:
        for _ in range(3):
            with pytest.raises(OrderNotFound):
                storage.delete_order(1, uuid.uuid4())
            storage.add_orders(2, [MenuItemRequest("Pizza")])
        assert len(storage.list_orders(2)) == 3
    finally:
        storage.close()
