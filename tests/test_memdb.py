import uuid

import pytest

from restaurant_service.app.errors import OrderNotFound, StoreUnavailable
from restaurant_service.app.memdb import MemoryStorage
from restaurant_service.app.orders import MenuItemRequest


def test_unseeded_store_has_no_tables():
    storage = MemoryStorage()
    assert storage.list_tables() == []


def test_lock_timeout_maps_to_store_unavailable():
    storage = MemoryStorage(lock_timeout=0.01)
    storage.add_table(1)

    storage._lock.acquire()
    try:
        with pytest.raises(StoreUnavailable):
            storage.list_orders(1)
        with pytest.raises(StoreUnavailable):
            storage.add_orders(1, [MenuItemRequest("Pizza")])
        with pytest.raises(StoreUnavailable):
            storage.delete_order(1, uuid.uuid4())
    finally:
        storage._lock.release()

    # Nothing was half-applied while the lock was held elsewhere.
    assert storage.list_orders(1) == []


def test_lock_released_after_failure(memory_storage):
    with pytest.raises(OrderNotFound):
        memory_storage.delete_order(1, uuid.uuid4())
    assert memory_storage._lock.acquire(blocking=False)
    memory_storage._lock.release()


def test_reads_return_snapshots(memory_storage):
    [order_id] = memory_storage.add_orders(1, [MenuItemRequest("Pizza")])

    tables = {table.id: table for table in memory_storage.list_tables()}
    tables[1].orders.clear()
    memory_storage.list_orders(1).clear()

    assert [order.id for order in memory_storage.list_orders(1)] == [order_id]
