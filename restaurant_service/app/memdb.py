from contextlib import contextmanager
from threading import Lock
from typing import Dict, List, Sequence
from uuid import UUID

from .errors import OrderNotFound, StoreUnavailable, TableNotFound
from .logger import logger
from .orders import MenuItemRequest, Order, Table, check_table_id, new_orders
from .storage import Storage


class MemoryStorage(Storage):
    """
    Thread-safe in-process order store.

    One lock guards the whole table -> orders mapping and is held for the full
    duration of every operation, so a reader never sees a half-updated table.
    """

    def __init__(self, lock_timeout: float = 5.0):
        self._tables: Dict[int, Dict[UUID, Order]] = {}
        self._lock = Lock()
        self._lock_timeout = lock_timeout

    @contextmanager
    def _locked(self):
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StoreUnavailable(f"Order store lock not acquired within {self._lock_timeout}s")
        try:
            yield self._tables
        finally:
            self._lock.release()

    def add_table(self, table_id: int) -> None:
        check_table_id(table_id)
        with self._locked() as tables:
            tables.setdefault(table_id, {})

    def list_tables(self) -> List[Table]:
        with self._locked() as tables:
            result = [Table(id=table_id, orders=dict(orders)) for table_id, orders in tables.items()]
        logger.debug(f"list_tables ::: {len(result)} tables")
        return result

    def list_orders(self, table_id: int) -> List[Order]:
        with self._locked() as tables:
            orders = tables.get(table_id)
            if orders is None:
                raise TableNotFound(table_id)
            return list(orders.values())

    def get_order(self, table_id: int, order_id: UUID) -> Order:
        with self._locked() as tables:
            order = tables.get(table_id, {}).get(order_id)
        if order is None:
            raise OrderNotFound(table_id, order_id)
        return order

    def add_orders(self, table_id: int, items: Sequence[MenuItemRequest]) -> List[UUID]:
        check_table_id(table_id)
        # Ids and cooking times are drawn before taking the lock.
        created = new_orders(items)
        with self._locked() as tables:
            orders = tables.setdefault(table_id, {})
            for order in created:
                orders[order.id] = order
        logger.info(f"add_orders ::: table_id={table_id} added {len(created)} orders")
        return [order.id for order in created]

    def delete_order(self, table_id: int, order_id: UUID) -> None:
        with self._locked() as tables:
            orders = tables.get(table_id)
            if orders is None:
                raise TableNotFound(table_id)
            if orders.pop(order_id, None) is None:
                raise OrderNotFound(table_id, order_id)
        logger.info(f"delete_order ::: table_id={table_id} order_id={order_id} deleted")
