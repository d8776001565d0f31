"""
Storage contract shared by every order store backend.

Callers only ever talk to ``Storage``; which backend sits behind it is decided
once at process start (see ``config.build_storage``).
"""

from abc import ABC, abstractmethod
from typing import List, Sequence
from uuid import UUID

from .orders import MenuItemRequest, Order, Table


class Storage(ABC):

    @abstractmethod
    def list_tables(self) -> List[Table]:
        """Returns every known table with all of its orders. No ordering is guaranteed."""
        pass

    @abstractmethod
    def list_orders(self, table_id: int) -> List[Order]:
        """
        Returns every order of a table.
        Raises TableNotFound for an unknown table; an empty list means the table has no orders.
        """
        pass

    @abstractmethod
    def get_order(self, table_id: int, order_id: UUID) -> Order:
        """Raises OrderNotFound when either the table or the order does not exist."""
        pass

    @abstractmethod
    def add_orders(self, table_id: int, items: Sequence[MenuItemRequest]) -> List[UUID]:
        """
        Creates one order per item and returns the new ids in the same order as the items.
        An unknown table is created on the fly. Either every order is stored or none is.
        Raises InvalidInput for a blank item or a table id outside 1..MAX_TABLE_ID.
        """
        pass

    @abstractmethod
    def delete_order(self, table_id: int, order_id: UUID) -> None:
        """Raises TableNotFound for an unknown table and OrderNotFound for an unknown order."""
        pass

    @abstractmethod
    def add_table(self, table_id: int) -> None:
        """Registers an empty table. An existing table keeps its orders."""
        pass

    def seed_tables(self, count: int) -> None:
        """Registers tables 1..count."""
        for table_id in range(1, count + 1):
            self.add_table(table_id)

    def close(self) -> None:
        pass
