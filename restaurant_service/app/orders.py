import random
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from uuid import UUID

from .errors import InvalidInput

# Cooking time range in minutes, both ends inclusive.
COOKING_TIME_MIN = 5
COOKING_TIME_MAX = 15

# Table ids are stored as signed 64-bit integers.
MAX_TABLE_ID = 2**63 - 1


@dataclass(frozen=True)
class MenuItemRequest:
    """A single dish requested for a table."""
    menu_item: str


@dataclass(frozen=True)
class Order:
    """An order placed at a table. Never modified after creation."""
    id: UUID
    menu_item: str
    cooking_time: str


@dataclass(frozen=True)
class Table:
    """Snapshot of a table and its orders, keyed by order id."""
    id: int
    orders: Dict[UUID, Order] = field(default_factory=dict)


def new_order_id() -> UUID:
    # uuid4 draws from os.urandom
    return uuid.uuid4()


def random_cooking_time() -> str:
    return f"{random.randint(COOKING_TIME_MIN, COOKING_TIME_MAX)} minutes"


def new_orders(items: Sequence[MenuItemRequest]) -> List[Order]:
    """
    Builds one order per requested item, keeping the input order.
    Every item is validated first, so a bad item means no order is built at all.
    """
    for position, item in enumerate(items):
        if not isinstance(item.menu_item, str) or not item.menu_item.strip():
            raise InvalidInput(f"menu_item at position {position} must be a non-empty string")

    return [
        Order(id=new_order_id(), menu_item=item.menu_item, cooking_time=random_cooking_time())
        for item in items
    ]


def parse_order_id(text: str) -> UUID:
    """Parses the canonical hyphenated hex form of an order id."""
    try:
        order_id = UUID(text)
    except (TypeError, ValueError, AttributeError):
        raise InvalidInput(f"Malformed order id: {text!r}")
    # UUID() also accepts braces, urn: prefixes and bare hex
    if str(order_id) != text.lower():
        raise InvalidInput(f"Malformed order id: {text!r}")
    return order_id


def table_id_in_range(table_id: int) -> bool:
    return 1 <= table_id <= MAX_TABLE_ID


def check_table_id(table_id: int) -> None:
    """Raises InvalidInput for a table id no backend can store."""
    if not table_id_in_range(table_id):
        raise InvalidInput(f"Table id must be between 1 and {MAX_TABLE_ID}, got {table_id}")
