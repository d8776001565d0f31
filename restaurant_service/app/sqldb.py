from contextlib import contextmanager
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from .database import Base, make_engine, make_session_factory
from .errors import OrderNotFound, StoreError, StoreUnavailable, TableNotFound
from .logger import logger
from .models import OrderRecord, TableRecord
from .orders import MenuItemRequest, Order, Table, check_table_id, new_orders, table_id_in_range
from .storage import Storage


class SqlStorage(Storage):
    """
    Order store backed by a relational database through SQLAlchemy.

    Every call checks out one pooled connection for its duration. There is no
    in-process lock: isolation of each transaction is left to the database.
    """

    def __init__(self, engine):
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, pool_size: int = 5, pool_timeout: float = 30):
        return cls(make_engine(database_url, pool_size=pool_size, pool_timeout=pool_timeout))

    @contextmanager
    def _session(self):
        database: Session = self.SessionLocal()
        try:
            yield database
        except OverflowError as e:
            # Raised by the driver, not wrapped by SQLAlchemy.
            raise StoreError(str(e)) from e
        except (OperationalError, PoolTimeoutError) as e:
            logger.error(f"_session ::: database unavailable: {e}")
            raise StoreUnavailable(str(e)) from e
        except SQLAlchemyError as e:
            logger.error(f"_session ::: database error: {e}")
            raise StoreError(str(e)) from e
        finally:
            # Rolls back anything left uncommitted and returns the connection to the pool.
            database.close()

    def setup(self) -> None:
        """Creates the tables and orders relations if they don't exist."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except OperationalError as e:
            raise StoreUnavailable(str(e)) from e
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def close(self) -> None:
        self.engine.dispose()

    @staticmethod
    def _to_order(record: OrderRecord) -> Order:
        try:
            order_id = UUID(record.order_id)
        except ValueError as e:
            raise StoreError(f"Stored order id {record.order_id!r} is not a valid UUID") from e
        return Order(id=order_id, menu_item=record.menu_item, cooking_time=record.cooking_time)

    @staticmethod
    def _table_exists(database: Session, table_id: int) -> bool:
        return database.query(TableRecord).filter(TableRecord.table_id == table_id).first() is not None

    @classmethod
    def _ensure_table(cls, database: Session, table_id: int) -> None:
        if cls._table_exists(database, table_id):
            return
        # A concurrent writer may create the same table first.
        try:
            with database.begin_nested():
                database.add(TableRecord(table_id=table_id))
        except IntegrityError:
            logger.debug(f"_ensure_table ::: table_id={table_id} created concurrently")

    def add_table(self, table_id: int) -> None:
        check_table_id(table_id)
        with self._session() as database:
            self._ensure_table(database, table_id)
            database.commit()

    def seed_tables(self, count: int) -> None:
        with self._session() as database:
            existing = {row.table_id for row in database.query(TableRecord.table_id).all()}
            missing = [table_id for table_id in range(1, count + 1) if table_id not in existing]
            database.add_all(TableRecord(table_id=table_id) for table_id in missing)
            database.commit()
        logger.info(f"seed_tables ::: {len(missing)} tables created")

    def list_tables(self) -> List[Table]:
        with self._session() as database:
            table_ids = [row.table_id for row in database.query(TableRecord.table_id).all()]
            records = database.query(OrderRecord).all()

        orders_by_table: Dict[int, Dict[UUID, Order]] = {table_id: {} for table_id in table_ids}
        for record in records:
            order = self._to_order(record)
            orders_by_table.setdefault(record.table_id, {})[order.id] = order
        return [Table(id=table_id, orders=orders) for table_id, orders in orders_by_table.items()]

    def list_orders(self, table_id: int) -> List[Order]:
        if not table_id_in_range(table_id):
            raise TableNotFound(table_id)
        with self._session() as database:
            if not self._table_exists(database, table_id):
                raise TableNotFound(table_id)
            records = database.query(OrderRecord).filter(OrderRecord.table_id == table_id).all()
        return [self._to_order(record) for record in records]

    def get_order(self, table_id: int, order_id: UUID) -> Order:
        if not table_id_in_range(table_id):
            raise OrderNotFound(table_id, order_id)
        with self._session() as database:
            record = database.query(OrderRecord).filter(
                OrderRecord.table_id == table_id,
                OrderRecord.order_id == str(order_id),
            ).first()
        if record is None:
            raise OrderNotFound(table_id, order_id)
        return self._to_order(record)

    def add_orders(self, table_id: int, items: Sequence[MenuItemRequest]) -> List[UUID]:
        check_table_id(table_id)
        created = new_orders(items)
        # One transaction: the table row and every order commit together or not at all.
        with self._session() as database:
            self._ensure_table(database, table_id)
            database.add_all(
                OrderRecord(
                    order_id=str(order.id),
                    table_id=table_id,
                    menu_item=order.menu_item,
                    cooking_time=order.cooking_time,
                )
                for order in created
            )
            database.commit()
        logger.info(f"add_orders ::: table_id={table_id} added {len(created)} orders")
        return [order.id for order in created]

    def delete_order(self, table_id: int, order_id: UUID) -> None:
        if not table_id_in_range(table_id):
            raise TableNotFound(table_id)
        with self._session() as database:
            if not self._table_exists(database, table_id):
                raise TableNotFound(table_id)
            deleted = database.query(OrderRecord).filter(
                OrderRecord.table_id == table_id,
                OrderRecord.order_id == str(order_id),
            ).delete(synchronize_session=False)
            if deleted == 0:
                raise OrderNotFound(table_id, order_id)
            database.commit()
        logger.info(f"delete_order ::: table_id={table_id} order_id={order_id} deleted")
