__all__ = ["StoreError", "TableNotFound", "OrderNotFound", "StoreUnavailable", "InvalidInput"]


class StoreError(Exception):
    pass


class TableNotFound(StoreError):
    def __init__(self, table_id):
        self.table_id = table_id
        super().__init__(f"Table {table_id} not found")


class OrderNotFound(StoreError):
    def __init__(self, table_id, order_id):
        self.table_id = table_id
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found for table {table_id}")


# Connectivity, pool timeout or lock failure
class StoreUnavailable(StoreError):
    pass


# Validation exceptions, raised before the store mutates anything
class InvalidInput(Exception):
    pass
