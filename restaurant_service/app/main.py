from typing import Annotated, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Path, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import build_storage
from .errors import InvalidInput, OrderNotFound, StoreError, StoreUnavailable, TableNotFound
from .logger import logger
from .orders import MAX_TABLE_ID, MenuItemRequest, Order, Table, parse_order_id
from .storage import Storage


# --- Request Models ---
class OrderInput(BaseModel):
    """A single dish requested for a table."""
    menu_item: str = Field(min_length=1)


class OrdersInput(BaseModel):
    """Defines the body of a request placing one or more orders."""
    orders: List[OrderInput]


# --- Response Models ---
class OrderResponse(BaseModel):
    id: UUID
    menu_item: str
    cooking_time: str

    @classmethod
    def from_order(cls, order: Order):
        return cls(id=order.id, menu_item=order.menu_item, cooking_time=order.cooking_time)


class TableResponse(BaseModel):
    id: int
    orders: Dict[str, OrderResponse]

    @classmethod
    def from_table(cls, table: Table):
        return cls(
            id=table.id,
            orders={str(order_id): OrderResponse.from_order(order) for order_id, order in table.orders.items()},
        )


TableId = Annotated[int, Path(gt=0, le=MAX_TABLE_ID, description="Positive table number")]


def get_storage(request: Request) -> Storage:
    """FastAPI dependency returning the order store the app was built with."""
    return request.app.state.storage


router = APIRouter()


# --- Error Handlers ---
def error_response(exc: Exception, status_code: int, message: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message or str(exc), "exception": exc.__class__.__name__},
    )


async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.warning(f"{request.method} {request.url.path} ::: {exc}")
    return error_response(exc, 400)


async def not_found_handler(request: Request, exc: StoreError):
    logger.warning(f"{request.method} {request.url.path} ::: {exc}")
    return error_response(exc, 404)


# Backend messages may carry SQL text; they are logged, not returned.
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"{request.method} {request.url.path} ::: store unavailable: {exc}", exc_info=exc)
    return error_response(exc, 503, "Order store unavailable")


async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} ::: store error: {exc}", exc_info=exc)
    return error_response(exc, 500, "Order store error")


# --- Endpoints ---
@router.get("/")
def root():
    """Health check endpoint."""
    return {"message": "Restaurant service is running"}


@router.get("/tables", response_model=List[TableResponse])
def get_tables(storage: Storage = Depends(get_storage)):
    """Lists every table with all of its orders."""
    return [TableResponse.from_table(table) for table in storage.list_tables()]


@router.get("/tables/{table_id}/orders", response_model=List[OrderResponse])
def get_table_orders(table_id: TableId, storage: Storage = Depends(get_storage)):
    """Lists the orders of one table."""
    return [OrderResponse.from_order(order) for order in storage.list_orders(table_id)]


@router.get("/tables/{table_id}/orders/{order_id}", response_model=OrderResponse)
def get_table_order(table_id: TableId, order_id: str, storage: Storage = Depends(get_storage)):
    """Retrieves a single order of a table by its id."""
    return OrderResponse.from_order(storage.get_order(table_id, parse_order_id(order_id)))


@router.post("/tables/{table_id}/orders", response_model=List[UUID])
def add_table_orders(table_id: TableId, orders_data: OrdersInput, storage: Storage = Depends(get_storage)):
    """Places the requested orders and returns their new ids, in request order."""
    items = [MenuItemRequest(menu_item=order.menu_item) for order in orders_data.orders]
    return storage.add_orders(table_id, items)


@router.delete("/tables/{table_id}/orders/{order_id}")
def delete_table_order(table_id: TableId, order_id: str, storage: Storage = Depends(get_storage)):
    """Removes an order from a table."""
    storage.delete_order(table_id, parse_order_id(order_id))
    return None


def create_app(storage: Storage = None) -> FastAPI:
    """
    Builds the HTTP application around an order store.
    Without an explicit store, the backend chosen by configuration is created and seeded.
    """
    app = FastAPI(title="Restaurant table orders")
    app.state.storage = storage if storage is not None else build_storage()

    app.add_exception_handler(InvalidInput, invalid_input_handler)
    app.add_exception_handler(TableNotFound, not_found_handler)
    app.add_exception_handler(OrderNotFound, not_found_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(router)
    return app


app = create_app()
