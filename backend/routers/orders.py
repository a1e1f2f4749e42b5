from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from dataclasses import asdict

from database import get_db
from models.orders import OrderStatus
from schemas.customers import AvailableItem
from schemas.orders import (
    Order as OrderSchema,
    OrderCreate,
    OrderCreatedResponse,
    OrderItemCreateRequest,
    OrderStatusUpdate,
    OrderSummary,
    StockWarning as StockWarningSchema,
)
from services.order_lifecycle import OrderCreated, OrderLifecycle
from utils.auth_utils import (
    CREATE_ORDER,
    DELETE_ORDER,
    EDIT_ORDERS,
    VIEW_ORDERS,
    get_current_user,
    get_user_identifier,
    require_permission,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_lifecycle(db: Session = Depends(get_db), user: dict = Depends(get_current_user)) -> OrderLifecycle:
    return OrderLifecycle(db, actor=get_user_identifier(user))


def _created_response(message: str, result: OrderCreated) -> OrderCreatedResponse:
    return OrderCreatedResponse(
        message=message,
        order=OrderSchema.model_validate(result.order),
        warnings=[StockWarningSchema(**asdict(w)) for w in result.warnings],
    )


@router.post("/", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(CREATE_ORDER))])
def create_order(order: OrderCreate, lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    """Create an order and take its quantities out of admin stock."""
    result = lifecycle.create_order(
        customer_id=order.customer_id,
        items=order.items,
        notes=order.notes,
        payment_deadline=order.payment_deadline,
    )
    message = "Order created successfully."
    if result.warnings:
        message = "Order created with insufficient stock warnings."
    return _created_response(message, result)


@router.get("/", response_model=List[OrderSchema], dependencies=[Depends(require_permission(VIEW_ORDERS))])
def get_all_orders(
    status: Optional[OrderStatus] = None,
    customer_id: Optional[int] = Query(None, alias="customerId"),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    return lifecycle.get_all(status=status, customer_id=customer_id)


@router.get("/summary", response_model=OrderSummary, dependencies=[Depends(require_permission(VIEW_ORDERS))])
def get_order_summary(lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    return lifecycle.summary()


@router.get("/customer/{customer_id}", response_model=List[OrderSchema],
            dependencies=[Depends(require_permission(VIEW_ORDERS))])
def get_customer_orders(
    customer_id: int,
    status: Optional[OrderStatus] = None,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    return lifecycle.get_customer_orders(customer_id, status=status)


@router.get("/customer/{customer_id}/available-items", response_model=List[AvailableItem],
            dependencies=[Depends(require_permission(VIEW_ORDERS))])
def get_available_items(customer_id: int, lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    return lifecycle.available_items(customer_id)


@router.get("/{order_id}", response_model=OrderSchema, dependencies=[Depends(require_permission(VIEW_ORDERS))])
def get_order(order_id: int, lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    return lifecycle.get(order_id)


@router.put("/{order_id}/status", response_model=OrderSchema, dependencies=[Depends(require_permission(EDIT_ORDERS))])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    return lifecycle.update_status(order_id, payload.status)


@router.post("/{order_id}/cancel", response_model=OrderSchema, dependencies=[Depends(require_permission(EDIT_ORDERS))])
def cancel_order(order_id: int, lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    return lifecycle.cancel(order_id)


@router.post("/{order_id}/items", response_model=OrderCreatedResponse,
             dependencies=[Depends(require_permission(EDIT_ORDERS))])
def add_item_to_order(
    order_id: int,
    item: OrderItemCreateRequest,
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    result = lifecycle.add_item(order_id, item)
    return _created_response("Item added to order successfully.", result)


@router.delete("/{order_id}", dependencies=[Depends(require_permission(DELETE_ORDER))])
def delete_order(order_id: int, lifecycle: OrderLifecycle = Depends(get_order_lifecycle)):
    restored = lifecycle.delete(order_id)
    return {"message": "Order deleted successfully.", "inventoryRestored": restored}
