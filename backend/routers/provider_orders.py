from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from dataclasses import asdict

from database import get_db
from models.provider_orders import ProviderOrderStatus
from schemas.provider_orders import (
    ProviderOrder as ProviderOrderSchema,
    ProviderOrderItemCreateRequest,
    ProviderOrderStatusUpdate,
    RestockSummary as RestockSummarySchema,
)
from services.provider_orders import ProviderOrderService
from services.restock_planner import RestockPlanner
from utils.auth_utils import (
    MANAGE_PROVIDER_ORDERS,
    VIEW_PROVIDER_ORDERS,
    get_current_user,
    get_user_identifier,
    require_permission,
)

router = APIRouter(prefix="/provider-orders", tags=["Provider Orders"])


def get_provider_order_service(db: Session = Depends(get_db), user: dict = Depends(get_current_user)) -> ProviderOrderService:
    return ProviderOrderService(db, actor=get_user_identifier(user))


@router.post("/check-stock", response_model=RestockSummarySchema,
             dependencies=[Depends(require_permission(MANAGE_PROVIDER_ORDERS))])
def check_and_create_provider_orders(db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    """Scan for low stock and create or extend pending provider orders."""
    summary = RestockPlanner(db, actor=get_user_identifier(user)).check_and_create_orders()
    return RestockSummarySchema(**asdict(summary))


@router.get("/", response_model=List[ProviderOrderSchema],
            dependencies=[Depends(require_permission(VIEW_PROVIDER_ORDERS))])
def get_all_provider_orders(
    status: Optional[ProviderOrderStatus] = None,
    provider_id: Optional[int] = Query(None, alias="providerId"),
    service: ProviderOrderService = Depends(get_provider_order_service),
):
    return service.get_all(status=status, provider_id=provider_id)


@router.get("/{order_id}", response_model=ProviderOrderSchema,
            dependencies=[Depends(require_permission(VIEW_PROVIDER_ORDERS))])
def get_provider_order(order_id: int, service: ProviderOrderService = Depends(get_provider_order_service)):
    return service.get(order_id)


@router.patch("/{order_id}/status", response_model=ProviderOrderSchema,
              dependencies=[Depends(require_permission(MANAGE_PROVIDER_ORDERS))])
def update_provider_order_status(
    order_id: int,
    payload: ProviderOrderStatusUpdate,
    service: ProviderOrderService = Depends(get_provider_order_service),
):
    return service.update_status(order_id, payload.status)


@router.post("/{order_id}/items", response_model=ProviderOrderSchema,
             dependencies=[Depends(require_permission(MANAGE_PROVIDER_ORDERS))])
def add_item_to_provider_order(
    order_id: int,
    item: ProviderOrderItemCreateRequest,
    service: ProviderOrderService = Depends(get_provider_order_service),
):
    return service.add_item(order_id, item.admin_item_id, item.quantity)


@router.delete("/{order_id}/items/{item_id}", response_model=ProviderOrderSchema,
               dependencies=[Depends(require_permission(MANAGE_PROVIDER_ORDERS))])
def remove_item_from_provider_order(
    order_id: int,
    item_id: int,
    service: ProviderOrderService = Depends(get_provider_order_service),
):
    return service.remove_item(order_id, item_id)


@router.delete("/{order_id}", dependencies=[Depends(require_permission(MANAGE_PROVIDER_ORDERS))])
def delete_provider_order(order_id: int, service: ProviderOrderService = Depends(get_provider_order_service)):
    service.delete(order_id)
    return {"message": "Provider order deleted successfully."}
