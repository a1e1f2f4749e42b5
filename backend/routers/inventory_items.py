from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db, transaction
from schemas.inventory_items import (
    InventoryAdjustment,
    InventoryAdjustmentResult,
    InventoryItem,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventorySummary,
)
from schemas.inventory_item_audit import InventoryItemAudit
from services.inventory_ledger import InventoryLedger
from utils.auth_utils import EDIT_INVENTORY, VIEW_INVENTORY, get_current_user, get_user_identifier, require_permission
from crud import inventory_items as crud_inventory_items
from crud import inventory_item_audit as crud_inventory_item_audit

router = APIRouter(prefix="/inventory-items", tags=["Inventory Items"])
logger = logging.getLogger("inventory_items")

@router.post("/", response_model=InventoryItem, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def create_inventory_item(
    item: InventoryItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Create a new inventory item."""
    new_item = crud_inventory_items.create_inventory_item(db=db, item=item, user=user)
    logger.info(f"Inventory item '{new_item.name}' created by user {get_user_identifier(user)}")
    return new_item

@router.get("/", response_model=List[InventoryItem], dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_inventory_items(
    skip: int = 0,
    limit: int = 100,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    provider_id: Optional[int] = Query(None, alias="providerId"),
    db: Session = Depends(get_db),
):
    """Retrieve a list of inventory items, with optional filtering by category or provider."""
    return crud_inventory_items.get_inventory_items(
        db, category_id=category_id, provider_id=provider_id, skip=skip, limit=limit
    )

@router.get("/summary", response_model=InventorySummary, dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_inventory_summary(db: Session = Depends(get_db)):
    return crud_inventory_items.get_inventory_summary(db)

@router.get("/low-stock", response_model=List[InventoryItem], dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_low_stock_items(db: Session = Depends(get_db)):
    """Items whose quantity is below their low-stock alert."""
    return InventoryLedger(db).low_stock_items()

@router.get("/{item_id}", response_model=InventoryItem, dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_inventory_item(item_id: int, db: Session = Depends(get_db)):
    return crud_inventory_items.get_inventory_item(db=db, item_id=item_id)

@router.patch("/{item_id}", response_model=InventoryItem, dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def update_inventory_item(
    item_id: int,
    item: InventoryItemUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Update an existing inventory item. Quantity is changed through /adjust."""
    updated_item = crud_inventory_items.update_inventory_item(db=db, item_id=item_id, item=item, user=user)
    logger.info(f"Inventory item '{updated_item.name}' (ID: {item_id}) updated by user {get_user_identifier(user)}")
    return updated_item

@router.post("/{item_id}/adjust", response_model=InventoryAdjustmentResult,
             dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def adjust_inventory_quantity(
    item_id: int,
    payload: InventoryAdjustment,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Manually add (positive) or remove (negative) stock."""
    ledger = InventoryLedger(db, actor=get_user_identifier(user))
    with transaction(db):
        change = ledger.adjust(item_id, payload.adjustment, reason=payload.reason)
    db.refresh(change.item)
    return {
        "previous_quantity": change.old_quantity,
        "new_quantity": change.new_quantity,
        "adjustment": change.delta,
        "item": change.item,
    }

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(EDIT_INVENTORY))])
def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Delete an inventory item. Items that appear on orders cannot be deleted."""
    crud_inventory_items.delete_inventory_item(db=db, item_id=item_id, user=user)
    logger.info(f"Inventory item ID {item_id} deleted by user {get_user_identifier(user)}")
    return None

@router.get("/{item_id}/audit", response_model=List[InventoryItemAudit],
            dependencies=[Depends(require_permission(VIEW_INVENTORY))])
def read_inventory_item_audit(
    item_id: int,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Ledger history of one inventory item."""
    crud_inventory_items.get_inventory_item(db=db, item_id=item_id)
    return crud_inventory_item_audit.get_inventory_item_audits(
        db, inventory_item_id=item_id, start_date=start_date, end_date=end_date
    )
