from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session
from models.inventory_items import InventoryItem
from models.order_items import OrderItem
from models.provider_order_items import ProviderOrderItem
from schemas.inventory_items import InventoryItemCreate, InventoryItemUpdate
from utils.auth_utils import get_user_identifier
from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, NotFoundError
from schemas.audit_log import AuditLogCreate
from services.inventory_ledger import InventoryLedger
from utils import local_now, quantize, sqlalchemy_to_dict

def get_inventory_item(db: Session, item_id: int):
    db_item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if db_item is None:
        raise NotFoundError("Inventory item not found.")
    return db_item

def get_inventory_items(db: Session, category_id: Optional[int] = None, provider_id: Optional[int] = None,
                        skip: int = 0, limit: int = 100):
    query = db.query(InventoryItem)
    if category_id:
        query = query.filter(InventoryItem.category_id == category_id)
    if provider_id:
        query = query.filter(InventoryItem.provider_id == provider_id)
    return query.order_by(InventoryItem.name).offset(skip).limit(limit).all()

def _ensure_unique_name(db: Session, name: str, item_id: Optional[int] = None):
    query = db.query(InventoryItem).filter(InventoryItem.name == name)
    if item_id is not None:
        query = query.filter(InventoryItem.id != item_id)
    if query.first():
        raise InvalidStateError(f"An inventory item named '{name}' already exists.", field="name")

def create_inventory_item(db: Session, item: InventoryItemCreate, user: dict):
    user_identifier = get_user_identifier(user)
    _ensure_unique_name(db, item.name)
    opening_quantity = item.quantity
    with transaction(db):
        db_item = InventoryItem(
            **item.model_dump(exclude={"quantity"}),
            quantity=Decimal("0"),
            created_by=user_identifier,
            updated_by=user_identifier,
        )
        db.add(db_item)
        db.flush()
        # Opening stock goes through the ledger so it has an audit row like every other change
        if opening_quantity and opening_quantity > 0:
            InventoryLedger(db, actor=user_identifier).increment(
                db_item.id, opening_quantity, change_type="adjustment", note="Opening stock"
            )
        create_audit_log(db, AuditLogCreate(
            table_name='inventory_items',
            record_id=db_item.id,
            changed_by=user_identifier,
            action='CREATE',
            old_values=None,
            new_values=sqlalchemy_to_dict(db_item)
        ))
    db.refresh(db_item)
    return db_item

def update_inventory_item(db: Session, item_id: int, item: InventoryItemUpdate, user: dict):
    db_item = get_inventory_item(db, item_id)
    update_data = item.model_dump(exclude_unset=True)
    if update_data.get("name"):
        _ensure_unique_name(db, update_data["name"], item_id)
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_item)
        for key, value in update_data.items():
            setattr(db_item, key, value)
        db_item.updated_at = local_now()
        db_item.updated_by = get_user_identifier(user)
        db.flush()
        create_audit_log(db=db, log_entry=AuditLogCreate(
            table_name='inventory_items',
            record_id=item_id,
            changed_by=get_user_identifier(user),
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_item)
        ))
    db.refresh(db_item)
    return db_item

def delete_inventory_item(db: Session, item_id: int, user: dict):
    db_item = get_inventory_item(db, item_id)
    # Order lines keep a reference to the admin item they were sold from
    referenced = (
        db.query(OrderItem).filter(OrderItem.admin_item_id == item_id).first()
        or db.query(ProviderOrderItem).filter(ProviderOrderItem.admin_item_id == item_id).first()
    )
    if referenced:
        raise InvalidStateError("Cannot delete an inventory item that appears on orders.")
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_item)
        db.delete(db_item)
        create_audit_log(db=db, log_entry=AuditLogCreate(
            table_name='inventory_items',
            record_id=item_id,
            changed_by=get_user_identifier(user),
            action='DELETE',
            old_values=old_values,
            new_values=None
        ))
    return True

def get_inventory_summary(db: Session):
    items = db.query(InventoryItem).order_by(InventoryItem.name).all()
    rows = []
    total_value = Decimal("0")
    for db_item in items:
        quantity = InventoryLedger.display_quantity(db_item)
        estimated_value = quantize(quantity * Decimal(db_item.price_per_unit or 0))
        total_value += estimated_value
        rows.append({
            "id": db_item.id,
            "name": db_item.name,
            "quantity": quantity,
            "unit": db_item.unit,
            "price_per_unit": db_item.price_per_unit,
            "estimated_value": estimated_value,
            "low_stock": InventoryLedger.is_low_stock(db_item),
        })
    return {
        "total_items": len(rows),
        "total_value": total_value,
        "low_stock_count": sum(1 for row in rows if row["low_stock"]),
        "items": rows,
    }
