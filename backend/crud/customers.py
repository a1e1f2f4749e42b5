from typing import List

from sqlalchemy.orm import Session, selectinload
from models.customers import Customer, CustomerInventory, CustomerInventoryItem
from models.inventory_items import InventoryItem
from models.orders import Order
from schemas.customers import CustomerCreate, CustomerUpdate
from utils.auth_utils import get_user_identifier
from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, NotFoundError
from schemas.audit_log import AuditLogCreate
from utils import local_now, sqlalchemy_to_dict

def get_customer(db: Session, customer_id: int):
    db_customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if db_customer is None:
        raise NotFoundError("Customer not found.")
    return db_customer

def get_customers(db: Session, skip: int = 0, limit: int = 100):
    return db.query(Customer).order_by(Customer.name).offset(skip).limit(limit).all()

def create_customer(db: Session, customer: CustomerCreate, user: dict):
    """Create a customer together with its (empty) customer inventory."""
    if customer.email and db.query(Customer).filter(Customer.email == customer.email).first():
        raise InvalidStateError(f"A customer with email '{customer.email}' already exists.", field="email")
    user_identifier = get_user_identifier(user)
    with transaction(db):
        db_customer = Customer(**customer.model_dump(), created_by=user_identifier)
        db_customer.inventory = CustomerInventory(created_by=user_identifier)
        db.add(db_customer)
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='customers',
            record_id=db_customer.id,
            changed_by=user_identifier,
            action='CREATE',
            new_values=sqlalchemy_to_dict(db_customer)
        ))
    db.refresh(db_customer)
    return db_customer

def update_customer(db: Session, customer_id: int, customer: CustomerUpdate, user: dict):
    db_customer = get_customer(db, customer_id)
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_customer)
        for key, value in customer.model_dump(exclude_unset=True).items():
            setattr(db_customer, key, value)
        db_customer.updated_at = local_now()
        db_customer.updated_by = get_user_identifier(user)
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='customers',
            record_id=customer_id,
            changed_by=get_user_identifier(user),
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_customer)
        ))
    db.refresh(db_customer)
    return db_customer

def delete_customer(db: Session, customer_id: int, user: dict):
    db_customer = get_customer(db, customer_id)
    if db.query(Order).filter(Order.customer_id == customer_id).first():
        raise InvalidStateError("Cannot delete a customer that has orders.")
    with transaction(db):
        old_values = sqlalchemy_to_dict(db_customer)
        db.delete(db_customer)
        create_audit_log(db, AuditLogCreate(
            table_name='customers',
            record_id=customer_id,
            changed_by=get_user_identifier(user),
            action='DELETE',
            old_values=old_values,
            new_values=None
        ))
    return True

def get_customer_inventory(db: Session, customer_id: int):
    get_customer(db, customer_id)
    customer_inventory = db.query(CustomerInventory).options(
        selectinload(CustomerInventory.items)
    ).filter(CustomerInventory.customer_id == customer_id).first()
    if customer_inventory is None:
        raise NotFoundError("Customer inventory not found.")
    return customer_inventory

def grant_inventory_items(db: Session, customer_id: int, admin_item_ids: List[int], user: dict):
    """Add admin items to the customer's inventory; items already granted are skipped."""
    customer_inventory = get_customer_inventory(db, customer_id)
    granted = {item.admin_item_id for item in customer_inventory.items}
    for admin_item_id in admin_item_ids:
        if db.query(InventoryItem).filter(InventoryItem.id == admin_item_id).first() is None:
            raise NotFoundError(f"Item {admin_item_id} not found in inventory.", field="adminItemIds")

    with transaction(db):
        for admin_item_id in admin_item_ids:
            if admin_item_id in granted:
                continue
            customer_inventory.items.append(CustomerInventoryItem(admin_item_id=admin_item_id))
            granted.add(admin_item_id)
        customer_inventory.updated_at = local_now()
        customer_inventory.updated_by = get_user_identifier(user)
    db.refresh(customer_inventory)
    return customer_inventory

def revoke_inventory_item(db: Session, customer_id: int, admin_item_id: int, user: dict):
    customer_inventory = get_customer_inventory(db, customer_id)
    grant = next((item for item in customer_inventory.items if item.admin_item_id == admin_item_id), None)
    if grant is None:
        raise NotFoundError("Item not found in customer inventory.")
    with transaction(db):
        customer_inventory.items.remove(grant)
        customer_inventory.updated_at = local_now()
        customer_inventory.updated_by = get_user_identifier(user)
    db.refresh(customer_inventory)
    return customer_inventory
