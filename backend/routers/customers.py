from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.customers import (
    Customer,
    CustomerCreate,
    CustomerInventory,
    CustomerInventoryItemsRequest,
    CustomerUpdate,
)
from utils.auth_utils import EDIT_CUSTOMERS, VIEW_CUSTOMERS, get_current_user, get_user_identifier, require_permission
from crud import customers as crud_customers

router = APIRouter(prefix="/customers", tags=["Customers"])
logger = logging.getLogger("customers")

@router.post("/", response_model=Customer, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(EDIT_CUSTOMERS))])
def create_customer(customer: CustomerCreate, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    """Create a customer and provision its empty customer inventory."""
    db_customer = crud_customers.create_customer(db, customer, user)
    logger.info(f"Customer '{db_customer.name}' (ID: {db_customer.id}) created by user {get_user_identifier(user)}")
    return db_customer

@router.get("/", response_model=List[Customer], dependencies=[Depends(require_permission(VIEW_CUSTOMERS))])
def read_customers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud_customers.get_customers(db, skip=skip, limit=limit)

@router.get("/{customer_id}", response_model=Customer, dependencies=[Depends(require_permission(VIEW_CUSTOMERS))])
def read_customer(customer_id: int, db: Session = Depends(get_db)):
    return crud_customers.get_customer(db, customer_id)

@router.patch("/{customer_id}", response_model=Customer, dependencies=[Depends(require_permission(EDIT_CUSTOMERS))])
def update_customer(
    customer_id: int,
    customer: CustomerUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    db_customer = crud_customers.update_customer(db, customer_id, customer, user)
    logger.info(f"Customer ID {customer_id} updated by user {get_user_identifier(user)}")
    return db_customer

@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(EDIT_CUSTOMERS))])
def delete_customer(customer_id: int, db: Session = Depends(get_db), user: dict = Depends(get_current_user)):
    crud_customers.delete_customer(db, customer_id, user)
    logger.info(f"Customer ID {customer_id} deleted by user {get_user_identifier(user)}")
    return None

@router.get("/{customer_id}/inventory", response_model=CustomerInventory,
            dependencies=[Depends(require_permission(VIEW_CUSTOMERS))])
def read_customer_inventory(customer_id: int, db: Session = Depends(get_db)):
    return crud_customers.get_customer_inventory(db, customer_id)

@router.post("/{customer_id}/inventory", response_model=CustomerInventory,
             dependencies=[Depends(require_permission(EDIT_CUSTOMERS))])
def grant_inventory_items(
    customer_id: int,
    payload: CustomerInventoryItemsRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    """Make admin items visible to the customer."""
    customer_inventory = crud_customers.grant_inventory_items(db, customer_id, payload.admin_item_ids, user)
    logger.info(f"Items {payload.admin_item_ids} granted to customer ID {customer_id} by user {get_user_identifier(user)}")
    return customer_inventory

@router.delete("/{customer_id}/inventory/{admin_item_id}", response_model=CustomerInventory,
               dependencies=[Depends(require_permission(EDIT_CUSTOMERS))])
def revoke_inventory_item(
    customer_id: int,
    admin_item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
):
    customer_inventory = crud_customers.revoke_inventory_item(db, customer_id, admin_item_id, user)
    logger.info(f"Item {admin_item_id} revoked from customer ID {customer_id} by user {get_user_identifier(user)}")
    return customer_inventory
