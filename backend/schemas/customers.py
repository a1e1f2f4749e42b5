from pydantic import EmailStr
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from schemas.base import ApiModel

class CustomerBase(ApiModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class CustomerCreate(CustomerBase):
    pass

class CustomerUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class CustomerBrief(ApiModel):
    id: int
    name: str
    email: Optional[str] = None

class Customer(CustomerBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CustomerInventoryItemsRequest(ApiModel):
    admin_item_ids: List[int]

class CustomerInventoryItem(ApiModel):
    id: int
    admin_item_id: int

class CustomerInventory(ApiModel):
    id: int
    customer_id: int
    items: List[CustomerInventoryItem] = []

class AvailableItem(ApiModel):
    """An admin item granted to a customer, with live stock."""
    id: int
    name: str
    description: Optional[str] = None
    current_stock: Decimal
    unit: str
    image_url: Optional[str] = None
    price_per_unit: Optional[Decimal] = None
    in_stock: bool
