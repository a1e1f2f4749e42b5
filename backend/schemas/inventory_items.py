from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime
from schemas.base import ApiModel

class InventoryItemBase(ApiModel):
    name: str
    description: Optional[str] = None
    product_code: Optional[str] = None
    image_url: Optional[str] = None
    unit: str = "piece" # e.g., "kg", "box", "liters", "piece"
    price_per_unit: Optional[Decimal] = None
    low_stock_alert: Optional[Decimal] = Decimal("20")
    maximum_capacity: Optional[Decimal] = None
    production_date: Optional[date] = None
    expiry_date: Optional[date] = None
    provider_id: Optional[int] = None
    category_id: Optional[int] = None

class InventoryItemCreate(InventoryItemBase):
    # opening stock; afterwards quantity is managed by the ledger
    quantity: Decimal = Decimal("0")

class InventoryItemUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    product_code: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    # quantity is system-managed, use the adjust endpoint
    price_per_unit: Optional[Decimal] = None
    low_stock_alert: Optional[Decimal] = None
    maximum_capacity: Optional[Decimal] = None
    production_date: Optional[date] = None
    expiry_date: Optional[date] = None
    provider_id: Optional[int] = None
    category_id: Optional[int] = None

class InventoryItem(InventoryItemBase):
    id: int
    quantity: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class InventoryAdjustment(ApiModel):
    adjustment: Decimal # positive adds stock, negative removes it
    reason: Optional[str] = None

class InventoryAdjustmentResult(ApiModel):
    previous_quantity: Decimal
    new_quantity: Decimal
    adjustment: Decimal
    item: InventoryItem

class InventorySummaryItem(ApiModel):
    id: int
    name: str
    quantity: Decimal
    unit: str
    price_per_unit: Optional[Decimal] = None
    estimated_value: Decimal
    low_stock: bool

class InventorySummary(ApiModel):
    total_items: int
    total_value: Decimal
    low_stock_count: int
    items: List[InventorySummaryItem] = []
