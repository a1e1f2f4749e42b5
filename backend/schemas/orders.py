from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal
from models.orders import OrderStatus
from schemas.base import ApiModel
from schemas.customers import CustomerBrief


class OrderItemCreateRequest(ApiModel):
    # Presence is checked by the order validator so the error names the missing field
    admin_item_id: Optional[int] = None
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None

class OrderCreate(ApiModel):
    customer_id: Optional[int] = None
    items: Optional[List[OrderItemCreateRequest]] = None
    notes: Optional[str] = None
    payment_deadline: Optional[date] = None

class OrderStatusUpdate(ApiModel):
    status: Optional[OrderStatus] = None

class OrderItem(ApiModel):
    id: int
    admin_item_id: int
    item_name: str
    unit: str
    quantity: Decimal
    price_per_unit: Optional[Decimal] = None
    total_price: Decimal

class Order(ApiModel):
    id: int
    customer_id: int
    status: OrderStatus
    total_amount: Decimal
    notes: Optional[str] = None
    payment_deadline: Optional[date] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    customer: Optional[CustomerBrief] = None
    items: List[OrderItem] = []

class StockWarning(ApiModel):
    admin_item_id: int
    item_name: str
    requested: Decimal
    available: Decimal

class OrderCreatedResponse(ApiModel):
    message: str
    order: Order
    warnings: List[StockWarning] = []

class OrderSummary(ApiModel):
    total_orders: int
    by_status: Dict[str, int]
    total_revenue: Decimal
    average_order_value: Decimal
