from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from models.provider_orders import ProviderOrderStatus
from schemas.base import ApiModel
from schemas.providers import ProviderBrief


class ProviderOrderItem(ApiModel):
    id: int
    admin_item_id: int
    item_name: str
    product_code: Optional[str] = None
    unit: str
    quantity: Decimal
    price_per_unit: Optional[Decimal] = None
    total_price: Decimal

class ProviderOrder(ApiModel):
    id: int
    provider_id: int
    status: ProviderOrderStatus
    total_amount: Decimal
    notes: Optional[str] = None
    email_sent: bool = False
    email_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    provider: Optional[ProviderBrief] = None
    items: List[ProviderOrderItem] = []

class ProviderOrderStatusUpdate(ApiModel):
    status: Optional[ProviderOrderStatus] = None

class ProviderOrderItemCreateRequest(ApiModel):
    admin_item_id: Optional[int] = None
    quantity: Optional[Decimal] = None

class RestockLine(ApiModel):
    provider_order_id: int
    provider_id: int
    admin_item_id: int
    item_name: str
    quantity: Decimal
    new_order: bool

class RestockSummary(ApiModel):
    low_stock_items_count: int
    created_order_ids: List[int] = []
    appended_order_ids: List[int] = []
    lines: List[RestockLine] = []
