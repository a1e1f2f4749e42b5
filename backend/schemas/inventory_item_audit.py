from datetime import datetime
from decimal import Decimal
from typing import Optional
from schemas.base import ApiModel

class InventoryItemAudit(ApiModel):
    id: int
    inventory_item_id: int
    change_type: str
    change_amount: Decimal
    old_quantity: Decimal
    new_quantity: Decimal
    changed_by: Optional[str] = None
    note: Optional[str] = None
    timestamp: datetime
