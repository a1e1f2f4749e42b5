from sqlalchemy.orm import Session
from models.inventory_item_audit import InventoryItemAudit
from typing import Optional
from datetime import date, datetime, time, timedelta

def get_inventory_item_audits(
    db: Session,
    inventory_item_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    query = db.query(InventoryItemAudit).filter(
        InventoryItemAudit.inventory_item_id == inventory_item_id
    )

    if start_date:
        query = query.filter(InventoryItemAudit.timestamp >= datetime.combine(start_date, time.min))
    if end_date:
        # inclusive of the whole end day
        query = query.filter(InventoryItemAudit.timestamp < datetime.combine(end_date + timedelta(days=1), time.min))

    return query.order_by(InventoryItemAudit.id).all()
