"""
Inventory ledger.

The only code path that changes ``InventoryItem.quantity``. Each call locks
the item row, applies the change, writes an ``InventoryItemAudit`` record and
flushes. Nothing here commits: the caller's transaction decides whether a
sequence of ledger calls is kept or rolled back as a whole.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

import config
from exceptions import InvalidStateError, MissingFieldsError, NotFoundError
from models.inventory_items import InventoryItem
from models.inventory_item_audit import InventoryItemAudit
from utils import local_now, quantize

logger = logging.getLogger("inventory_ledger")


@dataclass
class LedgerChange:
    item: InventoryItem
    old_quantity: Decimal
    new_quantity: Decimal
    insufficient_stock: bool = False

    @property
    def delta(self) -> Decimal:
        return self.new_quantity - self.old_quantity


class InventoryLedger:
    def __init__(self, db: Session, actor: Optional[str] = None):
        self.db = db
        self.actor = actor

    @staticmethod
    def low_stock_threshold(item: InventoryItem) -> Decimal:
        if item.low_stock_alert is None:
            return config.LOW_STOCK_DEFAULT
        return Decimal(item.low_stock_alert)

    @staticmethod
    def is_low_stock(item: InventoryItem) -> bool:
        """The canonical low-stock test: quantity strictly below the item's alert threshold."""
        return Decimal(item.quantity or 0) < InventoryLedger.low_stock_threshold(item)

    @staticmethod
    def display_quantity(item: InventoryItem) -> Decimal:
        return max(Decimal(item.quantity or 0), Decimal("0"))

    def get_item(self, item_id: int, for_update: bool = False) -> InventoryItem:
        query = self.db.query(InventoryItem).filter(InventoryItem.id == item_id)
        if for_update:
            query = query.with_for_update()
        item = query.first()
        if item is None:
            raise NotFoundError(f"Inventory item {item_id} not found.")
        return item

    def low_stock_items(self) -> List[InventoryItem]:
        items = self.db.query(InventoryItem).order_by(InventoryItem.id).all()
        return [item for item in items if self.is_low_stock(item)]

    def decrement(self, item_id: int, amount, note: Optional[str] = None) -> LedgerChange:
        """
        Take ``amount`` out of stock.

        Orders may be created against insufficient stock, so the write always
        happens and the result is not floored; the returned change carries an
        ``insufficient_stock`` flag instead.
        """
        amount = self._positive(amount)
        item = self.get_item(item_id, for_update=True)
        old_quantity = Decimal(item.quantity or 0)
        insufficient = amount > old_quantity
        if insufficient:
            logger.warning(
                f"Insufficient stock for '{item.name}' (ID: {item.id}). "
                f"Available: {old_quantity}, Requested: {amount}. Decrement applied anyway."
            )
        change = self._apply(item, -amount, "sale", note)
        change.insufficient_stock = insufficient
        return change

    def increment(self, item_id: int, amount, change_type: str = "return", note: Optional[str] = None) -> LedgerChange:
        """Put ``amount`` back into stock (cancellations, deletions, received restocks)."""
        amount = self._positive(amount)
        item = self.get_item(item_id, for_update=True)
        return self._apply(item, amount, change_type, note)

    def adjust(self, item_id: int, adjustment, reason: Optional[str] = None) -> LedgerChange:
        """Manual stock correction. Unlike order decrements, it may not take stock below zero."""
        if adjustment is None:
            raise MissingFieldsError("adjustment")
        adjustment = quantize(adjustment)
        item = self.get_item(item_id, for_update=True)
        new_quantity = Decimal(item.quantity or 0) + adjustment
        if new_quantity < 0:
            raise InvalidStateError(
                f"Insufficient stock. Cannot reduce '{item.name}' below 0 "
                f"(current: {item.quantity}, adjustment: {adjustment})."
            )
        return self._apply(item, adjustment, "adjustment", reason)

    def _positive(self, amount) -> Decimal:
        if amount is None:
            raise MissingFieldsError("quantity")
        amount = quantize(amount)
        if amount <= 0:
            raise MissingFieldsError("quantity", "quantity must be greater than zero.")
        return amount

    def _apply(self, item: InventoryItem, delta: Decimal, change_type: str, note: Optional[str]) -> LedgerChange:
        old_quantity = Decimal(item.quantity or 0)
        item.quantity = old_quantity + delta
        item.updated_at = local_now()
        item.updated_by = self.actor
        self.db.add(item)
        self.db.add(InventoryItemAudit(
            inventory_item_id=item.id,
            change_type=change_type,
            change_amount=delta,
            old_quantity=old_quantity,
            new_quantity=item.quantity,
            changed_by=self.actor,
            note=note,
        ))
        self.db.flush()
        logger.info(f"Ledger {change_type} on '{item.name}' (ID: {item.id}): {old_quantity} -> {item.quantity}")
        return LedgerChange(item=item, old_quantity=old_quantity, new_quantity=item.quantity)
