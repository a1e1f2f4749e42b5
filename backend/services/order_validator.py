"""
Order validation.

Turns a candidate order (customer + line items) into an ``OrderDraft`` with
resolved admin-item snapshots and totals, or raises a typed error naming the
rule that failed. Nothing is written to the database here.

Prices and availability always come from the admin inventory item. The
customer's inventory record must exist; whether it also restricts which items
may be ordered is the ENFORCE_CUSTOMER_INVENTORY_ALLOWLIST policy.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.orm import Session

import config
from exceptions import MissingFieldsError, NotFoundError
from models.customers import Customer, CustomerInventory
from models.inventory_items import InventoryItem
from utils import quantize

logger = logging.getLogger("order_validator")


@dataclass
class StockWarning:
    admin_item_id: int
    item_name: str
    requested: Decimal
    available: Decimal


@dataclass
class DraftLine:
    admin_item: InventoryItem
    admin_item_id: int
    quantity: Decimal
    unit: str
    price_per_unit: Optional[Decimal]
    item_total: Decimal
    insufficient_stock: bool = False


@dataclass
class OrderDraft:
    """Checked order input. `warnings` previews stock per line before anything is written."""
    customer: Customer
    lines: List[DraftLine]
    total_amount: Decimal
    notes: Optional[str] = None
    payment_deadline: Optional[date] = None
    warnings: List[StockWarning] = field(default_factory=list)


def _field(item: Any, name: str):
    if isinstance(item, dict):
        camel = "".join(part.capitalize() if i else part for i, part in enumerate(name.split("_")))
        return item.get(name, item.get(camel))
    return getattr(item, name, None)


class OrderValidator:
    def __init__(self, db: Session, enforce_customer_allowlist: Optional[bool] = None):
        self.db = db
        if enforce_customer_allowlist is None:
            enforce_customer_allowlist = config.ENFORCE_CUSTOMER_INVENTORY_ALLOWLIST
        self.enforce_customer_allowlist = enforce_customer_allowlist

    def validate(self, customer_id, items, notes: Optional[str] = None,
                 payment_deadline: Optional[date] = None) -> OrderDraft:
        if not customer_id:
            raise MissingFieldsError("customerId", "customerId and items array are required.")
        if not items:
            raise MissingFieldsError("items", "customerId and items array are required.")

        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if customer is None:
            raise NotFoundError("Customer not found.")
        customer_inventory = self._customer_inventory(customer.id)

        lines = []
        warnings = []
        total_amount = Decimal("0")
        for item in items:
            line = self._validate_line(customer_inventory, item)
            if line.insufficient_stock:
                warnings.append(self._warning(line))
            total_amount += line.item_total
            lines.append(line)

        return OrderDraft(
            customer=customer,
            lines=lines,
            total_amount=total_amount,
            notes=notes,
            payment_deadline=payment_deadline,
            warnings=warnings,
        )

    def validate_line(self, customer_id: int, item) -> DraftLine:
        """Validate a single line for an existing order's customer."""
        customer_inventory = self._customer_inventory(customer_id)
        return self._validate_line(customer_inventory, item)

    def _customer_inventory(self, customer_id: int) -> CustomerInventory:
        customer_inventory = self.db.query(CustomerInventory).filter(
            CustomerInventory.customer_id == customer_id
        ).first()
        if customer_inventory is None:
            raise NotFoundError("Customer inventory not found.")
        return customer_inventory

    def _validate_line(self, customer_inventory: CustomerInventory, item) -> DraftLine:
        admin_item_id = _field(item, "admin_item_id")
        quantity = _field(item, "quantity")
        unit = _field(item, "unit")

        if not admin_item_id:
            raise MissingFieldsError("adminItemId", "Each item must have adminItemId, quantity, and unit.")
        if quantity is None or Decimal(quantity) <= 0:
            raise MissingFieldsError("quantity", "Each item must have adminItemId, quantity, and unit.")
        if not unit:
            raise MissingFieldsError("unit", "Each item must have adminItemId, quantity, and unit.")
        quantity = quantize(quantity)
        if quantity <= 0:
            raise MissingFieldsError("quantity", "quantity must be greater than zero.")

        admin_item = self.db.query(InventoryItem).filter(InventoryItem.id == admin_item_id).first()
        if admin_item is None:
            raise NotFoundError(f"Item {admin_item_id} not found in inventory.", field="adminItemId")

        if self.enforce_customer_allowlist:
            granted = {ci.admin_item_id for ci in customer_inventory.items}
            if admin_item.id not in granted:
                raise NotFoundError(f"Item {admin_item_id} is not in customer inventory.", field="adminItemId")

        available = Decimal(admin_item.quantity or 0)
        insufficient = quantity > available
        if insufficient:
            # Orders may overcommit stock; the caller surfaces this as a warning
            logger.warning(
                f"Order line with insufficient stock: {admin_item.name}. "
                f"Available: {available}, Requested: {quantity}"
            )

        price_per_unit = admin_item.price_per_unit
        item_total = quantize(quantity * Decimal(price_per_unit or 0))
        return DraftLine(
            admin_item=admin_item,
            admin_item_id=admin_item.id,
            quantity=quantity,
            unit=unit,
            price_per_unit=price_per_unit,
            item_total=item_total,
            insufficient_stock=insufficient,
        )

    @staticmethod
    def _warning(line: DraftLine) -> StockWarning:
        return StockWarning(
            admin_item_id=line.admin_item_id,
            item_name=line.admin_item.name,
            requested=line.quantity,
            available=Decimal(line.admin_item.quantity or 0),
        )
