"""
Order lifecycle.

Owns the customer-order state machine and every inventory side effect of it:

    PENDING    -> CONFIRMED, PROCESSING, SHIPPED, CANCELLED
    CONFIRMED  -> PROCESSING, SHIPPED, CANCELLED
    PROCESSING -> SHIPPED, CANCELLED
    SHIPPED    -> DELIVERED, CANCELLED
    DELIVERED, CANCELLED are terminal

Creating an order decrements the ledger once per line; cancelling, or
deleting an order that still holds stock, increments it by the same amounts.
Each of these sequences runs in a single transaction.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, InvalidTransitionError, MissingFieldsError, NoOpError, NotFoundError
from models.customers import Customer, CustomerInventory, CustomerInventoryItem
from models.order_items import OrderItem
from models.orders import Order, OrderStatus
from schemas.audit_log import AuditLogCreate
from services.inventory_ledger import InventoryLedger, LedgerChange
from services.order_validator import DraftLine, OrderDraft, OrderValidator, StockWarning
from utils import local_now, quantize, sqlalchemy_to_dict

logger = logging.getLogger("orders")

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses in which the order's quantities are still taken out of admin stock
STOCK_HOLDING_STATUSES = {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}


@dataclass
class OrderCreated:
    order: Order
    warnings: List[StockWarning] = field(default_factory=list)


class OrderLifecycle:
    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None,
                 validator: Optional[OrderValidator] = None, actor: Optional[str] = None):
        self.db = db
        self.actor = actor
        self.ledger = ledger or InventoryLedger(db, actor=actor)
        self.validator = validator or OrderValidator(db)

    # --- reads ---

    def _query(self):
        return self.db.query(Order).options(
            selectinload(Order.items),
            selectinload(Order.customer),
        )

    def get(self, order_id: int) -> Order:
        order = self._query().filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Order not found.")
        return order

    def get_all(self, status: Optional[OrderStatus] = None, customer_id: Optional[int] = None) -> List[Order]:
        query = self._query()
        if status:
            query = query.filter(Order.status == status)
        if customer_id:
            query = query.filter(Order.customer_id == customer_id)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def get_customer_orders(self, customer_id: int, status: Optional[OrderStatus] = None) -> List[Order]:
        if self.db.query(Customer).filter(Customer.id == customer_id).first() is None:
            raise NotFoundError("Customer not found.")
        return self.get_all(status=status, customer_id=customer_id)

    def summary(self) -> Dict:
        orders = self.db.query(Order).all()
        total_revenue = sum((Decimal(o.total_amount or 0) for o in orders), Decimal("0"))
        return {
            "total_orders": len(orders),
            "by_status": {s.value: sum(1 for o in orders if o.status == s) for s in OrderStatus},
            "total_revenue": total_revenue,
            "average_order_value": total_revenue / len(orders) if orders else Decimal("0"),
        }

    def available_items(self, customer_id: int) -> List[Dict]:
        """Admin items granted to the customer, with current stock."""
        if self.db.query(Customer).filter(Customer.id == customer_id).first() is None:
            raise NotFoundError("Customer not found.")
        customer_inventory = self.db.query(CustomerInventory).options(
            selectinload(CustomerInventory.items).selectinload(CustomerInventoryItem.admin_item)
        ).filter(CustomerInventory.customer_id == customer_id).first()
        if customer_inventory is None:
            raise NotFoundError("Customer inventory not found.")

        return [
            {
                "id": grant.admin_item.id,
                "name": grant.admin_item.name,
                "description": grant.admin_item.description,
                "current_stock": grant.admin_item.quantity,
                "unit": grant.admin_item.unit,
                "image_url": grant.admin_item.image_url,
                "price_per_unit": grant.admin_item.price_per_unit,
                "in_stock": Decimal(grant.admin_item.quantity or 0) > 0,
            }
            for grant in customer_inventory.items
        ]

    # --- mutations ---

    def create_order(self, customer_id, items, notes: Optional[str] = None,
                     payment_deadline: Optional[date] = None) -> OrderCreated:
        # Validation happens before any write
        draft = self.validator.validate(customer_id, items, notes, payment_deadline)
        return self.create(draft)

    def create(self, draft: OrderDraft) -> OrderCreated:
        warnings = []
        with transaction(self.db):
            order = Order(
                customer_id=draft.customer.id,
                status=OrderStatus.PENDING,
                total_amount=draft.total_amount,
                notes=draft.notes,
                payment_deadline=draft.payment_deadline,
                created_by=self.actor,
            )
            order.items = [self._order_item(line) for line in draft.lines]
            self.db.add(order)
            self.db.flush()

            for line in draft.lines:
                change = self.ledger.decrement(line.admin_item_id, line.quantity, note=f"Sold via order #{order.id}")
                if change.insufficient_stock:
                    warnings.append(self._warning(line, change))

        logger.info(
            f"Order (ID: {order.id}) created for Customer ID {order.customer_id} "
            f"by {self.actor} with total {order.total_amount}"
        )
        return OrderCreated(order=self.get(order.id), warnings=warnings)

    def update_status(self, order_id: int, new_status: Optional[OrderStatus]) -> Order:
        if new_status is None:
            raise MissingFieldsError("status")
        new_status = OrderStatus(new_status)

        with transaction(self.db):
            order = self._lock(order_id)
            old_status = order.status
            if old_status == new_status:
                raise NoOpError(f"Order is already {new_status.value}.")
            if new_status not in ALLOWED_TRANSITIONS[old_status]:
                raise InvalidTransitionError(
                    f"Cannot change order status from {old_status.value} to {new_status.value}."
                )
            old_values = sqlalchemy_to_dict(order)
            if new_status == OrderStatus.CANCELLED:
                self._restore_stock(order, note=f"Order #{order.id} cancelled")
            order.status = new_status
            self._touch(order)
            self._audit(order, "UPDATE", old_values, sqlalchemy_to_dict(order))

        logger.info(f"Order (ID: {order_id}) status {old_status.value} -> {new_status.value} by {self.actor}")
        return self.get(order_id)

    def cancel(self, order_id: int) -> Order:
        with transaction(self.db):
            order = self._lock(order_id)
            if order.status in TERMINAL_STATUSES:
                raise InvalidStateError(f"Cannot cancel an order with status {order.status.value}.")
            old_values = sqlalchemy_to_dict(order)
            self._restore_stock(order, note=f"Order #{order.id} cancelled")
            order.status = OrderStatus.CANCELLED
            self._touch(order)
            self._audit(order, "UPDATE", old_values, sqlalchemy_to_dict(order))

        logger.info(f"Order (ID: {order_id}) cancelled by {self.actor}. Inventory restored.")
        return self.get(order_id)

    def delete(self, order_id: int) -> bool:
        """Remove an order and its items. Returns True when stock was restored."""
        with transaction(self.db):
            order = self._lock(order_id)
            if order.status == OrderStatus.SHIPPED:
                raise InvalidStateError(
                    f"Cannot delete an order with status {order.status.value}. "
                    "Shipped orders must be delivered or cancelled."
                )
            restored = order.status in STOCK_HOLDING_STATUSES
            old_values = sqlalchemy_to_dict(order)
            if restored:
                self._restore_stock(order, note=f"Order #{order.id} deleted")
            self._audit(order, "DELETE", old_values, None)
            self.db.delete(order)

        logger.info(
            f"Order (ID: {order_id}) deleted by {self.actor}."
            + (" Inventory restored." if restored else "")
        )
        return restored

    def add_item(self, order_id: int, item) -> OrderCreated:
        order = self.get(order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidStateError(f"Cannot add items to an order with status {order.status.value}.")
        line = self.validator.validate_line(order.customer_id, item)

        warnings = []
        with transaction(self.db):
            order = self._lock(order_id)
            if order.status != OrderStatus.PENDING:
                raise InvalidStateError(f"Cannot add items to an order with status {order.status.value}.")
            change = self.ledger.decrement(line.admin_item_id, line.quantity, note=f"Added to order #{order.id}")
            if change.insufficient_stock:
                warnings.append(self._warning(line, change))
            order.items.append(self._order_item(line))
            self.db.flush()
            order.total_amount = quantize(sum((Decimal(i.total_price) for i in order.items), Decimal("0")))
            self._touch(order)

        logger.info(f"Item '{line.admin_item.name}' added to Order (ID: {order_id}) by {self.actor}")
        return OrderCreated(order=self.get(order_id), warnings=warnings)

    # --- helpers ---

    def _lock(self, order_id: int) -> Order:
        """Re-read the order under a row lock so status checks see committed state."""
        order = self.db.query(Order).filter(Order.id == order_id).with_for_update().populate_existing().first()
        if order is None:
            raise NotFoundError("Order not found.")
        return order

    def _restore_stock(self, order: Order, note: str) -> None:
        for item in order.items:
            self.ledger.increment(item.admin_item_id, item.quantity, change_type="return", note=note)

    def _touch(self, order: Order) -> None:
        order.updated_at = local_now()
        order.updated_by = self.actor
        self.db.add(order)

    def _audit(self, order: Order, action: str, old_values, new_values) -> None:
        create_audit_log(self.db, AuditLogCreate(
            table_name="orders",
            record_id=order.id,
            changed_by=self.actor or "system",
            action=action,
            old_values=old_values,
            new_values=new_values,
        ))

    @staticmethod
    def _order_item(line: DraftLine) -> OrderItem:
        return OrderItem(
            admin_item_id=line.admin_item_id,
            item_name=line.admin_item.name,
            unit=line.unit,
            quantity=line.quantity,
            price_per_unit=line.price_per_unit,
            total_price=line.item_total,
        )

    @staticmethod
    def _warning(line: DraftLine, change: LedgerChange) -> StockWarning:
        return StockWarning(
            admin_item_id=line.admin_item_id,
            item_name=line.admin_item.name,
            requested=line.quantity,
            available=change.old_quantity,
        )
