import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from crud.audit_log import create_audit_log
from database import transaction
from exceptions import InvalidStateError, InvalidTransitionError, MissingFieldsError, NoOpError, NotFoundError
from models.provider_orders import ProviderOrder, ProviderOrderStatus
from schemas.audit_log import AuditLogCreate
from services.inventory_ledger import InventoryLedger
from services.restock_planner import provider_order_line
from utils import local_now, quantize, sqlalchemy_to_dict

logger = logging.getLogger("provider_orders")

TERMINAL_STATUSES = {ProviderOrderStatus.RECEIVED, ProviderOrderStatus.CANCELLED}
DELETABLE_STATUSES = {ProviderOrderStatus.PENDING, ProviderOrderStatus.CANCELLED}


class ProviderOrderService:
    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None, actor: Optional[str] = None):
        self.db = db
        self.actor = actor
        self.ledger = ledger or InventoryLedger(db, actor=actor)

    def _query(self):
        return self.db.query(ProviderOrder).options(
            selectinload(ProviderOrder.items),
            selectinload(ProviderOrder.provider),
        )

    def get(self, order_id: int) -> ProviderOrder:
        order = self._query().filter(ProviderOrder.id == order_id).first()
        if order is None:
            raise NotFoundError("Provider order not found.")
        return order

    def get_all(self, status: Optional[ProviderOrderStatus] = None, provider_id: Optional[int] = None) -> List[ProviderOrder]:
        query = self._query()
        if status:
            query = query.filter(ProviderOrder.status == status)
        if provider_id:
            query = query.filter(ProviderOrder.provider_id == provider_id)
        return query.order_by(ProviderOrder.created_at.desc(), ProviderOrder.id.desc()).all()

    def update_status(self, order_id: int, new_status: Optional[ProviderOrderStatus]) -> ProviderOrder:
        """Change status; receiving an order puts every line's quantity into stock."""
        if new_status is None:
            raise MissingFieldsError("status")
        new_status = ProviderOrderStatus(new_status)
        order = self.get(order_id)
        if order.status == new_status:
            raise NoOpError(f"Provider order is already {new_status.value}.")
        if order.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Cannot change provider order status from {order.status.value} to {new_status.value}."
            )

        old_status = order.status
        with transaction(self.db):
            old_values = sqlalchemy_to_dict(order)
            if new_status == ProviderOrderStatus.RECEIVED:
                for line in order.items:
                    self.ledger.increment(
                        line.admin_item_id, line.quantity,
                        change_type="restock", note=f"Received via provider order #{order.id}",
                    )
            order.status = new_status
            self._touch(order)
            self._audit(order, "UPDATE", old_values, sqlalchemy_to_dict(order))

        logger.info(f"Provider order (ID: {order_id}) status {old_status.value} -> {new_status.value} by {self.actor}")
        return self.get(order_id)

    def add_item(self, order_id: int, admin_item_id: Optional[int], quantity) -> ProviderOrder:
        if not admin_item_id:
            raise MissingFieldsError("adminItemId", "adminItemId and quantity are required.")
        if quantity is None or quantize(quantity) <= 0:
            raise MissingFieldsError("quantity", "adminItemId and quantity are required.")

        order = self._pending(order_id, "add items to")
        item = self.ledger.get_item(admin_item_id)
        if any(line.admin_item_id == item.id for line in order.items):
            raise InvalidStateError("Item already exists in this order.", field="adminItemId")

        with transaction(self.db):
            order.items.append(provider_order_line(item, quantity))
            self._recompute_total(order)

        logger.info(f"Item '{item.name}' added to provider order (ID: {order_id}) by {self.actor}")
        return self.get(order_id)

    def remove_item(self, order_id: int, line_id: int) -> ProviderOrder:
        order = self._pending(order_id, "remove items from")
        line = next((line for line in order.items if line.id == line_id), None)
        if line is None:
            raise NotFoundError("Item not found in this order.")

        with transaction(self.db):
            order.items.remove(line)
            self._recompute_total(order)

        logger.info(f"Line {line_id} removed from provider order (ID: {order_id}) by {self.actor}")
        return self.get(order_id)

    def delete(self, order_id: int) -> None:
        order = self.get(order_id)
        if order.status not in DELETABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot delete a provider order with status {order.status.value}. "
                "Only PENDING or CANCELLED orders can be deleted."
            )
        with transaction(self.db):
            self._audit(order, "DELETE", sqlalchemy_to_dict(order), None)
            self.db.delete(order)
        logger.info(f"Provider order (ID: {order_id}) deleted by {self.actor}")

    def _pending(self, order_id: int, action: str) -> ProviderOrder:
        order = self.get(order_id)
        if order.status != ProviderOrderStatus.PENDING:
            raise InvalidStateError(f"Can only {action} pending orders.")
        return order

    def _recompute_total(self, order: ProviderOrder) -> None:
        self.db.flush()
        order.total_amount = quantize(sum((Decimal(line.total_price) for line in order.items), Decimal("0")))
        self._touch(order)

    def _touch(self, order: ProviderOrder) -> None:
        order.updated_at = local_now()
        order.updated_by = self.actor
        self.db.add(order)

    def _audit(self, order: ProviderOrder, action: str, old_values, new_values) -> None:
        create_audit_log(self.db, AuditLogCreate(
            table_name="provider_orders",
            record_id=order.id,
            changed_by=self.actor or "system",
            action=action,
            old_values=old_values,
            new_values=new_values,
        ))
