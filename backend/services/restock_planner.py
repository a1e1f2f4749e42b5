"""
Restock planner.

Scans the ledger for low-stock items, groups them by provider and reconciles
each group against that provider's open (PENDING) provider order: items are
appended to the open order when one exists, otherwise a new order is created.
An item already on the open order is never added twice, so re-running the
scan without inventory changes is a no-op.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

import config
from crud.app_config import get_decimal_setting
from database import transaction
from models.inventory_items import InventoryItem
from models.provider_order_items import ProviderOrderItem
from models.provider_orders import ProviderOrder, ProviderOrderStatus
from services.inventory_ledger import InventoryLedger
from utils import quantize

logger = logging.getLogger("restock_planner")

RESTOCK_MULTIPLIER_SETTING = "RESTOCK_TARGET_MULTIPLIER"


@dataclass
class RestockLine:
    provider_order_id: int
    provider_id: int
    admin_item_id: int
    item_name: str
    quantity: Decimal
    new_order: bool


@dataclass
class RestockSummary:
    low_stock_items_count: int = 0
    created_order_ids: List[int] = field(default_factory=list)
    appended_order_ids: List[int] = field(default_factory=list)
    lines: List[RestockLine] = field(default_factory=list)


class RestockPlanner:
    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None,
                 target_multiplier: Optional[Decimal] = None, actor: Optional[str] = None):
        self.db = db
        self.actor = actor or "system"
        self.ledger = ledger or InventoryLedger(db, actor=actor)
        if target_multiplier is None:
            target_multiplier = get_decimal_setting(db, RESTOCK_MULTIPLIER_SETTING, config.RESTOCK_TARGET_MULTIPLIER)
        self.target_multiplier = Decimal(target_multiplier)

    def restock_quantity(self, item: InventoryItem) -> Decimal:
        """Gap between the current quantity and the item's restock target."""
        threshold = self.ledger.low_stock_threshold(item)
        target = max(Decimal(item.maximum_capacity or 0), threshold * self.target_multiplier)
        return quantize(max(target - Decimal(item.quantity or 0), Decimal("0")))

    def check_and_create_orders(self) -> RestockSummary:
        summary = RestockSummary()
        with transaction(self.db):
            low_stock = self.ledger.low_stock_items()
            summary.low_stock_items_count = len(low_stock)

            by_provider = OrderedDict()
            for item in low_stock:
                if item.provider_id is None:
                    logger.info(f"Skipping low-stock item '{item.name}' (ID: {item.id}): no provider")
                    continue
                by_provider.setdefault(item.provider_id, []).append(item)

            for provider_id, items in by_provider.items():
                open_order = self._open_order(provider_id)
                if open_order is not None:
                    if self._append(open_order, items, summary):
                        summary.appended_order_ids.append(open_order.id)
                else:
                    new_order = self._create(provider_id, items, summary)
                    summary.created_order_ids.append(new_order.id)

        logger.info(
            f"Low stock check by {self.actor}: {summary.low_stock_items_count} low-stock item(s), "
            f"created {summary.created_order_ids}, appended {summary.appended_order_ids}"
        )
        return summary

    def _open_order(self, provider_id: int) -> Optional[ProviderOrder]:
        return self.db.query(ProviderOrder).filter(
            ProviderOrder.provider_id == provider_id,
            ProviderOrder.status == ProviderOrderStatus.PENDING,
        ).order_by(ProviderOrder.id).first()

    def _append(self, order: ProviderOrder, items: List[InventoryItem], summary: RestockSummary) -> bool:
        present = {line.admin_item_id for line in order.items}
        added = False
        for item in items:
            if item.id in present:
                continue
            self._add_line(order, item, summary, new_order=False)
            added = True
        if added:
            self._recompute_total(order)
        return added

    def _create(self, provider_id: int, items: List[InventoryItem], summary: RestockSummary) -> ProviderOrder:
        order = ProviderOrder(
            provider_id=provider_id,
            status=ProviderOrderStatus.PENDING,
            total_amount=Decimal("0"),
            created_by=self.actor,
        )
        self.db.add(order)
        self.db.flush()
        for item in items:
            self._add_line(order, item, summary, new_order=True)
        self._recompute_total(order)
        return order

    def _add_line(self, order: ProviderOrder, item: InventoryItem, summary: RestockSummary, new_order: bool) -> None:
        quantity = self.restock_quantity(item)
        order.items.append(provider_order_line(item, quantity))
        summary.lines.append(RestockLine(
            provider_order_id=order.id,
            provider_id=order.provider_id,
            admin_item_id=item.id,
            item_name=item.name,
            quantity=quantity,
            new_order=new_order,
        ))

    def _recompute_total(self, order: ProviderOrder) -> None:
        self.db.flush()
        order.total_amount = quantize(sum((Decimal(line.total_price) for line in order.items), Decimal("0")))
        self.db.add(order)


def provider_order_line(item: InventoryItem, quantity: Decimal) -> ProviderOrderItem:
    """Snapshot an admin item onto a provider order line."""
    quantity = quantize(quantity)
    return ProviderOrderItem(
        admin_item_id=item.id,
        item_name=item.name,
        product_code=item.product_code,
        unit=item.unit,
        quantity=quantity,
        price_per_unit=item.price_per_unit,
        total_price=quantize(quantity * Decimal(item.price_per_unit or 0)),
    )
