from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from builders import make_item, make_provider
from exceptions import InvalidStateError, MissingFieldsError, NotFoundError
from models.inventory_item_audit import InventoryItemAudit
from services.inventory_ledger import InventoryLedger


def test_decrement_applies_and_records_audit(db_session: Session) -> None:
    item = make_item(db_session, quantity="100")
    ledger = InventoryLedger(db_session, actor="alice")

    change = ledger.decrement(item.id, Decimal("5"), note="Sold via order #1")
    db_session.commit()

    assert change.old_quantity == Decimal("100")
    assert change.new_quantity == Decimal("95")
    assert change.delta == Decimal("-5")
    assert change.insufficient_stock is False
    assert item.quantity == Decimal("95")

    audit = db_session.query(InventoryItemAudit).filter_by(inventory_item_id=item.id).one()
    assert audit.change_type == "sale"
    assert audit.change_amount == Decimal("-5")
    assert audit.old_quantity == Decimal("100")
    assert audit.new_quantity == Decimal("95")
    assert audit.changed_by == "alice"


def test_decrement_beyond_stock_is_applied_and_flagged(db_session: Session) -> None:
    item = make_item(db_session, quantity="3")

    change = InventoryLedger(db_session).decrement(item.id, 10)

    assert change.insufficient_stock is True
    assert item.quantity == Decimal("-7")
    assert InventoryLedger.display_quantity(item) == Decimal("0")


def test_increment_restores_exactly(db_session: Session) -> None:
    item = make_item(db_session, quantity="100")
    ledger = InventoryLedger(db_session)

    ledger.decrement(item.id, Decimal("12.5"))
    change = ledger.increment(item.id, Decimal("12.5"))

    assert change.new_quantity == Decimal("100")
    change_types = [a.change_type for a in db_session.query(InventoryItemAudit).order_by(InventoryItemAudit.id)]
    assert change_types == ["sale", "return"]


@pytest.mark.parametrize("amount", [None, 0, -1])
def test_non_positive_amount_is_rejected(db_session: Session, amount) -> None:
    item = make_item(db_session)
    with pytest.raises(MissingFieldsError) as excinfo:
        InventoryLedger(db_session).decrement(item.id, amount)
    assert excinfo.value.field == "quantity"


def test_unknown_item_is_not_found(db_session: Session) -> None:
    with pytest.raises(NotFoundError):
        InventoryLedger(db_session).increment(999, 1)


def test_adjust_cannot_go_below_zero(db_session: Session) -> None:
    item = make_item(db_session, quantity="4")
    ledger = InventoryLedger(db_session)

    with pytest.raises(InvalidStateError):
        ledger.adjust(item.id, Decimal("-5"))
    assert item.quantity == Decimal("4")

    change = ledger.adjust(item.id, Decimal("-4"), reason="Damaged in storage")
    assert change.new_quantity == Decimal("0")
    audit = db_session.query(InventoryItemAudit).one()
    assert audit.change_type == "adjustment"
    assert audit.note == "Damaged in storage"


def test_low_stock_threshold_classification(db_session: Session) -> None:
    low = make_item(db_session, name="Lettuce", quantity="15", low_stock_alert="20")
    ok = make_item(db_session, name="Onion", quantity="25", low_stock_alert="20")
    at_threshold = make_item(db_session, name="Garlic", quantity="20", low_stock_alert="20")
    default_threshold = make_item(db_session, name="Pepper", quantity="19", low_stock_alert=None)

    assert InventoryLedger.is_low_stock(low)
    assert not InventoryLedger.is_low_stock(ok)
    assert not InventoryLedger.is_low_stock(at_threshold)
    assert InventoryLedger.is_low_stock(default_threshold)

    names = [item.name for item in InventoryLedger(db_session).low_stock_items()]
    assert names == ["Lettuce", "Pepper"]


def test_ledger_does_not_commit(db_session: Session) -> None:
    provider = make_provider(db_session)
    item = make_item(db_session, quantity="50", provider=provider)

    InventoryLedger(db_session).decrement(item.id, 20)
    db_session.rollback()

    db_session.expire_all()
    assert db_session.get(type(item), item.id).quantity == Decimal("50")


def test_amounts_are_rounded_to_stored_scale(db_session: Session) -> None:
    item = make_item(db_session, quantity="100")
    ledger = InventoryLedger(db_session)

    change = ledger.decrement(item.id, "1.2345")
    assert change.delta == Decimal("-1.235")

    change = ledger.adjust(item.id, "0.0004")
    assert change.new_quantity == Decimal("98.765")

    with pytest.raises(MissingFieldsError):
        ledger.increment(item.id, "0.0004")
