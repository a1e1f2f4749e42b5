from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from builders import line, make_customer, make_item, reload
from exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    MissingFieldsError,
    NoOpError,
    NotFoundError,
    PersistenceError,
)
from models.audit_log import AuditLog
from models.inventory_item_audit import InventoryItemAudit
from models.order_items import OrderItem
from models.orders import Order, OrderStatus
from services.inventory_ledger import InventoryLedger
from services.order_lifecycle import OrderLifecycle
from services.order_validator import OrderValidator


def _place(db: Session, customer, *lines) -> Order:
    return OrderLifecycle(db, actor="tester").create_order(customer.id, list(lines)).order


def _set_status(db: Session, order: Order, *path: OrderStatus) -> Order:
    lifecycle = OrderLifecycle(db)
    for status in path:
        order = lifecycle.update_status(order.id, status)
    return order


def test_tomato_scenario(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100", price_per_unit="2.50", low_stock_alert="20")
    customer = make_customer(db_session, name="C1", items=[tomato])

    result = OrderLifecycle(db_session, actor="tester").create_order(customer.id, [line(tomato, "5", unit="kg")])

    order = result.order
    assert order.total_amount == Decimal("12.50")
    assert order.status == OrderStatus.PENDING
    assert order.created_by == "tester"
    assert result.warnings == []
    assert reload(db_session, tomato).quantity == Decimal("95")

    (order_item,) = order.items
    assert order_item.item_name == "Tomato"
    assert order_item.unit == "kg"
    assert order_item.price_per_unit == Decimal("2.50")
    assert order_item.total_price == Decimal("12.50")


def test_total_is_sum_of_line_totals(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", price_per_unit="2.50")
    basil = make_item(db_session, name="Basil", price_per_unit="1.15", unit="bunch")
    crate = make_item(db_session, name="Crate", price_per_unit=None, unit="piece")
    customer = make_customer(db_session)

    order = _place(db_session, customer, line(tomato, "3.5"), line(basil, "7", unit="bunch"), line(crate, "2", unit="piece"))

    assert sum(i.total_price for i in order.items) == order.total_amount
    assert order.total_amount == Decimal("16.80")


def test_fractional_quantities_keep_total_equal_to_line_sum(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", price_per_unit="2.50")
    pepper = make_item(db_session, name="Pepper", price_per_unit="2.50")
    customer = make_customer(db_session)

    order = _place(db_session, customer, line(tomato, "0.125"), line(pepper, "0.125"))
    stored = reload(db_session, order)

    # 0.3125 rounds half up per line
    assert [i.total_price for i in stored.items] == [Decimal("0.313"), Decimal("0.313")]
    assert stored.total_amount == Decimal("0.626")
    assert sum(i.total_price for i in stored.items) == stored.total_amount


def test_fractional_added_item_keeps_total_equal_to_line_sum(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", price_per_unit="1.333")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "0.5"))

    OrderLifecycle(db_session).add_item(order.id, line(tomato, "0.25"))
    stored = reload(db_session, order)

    assert [i.total_price for i in stored.items] == [Decimal("0.667"), Decimal("0.333")]
    assert sum(i.total_price for i in stored.items) == stored.total_amount
    assert reload(db_session, tomato).quantity == Decimal("99.25")


def test_order_against_insufficient_stock_is_allowed(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="4")
    customer = make_customer(db_session)

    result = OrderLifecycle(db_session).create_order(customer.id, [line(tomato, "10")])

    assert result.order.status == OrderStatus.PENDING
    assert reload(db_session, tomato).quantity == Decimal("-6")
    (warning,) = result.warnings
    assert warning.item_name == "Tomato"
    assert warning.requested == Decimal("10")
    assert warning.available == Decimal("4")


def test_repeated_item_in_one_order_decrements_each_line(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)

    result = OrderLifecycle(db_session).create_order(customer.id, [line(tomato, "60"), line(tomato, "60")])

    assert reload(db_session, tomato).quantity == Decimal("-20")
    assert len(result.warnings) == 1


def test_created_warnings_come_from_the_ledger(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    lines = [line(tomato, "60"), line(tomato, "60")]

    draft = OrderValidator(db_session).validate(customer.id, lines)
    assert draft.warnings == []

    result = OrderLifecycle(db_session).create(draft)
    (warning,) = result.warnings
    assert warning.requested == Decimal("60")
    assert warning.available == Decimal("40")


def test_validation_errors_happen_before_any_write(db_session: Session) -> None:
    tomato = make_item(db_session)
    customer = make_customer(db_session)

    with pytest.raises(MissingFieldsError):
        OrderLifecycle(db_session).create_order(customer.id, [line(tomato), {"adminItemId": tomato.id, "unit": "kg"}])

    assert db_session.query(Order).count() == 0
    assert reload(db_session, tomato).quantity == Decimal("100")


class FailingLedger(InventoryLedger):
    """Fails on the n-th decrement, after earlier ones were flushed."""

    def __init__(self, db, fail_on: int):
        super().__init__(db)
        self.calls = 0
        self.fail_on = fail_on

    def decrement(self, item_id, amount, note=None):
        self.calls += 1
        if self.calls == self.fail_on:
            raise PersistenceError("connection lost")
        return super().decrement(item_id, amount, note)


def test_failed_create_rolls_back_order_and_decrements(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100")
    basil = make_item(db_session, name="Basil", quantity="50")
    customer = make_customer(db_session)
    lifecycle = OrderLifecycle(db_session, ledger=FailingLedger(db_session, fail_on=2))

    with pytest.raises(PersistenceError):
        lifecycle.create_order(customer.id, [line(tomato, "5"), line(basil, "5")])

    assert db_session.query(Order).count() == 0
    assert db_session.query(OrderItem).count() == 0
    assert db_session.query(InventoryItemAudit).count() == 0
    assert reload(db_session, tomato).quantity == Decimal("100")
    assert reload(db_session, basil).quantity == Decimal("50")


def test_cancel_restores_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100")
    basil = make_item(db_session, name="Basil", quantity="30")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"), line(basil, "40"))

    cancelled = OrderLifecycle(db_session, actor="tester").cancel(order.id)

    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.updated_by == "tester"
    assert reload(db_session, tomato).quantity == Decimal("100")
    assert reload(db_session, basil).quantity == Decimal("30")
    audit = db_session.query(AuditLog).filter_by(table_name="orders", record_id=order.id).one()
    assert audit.old_values["status"] == "PENDING"
    assert audit.new_values["status"] == "CANCELLED"


def test_cancel_twice_does_not_restore_twice(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    lifecycle = OrderLifecycle(db_session)

    lifecycle.cancel(order.id)
    with pytest.raises(InvalidStateError):
        lifecycle.cancel(order.id)

    assert reload(db_session, tomato).quantity == Decimal("100")


def _status_changed_elsewhere(db: Session, order: Order, status: OrderStatus) -> None:
    # A concurrent writer; the identity map keeps the stale status
    db.execute(
        update(Order).where(Order.id == order.id).values(status=status).execution_options(synchronize_session=False)
    )


def test_cancel_checks_current_status_of_the_row(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))

    _status_changed_elsewhere(db_session, order, OrderStatus.CANCELLED)
    assert order.status == OrderStatus.PENDING

    with pytest.raises(InvalidStateError):
        OrderLifecycle(db_session).cancel(order.id)
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_delete_checks_current_status_of_the_row(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))

    _status_changed_elsewhere(db_session, order, OrderStatus.SHIPPED)

    with pytest.raises(InvalidStateError):
        OrderLifecycle(db_session).delete(order.id)
    assert db_session.query(Order).count() == 1
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_cancel_delivered_order_is_rejected(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.SHIPPED, OrderStatus.DELIVERED)

    with pytest.raises(InvalidStateError):
        OrderLifecycle(db_session).cancel(order.id)
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_cancel_shipped_order_restores_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.SHIPPED)

    OrderLifecycle(db_session).cancel(order.id)

    assert reload(db_session, tomato).quantity == Decimal("100")


def test_status_changes_follow_transition_table(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    lifecycle = OrderLifecycle(db_session)

    with pytest.raises(InvalidTransitionError):
        lifecycle.update_status(order.id, OrderStatus.DELIVERED)
    with pytest.raises(NoOpError):
        lifecycle.update_status(order.id, OrderStatus.PENDING)

    for status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        order = lifecycle.update_status(order.id, status)
        assert order.status == status

    with pytest.raises(InvalidTransitionError):
        lifecycle.update_status(order.id, OrderStatus.PENDING)
    with pytest.raises(InvalidTransitionError):
        lifecycle.update_status(order.id, OrderStatus.CANCELLED)

    # Pure status changes leave stock alone
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_backwards_transition_is_rejected(db_session: Session) -> None:
    tomato = make_item(db_session)
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato))
    _set_status(db_session, order, OrderStatus.PROCESSING)

    with pytest.raises(InvalidTransitionError):
        OrderLifecycle(db_session).update_status(order.id, OrderStatus.CONFIRMED)


def test_status_update_to_cancelled_restores_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))

    order = OrderLifecycle(db_session).update_status(order.id, OrderStatus.CANCELLED)

    assert order.status == OrderStatus.CANCELLED
    assert reload(db_session, tomato).quantity == Decimal("100")


def test_status_update_requires_status_and_existing_order(db_session: Session) -> None:
    lifecycle = OrderLifecycle(db_session)
    with pytest.raises(MissingFieldsError):
        lifecycle.update_status(1, None)
    with pytest.raises(NotFoundError):
        lifecycle.update_status(1, OrderStatus.SHIPPED)


def test_delete_shipped_order_is_rejected(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.SHIPPED)

    with pytest.raises(InvalidStateError):
        OrderLifecycle(db_session).delete(order.id)

    assert db_session.query(Order).count() == 1
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_delete_pending_order_restores_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))

    restored = OrderLifecycle(db_session).delete(order.id)

    assert restored is True
    assert db_session.query(Order).count() == 0
    assert db_session.query(OrderItem).count() == 0
    assert reload(db_session, tomato).quantity == Decimal("100")


def test_delete_confirmed_order_restores_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.CONFIRMED)

    assert OrderLifecycle(db_session).delete(order.id) is True
    assert reload(db_session, tomato).quantity == Decimal("100")


def test_delete_cancelled_order_leaves_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    lifecycle = OrderLifecycle(db_session)
    lifecycle.cancel(order.id)

    assert lifecycle.delete(order.id) is False
    assert reload(db_session, tomato).quantity == Decimal("100")


def test_delete_delivered_order_leaves_inventory(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.SHIPPED, OrderStatus.DELIVERED)

    assert OrderLifecycle(db_session).delete(order.id) is False
    assert db_session.query(Order).count() == 0
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_add_item_to_pending_order(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100", price_per_unit="2.50")
    basil = make_item(db_session, name="Basil", quantity="2", price_per_unit="1.00", unit="bunch")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))

    result = OrderLifecycle(db_session).add_item(order.id, line(basil, "3", unit="bunch"))

    assert [i.item_name for i in result.order.items] == ["Tomato", "Basil"]
    assert result.order.total_amount == Decimal("15.50")
    assert reload(db_session, basil).quantity == Decimal("-1")
    assert len(result.warnings) == 1


def test_add_item_only_while_pending(db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order = _place(db_session, customer, line(tomato, "5"))
    _set_status(db_session, order, OrderStatus.CONFIRMED)

    with pytest.raises(InvalidStateError):
        OrderLifecycle(db_session).add_item(order.id, line(tomato, "1"))
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_reads_and_summary(db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100", price_per_unit="2.00")
    first = make_customer(db_session, name="C1", items=[tomato])
    second = make_customer(db_session, name="C2")
    a = _place(db_session, first, line(tomato, "5"))
    b = _place(db_session, second, line(tomato, "10"))
    lifecycle = OrderLifecycle(db_session)
    lifecycle.cancel(a.id)

    assert [o.id for o in lifecycle.get_all()] == [b.id, a.id]
    assert [o.id for o in lifecycle.get_all(status=OrderStatus.CANCELLED)] == [a.id]
    assert [o.id for o in lifecycle.get_customer_orders(second.id)] == [b.id]
    with pytest.raises(NotFoundError):
        lifecycle.get_customer_orders(999)

    summary = lifecycle.summary()
    assert summary["total_orders"] == 2
    assert summary["by_status"]["CANCELLED"] == 1
    assert summary["by_status"]["PENDING"] == 1
    assert summary["total_revenue"] == Decimal("30")
    assert summary["average_order_value"] == Decimal("15")

    (available,) = lifecycle.available_items(first.id)
    assert available["name"] == "Tomato"
    assert available["current_stock"] == Decimal("90")
    assert available["in_stock"] is True
    assert lifecycle.available_items(second.id) == []
