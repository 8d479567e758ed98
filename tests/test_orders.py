import pytest

from conftest import make_product
from models.cash import CashMovement
from models.order import Order
from services import cash as cash_service
from services import orders as order_service
from services import shifts as shift_service
from services import tables as table_service
from services.cart import CartLine
from services.errors import InvalidTransition, NotFoundError, ValidationFailed
from services.finance import financial_summary


def _order(db, branch, service_type="takeaway", payment_method="card", quantity=1, **kwargs):
    product = make_product(db, branch, name=f"Dish {service_type}", price=10.0)
    lines = order_service.resolve_lines(db, branch, [{"product_id": product.id, "quantity": quantity}])
    if service_type == "delivery":
        kwargs.setdefault("delivery_address", {"street": "Main", "number": "1", "city": "Town"})
    if service_type == "table":
        kwargs.setdefault("table_number", "7")
        if table_service.find_by_number(db, branch.id, kwargs["table_number"]) is None:
            table_service.create_table(db, branch, {"number": kwargs["table_number"]})
    return order_service.create_order(
        db, branch, lines=lines, service_type=service_type,
        customer_name="Ana", customer_phone="555", payment_method=payment_method, **kwargs,
    )


def _advance(db, order, *statuses):
    for status in statuses:
        order = order_service.transition(db, order, status)
    return order


def test_compute_totals_only_charges_delivery_fee_for_delivery():
    lines = [CartLine(product_id=1, name="A", price=10.0, quantity=2)]
    takeaway = order_service.compute_totals(lines, service_type="takeaway", tax_rate=0.1, delivery_fee=5.0)
    delivery = order_service.compute_totals(lines, service_type="delivery", tax_rate=0.1, delivery_fee=5.0)

    assert takeaway["total"] == 22.0
    assert takeaway["delivery_fee"] == 0.0
    assert delivery["total"] == 27.0


def test_total_never_goes_negative():
    lines = [CartLine(product_id=1, name="A", price=3.0)]
    totals = order_service.compute_totals(lines, service_type="dine_in", discount=10.0)
    assert totals["total"] == 0.0


def test_order_numbers_are_sequential_per_branch(db, branch, other_branch):
    first = _order(db, branch)
    second = _order(db, branch)
    elsewhere = _order(db, other_branch)

    assert first.order_number == "ORD-000001"
    assert second.order_number == "ORD-000002"
    assert elsewhere.order_number == "ORD-000001"


def test_order_items_snapshot_extras_and_prices(db, branch):
    product = make_product(db, branch, extras=[{"id": "cheese", "name": "Cheese", "price": 1.5}])
    lines = order_service.resolve_lines(
        db, branch, [{"product_id": product.id, "quantity": 2, "extra_ids": ["cheese"]}]
    )
    order = order_service.create_order(db, branch, lines=lines, service_type="dine_in",
                                       customer_name="Ana", payment_method="card")

    assert order.subtotal == 23.0
    assert order.items[0].extras == [{"id": "cheese", "name": "Cheese", "price": 1.5}]


def test_resolve_lines_rejects_foreign_and_unavailable_products(db, branch, other_branch):
    foreign = make_product(db, other_branch)
    hidden = make_product(db, branch, name="Hidden", available=False)

    with pytest.raises(NotFoundError):
        order_service.resolve_lines(db, branch, [{"product_id": foreign.id, "quantity": 1}])
    with pytest.raises(ValidationFailed):
        order_service.resolve_lines(db, branch, [{"product_id": hidden.id, "quantity": 1}])


def test_cash_amount_sets_change_due(db, branch):
    order = _order(db, branch, payment_method="cash", cash_amount=20.0)
    assert order.total == 11.0
    assert order.change_due == 9.0

    with pytest.raises(ValidationFailed):
        _order(db, branch, payment_method="cash", cash_amount=5.0)


def test_happy_path_transitions(db, branch):
    order = _order(db, branch)
    order = _advance(db, order, "preparing", "ready", "completed")
    assert order.status == "completed"


def test_skipping_a_step_is_rejected(db, branch):
    order = _order(db, branch)
    with pytest.raises(InvalidTransition):
        order_service.transition(db, order, "ready")
    db.refresh(order)
    assert order.status == "pending"


def test_terminal_states_cannot_change(db, branch):
    order = _advance(db, _order(db, branch), "cancelled")
    assert not order_service.can_transition(order, "preparing")
    with pytest.raises(InvalidTransition):
        order_service.transition(db, order, "preparing")


def test_delivered_only_for_delivery_and_table(db, branch):
    takeaway = _advance(db, _order(db, branch), "preparing", "ready")
    with pytest.raises(InvalidTransition):
        order_service.transition(db, takeaway, "delivered")

    delivery = _advance(db, _order(db, branch, service_type="delivery"), "preparing", "ready", "delivered")
    assert delivery.status == "delivered"


def test_only_pending_orders_can_be_deleted(db, branch):
    order = _advance(db, _order(db, branch), "preparing")
    with pytest.raises(InvalidTransition):
        order_service.delete_order(db, order)

    pending = _order(db, branch)
    order_service.delete_order(db, pending)
    assert db.query(Order).filter(Order.id == pending.id).first() is None


def test_paid_orders_cannot_be_deleted(db, branch):
    register = cash_service.create_register(db, branch, "Front")
    cash_service.open_register(db, register, 0.0)
    order = order_service.record_payment(db, _order(db, branch, payment_method="cash"))

    with pytest.raises(InvalidTransition):
        order_service.delete_order(db, order)

    assert db.query(Order).filter(Order.id == order.id).first() is not None
    sale = db.query(CashMovement).filter(CashMovement.order_id == order.id).one()
    assert financial_summary(db, branch)["total_income"] == sale.amount == 11.0


def test_paid_orders_cannot_be_cancelled(db, branch):
    register = cash_service.create_register(db, branch, "Front")
    cash_service.open_register(db, register, 0.0)
    order = _advance(db, _order(db, branch, payment_method="cash"), "preparing")
    order = order_service.record_payment(db, order)

    assert not order_service.can_transition(order, "cancelled")
    with pytest.raises(InvalidTransition) as exc:
        order_service.transition(db, order, "cancelled")
    assert exc.value.message == "Paid orders cannot be cancelled"
    db.refresh(order)
    assert order.status == "preparing"

    unpaid = _advance(db, _order(db, branch), "preparing", "cancelled")
    assert unpaid.status == "cancelled"


def test_table_orders_need_a_registered_table(db, branch):
    product = make_product(db, branch, name="Paella", price=20.0)
    lines = order_service.resolve_lines(db, branch, [{"product_id": product.id}])

    def place(table_number):
        return order_service.create_order(
            db, branch, lines=lines, service_type="table", customer_name="Ana",
            payment_method="card", table_number=table_number,
        )

    with pytest.raises(ValidationFailed) as exc:
        place(None)
    assert exc.value.context["missing"] == ["table_number"]
    with pytest.raises(ValidationFailed):
        place("12")

    table = table_service.create_table(db, branch, {"number": "12", "capacity": 6})
    assert place(" 12 ").table_number == "12"

    table_service.set_status(db, branch, table, "maintenance")
    with pytest.raises(ValidationFailed):
        place("12")


def test_cash_payment_is_booked_into_open_register(db, branch):
    register = cash_service.create_register(db, branch, "Front")
    cash_service.open_register(db, register, 50.0)
    order = _order(db, branch, payment_method="cash")

    order = order_service.record_payment(db, order, user_id="u1")
    db.refresh(register)

    assert order.payment_status == "paid"
    assert register.expected_amount == 61.0
    sale = db.query(CashMovement).filter(CashMovement.order_id == order.id).one()
    assert sale.type == "sale"

    with pytest.raises(ValidationFailed):
        order_service.record_payment(db, order)


def test_shift_close_rejected_while_orders_are_open(db, branch):
    shift = shift_service.start_shift(db, branch)
    _order(db, branch)

    with pytest.raises(ValidationFailed) as exc:
        shift_service.close_shift(db, branch, shift)
    assert exc.value.context["open_orders"] == ["ORD-000001"]
    db.refresh(shift)
    assert shift.status == "active"


def test_shift_close_completes_delivered_orders_and_summarizes(db, branch):
    shift = shift_service.start_shift(db, branch, user_id="u1")
    delivered = _advance(db, _order(db, branch, service_type="table"), "preparing", "ready", "delivered")
    cash = _advance(db, _order(db, branch, payment_method="cash", quantity=2), "preparing", "ready", "completed")
    cancelled = _advance(db, _order(db, branch), "cancelled")

    result = shift_service.close_shift(db, branch, shift, user_id="u2")

    assert result.promoted_order_ids == [delivered.id]
    db.refresh(delivered)
    assert delivered.status == "completed"
    assert result.shift.status == "closed"
    assert result.shift.closed_by == "u2"
    summary = result.shift.summary
    assert summary["total_orders"] == 2
    assert summary["cash_sales"] == cash.total
    assert summary["card_sales"] == delivered.total
    assert summary["total_sales"] == round(cash.total + delivered.total, 2)
    assert cancelled.id not in result.promoted_order_ids


def test_only_one_active_shift(db, branch):
    shift_service.start_shift(db, branch)
    with pytest.raises(ValidationFailed):
        shift_service.start_shift(db, branch)
