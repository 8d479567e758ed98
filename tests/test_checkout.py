import pytest

from conftest import make_product
from models.order import Order
from services.cart import Cart, CartLine
from services.checkout import CheckoutFlow, CheckoutStep, CustomerInfo
from services.errors import ValidationFailed


def _cart(*prices):
    cart = Cart()
    for i, price in enumerate(prices, start=1):
        cart.add_item(CartLine(product_id=i, name=f"P{i}", price=price))
    return cart


def _walk_to_summary(flow, **state):
    flow.update(**state)
    while flow.step != CheckoutStep.SUMMARY:
        flow.next()


def test_cannot_leave_service_step_without_service_type():
    flow = CheckoutFlow(_cart(10.0))
    with pytest.raises(ValidationFailed) as exc:
        flow.next()
    assert exc.value.context["missing"] == ["service_type"]
    assert flow.step == CheckoutStep.SERVICE


def test_customer_step_requires_name_and_phone():
    flow = CheckoutFlow(_cart(10.0))
    flow.update(service_type="takeaway")
    flow.next()
    flow.update(customer=CustomerInfo(name="  ", phone=""))
    with pytest.raises(ValidationFailed) as exc:
        flow.next()
    assert set(exc.value.context["missing"]) == {"customer.name", "customer.phone"}
    assert flow.step == CheckoutStep.CUSTOMER


def test_delivery_requires_structured_address():
    flow = CheckoutFlow(_cart(10.0))
    flow.update(service_type="delivery", customer=CustomerInfo(name="Ana", phone="555"))
    flow.next()
    flow.update(delivery_address={"street": "Main", "number": "", "city": "Springfield"})
    assert flow.problems() == ["delivery_address.number"]

    flow.update(delivery_address={"street": "Main", "number": "12", "city": "Springfield"})
    assert flow.next() == CheckoutStep.PAYMENT


def test_table_service_requires_table_number():
    flow = CheckoutFlow(_cart(10.0))
    flow.update(service_type="table", customer=CustomerInfo(name="Ana", phone="555"))
    flow.next()
    assert flow.problems() == ["table_number"]

    flow.update(table_number="4")
    assert flow.next() == CheckoutStep.PAYMENT


def test_cash_with_change_requires_enough_cash(db, branch):
    flow = CheckoutFlow(_cart(10.0, 5.0), branch)
    flow.update(service_type="takeaway", customer=CustomerInfo(name="Ana", phone="555"))
    flow.next()
    flow.next()
    # subtotal 15 + 10% tax = 16.50
    flow.update(payment_method="cash", needs_change=True, cash_amount=16.0)
    assert flow.problems() == ["cash_amount"]

    flow.update(cash_amount=20.0)
    assert flow.next() == CheckoutStep.SUMMARY


def test_switching_away_from_cash_clears_cash_fields():
    flow = CheckoutFlow(_cart(10.0))
    flow.update(payment_method="cash", needs_change=True, cash_amount=50.0)
    flow.update(payment_method="card")
    assert flow.state.needs_change is False
    assert flow.state.cash_amount is None


def test_disabled_service_type_is_rejected(db, branch):
    branch.service_types = ["takeaway"]
    flow = CheckoutFlow(_cart(10.0), branch)
    flow.update(service_type="delivery")
    assert not flow.can_proceed()


def test_back_never_goes_before_first_step():
    flow = CheckoutFlow(_cart(10.0))
    assert flow.back() == CheckoutStep.SERVICE
    flow.update(service_type="dine_in")
    flow.next()
    assert flow.back() == CheckoutStep.SERVICE


def test_place_order_persists_and_resets(db, branch):
    burger = make_product(db, branch, price=10.0)
    cart = Cart()
    cart.add_item(CartLine(product_id=burger.id, name=burger.name, price=burger.price), quantity=2)
    flow = CheckoutFlow(cart, branch)
    _walk_to_summary(
        flow,
        service_type="delivery",
        customer=CustomerInfo(name="Ana", phone="555-0101"),
        delivery_address={"street": "Main", "number": "12", "city": "Springfield"},
        payment_method="card",
        tip=2.0,
    )

    order = flow.place_order(db)

    assert order.order_number == "ORD-000001"
    assert order.subtotal == 20.0
    assert order.tax == 2.0
    assert order.delivery_fee == 5.0
    assert order.total == 29.0
    assert cart.is_empty()
    assert flow.step == CheckoutStep.SERVICE
    assert flow.state.service_type is None


def test_place_order_before_summary_writes_nothing(db, branch):
    flow = CheckoutFlow(_cart(10.0), branch)
    flow.update(service_type="takeaway")
    with pytest.raises(ValidationFailed):
        flow.place_order(db)
    assert db.query(Order).count() == 0
    assert flow.step == CheckoutStep.SERVICE
    assert not flow.cart.is_empty()
