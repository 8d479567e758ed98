import pytest

from services.cart import Cart, CartExtra, CartLine


def _line(product_id, price, extras=()):
    return CartLine(product_id=product_id, name=f"P{product_id}", price=price, extras=list(extras))


def test_totals_follow_quantities_and_prices():
    cart = Cart()
    a = cart.add_item(_line(1, 10.0), quantity=2)
    b = cart.add_item(_line(2, 5.0))

    assert cart.total_items == 3
    assert cart.total_price == pytest.approx(25.0)

    cart.remove_item(b.key)
    assert cart.total_items == 2
    assert cart.total_price == pytest.approx(20.0)
    assert [line.key for line in cart.items] == [a.key]


def test_adding_same_product_increments_line():
    cart = Cart()
    cart.add_item(_line(1, 4.0))
    cart.add_item(_line(1, 4.0), quantity=3)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 4


def test_extras_make_separate_lines_and_count_in_price():
    cheese = CartExtra(id="cheese", name="Cheese", price=1.0)
    bacon = CartExtra(id="bacon", name="Bacon", price=1.5)
    cart = Cart()
    cart.add_item(_line(1, 10.0))
    cart.add_item(_line(1, 10.0, [bacon, cheese]))
    cart.add_item(_line(1, 10.0, [cheese, bacon]))

    assert len(cart.items) == 2
    assert cart.total_items == 3
    assert cart.total_price == pytest.approx(10.0 + 2 * 12.5)


def test_set_quantity_to_zero_removes_line():
    cart = Cart()
    line = cart.add_item(_line(1, 3.0), quantity=2)
    cart.set_quantity(line.key, 5)
    assert cart.total_items == 5

    cart.set_quantity(line.key, 0)
    assert cart.is_empty()
    assert cart.total_price == 0


def test_set_quantity_unknown_key_raises():
    cart = Cart()
    with pytest.raises(KeyError):
        cart.set_quantity("99-no-extras", 2)


def test_subscribers_are_notified_until_unsubscribed():
    cart = Cart()
    seen = []
    unsubscribe = cart.subscribe(lambda c: seen.append(c.total_items))

    line = cart.add_item(_line(1, 2.0))
    cart.set_quantity(line.key, 3)
    cart.clear()
    assert seen == [1, 3, 0]

    unsubscribe()
    cart.add_item(_line(2, 1.0))
    assert seen == [1, 3, 0]
