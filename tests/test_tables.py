import pytest

from conftest import make_product
from services import orders as order_service
from services import tables as table_service
from services.errors import ConflictError, NotFoundError, ValidationFailed


def test_tables_are_listed_in_floor_order(db, branch):
    for number in ("10", "Terrace A", "2", "1"):
        table_service.create_table(db, branch, {"number": number})
    hidden = table_service.create_table(db, branch, {"number": "3", "is_active": False})

    assert [t.number for t in table_service.list_tables(db, branch)] == ["1", "2", "10", "Terrace A"]
    everything = table_service.list_tables(db, branch, include_inactive=True)
    assert hidden in everything


def test_table_numbers_are_unique_per_branch(db, branch, other_branch):
    table_service.create_table(db, branch, {"number": "4"})
    with pytest.raises(ConflictError):
        table_service.create_table(db, branch, {"number": " 4 "})

    table_service.create_table(db, other_branch, {"number": "4"})
    five = table_service.create_table(db, branch, {"number": "5"})
    with pytest.raises(ConflictError):
        table_service.update_table(db, branch, five, {"number": "4"})


def test_table_fields_are_validated(db, branch):
    with pytest.raises(ValidationFailed):
        table_service.create_table(db, branch, {"number": "1", "capacity": 0})
    table = table_service.create_table(db, branch, {"number": "1", "capacity": 2, "location": "Window"})
    with pytest.raises(ValidationFailed):
        table_service.set_status(db, branch, table, "dirty")

    table = table_service.set_status(db, branch, table, "occupied")
    assert table.status == "occupied"


def test_tables_are_branch_scoped(db, branch, other_branch):
    table = table_service.create_table(db, other_branch, {"number": "1"})
    with pytest.raises(NotFoundError):
        table_service.get_table(db, branch, table.id)


def test_table_with_open_orders_cannot_be_deleted(db, branch):
    table = table_service.create_table(db, branch, {"number": "8"})
    product = make_product(db, branch)
    lines = order_service.resolve_lines(db, branch, [{"product_id": product.id}])
    order = order_service.create_order(
        db, branch, lines=lines, service_type="table", customer_name="Ana",
        payment_method="card", table_number="8",
    )

    with pytest.raises(ValidationFailed) as exc:
        table_service.delete_table(db, table)
    assert exc.value.context["open_orders"] == [order.order_number]

    order_service.transition(db, order, "cancelled")
    table_service.delete_table(db, table)
    assert table_service.find_by_number(db, branch.id, "8") is None
