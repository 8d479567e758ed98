from datetime import date, timedelta

import pytest

from conftest import make_item
from services import cash as cash_service
from services import finance as finance_service
from services.errors import ConflictError, NotFoundError, ValidationFailed


def test_default_categories_are_seeded_once(db, branch):
    first = finance_service.list_categories(db, branch)
    second = finance_service.list_categories(db, branch)

    assert [c.name for c in first] == [c["name"] for c in finance_service.DEFAULT_CATEGORIES]
    assert [c.id for c in second] == [c.id for c in first]


def test_duplicate_category_is_rejected(db, branch):
    finance_service.create_category(db, branch, {"name": "Repairs", "color": "#000000"})
    with pytest.raises(ConflictError):
        finance_service.create_category(db, branch, {"name": "Repairs"})


def test_expense_defaults_and_validation(db, branch):
    expense = finance_service.create_expense(db, branch, {"category": "Rent", "amount": 900.0})
    assert expense.date == date.today()
    assert expense.status == "paid"

    with pytest.raises(ValidationFailed):
        finance_service.create_expense(db, branch, {"category": "Rent", "amount": 0})
    with pytest.raises(ValidationFailed):
        finance_service.update_expense(db, branch, expense, {"status": "void"})


def test_expense_item_link_must_belong_to_branch(db, branch, other_branch):
    foreign = make_item(db, other_branch, name="Gas")
    with pytest.raises(NotFoundError):
        finance_service.create_expense(db, branch, {
            "category": "Supplies", "amount": 10.0, "inventory_item_id": foreign.id,
        })


def test_financial_summary(db, branch):
    today = date.today()
    finance_service.create_expense(db, branch, {"category": "Rent", "amount": 300.0, "date": today})
    finance_service.create_expense(db, branch, {"category": "Utilities", "amount": 100.0, "date": today})
    finance_service.create_expense(db, branch, {
        "category": "Rent", "amount": 50.0, "date": today - timedelta(days=400),
    })

    register = cash_service.create_register(db, branch, "Front")
    cash_service.open_register(db, register, 100.0)
    cash_service.add_manual_movement(db, register, "income", 40.0, "Catering deposit")
    cash_service.book_movement(db, register, "sale", 500.0, description="Order ORD-000001")
    db.commit()

    summary = finance_service.financial_summary(db, branch, today=today)

    assert summary["total_expenses"] == 450.0
    assert summary["total_income"] == 540.0
    assert summary["profit"] == 90.0

    rent, utilities = summary["expenses_by_category"]
    assert (rent["category"], rent["amount"]) == ("Rent", 350.0)
    assert rent["share"] == pytest.approx(77.78, abs=0.01)
    assert rent["color"] == "#8B5CF6"
    assert utilities["amount"] == 100.0

    assert summary["income_by_category"] == [
        {"category": "Sales", "amount": 500.0, "color": "#10B981"},
        {"category": "Other income", "amount": 40.0, "color": "#3B82F6"},
    ]

    monthly = summary["monthly"]
    assert len(monthly) == 6
    assert monthly[-1]["month"] == today.strftime("%Y-%m")
    assert monthly[-1]["expenses"] == 400.0
    assert monthly[-1]["income"] == 540.0
    assert monthly[-1]["profit"] == 140.0
    assert monthly[0]["month"] < monthly[-1]["month"]


def test_summary_without_activity(db, branch):
    summary = finance_service.financial_summary(db, branch, today=date(2024, 3, 15))

    assert summary["profit"] == 0
    assert summary["expenses_by_category"] == []
    assert summary["income_by_category"] == []
    assert [m["month"] for m in summary["monthly"]] == [
        "2023-10", "2023-11", "2023-12", "2024-01", "2024-02", "2024-03",
    ]
