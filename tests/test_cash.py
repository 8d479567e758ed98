import pytest

from models.cash import CashMovement
from services import cash as cash_service
from services.errors import ValidationFailed


def test_register_lifecycle_tracks_expected_amount(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 100.0, user_id="u1")
    cash_service.add_manual_movement(db, register, "income", 20.0, "Tips jar")
    cash_service.add_manual_movement(db, register, "expense", 15.5, "Ice")
    cash_service.add_manual_movement(db, register, "withdrawal", 50.0)

    register = cash_service.close_register(db, register, 50.0, user_id="u2")

    assert register.expected_amount == 54.5
    assert register.difference == -4.5
    assert register.is_open is False


def test_sales_cannot_be_added_by_hand(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 0.0)
    with pytest.raises(ValidationFailed):
        cash_service.add_manual_movement(db, register, "sale", 10.0)


def test_withdrawal_cannot_exceed_drawer(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 10.0)
    with pytest.raises(ValidationFailed):
        cash_service.add_manual_movement(db, register, "withdrawal", 10.5)


def test_single_open_register_per_branch(db, branch):
    first = cash_service.create_register(db, branch, "One")
    second = cash_service.create_register(db, branch, "Two")
    cash_service.open_register(db, first, 0.0)
    with pytest.raises(ValidationFailed):
        cash_service.open_register(db, second, 0.0)


def test_closed_register_rejects_movements(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    with pytest.raises(ValidationFailed):
        cash_service.add_manual_movement(db, register, "income", 5.0)


def test_balanced_audit_books_nothing(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 80.0)

    audit = cash_service.audit_register(db, register, 80.0, user_id="u1")

    assert audit.status == "balanced"
    assert audit.difference == 0.0
    assert audit.adjustment_id is None
    assert db.query(CashMovement).filter(CashMovement.register_id == register.id).count() == 1


def test_audit_shortage_corrects_the_expected_amount(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 100.0)
    cash_service.add_manual_movement(db, register, "income", 20.0)

    audit = cash_service.audit_register(db, register, 112.5, notes="Midday count")

    assert audit.expected_cash == 120.0
    assert audit.difference == -7.5
    assert audit.status == "shortage"
    adjustment = db.get(CashMovement, audit.adjustment_id)
    assert adjustment.type == "adjustment"
    assert adjustment.amount == -7.5
    db.refresh(register)
    assert register.expected_amount == 112.5

    register = cash_service.close_register(db, register, 112.5)
    assert register.difference == 0.0


def test_audit_surplus_from_denominations(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 50.0)

    audit = cash_service.audit_register(db, register, denominations={"20": 2, "10": 1, "0.5": 4})

    assert audit.actual_cash == 52.0
    assert audit.status == "surplus"
    assert audit.difference == 2.0
    assert audit.denominations == {"20": 2, "10": 1, "0.5": 4}
    assert [a.id for a in cash_service.list_audits(db, register)] == [audit.id]


def test_audit_rejects_denominations_that_do_not_add_up(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    cash_service.open_register(db, register, 50.0)
    with pytest.raises(ValidationFailed):
        cash_service.audit_register(db, register, 50.0, denominations={"20": 2})
    with pytest.raises(ValidationFailed):
        cash_service.audit_register(db, register, denominations={"coins": 3})
    assert cash_service.list_audits(db, register) == []


def test_closed_register_cannot_be_audited(db, branch):
    register = cash_service.create_register(db, branch, "Bar")
    with pytest.raises(ValidationFailed):
        cash_service.audit_register(db, register, 0.0)
