# backend/services/cash.py
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from models.cash import AuditStatus, CashAudit, CashRegister, CashMovement, CashMovementType
from models.tenant import Branch
from services.errors import NotFoundError, ValidationFailed

# Sign applied to the expected drawer amount per movement type
_SIGN = {
    CashMovementType.INITIAL.value: 1,
    CashMovementType.SALE.value: 1,
    CashMovementType.INCOME.value: 1,
    CashMovementType.EXPENSE.value: -1,
    CashMovementType.WITHDRAWAL.value: -1,
}

# Types that can be entered by hand; sales come from order payments
MANUAL_TYPES = {
    CashMovementType.INCOME.value,
    CashMovementType.EXPENSE.value,
    CashMovementType.WITHDRAWAL.value,
}


def open_register_for(db: Session, branch_id: int) -> Optional[CashRegister]:
    return db.query(CashRegister).filter(
        CashRegister.branch_id == branch_id, CashRegister.is_open == True  # noqa: E712
    ).first()


def get_register(db: Session, branch: Branch, register_id: int) -> CashRegister:
    register = db.query(CashRegister).filter(
        CashRegister.id == register_id, CashRegister.branch_id == branch.id
    ).first()
    if not register:
        raise NotFoundError("Cash register not found", register_id=register_id)
    return register


def create_register(db: Session, branch: Branch, name: str) -> CashRegister:
    register = CashRegister(tenant_id=branch.tenant_id, branch_id=branch.id, name=name)
    db.add(register)
    db.commit()
    db.refresh(register)
    return register


def book_movement(
    db: Session,
    register: CashRegister,
    movement_type: str,
    amount: float,
    *,
    description: Optional[str] = None,
    order_id: Optional[int] = None,
    user_id: Optional[str] = None,
) -> CashMovement:
    """Add a movement to an open register without committing.

    Adjustments carry a signed amount; every other type is positive and
    takes its direction from the movement type.
    """
    if movement_type == CashMovementType.ADJUSTMENT.value:
        if not amount:
            raise ValidationFailed("Adjustment amount cannot be zero")
        delta = amount
    elif movement_type in _SIGN:
        if amount <= 0:
            raise ValidationFailed("Amount must be positive")
        delta = _SIGN[movement_type] * amount
    else:
        raise ValidationFailed(f"Unknown cash movement type '{movement_type}'")
    if not register.is_open:
        raise ValidationFailed("Cash register is closed")

    new_expected = round(register.expected_amount + delta, 2)
    if new_expected < 0:
        raise ValidationFailed("Not enough cash in the register", expected=register.expected_amount)

    movement = CashMovement(
        tenant_id=register.tenant_id,
        branch_id=register.branch_id,
        register_id=register.id,
        type=movement_type,
        amount=round(amount, 2),
        description=description,
        order_id=order_id,
        created_by=user_id,
    )
    register.expected_amount = new_expected
    db.add(movement)
    return movement


def open_register(db: Session, register: CashRegister, initial_amount: float,
                  user_id: Optional[str] = None, notes: Optional[str] = None) -> CashRegister:
    if register.is_open:
        raise ValidationFailed("Cash register is already open")
    if open_register_for(db, register.branch_id) is not None:
        raise ValidationFailed("Another cash register is already open in this branch")
    if initial_amount < 0:
        raise ValidationFailed("Initial amount cannot be negative")

    register.is_open = True
    register.opened_at = datetime.now(timezone.utc)
    register.opened_by = user_id
    register.initial_amount = initial_amount
    register.expected_amount = 0.0
    register.counted_amount = None
    register.difference = None
    register.closed_at = None
    register.closed_by = None
    register.notes = notes
    if initial_amount > 0:
        book_movement(db, register, CashMovementType.INITIAL.value, initial_amount,
                      description="Opening float", user_id=user_id)
    db.commit()
    db.refresh(register)
    return register


def add_manual_movement(db: Session, register: CashRegister, movement_type: str, amount: float,
                        description: Optional[str] = None, user_id: Optional[str] = None) -> CashMovement:
    if movement_type not in MANUAL_TYPES:
        raise ValidationFailed(f"Movements of type '{movement_type}' cannot be added by hand")
    movement = book_movement(db, register, movement_type, amount, description=description, user_id=user_id)
    db.commit()
    db.refresh(movement)
    return movement


def close_register(db: Session, register: CashRegister, counted_amount: float,
                   user_id: Optional[str] = None, notes: Optional[str] = None) -> CashRegister:
    if not register.is_open:
        raise ValidationFailed("Cash register is not open")
    if counted_amount < 0:
        raise ValidationFailed("Counted amount cannot be negative")

    register.is_open = False
    register.counted_amount = counted_amount
    register.difference = round(counted_amount - register.expected_amount, 2)
    register.closed_at = datetime.now(timezone.utc)
    register.closed_by = user_id
    if notes:
        register.notes = notes
    db.commit()
    db.refresh(register)
    return register


def count_denominations(denominations: Dict[str, int]) -> float:
    total = 0.0
    for face, count in denominations.items():
        try:
            value = float(face)
        except ValueError:
            raise ValidationFailed(f"Unknown denomination '{face}'")
        if value <= 0 or count < 0:
            raise ValidationFailed("Denominations and counts cannot be negative", denomination=face)
        total += value * count
    return round(total, 2)


def audit_register(db: Session, register: CashRegister, actual_cash: Optional[float] = None, *,
                   denominations: Optional[Dict[str, int]] = None, user_id: Optional[str] = None,
                   notes: Optional[str] = None) -> CashAudit:
    """Count the drawer of an open register.

    Any difference against the expected amount is booked as an adjustment
    movement, so the register expects what was counted from then on.
    """
    if not register.is_open:
        raise ValidationFailed("Only open cash registers can be audited")
    if denominations:
        counted = count_denominations(denominations)
        if actual_cash is None:
            actual_cash = counted
        elif abs(counted - actual_cash) >= 0.01:
            raise ValidationFailed("Denominations do not add up to the counted cash",
                                   counted=counted, actual_cash=actual_cash)
    if actual_cash is None:
        raise ValidationFailed("Counted cash is required")
    if actual_cash < 0:
        raise ValidationFailed("Counted cash cannot be negative")

    expected = register.expected_amount
    difference = round(actual_cash - expected, 2)
    if difference > 0:
        status = AuditStatus.SURPLUS.value
    elif difference < 0:
        status = AuditStatus.SHORTAGE.value
    else:
        status = AuditStatus.BALANCED.value

    adjustment = None
    if difference:
        adjustment = book_movement(db, register, CashMovementType.ADJUSTMENT.value, difference,
                                   description=f"Cash audit {status}", user_id=user_id)
        db.flush()

    audit = CashAudit(
        tenant_id=register.tenant_id,
        branch_id=register.branch_id,
        register_id=register.id,
        expected_cash=expected,
        actual_cash=round(actual_cash, 2),
        difference=difference,
        status=status,
        denominations=denominations or None,
        adjustment_id=adjustment.id if adjustment is not None else None,
        notes=notes,
        performed_by=user_id,
    )
    db.add(audit)
    db.commit()
    db.refresh(audit)
    return audit


def list_audits(db: Session, register: CashRegister) -> List[CashAudit]:
    return (
        db.query(CashAudit)
        .filter(CashAudit.register_id == register.id)
        .order_by(CashAudit.performed_at.desc(), CashAudit.id.desc())
        .all()
    )
