# backend/services/shifts.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from models.order import Order, OrderStatus, OPEN_STATUSES
from models.shift import Shift
from models.tenant import Branch
from services.errors import NotFoundError, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class ShiftCloseResult:
    shift: Shift
    promoted_order_ids: List[int] = field(default_factory=list)


def current_shift(db: Session, branch: Branch) -> Optional[Shift]:
    return db.query(Shift).filter(Shift.branch_id == branch.id, Shift.status == "active").first()


def get_shift(db: Session, branch: Branch, shift_id: int) -> Shift:
    shift = db.query(Shift).filter(Shift.id == shift_id, Shift.branch_id == branch.id).first()
    if not shift:
        raise NotFoundError("Shift not found", shift_id=shift_id)
    return shift


def start_shift(db: Session, branch: Branch, user_id: Optional[str] = None, notes: Optional[str] = None) -> Shift:
    if current_shift(db, branch) is not None:
        raise ValidationFailed("A shift is already active. Close it before starting a new one.")
    shift = Shift(
        tenant_id=branch.tenant_id,
        branch_id=branch.id,
        status="active",
        started_at=datetime.now(timezone.utc),
        opened_by=user_id,
        notes=notes,
    )
    db.add(shift)
    db.commit()
    db.refresh(shift)
    logger.info("Shift %s started for branch %s", shift.id, branch.id)
    return shift


def summarize(orders: List[Order]) -> dict:
    summary = {
        "total_orders": 0,
        "total_sales": 0.0,
        "cash_sales": 0.0,
        "card_sales": 0.0,
        "other_sales": 0.0,
    }
    for order in orders:
        if order.status == OrderStatus.CANCELLED.value:
            continue
        summary["total_orders"] += 1
        summary["total_sales"] += order.total
        if order.payment_method == "cash":
            summary["cash_sales"] += order.total
        elif order.payment_method == "card":
            summary["card_sales"] += order.total
        else:
            summary["other_sales"] += order.total
    for key in ("total_sales", "cash_sales", "card_sales", "other_sales"):
        summary[key] = round(summary[key], 2)
    return summary


def close_shift(db: Session, branch: Branch, shift: Shift,
                user_id: Optional[str] = None, notes: Optional[str] = None) -> ShiftCloseResult:
    """Reconcile and close a shift in one transaction.

    Rejected while any order of the branch is still pending, preparing or
    ready. Delivered orders are completed as part of the close.
    """
    if shift.status != "active":
        raise ValidationFailed("Shift is already closed", shift_id=shift.id)

    open_orders = db.query(Order).filter(
        Order.branch_id == branch.id, Order.status.in_(OPEN_STATUSES)
    ).all()
    if open_orders:
        raise ValidationFailed(
            f"{len(open_orders)} order(s) are still open",
            open_orders=[o.order_number for o in open_orders],
        )

    try:
        delivered = db.query(Order).filter(
            Order.branch_id == branch.id, Order.status == OrderStatus.DELIVERED.value
        ).all()
        for order in delivered:
            order.status = OrderStatus.COMPLETED.value

        shift_orders = db.query(Order).filter(Order.shift_id == shift.id).all()
        shift.summary = summarize(shift_orders)
        shift.status = "closed"
        shift.ended_at = datetime.now(timezone.utc)
        shift.closed_by = user_id
        if notes:
            shift.notes = notes
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Closing shift %s failed; nothing was changed", shift.id)
        raise

    db.refresh(shift)
    logger.info("Shift %s closed, %d delivered order(s) completed", shift.id, len(delivered))
    return ShiftCloseResult(shift=shift, promoted_order_ids=[o.id for o in delivered])
