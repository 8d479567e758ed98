# backend/services/inventory.py
"""Inventory ledger.

Stock and unit cost change only through the functions below. Each change
appends an InventoryMovement and writes the item with a compare-and-swap on
its version, so a concurrent writer turns into a ConflictError instead of a
lost update.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from models.inventory import InventoryItem, InventoryMovement, MovementType, WasteRecord
from models.tenant import Branch
from services.errors import ConflictError, InsufficientStock, NotFoundError, ValidationFailed

logger = logging.getLogger(__name__)

# Fields owned by the ledger
LEDGER_FIELDS = {"stock", "unit_cost", "version"}

EPSILON = 1e-9


def weighted_average_cost(old_stock: float, old_cost: float, quantity: float, unit_cost: float) -> float:
    total_qty = old_stock + quantity
    if total_qty <= 0:
        return unit_cost
    return (old_stock * old_cost + quantity * unit_cost) / total_qty


def get_item(db: Session, branch: Branch, item_id: int) -> InventoryItem:
    item = db.query(InventoryItem).filter(
        InventoryItem.id == item_id, InventoryItem.branch_id == branch.id
    ).first()
    if not item:
        raise NotFoundError("Inventory item not found", item_id=item_id)
    return item


def _write_stock(db: Session, item: InventoryItem, new_stock: float, new_cost: Optional[float] = None) -> None:
    expected_version = item.version
    values = {"stock": new_stock, "version": expected_version + 1}
    if new_cost is not None:
        values["unit_cost"] = new_cost

    stmt = (
        update(InventoryItem)
        .where(InventoryItem.id == item.id, InventoryItem.version == expected_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount != 1:
        db.rollback()
        raise ConflictError(
            f"Stock of '{item.name}' changed concurrently, reload and retry",
            item_id=item.id,
            expected_version=expected_version,
        )
    db.expire(item, ["stock", "unit_cost", "version"])


def _record(
    db: Session,
    item: InventoryItem,
    delta: float,
    movement_type: str,
    *,
    new_cost: Optional[float] = None,
    reference_id: Optional[str] = None,
    notes: Optional[str] = None,
    user_id: Optional[str] = None,
) -> InventoryMovement:
    if delta < 0 and item.stock + delta < -EPSILON:
        raise InsufficientStock(
            f"Insufficient stock. Only {item.stock:g} {item.unit} of '{item.name}' available.",
            item_id=item.id,
            available=item.stock,
            requested=-delta,
        )
    new_stock = max(round(item.stock + delta, 6), 0.0)
    _write_stock(db, item, new_stock, new_cost)

    movement = InventoryMovement(
        tenant_id=item.tenant_id,
        branch_id=item.branch_id,
        item_id=item.id,
        quantity=delta,
        type=movement_type,
        reference_id=reference_id,
        notes=notes,
        created_by=user_id,
    )
    db.add(movement)
    db.flush()
    return movement


def _finish(db: Session, commit: bool, *objs) -> None:
    if commit:
        db.commit()
        for obj in objs:
            db.refresh(obj)


def _positive(quantity: float) -> float:
    if quantity is None or quantity <= 0:
        raise ValidationFailed("Quantity must be positive")
    return float(quantity)


def register_consumption(db: Session, item: InventoryItem, quantity: float, *, notes: Optional[str] = None,
                         reference_id: Optional[str] = None, user_id: Optional[str] = None,
                         commit: bool = True) -> InventoryMovement:
    quantity = _positive(quantity)
    movement = _record(db, item, -quantity, MovementType.CONSUMPTION.value,
                       reference_id=reference_id, notes=notes or "Ingredient consumption", user_id=user_id)
    _finish(db, commit, movement)
    return movement


def register_waste(db: Session, item: InventoryItem, quantity: float, reason: str, *,
                   user_id: Optional[str] = None, commit: bool = True) -> Tuple[InventoryMovement, WasteRecord]:
    quantity = _positive(quantity)
    if not (reason or "").strip():
        raise ValidationFailed("A reason is required to register waste")
    unit_cost = item.unit_cost
    movement = _record(db, item, -quantity, MovementType.WASTE.value, notes=f"Waste: {reason}", user_id=user_id)
    waste = WasteRecord(
        tenant_id=item.tenant_id,
        branch_id=item.branch_id,
        item_id=item.id,
        movement_id=movement.id,
        quantity=quantity,
        reason=reason,
        cost=round(quantity * unit_cost, 2),
        reported_by=user_id,
    )
    db.add(waste)
    _finish(db, commit, movement, waste)
    return movement, waste


def register_adjustment(db: Session, item: InventoryItem, delta: float, *, notes: Optional[str] = None,
                        user_id: Optional[str] = None, commit: bool = True) -> InventoryMovement:
    if not delta:
        raise ValidationFailed("Adjustment quantity cannot be zero")
    movement = _record(db, item, float(delta), MovementType.ADJUSTMENT.value,
                       notes=notes or "Stock adjustment", user_id=user_id)
    _finish(db, commit, movement)
    return movement


def receive_stock(db: Session, item: InventoryItem, quantity: float, unit_cost: float, *,
                  reference_id: Optional[str] = None, notes: Optional[str] = None,
                  user_id: Optional[str] = None, commit: bool = True) -> InventoryMovement:
    """Book a purchase receipt and re-average the unit cost."""
    quantity = _positive(quantity)
    if unit_cost is None or unit_cost < 0:
        raise ValidationFailed("Unit cost cannot be negative")
    new_cost = round(weighted_average_cost(item.stock, item.unit_cost, quantity, unit_cost), 6)
    movement = _record(db, item, quantity, MovementType.PURCHASE.value, new_cost=new_cost,
                       reference_id=reference_id, notes=notes, user_id=user_id)
    _finish(db, commit, movement)
    return movement


def create_item(db: Session, branch: Branch, data: dict, *, initial_stock: float = 0.0,
                unit_cost: float = 0.0, user_id: Optional[str] = None) -> InventoryItem:
    """Create an item; its opening stock is booked as an adjustment."""
    if unit_cost < 0:
        raise ValidationFailed("Unit cost cannot be negative")
    data = {k: v for k, v in data.items() if k not in LEDGER_FIELDS}
    item = InventoryItem(tenant_id=branch.tenant_id, branch_id=branch.id, stock=0.0, version=1,
                         unit_cost=unit_cost, **data)
    db.add(item)
    db.flush()
    if initial_stock:
        if initial_stock < 0:
            db.rollback()
            raise ValidationFailed("Initial stock cannot be negative")
        register_adjustment(db, item, initial_stock, notes="Initial stock", user_id=user_id, commit=False)
    db.commit()
    db.refresh(item)
    return item


def update_item(db: Session, item: InventoryItem, changes: dict) -> InventoryItem:
    touched = LEDGER_FIELDS & set(changes)
    if touched:
        raise ValidationFailed(
            "Stock and cost can only change through inventory movements",
            fields=sorted(touched),
        )
    for key, value in changes.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


def ledger_balance(db: Session, item: InventoryItem) -> float:
    total = db.query(func.coalesce(func.sum(InventoryMovement.quantity), 0.0)).filter(
        InventoryMovement.item_id == item.id
    ).scalar()
    return float(total or 0.0)


def reconcile(db: Session, item: InventoryItem) -> dict:
    balance = round(ledger_balance(db, item), 6)
    return {
        "item_id": item.id,
        "stock": item.stock,
        "ledger_balance": balance,
        "in_balance": abs(balance - item.stock) < 1e-6,
    }


def low_stock(db: Session, branch: Branch) -> List[InventoryItem]:
    return (
        db.query(InventoryItem)
        .filter(
            InventoryItem.branch_id == branch.id,
            InventoryItem.is_active == True,  # noqa: E712
            InventoryItem.stock <= InventoryItem.min_stock,
        )
        .order_by(InventoryItem.name)
        .all()
    )


# Stock value per category plus the grand total
def valuation(db: Session, branch: Branch) -> dict:
    items = db.query(InventoryItem).filter(
        InventoryItem.branch_id == branch.id, InventoryItem.is_active == True  # noqa: E712
    ).all()
    by_category: dict = {}
    total = 0.0
    for item in items:
        value = item.stock * item.unit_cost
        total += value
        key = item.category or "Uncategorized"
        by_category[key] = by_category.get(key, 0.0) + value
    return {
        "total_value": round(total, 2),
        "item_count": len(items),
        "by_category": {k: round(v, 2) for k, v in sorted(by_category.items())},
    }
