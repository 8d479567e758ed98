# backend/services/purchases.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from models.inventory import InventoryItem
from models.purchase import Purchase, PurchaseItem, PurchaseStatus, Supplier
from models.tenant import Branch
from services.errors import DomainError, InvalidTransition, NotFoundError, ValidationFailed
from services import inventory as inventory_service

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "partial", "paid")


# --- suppliers --------------------------------------------------------------

def get_supplier(db: Session, branch: Branch, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(
        Supplier.id == supplier_id, Supplier.branch_id == branch.id
    ).first()
    if not supplier:
        raise NotFoundError("Supplier not found", supplier_id=supplier_id)
    return supplier


def create_supplier(db: Session, branch: Branch, data: dict) -> Supplier:
    supplier = Supplier(tenant_id=branch.tenant_id, branch_id=branch.id, **data)
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def update_supplier(db: Session, supplier: Supplier, changes: dict) -> Supplier:
    for key, value in changes.items():
        setattr(supplier, key, value)
    db.commit()
    db.refresh(supplier)
    return supplier


def deactivate_supplier(db: Session, supplier: Supplier) -> Supplier:
    supplier.is_active = False
    db.commit()
    db.refresh(supplier)
    return supplier


# --- purchases --------------------------------------------------------------

def get_purchase(db: Session, branch: Branch, purchase_id: int) -> Purchase:
    purchase = db.query(Purchase).filter(
        Purchase.id == purchase_id, Purchase.branch_id == branch.id
    ).first()
    if not purchase:
        raise NotFoundError("Purchase not found", purchase_id=purchase_id)
    return purchase


def _build_lines(db: Session, branch: Branch, lines: Sequence[dict]) -> List[PurchaseItem]:
    if not lines:
        raise ValidationFailed("A purchase needs at least one line")
    built = []
    for line in lines:
        item = db.query(InventoryItem).filter(
            InventoryItem.id == line["item_id"], InventoryItem.branch_id == branch.id
        ).first()
        if not item:
            raise NotFoundError(f"Inventory item {line['item_id']} not found", item_id=line["item_id"])
        if line["quantity"] <= 0:
            raise ValidationFailed("Quantity must be positive", item_id=item.id)
        if line["unit_cost"] < 0:
            raise ValidationFailed("Unit cost cannot be negative", item_id=item.id)
        built.append(PurchaseItem(item_id=item.id, quantity=line["quantity"], unit_cost=line["unit_cost"]))
    return built


def _total(items: Sequence[PurchaseItem]) -> float:
    return round(sum(i.quantity * i.unit_cost for i in items), 2)


def create_purchase(db: Session, branch: Branch, supplier_id: int, lines: Sequence[dict], *,
                    payment_method: Optional[str] = None, notes: Optional[str] = None) -> Purchase:
    supplier = get_supplier(db, branch, supplier_id)
    if not supplier.is_active:
        raise ValidationFailed("Supplier is inactive", supplier_id=supplier.id)

    items = _build_lines(db, branch, lines)
    purchase = Purchase(
        tenant_id=branch.tenant_id,
        branch_id=branch.id,
        supplier_id=supplier.id,
        status=PurchaseStatus.PENDING.value,
        payment_status="pending",
        payment_method=payment_method,
        notes=notes,
        total_amount=_total(items),
    )
    purchase.items = items
    db.add(purchase)
    db.commit()
    db.refresh(purchase)
    return purchase


def _require_pending(purchase: Purchase, action: str) -> None:
    if purchase.status != PurchaseStatus.PENDING.value:
        raise InvalidTransition(
            f"Only pending purchases can be {action}", current=purchase.status
        )


def update_purchase(db: Session, branch: Branch, purchase: Purchase, changes: dict,
                    lines: Optional[Sequence[dict]] = None) -> Purchase:
    _require_pending(purchase, "edited")
    if "supplier_id" in changes:
        get_supplier(db, branch, changes["supplier_id"])
    for key, value in changes.items():
        setattr(purchase, key, value)
    if lines is not None:
        purchase.items = _build_lines(db, branch, lines)
        purchase.total_amount = _total(purchase.items)
    db.commit()
    db.refresh(purchase)
    return purchase


def cancel_purchase(db: Session, purchase: Purchase) -> Purchase:
    _require_pending(purchase, "cancelled")
    purchase.status = PurchaseStatus.CANCELLED.value
    db.commit()
    db.refresh(purchase)
    return purchase


def delete_purchase(db: Session, purchase: Purchase) -> None:
    _require_pending(purchase, "deleted")
    db.delete(purchase)
    db.commit()


def receive_purchase(db: Session, purchase: Purchase, received: Optional[Dict[int, float]] = None,
                     user_id: Optional[str] = None) -> Purchase:
    """Book received quantities into stock.

    ``received`` maps purchase line ids to the quantity arriving now; when
    omitted every outstanding quantity is received. Either all lines are
    booked or none are.
    """
    if purchase.status not in (PurchaseStatus.PENDING.value, PurchaseStatus.PARTIAL.value):
        raise InvalidTransition(f"Cannot receive a {purchase.status} purchase", current=purchase.status)

    lines = {line.id: line for line in purchase.items}
    if received is None:
        received = {line.id: line.quantity - line.received for line in purchase.items}
    unknown = set(received) - set(lines)
    if unknown:
        raise ValidationFailed("Unknown purchase lines", line_ids=sorted(unknown))

    try:
        booked = 0
        for line_id, quantity in received.items():
            if quantity is None or quantity <= 0:
                continue
            line = lines[line_id]
            outstanding = round(line.quantity - line.received, 6)
            if quantity > outstanding + 1e-9:
                raise ValidationFailed(
                    f"Received quantity exceeds the {outstanding:g} outstanding",
                    line_id=line_id,
                )
            inventory_service.receive_stock(
                db,
                line.item,
                quantity,
                line.unit_cost,
                reference_id=str(purchase.id),
                notes=f"Purchase #{purchase.id}",
                user_id=user_id,
                commit=False,
            )
            line.received = round(line.received + quantity, 6)
            booked += 1
        if not booked:
            raise ValidationFailed("Nothing to receive")

        if all(line.received >= line.quantity - 1e-9 for line in purchase.items):
            purchase.status = PurchaseStatus.DELIVERED.value
        else:
            purchase.status = PurchaseStatus.PARTIAL.value
        purchase.delivery_date = datetime.now(timezone.utc)
        purchase.received_by = user_id
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Receiving purchase %s failed; no stock was booked", purchase.id)
        raise

    db.refresh(purchase)
    logger.info("Purchase %s received (%s)", purchase.id, purchase.status)
    return purchase


def set_payment_status(db: Session, purchase: Purchase, payment_status: str) -> Purchase:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationFailed(f"Unknown payment status '{payment_status}'")
    purchase.payment_status = payment_status
    db.commit()
    db.refresh(purchase)
    return purchase
