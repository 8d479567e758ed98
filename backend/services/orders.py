# backend/services/orders.py
"""Order pricing, creation and status lifecycle."""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.order import Order, OrderItem, OrderStatus, ServiceType, PaymentStatus
from models.product import Product
from models.shift import Shift
from models.tenant import Branch
from services.cart import CartExtra, CartLine
from services.errors import ConflictError, InvalidTransition, NotFoundError, ValidationFailed
from services import cash as cash_service
from services import tables as tables_service

logger = logging.getLogger(__name__)

# Service types that go through the "delivered" state
HANDED_OVER_TYPES = {ServiceType.DELIVERY.value, ServiceType.TABLE.value}

ALLOWED_TRANSITIONS: Dict[str, set] = {
    OrderStatus.PENDING.value: {OrderStatus.PREPARING.value, OrderStatus.CANCELLED.value},
    OrderStatus.PREPARING.value: {OrderStatus.READY.value, OrderStatus.CANCELLED.value},
    OrderStatus.READY.value: {
        OrderStatus.DELIVERED.value,
        OrderStatus.COMPLETED.value,
        OrderStatus.CANCELLED.value,
    },
    OrderStatus.DELIVERED.value: {OrderStatus.COMPLETED.value},
    OrderStatus.COMPLETED.value: set(),
    OrderStatus.CANCELLED.value: set(),
}

ADDRESS_FIELDS = ("street", "number", "city")


def format_order_number(sequence: int) -> str:
    return f"ORD-{sequence:06d}"


def missing_address_fields(address: Optional[dict]) -> List[str]:
    address = address or {}
    return [f"delivery_address.{k}" for k in ADDRESS_FIELDS if not str(address.get(k) or "").strip()]


def compute_totals(
    lines: Iterable[CartLine],
    *,
    service_type: str,
    tax_rate: float = 0.0,
    delivery_fee: float = 0.0,
    discount: float = 0.0,
    tip: float = 0.0,
) -> dict:
    """Monetary breakdown of an order, rounded to cents."""
    subtotal = sum(line.subtotal for line in lines)
    tax = subtotal * tax_rate
    fee = delivery_fee if service_type == ServiceType.DELIVERY.value else 0.0
    total = max(subtotal + tax + fee + tip - discount, 0.0)
    return {
        "subtotal": round(subtotal, 2),
        "tax": round(tax, 2),
        "delivery_fee": round(fee, 2),
        "discount": round(discount, 2),
        "tip": round(tip, 2),
        "total": round(total, 2),
    }


def resolve_lines(db: Session, branch: Branch, requested: Sequence[dict]) -> List[CartLine]:
    """Build cart lines from product ids using catalog prices.

    Each entry holds ``product_id``, ``quantity`` and optional ``extra_ids``.
    """
    lines: List[CartLine] = []
    for entry in requested:
        product = db.query(Product).filter(
            Product.id == entry["product_id"], Product.branch_id == branch.id
        ).first()
        if not product:
            raise NotFoundError(f"Product {entry['product_id']} not found", product_id=entry["product_id"])
        if not product.is_available:
            raise ValidationFailed(f"Product '{product.name}' is not available", product_id=product.id)

        offered = {str(e["id"]): e for e in (product.extras or [])}
        extras = []
        for extra_id in entry.get("extra_ids") or []:
            extra = offered.get(str(extra_id))
            if extra is None:
                raise ValidationFailed(
                    f"Extra {extra_id} is not offered for '{product.name}'", product_id=product.id
                )
            extras.append(CartExtra(id=str(extra["id"]), name=extra["name"], price=float(extra["price"])))

        quantity = int(entry.get("quantity", 1))
        if quantity <= 0:
            raise ValidationFailed("Quantity must be positive", product_id=product.id)

        lines.append(CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            image=product.image_url,
            extras=extras,
        ))
    return lines


def active_shift(db: Session, branch_id: int) -> Optional[Shift]:
    return db.query(Shift).filter(Shift.branch_id == branch_id, Shift.status == "active").first()


def _next_sequence(db: Session, branch_id: int) -> int:
    last = db.query(func.max(Order.sequence)).filter(Order.branch_id == branch_id).scalar()
    return (last or 0) + 1


def create_order(
    db: Session,
    branch: Branch,
    *,
    lines: Sequence[CartLine],
    service_type: str,
    customer_name: str,
    payment_method: str,
    customer_phone: Optional[str] = None,
    customer_email: Optional[str] = None,
    delivery_address: Optional[dict] = None,
    table_number: Optional[str] = None,
    cash_amount: Optional[float] = None,
    discount: float = 0.0,
    tip: float = 0.0,
    notes: Optional[str] = None,
) -> Order:
    """Persist a new pending order in a single commit."""
    if not lines:
        raise ValidationFailed("Order has no items")
    if service_type not in {s.value for s in ServiceType}:
        raise ValidationFailed(f"Unknown service type '{service_type}'")
    if not (customer_name or "").strip():
        raise ValidationFailed("Customer name is required", missing=["customer.name"])
    if service_type == ServiceType.DELIVERY.value:
        missing = missing_address_fields(delivery_address)
        if missing:
            raise ValidationFailed("Delivery address is incomplete", missing=missing)
    if discount < 0 or tip < 0:
        raise ValidationFailed("Discount and tip cannot be negative")
    if service_type == ServiceType.TABLE.value:
        table_number = tables_service.resolve_for_order(db, branch.id, table_number).number

    totals = compute_totals(
        lines,
        service_type=service_type,
        tax_rate=branch.tax_rate,
        delivery_fee=branch.delivery_fee,
        discount=discount,
        tip=tip,
    )

    change_due = None
    if cash_amount is not None:
        if cash_amount < totals["total"]:
            raise ValidationFailed("Cash amount is below the order total", total=totals["total"])
        change_due = round(cash_amount - totals["total"], 2)

    shift = active_shift(db, branch.id)
    sequence = _next_sequence(db, branch.id)

    order = Order(
        tenant_id=branch.tenant_id,
        branch_id=branch.id,
        shift_id=shift.id if shift else None,
        sequence=sequence,
        order_number=format_order_number(sequence),
        service_type=service_type,
        status=OrderStatus.PENDING.value,
        table_number=table_number,
        customer_name=customer_name.strip(),
        customer_phone=customer_phone,
        customer_email=customer_email,
        delivery_address=delivery_address if service_type == ServiceType.DELIVERY.value else None,
        payment_method=payment_method,
        payment_status=PaymentStatus.PENDING.value,
        cash_amount=cash_amount,
        change_due=change_due,
        notes=notes,
        **totals,
    )
    order.items = [
        OrderItem(
            product_id=line.product_id,
            name=line.name,
            quantity=line.quantity,
            unit_price=line.price,
            extras=[{"id": e.id, "name": e.name, "price": e.price} for e in line.extras],
            subtotal=round(line.subtotal, 2),
        )
        for line in lines
    ]
    db.add(order)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another order took the same sequence number
        raise ConflictError("Order number already taken, please retry")
    db.refresh(order)
    logger.info("Created order %s for branch %s (total %.2f)", order.order_number, branch.id, order.total)
    return order


def get_order(db: Session, branch: Branch, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.branch_id == branch.id).first()
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)
    return order


def can_transition(order: Order, new_status: str) -> bool:
    allowed = ALLOWED_TRANSITIONS.get(order.status, set())
    if new_status not in allowed:
        return False
    if new_status == OrderStatus.DELIVERED.value and order.service_type not in HANDED_OVER_TYPES:
        return False
    if new_status == OrderStatus.CANCELLED.value and order.payment_status == PaymentStatus.PAID.value:
        return False
    return True


def transition(db: Session, order: Order, new_status: str) -> Order:
    if new_status not in ALLOWED_TRANSITIONS:
        raise ValidationFailed(f"Unknown order status '{new_status}'")
    if not can_transition(order, new_status):
        message = f"Cannot change status from {order.status} to {new_status}"
        if new_status == OrderStatus.CANCELLED.value and order.payment_status == PaymentStatus.PAID.value:
            message = "Paid orders cannot be cancelled"
        raise InvalidTransition(message, current=order.status, requested=new_status)
    order.status = new_status
    db.commit()
    db.refresh(order)
    return order


def delete_order(db: Session, order: Order) -> None:
    if order.status != OrderStatus.PENDING.value:
        raise InvalidTransition("Only pending orders can be deleted", current=order.status)
    # The sale movement in the cash register points at the order
    if order.payment_status == PaymentStatus.PAID.value:
        raise InvalidTransition("Paid orders cannot be deleted", current=order.status)
    db.delete(order)
    db.commit()


def record_payment(db: Session, order: Order, user_id: Optional[str] = None) -> Order:
    """Mark an order paid; cash payments are booked into the open register."""
    if order.status == OrderStatus.CANCELLED.value:
        raise ValidationFailed("Cancelled orders cannot be paid")
    if order.payment_status == PaymentStatus.PAID.value:
        raise ValidationFailed("Order is already paid")

    order.payment_status = PaymentStatus.PAID.value
    if order.payment_method == "cash":
        register = cash_service.open_register_for(db, order.branch_id)
        if register is not None:
            cash_service.book_movement(
                db,
                register,
                "sale",
                order.total,
                description=f"Order {order.order_number}",
                order_id=order.id,
                user_id=user_id,
            )
    db.commit()
    db.refresh(order)
    return order
