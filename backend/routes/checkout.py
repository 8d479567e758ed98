# backend/routes/checkout.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order
from models.tenant import Branch
from schemas.checkout import CheckoutRequest, CheckoutResult, CheckoutStatus
from schemas.order import OrderConfirmation
from services import orders as order_service
from services.cart import Cart
from services.checkout import CheckoutFlow, CheckoutStep, CustomerInfo
from utils.messaging import normalize_phone, order_confirmation_link
from utils.scope import BRANCH_PREFIX, get_branch

router = APIRouter(prefix=BRANCH_PREFIX + "/checkout", tags=["Checkout"])


# Rebuild the client's wizard server side and walk it as far as the guards allow
def _drive(db: Session, branch: Branch, payload: CheckoutRequest) -> CheckoutFlow:
    cart = Cart()
    for line in order_service.resolve_lines(db, branch, [i.model_dump() for i in payload.items]):
        cart.add_item(line, line.quantity)

    flow = CheckoutFlow(cart, branch)
    flow.update(
        service_type=payload.service_type,
        customer=CustomerInfo(
            name=payload.customer.name,
            phone=payload.customer.phone,
            email=payload.customer.email,
        ),
        delivery_address=payload.delivery_address.model_dump() if payload.delivery_address else None,
        table_number=payload.table_number,
        payment_method=payload.payment_method,
        needs_change=payload.needs_change and payload.payment_method == "cash",
        cash_amount=payload.cash_amount if payload.payment_method == "cash" else None,
        tip=payload.tip,
        discount=payload.discount,
        notes=payload.notes,
    )
    while flow.step != CheckoutStep.SUMMARY and flow.can_proceed():
        flow.next()
    return flow


@router.post("/validate", response_model=CheckoutStatus)
def validate_checkout(
    payload: CheckoutRequest,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    flow = _drive(db, branch, payload)
    return {
        "step": flow.step.value,
        "ready": flow.step == CheckoutStep.SUMMARY,
        "missing": flow.problems(),
        "totals": flow.totals(),
    }


@router.post("", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: CheckoutRequest,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    flow = _drive(db, branch, payload)
    if flow.step != CheckoutStep.SUMMARY:
        # Raises with the fields still missing on the current step
        flow.next()
    order = flow.place_order(db)
    return {
        "order": order,
        "message_link": order_confirmation_link(branch.messaging_phone, order, branch.currency),
    }


# Public confirmation page; the customer's phone acts as a lookup key
@router.get("/confirmation/{order_number}", response_model=OrderConfirmation)
def order_confirmation(
    order_number: str,
    phone: str = Query(..., min_length=3),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    order = db.query(Order).filter(Order.branch_id == branch.id, Order.order_number == order_number).first()
    if not order or normalize_phone(order.customer_phone) != normalize_phone(phone):
        raise HTTPException(status_code=404, detail="Order not found")
    return {
        "order": order,
        "message_link": order_confirmation_link(branch.messaging_phone, order, branch.currency),
    }
