# backend/routes/orders.py
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order
from models.tenant import Branch
from schemas.common import OrderStatusName, ServiceTypeName
from schemas.order import OrderCreate, OrderOut, OrdersPage, OrderStatusUpdate
from services import orders as order_service
from utils.audit import client_ip, write_log
from utils.dates import parse_day
from utils.exports import csv_response, orders_frame
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/orders", tags=["Orders"])


def _filtered(db: Session, branch: Branch, status_filter, service_type, q, date_from, date_to):
    query = db.query(Order).filter(Order.branch_id == branch.id)
    if status_filter:
        query = query.filter(Order.status == status_filter)
    if service_type:
        query = query.filter(Order.service_type == service_type)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Order.order_number.ilike(like),
            Order.customer_name.ilike(like),
            Order.customer_phone.ilike(like),
        ))
    dt_from = parse_day(date_from)
    if dt_from:
        query = query.filter(Order.created_at >= dt_from)
    dt_to = parse_day(date_to, end_of_day=True)
    if dt_to:
        query = query.filter(Order.created_at <= dt_to)
    return query.order_by(Order.created_at.desc(), Order.id.desc())


@router.get("", response_model=OrdersPage)
def list_orders(
    status_filter: Optional[OrderStatusName] = Query(None, alias="status"),
    service_type: Optional[ServiceTypeName] = Query(None),
    q: Optional[str] = Query(None, description="Order number, customer name or phone"),
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    query = _filtered(db, branch, status_filter, service_type, q, date_from, date_to)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Order history as CSV
@router.get("/export")
def export_orders(
    status_filter: Optional[OrderStatusName] = Query(None, alias="status"),
    service_type: Optional[ServiceTypeName] = Query(None),
    q: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    orders = _filtered(db, branch, status_filter, service_type, q, date_from, date_to).all()
    return csv_response(orders_frame(orders), f"orders_{branch.id}.csv")


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    lines = order_service.resolve_lines(db, branch, [i.model_dump() for i in payload.items])
    order = order_service.create_order(
        db,
        branch,
        lines=lines,
        service_type=payload.service_type,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        customer_email=payload.customer_email,
        delivery_address=payload.delivery_address.model_dump() if payload.delivery_address else None,
        table_number=payload.table_number,
        payment_method=payload.payment_method,
        cash_amount=payload.cash_amount if payload.payment_method == "cash" else None,
        discount=payload.discount,
        tip=payload.tip,
        notes=payload.notes,
    )
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="ORDER_CREATE",
              resource="orders", ip=client_ip(request), meta={"order_id": order.id, "number": order.order_number})
    return order


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return order_service.get_order(db, branch, order_id)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    order = order_service.get_order(db, branch, order_id)
    old_status = order.status
    order = order_service.transition(db, order, payload.status)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="ORDER_STATUS",
              resource="orders", ip=client_ip(request),
              meta={"order_id": order.id, "from": old_status, "to": order.status})
    return order


@router.post("/{order_id}/payment", response_model=OrderOut)
def record_order_payment(
    order_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    order = order_service.get_order(db, branch, order_id)
    order = order_service.record_payment(db, order, user_id=current_user.id)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="ORDER_PAYMENT",
              resource="orders", ip=client_ip(request), meta={"order_id": order.id, "amount": order.total})
    return order


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    order = order_service.get_order(db, branch, order_id)
    number = order.order_number
    order_service.delete_order(db, order)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="ORDER_DELETE",
              resource="orders", ip=client_ip(request), meta={"order_id": order_id, "number": number})
