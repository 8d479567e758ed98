# backend/routes/purchases.py
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.purchase import Purchase
from models.tenant import Branch
import schemas.purchase as purchase_schemas
from services import purchases as purchase_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required

router = APIRouter(prefix=BRANCH_PREFIX + "/purchases", tags=["Purchases"])


@router.get("", response_model=purchase_schemas.PurchasesPage)
def list_purchases(
    status_filter: Optional[str] = Query(None, alias="status"),
    supplier_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    query = db.query(Purchase).filter(Purchase.branch_id == branch.id)
    if status_filter:
        query = query.filter(Purchase.status == status_filter)
    if supplier_id is not None:
        query = query.filter(Purchase.supplier_id == supplier_id)

    query = query.order_by(Purchase.order_date.desc(), Purchase.id.desc())
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.post("", response_model=purchase_schemas.PurchaseOut, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: purchase_schemas.PurchaseCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.create_purchase(
        db, branch, payload.supplier_id, [i.model_dump() for i in payload.items],
        payment_method=payload.payment_method, notes=payload.notes,
    )
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PURCHASE_CREATE",
              resource="purchases", ip=client_ip(request),
              meta={"purchase_id": purchase.id, "total": purchase.total_amount})
    return purchase


@router.get("/{purchase_id}", response_model=purchase_schemas.PurchaseOut)
def get_purchase(
    purchase_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return purchase_service.get_purchase(db, branch, purchase_id)


@router.patch("/{purchase_id}", response_model=purchase_schemas.PurchaseOut)
def update_purchase(
    purchase_id: int,
    payload: purchase_schemas.PurchaseUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.get_purchase(db, branch, purchase_id)
    changes = payload.model_dump(exclude_none=True, exclude={"items"})
    lines = [i.model_dump() for i in payload.items] if payload.items is not None else None
    return purchase_service.update_purchase(db, branch, purchase, changes, lines)


@router.post("/{purchase_id}/receive", response_model=purchase_schemas.PurchaseOut)
def receive_purchase(
    purchase_id: int,
    payload: purchase_schemas.PurchaseReceive,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.get_purchase(db, branch, purchase_id)
    received = None
    if payload.lines:
        received = {}
        for line in payload.lines:
            received[line.line_id] = received.get(line.line_id, 0.0) + line.quantity
    purchase = purchase_service.receive_purchase(db, purchase, received, user_id=current_user.id)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PURCHASE_RECEIVE",
              resource="purchases", ip=client_ip(request),
              meta={"purchase_id": purchase.id, "status": purchase.status})
    return purchase


@router.post("/{purchase_id}/cancel", response_model=purchase_schemas.PurchaseOut)
def cancel_purchase(
    purchase_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.get_purchase(db, branch, purchase_id)
    purchase = purchase_service.cancel_purchase(db, purchase)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PURCHASE_CANCEL",
              resource="purchases", ip=client_ip(request), meta={"purchase_id": purchase.id})
    return purchase


@router.patch("/{purchase_id}/payment", response_model=purchase_schemas.PurchaseOut)
def update_payment_status(
    purchase_id: int,
    payload: purchase_schemas.PaymentStatusUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.get_purchase(db, branch, purchase_id)
    return purchase_service.set_payment_status(db, purchase, payload.payment_status)


@router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(
    purchase_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    purchase = purchase_service.get_purchase(db, branch, purchase_id)
    purchase_service.delete_purchase(db, purchase)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PURCHASE_DELETE",
              resource="purchases", ip=client_ip(request), meta={"purchase_id": purchase_id})
