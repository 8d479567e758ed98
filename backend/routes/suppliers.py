# backend/routes/suppliers.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.purchase import Supplier
from models.tenant import Branch
from schemas.purchase import SupplierCreate, SupplierUpdate, SupplierOut
from services import purchases as purchase_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required

router = APIRouter(prefix=BRANCH_PREFIX + "/suppliers", tags=["Suppliers"])


@router.get("", response_model=List[SupplierOut])
def list_suppliers(
    q: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    query = db.query(Supplier).filter(Supplier.branch_id == branch.id)
    if not include_inactive:
        query = query.filter(Supplier.is_active == True)  # noqa: E712
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Supplier.name.ilike(like), Supplier.contact_name.ilike(like)))
    return query.order_by(Supplier.name).all()


@router.post("", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(
    payload: SupplierCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    supplier = purchase_service.create_supplier(db, branch, payload.model_dump())
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="SUPPLIER_CREATE",
              resource="suppliers", ip=client_ip(request), meta={"supplier_id": supplier.id})
    return supplier


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(
    supplier_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return purchase_service.get_supplier(db, branch, supplier_id)


@router.patch("/{supplier_id}", response_model=SupplierOut)
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    supplier = purchase_service.get_supplier(db, branch, supplier_id)
    return purchase_service.update_supplier(db, supplier, payload.model_dump(exclude_unset=True))


# Suppliers stay referenced by old purchases, so they are only deactivated
@router.delete("/{supplier_id}", response_model=SupplierOut)
def deactivate_supplier(
    supplier_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    supplier = purchase_service.get_supplier(db, branch, supplier_id)
    supplier = purchase_service.deactivate_supplier(db, supplier)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="SUPPLIER_DEACTIVATE",
              resource="suppliers", ip=client_ip(request), meta={"supplier_id": supplier.id})
    return supplier
