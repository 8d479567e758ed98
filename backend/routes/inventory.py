# backend/routes/inventory.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.inventory import InventoryItem, InventoryMovement, WasteRecord
from models.tenant import Branch
import schemas.inventory as inv_schemas
from services import inventory as inventory_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/inventory", tags=["Inventory"])


def _log_movement(db: Session, request: Request, user: TokenUser, branch: Branch, action: str, movement, **extra):
    write_log(db, user_id=user.id, tenant_id=branch.tenant_id, action=action, resource="inventory",
              ip=client_ip(request),
              meta={"item_id": movement.item_id, "movement_id": movement.id, "quantity": movement.quantity, **extra})


@router.get("/items", response_model=inv_schemas.InventoryItemsPage)
def list_items(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, description="Only items at or below their minimum stock"),
    include_inactive: bool = Query(False),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    query = db.query(InventoryItem).filter(InventoryItem.branch_id == branch.id)
    if not include_inactive:
        query = query.filter(InventoryItem.is_active == True)  # noqa: E712
    if q:
        like = f"%{q}%"
        query = query.filter(or_(InventoryItem.name.ilike(like), InventoryItem.description.ilike(like)))
    if category:
        query = query.filter(InventoryItem.category == category)
    if low_stock:
        query = query.filter(InventoryItem.stock <= InventoryItem.min_stock)

    query = query.order_by(InventoryItem.name)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.post("/items", response_model=inv_schemas.InventoryItemOut, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: inv_schemas.InventoryItemCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    data = payload.model_dump(exclude={"initial_stock", "unit_cost"})
    item = inventory_service.create_item(
        db, branch, data,
        initial_stock=payload.initial_stock,
        unit_cost=payload.unit_cost,
        user_id=current_user.id,
    )
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="INVENTORY_ITEM_CREATE",
              resource="inventory", ip=client_ip(request), meta={"item_id": item.id, "initial_stock": item.stock})
    return item


@router.get("/items/{item_id}", response_model=inv_schemas.InventoryItemOut)
def get_item(
    item_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return inventory_service.get_item(db, branch, item_id)


@router.patch("/items/{item_id}", response_model=inv_schemas.InventoryItemOut)
def update_item(
    item_id: int,
    payload: inv_schemas.InventoryItemUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    return inventory_service.update_item(db, item, payload.model_dump(exclude_unset=True))


@router.post("/items/{item_id}/consumption", response_model=inv_schemas.MovementOut, status_code=status.HTTP_201_CREATED)
def register_consumption(
    item_id: int,
    payload: inv_schemas.ConsumptionIn,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    movement = inventory_service.register_consumption(
        db, item, payload.quantity, notes=payload.notes, reference_id=payload.reference_id, user_id=current_user.id
    )
    _log_movement(db, request, current_user, branch, "STOCK_CONSUMPTION", movement)
    return movement


@router.post("/items/{item_id}/waste", response_model=inv_schemas.WasteOut, status_code=status.HTTP_201_CREATED)
def register_waste(
    item_id: int,
    payload: inv_schemas.WasteIn,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    movement, waste = inventory_service.register_waste(db, item, payload.quantity, payload.reason, user_id=current_user.id)
    _log_movement(db, request, current_user, branch, "STOCK_WASTE", movement, cost=waste.cost)
    return waste


@router.post("/items/{item_id}/adjustment", response_model=inv_schemas.MovementOut, status_code=status.HTTP_201_CREATED)
def register_adjustment(
    item_id: int,
    payload: inv_schemas.AdjustmentIn,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    movement = inventory_service.register_adjustment(db, item, payload.quantity, notes=payload.notes,
                                                     user_id=current_user.id)
    _log_movement(db, request, current_user, branch, "STOCK_ADJUSTMENT", movement)
    return movement


# Stock arriving outside of a purchase order
@router.post("/items/{item_id}/receipts", response_model=inv_schemas.MovementOut, status_code=status.HTTP_201_CREATED)
def receive_stock(
    item_id: int,
    payload: inv_schemas.ReceiptIn,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    movement = inventory_service.receive_stock(
        db, item, payload.quantity, payload.unit_cost,
        reference_id=payload.reference_id, notes=payload.notes, user_id=current_user.id,
    )
    _log_movement(db, request, current_user, branch, "STOCK_RECEIPT", movement, unit_cost=payload.unit_cost)
    return movement


@router.get("/items/{item_id}/reconciliation", response_model=inv_schemas.ReconciliationOut)
def reconcile_item(
    item_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    item = inventory_service.get_item(db, branch, item_id)
    return inventory_service.reconcile(db, item)


@router.get("/movements", response_model=inv_schemas.MovementsPage)
def list_movements(
    item_id: Optional[int] = Query(None),
    type: Optional[inv_schemas.MovementTypeName] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    query = db.query(InventoryMovement).filter(InventoryMovement.branch_id == branch.id)
    if item_id is not None:
        query = query.filter(InventoryMovement.item_id == item_id)
    if type:
        query = query.filter(InventoryMovement.type == type)
    if date_from:
        query = query.filter(InventoryMovement.created_at >= date_from)
    if date_to:
        query = query.filter(InventoryMovement.created_at <= date_to)

    query = query.order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/waste", response_model=List[inv_schemas.WasteOut])
def list_waste(
    item_id: Optional[int] = Query(None),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    query = db.query(WasteRecord).filter(WasteRecord.branch_id == branch.id)
    if item_id is not None:
        query = query.filter(WasteRecord.item_id == item_id)
    return query.order_by(WasteRecord.created_at.desc(), WasteRecord.id.desc()).all()


@router.get("/low-stock", response_model=List[inv_schemas.InventoryItemOut])
def low_stock_report(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return inventory_service.low_stock(db, branch)


@router.get("/valuation", response_model=inv_schemas.ValuationOut)
def inventory_valuation(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return inventory_service.valuation(db, branch)
