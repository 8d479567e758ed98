# backend/routes/cash.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.cash import CashRegister
from models.tenant import Branch
import schemas.cash as cash_schemas
from services import cash as cash_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/cash-registers", tags=["Cash"])


@router.get("", response_model=List[cash_schemas.RegisterOut])
def list_registers(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return db.query(CashRegister).filter(CashRegister.branch_id == branch.id).order_by(CashRegister.id).all()


@router.post("", response_model=cash_schemas.RegisterOut, status_code=status.HTTP_201_CREATED)
def create_register(
    payload: cash_schemas.RegisterCreate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return cash_service.create_register(db, branch, payload.name)


@router.get("/{register_id}", response_model=cash_schemas.RegisterDetail)
def get_register(
    register_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return cash_service.get_register(db, branch, register_id)


@router.post("/{register_id}/open", response_model=cash_schemas.RegisterOut)
def open_register(
    register_id: int,
    payload: cash_schemas.RegisterOpen,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    register = cash_service.get_register(db, branch, register_id)
    register = cash_service.open_register(db, register, payload.initial_amount,
                                          user_id=current_user.id, notes=payload.notes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="CASH_OPEN",
              resource="cash", ip=client_ip(request),
              meta={"register_id": register.id, "initial_amount": register.initial_amount})
    return register


@router.post("/{register_id}/movements", response_model=cash_schemas.CashMovementOut,
             status_code=status.HTTP_201_CREATED)
def add_movement(
    register_id: int,
    payload: cash_schemas.CashMovementIn,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    register = cash_service.get_register(db, branch, register_id)
    movement = cash_service.add_manual_movement(db, register, payload.type, payload.amount,
                                                description=payload.description, user_id=current_user.id)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="CASH_MOVEMENT",
              resource="cash", ip=client_ip(request),
              meta={"register_id": register.id, "type": payload.type, "amount": payload.amount})
    return movement


@router.post("/{register_id}/close", response_model=cash_schemas.RegisterOut)
def close_register(
    register_id: int,
    payload: cash_schemas.RegisterClose,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    register = cash_service.get_register(db, branch, register_id)
    register = cash_service.close_register(db, register, payload.counted_amount,
                                           user_id=current_user.id, notes=payload.notes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="CASH_CLOSE",
              resource="cash", ip=client_ip(request),
              meta={"register_id": register.id, "difference": register.difference})
    return register


@router.get("/{register_id}/audits", response_model=List[cash_schemas.CashAuditOut])
def list_audits(
    register_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    register = cash_service.get_register(db, branch, register_id)
    return cash_service.list_audits(db, register)


@router.post("/{register_id}/audits", response_model=cash_schemas.CashAuditOut,
             status_code=status.HTTP_201_CREATED)
def audit_register(
    register_id: int,
    payload: cash_schemas.CashAuditCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    register = cash_service.get_register(db, branch, register_id)
    audit = cash_service.audit_register(db, register, payload.actual_cash, denominations=payload.denominations,
                                        user_id=current_user.id, notes=payload.notes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="CASH_AUDIT",
              resource="cash", ip=client_ip(request),
              meta={"register_id": register.id, "audit_id": audit.id, "difference": audit.difference})
    return audit
