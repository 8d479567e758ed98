# backend/routes/shifts.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.shift import Shift
from models.tenant import Branch
from schemas.shift import ShiftStart, ShiftClose, ShiftOut, ShiftCloseOut
from services import shifts as shift_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/shifts", tags=["Shifts"])


@router.get("", response_model=List[ShiftOut])
def list_shifts(
    limit: int = Query(30, ge=1, le=200),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return (
        db.query(Shift)
        .filter(Shift.branch_id == branch.id)
        .order_by(Shift.started_at.desc(), Shift.id.desc())
        .limit(limit)
        .all()
    )


@router.get("/current", response_model=Optional[ShiftOut])
def get_current_shift(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return shift_service.current_shift(db, branch)


@router.post("/start", response_model=ShiftOut, status_code=status.HTTP_201_CREATED)
def start_shift(
    payload: ShiftStart,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    shift = shift_service.start_shift(db, branch, user_id=current_user.id, notes=payload.notes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="SHIFT_START",
              resource="shifts", ip=client_ip(request), meta={"shift_id": shift.id})
    return shift


@router.post("/{shift_id}/close", response_model=ShiftCloseOut)
def close_shift(
    shift_id: int,
    payload: ShiftClose,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    shift = shift_service.get_shift(db, branch, shift_id)
    result = shift_service.close_shift(db, branch, shift, user_id=current_user.id, notes=payload.notes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="SHIFT_CLOSE",
              resource="shifts", ip=client_ip(request),
              meta={"shift_id": shift.id, "summary": result.shift.summary,
                    "completed_orders": result.promoted_order_ids})
    return {"shift": result.shift, "promoted_order_ids": result.promoted_order_ids}
