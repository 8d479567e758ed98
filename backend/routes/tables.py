# backend/routes/tables.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.tenant import Branch
import schemas.table as table_schemas
from services import tables as table_service
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/tables", tags=["Tables"])


@router.get("", response_model=List[table_schemas.TableOut])
def list_tables(
    status_filter: Optional[table_schemas.TableStatusName] = Query(None, alias="status"),
    include_inactive: bool = Query(False),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return table_service.list_tables(db, branch, status=status_filter, include_inactive=include_inactive)


@router.post("", response_model=table_schemas.TableOut, status_code=status.HTTP_201_CREATED)
def create_table(
    payload: table_schemas.TableCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    table = table_service.create_table(db, branch, payload.model_dump())
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="TABLE_CREATE",
              resource="tables", ip=client_ip(request), meta={"table_id": table.id, "number": table.number})
    return table


@router.get("/{table_id}", response_model=table_schemas.TableOut)
def get_table(
    table_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return table_service.get_table(db, branch, table_id)


@router.patch("/{table_id}", response_model=table_schemas.TableOut)
def update_table(
    table_id: int,
    payload: table_schemas.TableUpdate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    table = table_service.get_table(db, branch, table_id)
    changes = payload.model_dump(exclude_unset=True)
    table = table_service.update_table(db, branch, table, changes)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="TABLE_UPDATE",
              resource="tables", ip=client_ip(request), meta={"table_id": table.id, "fields": sorted(changes)})
    return table


# Floor staff seat guests and free tables
@router.patch("/{table_id}/status", response_model=table_schemas.TableOut)
def update_table_status(
    table_id: int,
    payload: table_schemas.TableStatusUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    table = table_service.get_table(db, branch, table_id)
    return table_service.set_status(db, branch, table, payload.status)


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    table = table_service.get_table(db, branch, table_id)
    table_service.delete_table(db, table)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="TABLE_DELETE",
              resource="tables", ip=client_ip(request), meta={"table_id": table_id})
