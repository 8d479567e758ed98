# backend/services/tables.py
"""Dining tables of a branch, referenced by table-service orders."""
from typing import List, Optional

from sqlalchemy.orm import Session

from models.order import Order, OPEN_STATUSES
from models.table import DiningTable, TableStatus
from models.tenant import Branch
from services.errors import ConflictError, NotFoundError, ValidationFailed

TABLE_STATUSES = {s.value for s in TableStatus}


def _sort_key(table: DiningTable):
    # "2" before "10"; named tables ("Terrace A") after the numbered ones
    number = table.number.strip()
    return (0, int(number), "") if number.isdigit() else (1, 0, number.lower())


def list_tables(db: Session, branch: Branch, status: Optional[str] = None,
                include_inactive: bool = False) -> List[DiningTable]:
    query = db.query(DiningTable).filter(DiningTable.branch_id == branch.id)
    if status:
        query = query.filter(DiningTable.status == status)
    if not include_inactive:
        query = query.filter(DiningTable.is_active == True)  # noqa: E712
    return sorted(query.all(), key=_sort_key)


def get_table(db: Session, branch: Branch, table_id: int) -> DiningTable:
    table = db.query(DiningTable).filter(DiningTable.id == table_id, DiningTable.branch_id == branch.id).first()
    if not table:
        raise NotFoundError("Table not found", table_id=table_id)
    return table


def find_by_number(db: Session, branch_id: int, number: str) -> Optional[DiningTable]:
    return db.query(DiningTable).filter(
        DiningTable.branch_id == branch_id, DiningTable.number == number.strip()
    ).first()


def _check(data: dict) -> None:
    if "number" in data and not (data["number"] or "").strip():
        raise ValidationFailed("Table number is required")
    if "capacity" in data and (data["capacity"] is None or data["capacity"] < 1):
        raise ValidationFailed("Capacity must be at least 1")
    if "status" in data and data["status"] not in TABLE_STATUSES:
        raise ValidationFailed(f"Unknown table status '{data['status']}'")


def create_table(db: Session, branch: Branch, data: dict) -> DiningTable:
    _check(data)
    data = dict(data, number=data["number"].strip())
    if find_by_number(db, branch.id, data["number"]):
        raise ConflictError(f"Table {data['number']} already exists", number=data["number"])
    table = DiningTable(tenant_id=branch.tenant_id, branch_id=branch.id, **data)
    db.add(table)
    db.commit()
    db.refresh(table)
    return table


def update_table(db: Session, branch: Branch, table: DiningTable, changes: dict) -> DiningTable:
    _check(changes)
    if "number" in changes:
        changes = dict(changes, number=changes["number"].strip())
        other = find_by_number(db, branch.id, changes["number"])
        if other is not None and other.id != table.id:
            raise ConflictError(f"Table {changes['number']} already exists", number=changes["number"])
    for key, value in changes.items():
        setattr(table, key, value)
    db.commit()
    db.refresh(table)
    return table


def set_status(db: Session, branch: Branch, table: DiningTable, status: str) -> DiningTable:
    return update_table(db, branch, table, {"status": status})


def open_orders_at(db: Session, table: DiningTable) -> List[Order]:
    return db.query(Order).filter(
        Order.branch_id == table.branch_id,
        Order.table_number == table.number,
        Order.status.in_(OPEN_STATUSES),
    ).all()


def delete_table(db: Session, table: DiningTable) -> None:
    busy = open_orders_at(db, table)
    if busy:
        raise ValidationFailed(
            f"Table {table.number} still has open orders",
            open_orders=[o.order_number for o in busy],
        )
    db.delete(table)
    db.commit()


def resolve_for_order(db: Session, branch_id: int, number: Optional[str]) -> DiningTable:
    """The table a table-service order is placed at."""
    if not (number or "").strip():
        raise ValidationFailed("Table number is required", missing=["table_number"])
    table = find_by_number(db, branch_id, number)
    if table is None or not table.is_active:
        raise ValidationFailed(f"Table {number.strip()} does not exist", table_number=number.strip())
    if table.status == TableStatus.MAINTENANCE.value:
        raise ValidationFailed(f"Table {table.number} is out of service", table_number=table.number)
    return table
