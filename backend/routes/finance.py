# backend/routes/finance.py
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.finance import Expense
from models.tenant import Branch
import schemas.finance as finance_schemas
from services import finance as finance_service
from utils.audit import client_ip, write_log
from utils.exports import csv_response, expenses_frame
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required

router = APIRouter(prefix=BRANCH_PREFIX + "/finance", tags=["Finance"])


def _expense_query(db: Session, branch: Branch, category, status_filter, q, date_from, date_to):
    query = db.query(Expense).filter(Expense.branch_id == branch.id)
    if category:
        query = query.filter(Expense.category == category)
    if status_filter:
        query = query.filter(Expense.status == status_filter)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Expense.description.ilike(like), Expense.notes.ilike(like)))
    if date_from:
        query = query.filter(Expense.date >= date_from)
    if date_to:
        query = query.filter(Expense.date <= date_to)
    return query.order_by(Expense.date.desc(), Expense.id.desc())


@router.get("/categories", response_model=List[finance_schemas.CategoryOut])
def list_categories(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return finance_service.list_categories(db, branch)


@router.post("/categories", response_model=finance_schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: finance_schemas.CategoryCreate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return finance_service.create_category(db, branch, payload.model_dump())


@router.patch("/categories/{category_id}", response_model=finance_schemas.CategoryOut)
def update_category(
    category_id: int,
    payload: finance_schemas.CategoryUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    category = finance_service.get_category(db, branch, category_id)
    return finance_service.update_category(db, category, payload.model_dump(exclude_none=True))


@router.get("/expenses", response_model=finance_schemas.ExpensesPage)
def list_expenses(
    category: Optional[str] = Query(None),
    status_filter: Optional[finance_schemas.ExpenseStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    query = _expense_query(db, branch, category, status_filter, q, date_from, date_to)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/expenses/export")
def export_expenses(
    category: Optional[str] = Query(None),
    status_filter: Optional[finance_schemas.ExpenseStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    expenses = _expense_query(db, branch, category, status_filter, q, date_from, date_to).all()
    return csv_response(expenses_frame(expenses), f"expenses_{branch.id}.csv")


@router.post("/expenses", response_model=finance_schemas.ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: finance_schemas.ExpenseCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    expense = finance_service.create_expense(db, branch, payload.model_dump(exclude_none=True))
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="EXPENSE_CREATE",
              resource="finance", ip=client_ip(request), meta={"expense_id": expense.id, "amount": expense.amount})
    return expense


@router.get("/expenses/{expense_id}", response_model=finance_schemas.ExpenseOut)
def get_expense(
    expense_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return finance_service.get_expense(db, branch, expense_id)


@router.patch("/expenses/{expense_id}", response_model=finance_schemas.ExpenseOut)
def update_expense(
    expense_id: int,
    payload: finance_schemas.ExpenseUpdate,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    expense = finance_service.get_expense(db, branch, expense_id)
    return finance_service.update_expense(db, branch, expense, payload.model_dump(exclude_unset=True))


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    expense = finance_service.get_expense(db, branch, expense_id)
    finance_service.delete_expense(db, expense)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="EXPENSE_DELETE",
              resource="finance", ip=client_ip(request), meta={"expense_id": expense_id})


@router.get("/summary", response_model=finance_schemas.FinancialSummary)
def financial_summary(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    return finance_service.financial_summary(db, branch)
