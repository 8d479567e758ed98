# backend/services/finance.py
"""Expenses, expense categories and the financial summary."""
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from models.cash import CashMovement, CashMovementType
from models.finance import Expense, ExpenseCategory
from models.inventory import InventoryItem
from models.tenant import Branch
from services.errors import ConflictError, NotFoundError, ValidationFailed

DEFAULT_CATEGORIES = [
    {"name": "Supplies", "description": "Raw materials and supplies", "color": "#3B82F6"},
    {"name": "Utilities", "description": "Power, water, internet", "color": "#10B981"},
    {"name": "Salaries", "description": "Staff wages", "color": "#F59E0B"},
    {"name": "Rent", "description": "Premises rent", "color": "#8B5CF6"},
    {"name": "Marketing", "description": "Advertising and promotion", "color": "#EC4899"},
    {"name": "Taxes", "description": "Taxes and fees", "color": "#EF4444"},
    {"name": "Other", "description": "Miscellaneous expenses", "color": "#6B7280"},
]

INCOME_TYPES = (CashMovementType.SALE.value, CashMovementType.INCOME.value)
EXPENSE_STATUSES = ("paid", "pending")

MONTHS_IN_SUMMARY = 6


# --- categories -------------------------------------------------------------

def list_categories(db: Session, branch: Branch) -> List[ExpenseCategory]:
    """Categories of a branch; the defaults are created on first use."""
    query = db.query(ExpenseCategory).filter(ExpenseCategory.branch_id == branch.id)
    if query.count() == 0:
        for entry in DEFAULT_CATEGORIES:
            db.add(ExpenseCategory(tenant_id=branch.tenant_id, branch_id=branch.id, **entry))
        db.commit()
    return query.order_by(ExpenseCategory.id).all()


def get_category(db: Session, branch: Branch, category_id: int) -> ExpenseCategory:
    category = db.query(ExpenseCategory).filter(
        ExpenseCategory.id == category_id, ExpenseCategory.branch_id == branch.id
    ).first()
    if not category:
        raise NotFoundError("Expense category not found", category_id=category_id)
    return category


def create_category(db: Session, branch: Branch, data: dict) -> ExpenseCategory:
    exists = db.query(ExpenseCategory).filter(
        ExpenseCategory.branch_id == branch.id, ExpenseCategory.name == data["name"]
    ).first()
    if exists:
        raise ConflictError(f"Category '{data['name']}' already exists")
    category = ExpenseCategory(tenant_id=branch.tenant_id, branch_id=branch.id, **data)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category: ExpenseCategory, changes: dict) -> ExpenseCategory:
    for key, value in changes.items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)
    return category


# --- expenses ---------------------------------------------------------------

def get_expense(db: Session, branch: Branch, expense_id: int) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id, Expense.branch_id == branch.id).first()
    if not expense:
        raise NotFoundError("Expense not found", expense_id=expense_id)
    return expense


def _check_expense(db: Session, branch: Branch, data: dict) -> None:
    for key in ("category", "date"):
        if key in data and not data[key]:
            raise ValidationFailed(f"Expense {key} is required")
    if "amount" in data and (data["amount"] is None or data["amount"] <= 0):
        raise ValidationFailed("Amount must be positive")
    if "status" in data and data["status"] not in EXPENSE_STATUSES:
        raise ValidationFailed(f"Unknown expense status '{data['status']}'")
    item_id = data.get("inventory_item_id")
    if item_id is not None:
        item = db.query(InventoryItem).filter(
            InventoryItem.id == item_id, InventoryItem.branch_id == branch.id
        ).first()
        if not item:
            raise NotFoundError("Linked inventory item not found", item_id=item_id)


def create_expense(db: Session, branch: Branch, data: dict) -> Expense:
    data = dict(data)
    data.setdefault("date", date.today())
    data.setdefault("status", "paid")
    _check_expense(db, branch, data)
    expense = Expense(tenant_id=branch.tenant_id, branch_id=branch.id, **data)
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense


def update_expense(db: Session, branch: Branch, expense: Expense, changes: dict) -> Expense:
    _check_expense(db, branch, changes)
    for key, value in changes.items():
        setattr(expense, key, value)
    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense: Expense) -> None:
    db.delete(expense)
    db.commit()


# --- summary ----------------------------------------------------------------

def income_movements(db: Session, branch: Branch) -> List[CashMovement]:
    return (
        db.query(CashMovement)
        .filter(CashMovement.branch_id == branch.id, CashMovement.type.in_(INCOME_TYPES))
        .order_by(CashMovement.created_at)
        .all()
    )


def _last_months(today: date, count: int) -> List[tuple]:
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def financial_summary(db: Session, branch: Branch, today: Optional[date] = None) -> dict:
    """Recompute the branch's finances from every expense and income movement."""
    today = today or date.today()
    expenses = db.query(Expense).filter(Expense.branch_id == branch.id).all()
    incomes = income_movements(db, branch)
    categories = list_categories(db, branch)

    total_expenses = sum(e.amount for e in expenses)
    total_income = sum(m.amount for m in incomes)

    colors = {c.name: c.color for c in categories}
    per_category: dict = {}
    for expense in expenses:
        per_category[expense.category] = per_category.get(expense.category, 0.0) + expense.amount
    expenses_by_category = [
        {
            "category": name,
            "amount": round(amount, 2),
            "color": colors.get(name),
            "share": round(amount / total_expenses * 100, 2) if total_expenses else 0.0,
        }
        for name, amount in sorted(per_category.items(), key=lambda kv: kv[1], reverse=True)
        if amount > 0
    ]

    sales = sum(m.amount for m in incomes if m.type == CashMovementType.SALE.value)
    other = sum(m.amount for m in incomes if m.type == CashMovementType.INCOME.value)
    income_by_category = [
        entry for entry in (
            {"category": "Sales", "amount": round(sales, 2), "color": "#10B981"},
            {"category": "Other income", "amount": round(other, 2), "color": "#3B82F6"},
        )
        if entry["amount"] > 0
    ]

    monthly = []
    for year, month in _last_months(today, MONTHS_IN_SUMMARY):
        month_expenses = sum(e.amount for e in expenses if e.date.year == year and e.date.month == month)
        month_income = sum(
            m.amount for m in incomes
            if _as_date(m.created_at).year == year and _as_date(m.created_at).month == month
        )
        monthly.append({
            "month": f"{year:04d}-{month:02d}",
            "expenses": round(month_expenses, 2),
            "income": round(month_income, 2),
            "profit": round(month_income - month_expenses, 2),
        })

    return {
        "total_expenses": round(total_expenses, 2),
        "total_income": round(total_income, 2),
        "profit": round(total_income - total_expenses, 2),
        "expenses_by_category": expenses_by_category,
        "income_by_category": income_by_category,
        "monthly": monthly,
    }


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
