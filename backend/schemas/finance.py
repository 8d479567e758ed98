# backend/schemas/finance.py
from pydantic import BaseModel, Field
import datetime as dt
from typing import List, Literal, Optional

from schemas.common import ORMBase

ExpenseStatus = Literal["paid", "pending"]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    is_active: Optional[bool] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    is_active: bool


class ExpenseCreate(BaseModel):
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    amount: float = Field(..., gt=0)
    date: Optional[dt.date] = None
    payment_method: Optional[str] = None
    status: ExpenseStatus = "paid"
    inventory_item_id: Optional[int] = None
    notes: Optional[str] = None


class ExpenseUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[dt.date] = None
    payment_method: Optional[str] = None
    status: Optional[ExpenseStatus] = None
    inventory_item_id: Optional[int] = None
    notes: Optional[str] = None


class ExpenseOut(ORMBase):
    id: int
    category: str
    description: Optional[str] = None
    amount: float
    date: dt.date
    payment_method: Optional[str] = None
    status: str
    inventory_item_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class ExpensesPage(BaseModel):
    items: List[ExpenseOut]
    total: int
    page: int
    page_size: int


class CategoryAmount(BaseModel):
    category: str
    amount: float
    color: Optional[str] = None
    share: Optional[float] = None


class MonthFigures(BaseModel):
    month: str
    expenses: float
    income: float
    profit: float


class FinancialSummary(BaseModel):
    total_expenses: float
    total_income: float
    profit: float
    expenses_by_category: List[CategoryAmount]
    income_by_category: List[CategoryAmount]
    monthly: List[MonthFigures]
