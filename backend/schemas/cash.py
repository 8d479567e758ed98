# backend/schemas/cash.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Literal, Optional

from schemas.common import ORMBase


class RegisterCreate(BaseModel):
    name: str = Field("Main register", min_length=1)


class RegisterOpen(BaseModel):
    initial_amount: float = Field(0.0, ge=0)
    notes: Optional[str] = None


class RegisterClose(BaseModel):
    counted_amount: float = Field(..., ge=0)
    notes: Optional[str] = None


# Sales are booked from order payments, not by hand
class CashMovementIn(BaseModel):
    type: Literal["income", "expense", "withdrawal"]
    amount: float = Field(..., gt=0)
    description: Optional[str] = None


class CashMovementOut(ORMBase):
    id: int
    register_id: int
    type: str
    amount: float
    description: Optional[str] = None
    order_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class RegisterOut(ORMBase):
    id: int
    name: str
    is_open: bool
    initial_amount: float
    expected_amount: float
    counted_amount: Optional[float] = None
    difference: Optional[float] = None
    opened_at: Optional[datetime] = None
    opened_by: Optional[str] = None
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None
    notes: Optional[str] = None


class RegisterDetail(RegisterOut):
    movements: List[CashMovementOut] = []


class CashAuditCreate(BaseModel):
    actual_cash: Optional[float] = Field(None, ge=0)
    # Face value -> number of notes or coins; fills actual_cash when omitted
    denominations: Optional[Dict[str, int]] = None
    notes: Optional[str] = None


class CashAuditOut(ORMBase):
    id: int
    register_id: int
    expected_cash: float
    actual_cash: float
    difference: float
    status: str
    denominations: Optional[Dict[str, int]] = None
    adjustment_id: Optional[int] = None
    notes: Optional[str] = None
    performed_by: Optional[str] = None
    performed_at: Optional[datetime] = None
