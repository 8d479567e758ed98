# backend/schemas/shift.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase


class ShiftStart(BaseModel):
    notes: Optional[str] = None


class ShiftClose(BaseModel):
    notes: Optional[str] = None


class ShiftSummary(BaseModel):
    total_orders: int
    total_sales: float
    cash_sales: float
    card_sales: float
    other_sales: float


class ShiftOut(ORMBase):
    id: int
    status: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    opened_by: Optional[str] = None
    closed_by: Optional[str] = None
    notes: Optional[str] = None
    summary: Optional[ShiftSummary] = None


class ShiftCloseOut(BaseModel):
    shift: ShiftOut
    promoted_order_ids: List[int]
