# backend/schemas/purchase.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Literal, Optional

from schemas.common import ORMBase


class SupplierBase(BaseModel):
    contact_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None


class SupplierCreate(SupplierBase):
    name: str = Field(..., min_length=1)


class SupplierUpdate(SupplierBase):
    name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class SupplierOut(ORMBase):
    id: int
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool


class PurchaseLineIn(BaseModel):
    item_id: int
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)


class PurchaseCreate(BaseModel):
    supplier_id: int
    items: List[PurchaseLineIn] = Field(..., min_length=1)
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PurchaseUpdate(BaseModel):
    supplier_id: Optional[int] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[PurchaseLineIn]] = Field(None, min_length=1)


class PurchaseLineOut(ORMBase):
    id: int
    item_id: int
    item_name: Optional[str] = None
    quantity: float
    unit_cost: float
    received: float
    total_cost: float


class PurchaseOut(ORMBase):
    id: int
    supplier_id: int
    supplier_name: Optional[str] = None
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    total_amount: float
    notes: Optional[str] = None
    order_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    received_by: Optional[str] = None
    items: List[PurchaseLineOut]


class PurchasesPage(BaseModel):
    items: List[PurchaseOut]
    total: int
    page: int
    page_size: int


class ReceiveLine(BaseModel):
    line_id: int
    quantity: float = Field(..., gt=0)


# Leave lines empty to receive everything still outstanding
class PurchaseReceive(BaseModel):
    lines: Optional[List[ReceiveLine]] = None


class PaymentStatusUpdate(BaseModel):
    payment_status: Literal["pending", "partial", "paid"]
