# backend/schemas/inventory.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Dict, List, Literal, Optional

from schemas.common import ORMBase

MovementTypeName = Literal["purchase", "consumption", "waste", "adjustment"]


class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    unit: str = "unit"
    description: Optional[str] = None
    location: Optional[str] = None
    min_stock: float = Field(0.0, ge=0)
    unit_cost: float = Field(0.0, ge=0)
    # Booked as an adjustment movement
    initial_stock: float = Field(0.0, ge=0)


# Stock and cost are not editable here; they change through movements
class InventoryItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    min_stock: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class InventoryItemOut(ORMBase):
    id: int
    name: str
    category: Optional[str] = None
    unit: str
    description: Optional[str] = None
    location: Optional[str] = None
    stock: float
    unit_cost: float
    min_stock: float
    version: int
    is_active: bool
    updated_at: Optional[datetime] = None


class InventoryItemsPage(BaseModel):
    items: List[InventoryItemOut]
    total: int
    page: int
    page_size: int


class ConsumptionIn(BaseModel):
    quantity: float = Field(..., gt=0)
    notes: Optional[str] = None
    reference_id: Optional[str] = None


class WasteIn(BaseModel):
    quantity: float = Field(..., gt=0)
    reason: str = Field(..., min_length=1)


class AdjustmentIn(BaseModel):
    quantity: float
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def not_zero(cls, v: float) -> float:
        if v == 0:
            raise ValueError("Adjustment quantity cannot be zero")
        return v


class ReceiptIn(BaseModel):
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)
    notes: Optional[str] = None
    reference_id: Optional[str] = None


class MovementOut(ORMBase):
    id: int
    item_id: int
    quantity: float
    type: str
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class MovementsPage(BaseModel):
    items: List[MovementOut]
    total: int
    page: int
    page_size: int


class WasteOut(ORMBase):
    id: int
    item_id: int
    movement_id: int
    quantity: float
    reason: str
    cost: float
    reported_by: Optional[str] = None
    created_at: Optional[datetime] = None


class ValuationOut(BaseModel):
    total_value: float
    item_count: int
    by_category: Dict[str, float]


class ReconciliationOut(BaseModel):
    item_id: int
    stock: float
    ledger_balance: float
    in_balance: bool
