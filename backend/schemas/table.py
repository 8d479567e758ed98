# backend/schemas/table.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional

from schemas.common import ORMBase

TableStatusName = Literal["available", "occupied", "reserved", "maintenance"]


class TableCreate(BaseModel):
    number: str = Field(..., min_length=1)
    capacity: int = Field(4, ge=1)
    location: Optional[str] = None
    status: TableStatusName = "available"
    is_active: bool = True


class TableUpdate(BaseModel):
    """All fields optional for PATCH."""
    number: Optional[str] = Field(None, min_length=1)
    capacity: Optional[int] = Field(None, ge=1)
    location: Optional[str] = None
    status: Optional[TableStatusName] = None
    is_active: Optional[bool] = None


class TableStatusUpdate(BaseModel):
    status: TableStatusName


class TableOut(ORMBase):
    id: int
    number: str
    capacity: int
    location: Optional[str] = None
    status: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
