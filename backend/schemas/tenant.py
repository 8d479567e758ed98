# backend/schemas/tenant.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase, ServiceTypeName, PaymentMethodName


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., pattern=r"^[a-z0-9][a-z0-9-]*$")


class TenantOut(ORMBase):
    id: int
    name: str
    slug: str
    is_active: bool
    created_at: Optional[datetime] = None


# Shared branch settings; unset pricing fields fall back to configured defaults
class BranchBase(BaseModel):
    address: Optional[str] = None
    phone: Optional[str] = None
    messaging_phone: Optional[str] = None
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    delivery_fee: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    service_types: Optional[List[ServiceTypeName]] = None
    payment_methods: Optional[List[PaymentMethodName]] = None


class BranchCreate(BranchBase):
    name: str = Field(..., min_length=1)


class BranchUpdate(BranchBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class BranchOut(ORMBase):
    id: int
    tenant_id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    messaging_phone: Optional[str] = None
    tax_rate: float
    delivery_fee: float
    currency: str
    service_types: List[str]
    payment_methods: List[str]
    is_active: bool
