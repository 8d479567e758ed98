# backend/schemas/checkout.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional

from schemas.common import ServiceTypeName, PaymentMethodName
from schemas.order import DeliveryAddress, OrderLineIn, OrderOut


class CustomerIn(BaseModel):
    name: str = ""
    phone: str = ""
    email: Optional[EmailStr] = None


# Everything the checkout wizard collected on the client
class CheckoutRequest(BaseModel):
    items: List[OrderLineIn] = Field(..., min_length=1)
    service_type: Optional[ServiceTypeName] = None
    customer: CustomerIn = CustomerIn()
    delivery_address: Optional[DeliveryAddress] = None
    table_number: Optional[str] = None
    payment_method: Optional[PaymentMethodName] = None
    needs_change: bool = False
    cash_amount: Optional[float] = Field(None, ge=0)
    tip: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    notes: Optional[str] = None


class CheckoutTotals(BaseModel):
    subtotal: float
    tax: float
    delivery_fee: float
    discount: float
    tip: float
    total: float


# Result of walking the wizard without placing the order
class CheckoutStatus(BaseModel):
    step: str
    ready: bool
    missing: List[str]
    totals: CheckoutTotals


class CheckoutResult(BaseModel):
    order: OrderOut
    message_link: Optional[str] = None
