# backend/schemas/order.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase, ServiceTypeName, PaymentMethodName, OrderStatusName


# A requested order line; prices are looked up from the menu
class OrderLineIn(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)
    extra_ids: List[str] = []


class DeliveryAddress(BaseModel):
    street: str = ""
    number: str = ""
    city: str = ""
    zip_code: Optional[str] = None
    notes: Optional[str] = None


# Order entered by staff from the back office
class OrderCreate(BaseModel):
    items: List[OrderLineIn] = Field(..., min_length=1)
    service_type: ServiceTypeName
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    delivery_address: Optional[DeliveryAddress] = None
    table_number: Optional[str] = None
    payment_method: PaymentMethodName
    cash_amount: Optional[float] = Field(None, ge=0)
    discount: float = Field(0.0, ge=0)
    tip: float = Field(0.0, ge=0)
    notes: Optional[str] = None


class OrderItemOut(ORMBase):
    product_id: Optional[int] = None
    name: str
    quantity: int
    unit_price: float
    extras: list = []
    subtotal: float


# Output schema representing the full order details
class OrderOut(ORMBase):
    id: int
    order_number: str
    status: str
    service_type: str
    table_number: Optional[str] = None
    customer_name: str
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    delivery_address: Optional[dict] = None
    payment_method: str
    payment_status: str
    cash_amount: Optional[float] = None
    change_due: Optional[float] = None
    subtotal: float
    tax: float
    discount: float
    tip: float
    delivery_fee: float
    total: float
    shift_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    page_size: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatusName


class OrderConfirmation(BaseModel):
    order: OrderOut
    message_link: Optional[str] = None
