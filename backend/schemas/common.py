# backend/schemas/common.py
from pydantic import BaseModel, ConfigDict
from typing import Literal


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


ServiceTypeName = Literal["dine_in", "takeaway", "delivery", "table"]
PaymentMethodName = Literal["cash", "card", "transfer", "app"]
OrderStatusName = Literal["pending", "preparing", "ready", "delivered", "completed", "cancelled"]
