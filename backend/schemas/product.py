# backend/schemas/product.py
from pydantic import BaseModel, Field
from typing import Optional, List

from schemas.common import ORMBase


class ProductExtra(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    price: float = Field(0.0, ge=0)


# Shared base attributes for menu products
class ProductBase(ORMBase):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    is_available: bool = True
    extras: List[ProductExtra] = []


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    extras: Optional[List[ProductExtra]] = None


# Full product representation including ID
class ProductOut(ProductBase):
    id: int


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
