# backend/schemas/recipe.py
from pydantic import BaseModel, Field
from typing import List, Optional

from schemas.common import ORMBase


class IngredientIn(BaseModel):
    item_id: int
    quantity: float = Field(..., gt=0)


class RecipeCreate(BaseModel):
    product_id: int
    yield_qty: float = Field(1.0, gt=0)
    preparation_time: Optional[int] = Field(None, ge=0)
    instructions: Optional[str] = None
    ingredients: List[IngredientIn] = Field(..., min_length=1)


class RecipeUpdate(BaseModel):
    yield_qty: Optional[float] = Field(None, gt=0)
    preparation_time: Optional[int] = Field(None, ge=0)
    instructions: Optional[str] = None
    ingredients: Optional[List[IngredientIn]] = Field(None, min_length=1)


class IngredientOut(ORMBase):
    id: int
    item_id: int
    item_name: Optional[str] = None
    quantity: float


class RecipeOut(ORMBase):
    id: int
    product_id: int
    yield_qty: float
    preparation_time: Optional[int] = None
    instructions: Optional[str] = None
    ingredients: List[IngredientOut]


class CostLine(BaseModel):
    item_id: int
    name: str
    unit: str
    quantity: float
    unit_cost: float
    cost: float


class RecipeCost(BaseModel):
    recipe_id: int
    product_id: int
    product_name: str
    ingredients: List[CostLine]
    batch_cost: float
    yield_qty: float
    portion_cost: float
    price: float
    margin: float
    margin_percent: Optional[float] = None
