# backend/routes/menu.py
from typing import Optional, List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.tenant import Branch
from schemas.product import ProductOut, ProductListPage
from utils.scope import BRANCH_PREFIX, get_branch

router = APIRouter(prefix=BRANCH_PREFIX + "/menu", tags=["Menu"])


# Retrieve the categories of available products
@router.get("/categories", response_model=List[str])
def get_menu_categories(
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    categories = (
        db.query(Product.category)
        .filter(Product.branch_id == branch.id, Product.is_available == True, Product.category != None)  # noqa: E711,E712
        .distinct()
        .order_by(Product.category)
        .all()
    )
    return [c[0] for c in categories]


@router.get("/products", response_model=ProductListPage)
def list_menu_products(
    q: Optional[str] = Query(None, description="Search by name, description or category"),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    sort_by: Literal["name", "price"] = "name",
    order: Literal["asc", "desc"] = "asc",
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    query = db.query(Product).filter(Product.branch_id == branch.id, Product.is_available == True)  # noqa: E712

    if q:
        like = f"%{q}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.category.ilike(like),
            )
        )
    if category:
        query = query.filter(Product.category == category)

    sort_col = Product.price if sort_by == "price" else Product.name
    query = query.order_by(sort_col.desc() if order == "desc" else sort_col.asc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/products/{product_id}", response_model=ProductOut)
def get_menu_product(
    product_id: int,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(
        Product.id == product_id, Product.branch_id == branch.id, Product.is_available == True  # noqa: E712
    ).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
