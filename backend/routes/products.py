# backend/routes/products.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.order import OrderItem
from models.product import Product
from models.tenant import Branch
import schemas.product as product_schemas
from utils.audit import client_ip, write_log
from utils.scope import BRANCH_PREFIX, get_branch
from utils.tokenJWT import TokenUser, back_office_required, staff_required

router = APIRouter(prefix=BRANCH_PREFIX + "/products", tags=["Products"])


def _get_product(db: Session, branch: Branch, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.branch_id == branch.id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# Back office listing, unavailable products included
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    available: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    query = db.query(Product).filter(Product.branch_id == branch.id)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.category.ilike(like)))
    if category:
        query = query.filter(Product.category == category)
    if available is not None:
        query = query.filter(Product.is_available == available)

    query = query.order_by(Product.category, Product.name)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    product = Product(tenant_id=branch.tenant_id, branch_id=branch.id, **payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PRODUCT_CREATE",
              resource="products", ip=client_ip(request), meta={"product_id": product.id})
    return product


@router.patch("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    product = _get_product(db, branch, product_id)
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PRODUCT_UPDATE",
              resource="products", ip=client_ip(request), meta={"product_id": product.id, "fields": sorted(changes)})
    return product


# Products already sold are hidden instead of deleted
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(back_office_required),
):
    product = _get_product(db, branch, product_id)
    if db.query(OrderItem).filter(OrderItem.product_id == product.id).first():
        product.is_available = False
    else:
        db.delete(product)
    db.commit()
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="PRODUCT_DELETE",
              resource="products", ip=client_ip(request), meta={"product_id": product_id})
