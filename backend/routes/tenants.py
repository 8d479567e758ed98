# backend/routes/tenants.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.tenant import Tenant, Branch
from schemas.tenant import TenantCreate, TenantOut, BranchCreate, BranchUpdate, BranchOut
from utils.audit import client_ip, write_log
from utils.scope import get_tenant, get_branch
from utils.tokenJWT import TokenUser, role_required, staff_required, superadmin_required

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post("", response_model=TenantOut, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(superadmin_required),
):
    if db.query(Tenant).filter(Tenant.slug == payload.slug).first():
        raise HTTPException(status_code=409, detail="Slug already in use")
    tenant = Tenant(name=payload.name, slug=payload.slug)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    write_log(db, user_id=current_user.id, tenant_id=tenant.id, action="TENANT_CREATE",
              resource="tenants", ip=client_ip(request), meta={"slug": tenant.slug})
    return tenant


@router.get("", response_model=List[TenantOut])
def list_tenants(
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(superadmin_required),
):
    return db.query(Tenant).order_by(Tenant.id).all()


@router.post("/{tenant_id}/branches", response_model=BranchOut, status_code=status.HTTP_201_CREATED)
def create_branch(
    payload: BranchCreate,
    request: Request,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(role_required("superadmin", "admin")),
):
    if db.query(Branch).filter(Branch.tenant_id == tenant.id, Branch.name == payload.name).first():
        raise HTTPException(status_code=409, detail="A branch with this name already exists")

    data = payload.model_dump(exclude_none=True)
    data.setdefault("tax_rate", settings.DEFAULT_TAX_RATE)
    data.setdefault("delivery_fee", settings.DEFAULT_DELIVERY_FEE)
    data.setdefault("currency", settings.DEFAULT_CURRENCY)
    branch = Branch(tenant_id=tenant.id, **data)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    write_log(db, user_id=current_user.id, tenant_id=tenant.id, action="BRANCH_CREATE",
              resource="branches", ip=client_ip(request), meta={"branch_id": branch.id})
    return branch


@router.get("/{tenant_id}/branches", response_model=List[BranchOut])
def list_branches(
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(staff_required),
):
    return db.query(Branch).filter(Branch.tenant_id == tenant.id).order_by(Branch.id).all()


# Public: storefronts read service types, payment methods and fees from here
@router.get("/{tenant_id}/branches/{branch_id}", response_model=BranchOut)
def get_branch_settings(branch: Branch = Depends(get_branch)):
    return branch


@router.patch("/{tenant_id}/branches/{branch_id}", response_model=BranchOut)
def update_branch(
    payload: BranchUpdate,
    request: Request,
    branch: Branch = Depends(get_branch),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(role_required("superadmin", "admin")),
):
    changes = payload.model_dump(exclude_none=True)
    for key, value in changes.items():
        setattr(branch, key, value)
    db.commit()
    db.refresh(branch)
    write_log(db, user_id=current_user.id, tenant_id=branch.tenant_id, action="BRANCH_UPDATE",
              resource="branches", ip=client_ip(request), meta={"branch_id": branch.id, "fields": sorted(changes)})
    return branch
