# utils/scope.py
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models.tenant import Branch, Tenant


# Resolve the tenant from the path; inactive tenants are hidden
def get_tenant(tenant_id: int, db: Session = Depends(get_db)) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.is_active == True).first()  # noqa: E712
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


# Resolve the branch and make sure it belongs to the tenant in the path
def get_branch(branch_id: int, tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_db)) -> Branch:
    branch = db.query(Branch).filter(Branch.id == branch_id, Branch.tenant_id == tenant.id).first()
    if not branch or not branch.is_active:
        raise HTTPException(status_code=404, detail="Branch not found")
    return branch


# Every branch scoped router lives under this prefix
BRANCH_PREFIX = "/tenants/{tenant_id}/branches/{branch_id}"
