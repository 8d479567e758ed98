# backend/routes/logs.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from models.tenant import Tenant
from schemas.log import LogPage
from utils.dates import parse_day
from utils.scope import get_tenant
from utils.tokenJWT import TokenUser, role_required

router = APIRouter(prefix="/tenants/{tenant_id}/logs", tags=["Logs"])


# Audit trail of one tenant, newest first
@router.get("", response_model=LogPage)
def list_logs(
    action: Optional[str] = Query(None, description="Substring of the action, e.g. ORDER_"),
    resource: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, description="Identity provider subject"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(role_required("superadmin", "admin")),
):
    query = db.query(Log).filter(Log.tenant_id == tenant.id)
    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if resource:
        query = query.filter(Log.resource == resource)
    if user_id:
        query = query.filter(Log.user_id == user_id)
    if status:
        query = query.filter(Log.status == status.upper())

    since = parse_day(date_from)
    if since:
        query = query.filter(Log.ts >= since)
    until = parse_day(date_to, end_of_day=True)
    if until:
        query = query.filter(Log.ts <= until)

    total = query.count()
    items = (
        query.order_by(Log.ts.desc(), Log.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}
