from pydantic import BaseModel
from typing import Any, List, Optional
from datetime import datetime

from schemas.common import ORMBase


class LogOut(ORMBase):
    id: int
    tenant_id: Optional[int] = None
    user_id: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None


class LogPage(BaseModel):
    items: List[LogOut]
    total: int
    page: int
    page_size: int
