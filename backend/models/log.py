from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, Index, func
from database import Base


# One row per back-office action; tenant_id is empty for platform level actions
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True)

    # Subject claim of the caller's token
    user_id = Column(String, nullable=True, index=True)
    action = Column(String(50), nullable=False, index=True)  # e.g. ORDER_STATUS, STOCK_RECEIPT
    resource = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="SUCCESS")
    ip = Column(String(64), nullable=True)

    # Ids and before/after values of the action
    meta = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_logs_tenant_ts", "tenant_id", "ts"),
    )
