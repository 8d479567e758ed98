# backend/models/shift.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, func
from database import Base

# Operational work period of a branch, closed through a reconciliation step
class Shift(Base):
    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)

    status = Column(String, nullable=False, default="active", index=True)  # active / closed
    started_at = Column(DateTime(timezone=True), server_default=func.now())
    ended_at = Column(DateTime(timezone=True), nullable=True)
    opened_by = Column(String, nullable=True)
    closed_by = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    # total_orders, total_sales, cash_sales, card_sales, other_sales
    summary = Column(JSON, nullable=True)
