# backend/models/cash.py
import enum
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base


class CashMovementType(str, enum.Enum):
    INITIAL = "initial"
    SALE = "sale"
    INCOME = "income"
    EXPENSE = "expense"
    WITHDRAWAL = "withdrawal"
    # Booked by a cash audit; direction follows the audit difference
    ADJUSTMENT = "adjustment"


class AuditStatus(str, enum.Enum):
    BALANCED = "balanced"
    SURPLUS = "surplus"
    SHORTAGE = "shortage"


class CashRegister(Base):
    __tablename__ = "cash_registers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)

    name = Column(String, nullable=False, default="Main register")
    is_open = Column(Boolean, default=False, nullable=False)
    initial_amount = Column(Float, nullable=False, default=0.0)
    expected_amount = Column(Float, nullable=False, default=0.0)
    counted_amount = Column(Float, nullable=True)
    difference = Column(Float, nullable=True)

    opened_at = Column(DateTime(timezone=True), nullable=True)
    opened_by = Column(String, nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    closed_by = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    movements = relationship("CashMovement", back_populates="register", cascade="all, delete-orphan")
    audits = relationship("CashAudit", back_populates="register", cascade="all, delete-orphan")


class CashMovement(Base):
    __tablename__ = "cash_movements"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    register_id = Column(Integer, ForeignKey("cash_registers.id"), index=True, nullable=False)

    type = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    register = relationship("CashRegister", back_populates="movements")


# A count of the drawer while the register stays open
class CashAudit(Base):
    __tablename__ = "cash_audits"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    register_id = Column(Integer, ForeignKey("cash_registers.id"), index=True, nullable=False)

    expected_cash = Column(Float, nullable=False)
    actual_cash = Column(Float, nullable=False)
    difference = Column(Float, nullable=False)
    status = Column(String, nullable=False)
    # Face value (as string) -> count, e.g. {"20": 3, "0.5": 4}
    denominations = Column(JSON, nullable=True)
    adjustment_id = Column(Integer, ForeignKey("cash_movements.id"), nullable=True)
    notes = Column(String, nullable=True)

    performed_by = Column(String, nullable=True)
    performed_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    register = relationship("CashRegister", back_populates="audits")
