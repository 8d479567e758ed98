# backend/models/inventory.py
import enum
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class MovementType(str, enum.Enum):
    PURCHASE = "purchase"
    CONSUMPTION = "consumption"
    WASTE = "waste"
    ADJUSTMENT = "adjustment"


# Ingredient or supply kept in stock.
# stock and unit_cost are only written by services.inventory, which bumps
# version on every change so concurrent writers can be detected.
class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)

    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True, index=True)
    unit = Column(String, nullable=False, default="unit")
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)

    stock = Column(Float, CheckConstraint("stock >= 0"), nullable=False, default=0.0)
    unit_cost = Column(Float, CheckConstraint("unit_cost >= 0"), nullable=False, default=0.0)
    min_stock = Column(Float, nullable=False, default=0.0)
    version = Column(Integer, nullable=False, default=1)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Append-only ledger entry; quantity is signed (positive in, negative out)
class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), index=True, nullable=False)

    quantity = Column(Float, nullable=False)
    type = Column(String, nullable=False, index=True)
    # e.g. purchase id for purchase receipts
    reference_id = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    item = relationship("InventoryItem")


class WasteRecord(Base):
    __tablename__ = "waste_records"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), index=True, nullable=False)
    movement_id = Column(Integer, ForeignKey("inventory_movements.id"), nullable=False)

    quantity = Column(Float, nullable=False)
    reason = Column(String, nullable=False)
    cost = Column(Float, nullable=False)
    reported_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem")
