# backend/models/purchase.py
import enum
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base


class PurchaseStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)

    name = Column(String, nullable=False, index=True)
    contact_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    payment_terms = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# Order placed with a supplier; receiving it books stock into the ledger
class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), index=True, nullable=False)

    status = Column(String, nullable=False, default=PurchaseStatus.PENDING.value, index=True)
    payment_status = Column(String, nullable=False, default="pending")  # pending / partial / paid
    payment_method = Column(String, nullable=True)
    total_amount = Column(Float, nullable=False, default=0.0)
    notes = Column(String, nullable=True)

    order_date = Column(DateTime(timezone=True), server_default=func.now())
    delivery_date = Column(DateTime(timezone=True), nullable=True)
    received_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier")
    items = relationship("PurchaseItem", back_populates="purchase", cascade="all, delete-orphan")

    @property
    def supplier_name(self):
        return self.supplier.name if self.supplier else None


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), index=True, nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)

    quantity = Column(Float, nullable=False)
    unit_cost = Column(Float, nullable=False)
    received = Column(Float, nullable=False, default=0.0)

    purchase = relationship("Purchase", back_populates="items")
    item = relationship("InventoryItem")

    @property
    def item_name(self):
        return self.item.name if self.item else None

    @property
    def total_cost(self):
        return round(self.quantity * self.unit_cost, 2)
