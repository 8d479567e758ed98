# backend/models/tenant.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, JSON, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A restaurant business using the platform
class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branches = relationship("Branch", back_populates="tenant", cascade="all, delete-orphan")


# A physical location of a tenant; almost every record is scoped to one
class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # Number used to build order confirmation message links
    messaging_phone = Column(String, nullable=True)

    # Pricing and checkout configuration
    tax_rate = Column(Float, nullable=False, default=0.10)
    delivery_fee = Column(Float, nullable=False, default=5.0)
    currency = Column(String(3), nullable=False, default="USD")
    service_types = Column(JSON, nullable=False, default=lambda: ["dine_in", "takeaway", "delivery", "table"])
    payment_methods = Column(JSON, nullable=False, default=lambda: ["cash", "card", "transfer", "app"])

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tenant = relationship("Tenant", back_populates="branches")

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_branch_tenant_name"),
    )
