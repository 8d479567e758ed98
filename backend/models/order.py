# backend/models/order.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, JSON, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ServiceType(str, enum.Enum):
    DINE_IN = "dine_in"
    TAKEAWAY = "takeaway"
    DELIVERY = "delivery"
    TABLE = "table"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


# Statuses that block closing a shift
OPEN_STATUSES = (OrderStatus.PENDING.value, OrderStatus.PREPARING.value, OrderStatus.READY.value)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)
    shift_id = Column(Integer, ForeignKey("shifts.id"), index=True, nullable=True)

    # Sequential per branch, rendered as ORD-000001
    sequence = Column(Integer, nullable=False)
    order_number = Column(String, nullable=False, index=True)

    service_type = Column(String, nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value, index=True)
    table_number = Column(String, nullable=True)

    # Customer details
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    # Structured delivery address: street, number, city, zip_code, notes
    delivery_address = Column(JSON, nullable=True)

    # Payment
    payment_method = Column(String, nullable=False)
    payment_status = Column(String, nullable=False, default=PaymentStatus.PENDING.value)
    cash_amount = Column(Float, nullable=True)
    change_due = Column(Float, nullable=True)

    # Monetary breakdown
    subtotal = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)
    tip = Column(Float, nullable=False, default=0.0)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)

    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("branch_id", "sequence", name="uq_order_branch_sequence"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    # Snapshot of the chosen extras: [{"id", "name", "price"}]
    extras = Column(JSON, nullable=False, default=list)
    subtotal = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
