# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, JSON, CheckConstraint, func
from database import Base

# Menu item offered by a branch.
# Extras are stored as a JSON list of {"id", "name", "price"} entries.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), index=True, nullable=False)

    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True, index=True)
    description = Column(String, nullable=True)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    image_url = Column(String, nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)
    extras = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
