import os

# Keep the application's own engine off the developer database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, init_db
from main import app
from models.tenant import Tenant, Branch
from models.product import Product
from services import inventory as inventory_service
from utils.tokenJWT import create_access_token

init_db()

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Casa Pepe", slug="casa-pepe")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def branch(db, tenant):
    branch = Branch(
        tenant_id=tenant.id,
        name="Centro",
        messaging_phone="+54 9 11 5555-0101",
        tax_rate=0.10,
        delivery_fee=5.0,
    )
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


@pytest.fixture
def other_branch(db):
    tenant = Tenant(name="Other Grill", slug="other-grill")
    db.add(tenant)
    db.flush()
    branch = Branch(tenant_id=tenant.id, name="North")
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


def make_product(db, branch, name="Burger", price=10.0, extras=None, category="Mains", available=True):
    product = Product(
        tenant_id=branch.tenant_id,
        branch_id=branch.id,
        name=name,
        price=price,
        category=category,
        extras=extras or [],
        is_available=available,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_item(db, branch, name="Flour", stock=0.0, unit_cost=0.0, min_stock=0.0, unit="kg"):
    return inventory_service.create_item(
        db, branch, {"name": name, "unit": unit, "min_stock": min_stock},
        initial_stock=stock, unit_cost=unit_cost, user_id="tester",
    )


def auth_headers(role="admin", tenant_id=None, sub="user-1"):
    claims = {"sub": sub, "role": role}
    if tenant_id is not None:
        claims["tenant_id"] = tenant_id
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


def branch_url(branch, path=""):
    return f"/tenants/{branch.tenant_id}/branches/{branch.id}{path}"
