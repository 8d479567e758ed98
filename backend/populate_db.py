import os
import sys
import random
import logging
from datetime import date, timedelta

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.tenant import Tenant, Branch
from models.product import Product
from services import cash as cash_service
from services import finance as finance_service
from services import inventory as inventory_service
from services import orders as order_service
from services import purchases as purchase_service
from services import recipes as recipe_service
from services import shifts as shift_service
from services import tables as table_service

logger = logging.getLogger("populate_db")

# Configuration
DEMO_SLUG = "demo-bistro"
SAMPLE_ORDERS = 25
SEED = 42
TABLE_COUNT = 12

MENU = [
    # name, category, price, extras
    ("Classic Burger", "Burgers", 9.5, [{"id": "cheese", "name": "Cheese", "price": 1.0},
                                        {"id": "bacon", "name": "Bacon", "price": 1.5}]),
    ("Veggie Burger", "Burgers", 9.0, [{"id": "cheese", "name": "Cheese", "price": 1.0}]),
    ("Margherita Pizza", "Pizza", 11.0, [{"id": "olives", "name": "Olives", "price": 0.8}]),
    ("Caesar Salad", "Salads", 8.0, []),
    ("French Fries", "Sides", 3.5, []),
    ("Lemonade", "Drinks", 2.5, []),
]

INVENTORY = [
    # name, category, unit, unit cost, opening stock, minimum
    ("Beef patty", "Meat", "unit", 1.80, 120, 30),
    ("Burger bun", "Bakery", "unit", 0.35, 150, 40),
    ("Cheddar", "Dairy", "kg", 9.00, 5, 1),
    ("Pizza dough", "Bakery", "unit", 0.60, 60, 15),
    ("Tomato sauce", "Pantry", "l", 2.20, 8, 2),
    ("Mozzarella", "Dairy", "kg", 8.50, 6, 2),
    ("Potatoes", "Produce", "kg", 0.90, 40, 10),
    ("Lettuce", "Produce", "unit", 0.70, 25, 8),
]

RECIPES = {
    "Classic Burger": [("Beef patty", 1), ("Burger bun", 1), ("Cheddar", 0.03)],
    "Margherita Pizza": [("Pizza dough", 1), ("Tomato sauce", 0.1), ("Mozzarella", 0.15)],
    "French Fries": [("Potatoes", 0.3)],
}


def seed_demo():
    """Creates a demo tenant with one branch, menu, stock, recipes and sample orders."""
    random.seed(SEED)
    init_db()
    session = SessionLocal()
    try:
        if session.query(Tenant).filter(Tenant.slug == DEMO_SLUG).first():
            logger.info("Demo tenant already exists, nothing to do")
            return

        tenant = Tenant(name="Demo Bistro", slug=DEMO_SLUG)
        session.add(tenant)
        session.flush()
        branch = Branch(tenant_id=tenant.id, name="Downtown", address="1 Main St",
                        phone="+1 555 0100", messaging_phone="+1 555 0100")
        session.add(branch)
        session.commit()
        session.refresh(branch)

        products = {}
        for name, category, price, extras in MENU:
            product = Product(tenant_id=tenant.id, branch_id=branch.id, name=name, category=category,
                              price=price, extras=extras, description=f"House {name.lower()}")
            session.add(product)
            products[name] = product
        session.commit()

        items = {}
        for name, category, unit, cost, stock, minimum in INVENTORY:
            items[name] = inventory_service.create_item(
                session, branch,
                {"name": name, "category": category, "unit": unit, "min_stock": minimum},
                initial_stock=stock, unit_cost=cost, user_id="seed",
            )

        for product_name, lines in RECIPES.items():
            recipe_service.create_recipe(
                session, branch, products[product_name].id,
                [{"item_id": items[item].id, "quantity": qty} for item, qty in lines],
            )

        supplier = purchase_service.create_supplier(session, branch, {"name": "Fresh Foods Co.",
                                                                     "email": "orders@freshfoods.example"})
        purchase = purchase_service.create_purchase(
            session, branch, supplier.id,
            [{"item_id": items["Beef patty"].id, "quantity": 50, "unit_cost": 2.0},
             {"item_id": items["Burger bun"].id, "quantity": 60, "unit_cost": 0.4}],
        )
        purchase_service.receive_purchase(session, purchase, user_id="seed")

        for number in range(1, TABLE_COUNT + 1):
            table_service.create_table(session, branch, {
                "number": str(number),
                "capacity": 2 if number <= 4 else 4,
                "location": "Terrace" if number > 8 else "Main room",
            })

        register = cash_service.create_register(session, branch, "Main register")
        cash_service.open_register(session, register, 100.0, user_id="seed")
        shift_service.start_shift(session, branch, user_id="seed")

        menu = list(products.values())
        for _ in range(SAMPLE_ORDERS):
            picks = random.sample(menu, k=random.randint(1, 3))
            lines = order_service.resolve_lines(
                session, branch,
                [{"product_id": p.id, "quantity": random.randint(1, 2)} for p in picks],
            )
            service_type = random.choice(["dine_in", "takeaway", "table"])
            order = order_service.create_order(
                session, branch, lines=lines, service_type=service_type,
                customer_name=random.choice(["Ana", "Ben", "Chloe", "Dev", "Eli"]),
                customer_phone="555 01%02d" % random.randint(0, 99),
                table_number=str(random.randint(1, TABLE_COUNT)) if service_type == "table" else None,
                payment_method=random.choice(["cash", "card"]),
            )
            order_service.transition(session, order, "preparing")
            order_service.transition(session, order, "ready")
            order_service.transition(session, order, "delivered" if service_type == "table" else "completed")
            order_service.record_payment(session, order, user_id="seed")

        categories = finance_service.list_categories(session, branch)
        for offset in range(0, 150, 30):
            finance_service.create_expense(session, branch, {
                "category": random.choice(categories).name,
                "description": "Monthly bill",
                "amount": round(random.uniform(50, 400), 2),
                "date": date.today() - timedelta(days=offset),
            })

        logger.info("Seeded tenant %s (branch %s)", tenant.id, branch.id)
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_demo()
