from conftest import auth_headers, branch_url, make_item, make_product


def test_only_superadmin_creates_tenants(client, tenant):
    payload = {"name": "Taqueria", "slug": "taqueria"}
    admin = auth_headers("admin", tenant_id=tenant.id)

    assert client.post("/tenants", json=payload, headers=admin).status_code == 403
    created = client.post("/tenants", json=payload, headers=auth_headers("superadmin"))
    assert created.status_code == 201
    assert created.json()["slug"] == "taqueria"


def test_branch_creation_uses_defaults(client, tenant):
    admin = auth_headers("admin", tenant_id=tenant.id)

    response = client.post(f"/tenants/{tenant.id}/branches", json={"name": "Harbour"}, headers=admin)

    assert response.status_code == 201
    body = response.json()
    assert body["currency"] == "USD"
    assert "delivery" in body["service_types"]
    duplicate = client.post(f"/tenants/{tenant.id}/branches", json={"name": "Harbour"}, headers=admin)
    assert duplicate.status_code == 409


def test_product_management(client, db, branch):
    manager = auth_headers("manager", tenant_id=branch.tenant_id)
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    payload = {"name": "Taco", "price": 3.5, "category": "Mains",
               "extras": [{"id": "guac", "name": "Guacamole", "price": 1.0}]}

    assert client.post(branch_url(branch, "/products"), json=payload, headers=staff).status_code == 403
    created = client.post(branch_url(branch, "/products"), json=payload, headers=manager)
    assert created.status_code == 201
    product_id = created.json()["id"]

    updated = client.patch(branch_url(branch, f"/products/{product_id}"), json={"price": 4.0}, headers=manager)
    assert updated.json()["price"] == 4.0
    deleted = client.delete(branch_url(branch, f"/products/{product_id}"), headers=manager)
    assert deleted.status_code == 204


def test_inventory_endpoints(client, branch):
    manager = auth_headers("manager", tenant_id=branch.tenant_id)
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/inventory")

    created = client.post(f"{base}/items", headers=manager, json={
        "name": "Rice", "unit": "kg", "min_stock": 5, "initial_stock": 10, "unit_cost": 2.0,
    })
    assert created.status_code == 201
    item_id = created.json()["id"]
    assert created.json()["stock"] == 10.0

    too_much = client.post(f"{base}/items/{item_id}/consumption", headers=staff, json={"quantity": 20})
    assert too_much.status_code == 422
    assert too_much.json()["code"] == "insufficient_stock"

    used = client.post(f"{base}/items/{item_id}/consumption", headers=staff, json={"quantity": 6})
    assert used.status_code == 201

    assert client.post(f"{base}/items/{item_id}/receipts", headers=staff,
                       json={"quantity": 5, "unit_cost": 4.0}).status_code == 403
    received = client.post(f"{base}/items/{item_id}/receipts", headers=manager,
                           json={"quantity": 4, "unit_cost": 4.0})
    assert received.status_code == 201

    item = client.get(f"{base}/items/{item_id}", headers=staff).json()
    assert item["stock"] == 8.0
    assert item["unit_cost"] == 3.0

    reconciliation = client.get(f"{base}/items/{item_id}/reconciliation", headers=manager).json()
    assert reconciliation["in_balance"] is True
    movements = client.get(f"{base}/movements", headers=staff, params={"item_id": item_id}).json()
    assert movements["total"] == 3


def test_stock_cannot_be_patched(client, db, branch):
    item = make_item(db, branch, stock=3.0)
    manager = auth_headers("manager", tenant_id=branch.tenant_id)

    response = client.patch(branch_url(branch, f"/inventory/items/{item.id}"), headers=manager,
                            json={"stock": 100})

    assert response.status_code == 422
    db.expire_all()
    assert item.stock == 3.0


def test_waste_and_low_stock_reports(client, db, branch):
    item = make_item(db, branch, name="Milk", stock=4.0, unit_cost=1.25, min_stock=3.0, unit="l")
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    manager = auth_headers("manager", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/inventory")

    waste = client.post(f"{base}/items/{item.id}/waste", headers=staff, json={"quantity": 2, "reason": "Sour"})
    assert waste.status_code == 201
    assert waste.json()["cost"] == 2.5

    low = client.get(f"{base}/low-stock", headers=staff).json()
    assert [i["name"] for i in low] == ["Milk"]
    assert client.get(f"{base}/valuation", headers=manager).json()["total_value"] == 2.5


def test_purchase_receipt_over_http(client, db, branch):
    item = make_item(db, branch, name="Beans", stock=0.0)
    admin = auth_headers("admin", tenant_id=branch.tenant_id)

    supplier = client.post(branch_url(branch, "/suppliers"), headers=admin, json={"name": "Agro"}).json()
    purchase = client.post(branch_url(branch, "/purchases"), headers=admin, json={
        "supplier_id": supplier["id"],
        "items": [{"item_id": item.id, "quantity": 10, "unit_cost": 1.5}],
    })
    assert purchase.status_code == 201
    purchase_id = purchase.json()["id"]
    line_id = purchase.json()["items"][0]["id"]

    partial = client.post(branch_url(branch, f"/purchases/{purchase_id}/receive"), headers=admin,
                          json={"lines": [{"line_id": line_id, "quantity": 4}]})
    assert partial.json()["status"] == "partial"
    rest = client.post(branch_url(branch, f"/purchases/{purchase_id}/receive"), headers=admin, json={})
    assert rest.json()["status"] == "delivered"

    db.expire_all()
    assert item.stock == 10.0
    locked = client.delete(branch_url(branch, f"/purchases/{purchase_id}"), headers=admin)
    assert locked.status_code == 422


def test_recipe_cost_over_http(client, db, branch):
    product = make_product(db, branch, name="Rice bowl", price=8.0)
    item = make_item(db, branch, name="Rice", stock=10.0, unit_cost=2.0)
    manager = auth_headers("manager", tenant_id=branch.tenant_id)

    recipe = client.post(branch_url(branch, "/recipes"), headers=manager, json={
        "product_id": product.id, "ingredients": [{"item_id": item.id, "quantity": 0.5}],
    })
    assert recipe.status_code == 201
    duplicate = client.post(branch_url(branch, "/recipes"), headers=manager, json={
        "product_id": product.id, "ingredients": [{"item_id": item.id, "quantity": 1}],
    })
    assert duplicate.status_code == 409

    cost = client.get(branch_url(branch, f"/recipes/{recipe.json()['id']}/cost"), headers=manager).json()
    assert cost["portion_cost"] == 1.0
    assert cost["margin"] == 7.0


def test_finance_over_http(client, branch):
    admin = auth_headers("admin", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/finance")

    categories = client.get(f"{base}/categories", headers=admin).json()
    assert len(categories) == 7

    created = client.post(f"{base}/expenses", headers=admin,
                          json={"category": "Rent", "amount": 1200, "description": "March"})
    assert created.status_code == 201
    invalid = client.post(f"{base}/expenses", headers=admin, json={"category": "Rent", "amount": -5})
    assert invalid.status_code == 422

    summary = client.get(f"{base}/summary", headers=admin).json()
    assert summary["total_expenses"] == 1200.0
    assert summary["profit"] == -1200.0
    assert len(summary["monthly"]) == 6

    export = client.get(f"{base}/expenses/export", headers=admin)
    assert export.text.splitlines()[0].startswith("id,date,category")


def test_cash_register_over_http(client, branch):
    admin = auth_headers("admin", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/cash-registers")

    register = client.post(base, headers=admin, json={"name": "Front"}).json()
    client.post(f"{base}/{register['id']}/open", headers=admin, json={"initial_amount": 50})
    movement = client.post(f"{base}/{register['id']}/movements", headers=admin,
                           json={"type": "expense", "amount": 20, "description": "Ice"})
    assert movement.status_code == 201

    closed = client.post(f"{base}/{register['id']}/close", headers=admin, json={"counted_amount": 31})
    assert closed.json()["expected_amount"] == 30.0
    assert closed.json()["difference"] == 1.0


def test_cash_audit_over_http(client, branch):
    manager = auth_headers("manager", tenant_id=branch.tenant_id)
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/cash-registers")
    register = client.post(base, headers=manager, json={"name": "Front"}).json()
    client.post(f"{base}/{register['id']}/open", headers=manager, json={"initial_amount": 40})

    denied = client.post(f"{base}/{register['id']}/audits", headers=staff, json={"actual_cash": 40})
    assert denied.status_code == 403
    audit = client.post(f"{base}/{register['id']}/audits", headers=manager,
                        json={"denominations": {"20": 1, "5": 3}, "notes": "Shift change"})
    assert audit.status_code == 201
    assert audit.json()["status"] == "shortage"
    assert audit.json()["difference"] == -5.0

    listed = client.get(f"{base}/{register['id']}/audits", headers=manager).json()
    assert [a["id"] for a in listed] == [audit.json()["id"]]
    detail = client.get(f"{base}/{register['id']}", headers=manager).json()
    assert detail["expected_amount"] == 35.0
    assert [m["type"] for m in detail["movements"]] == ["initial", "adjustment"]


def test_table_registry_over_http(client, db, branch):
    manager = auth_headers("manager", tenant_id=branch.tenant_id)
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    base = branch_url(branch, "/tables")

    assert client.post(base, headers=staff, json={"number": "1"}).status_code == 403
    created = client.post(base, headers=manager, json={"number": "1", "capacity": 2, "location": "Window"})
    assert created.status_code == 201
    assert client.post(base, headers=manager, json={"number": "1"}).status_code == 409
    table_id = created.json()["id"]

    seated = client.patch(f"{base}/{table_id}/status", headers=staff, json={"status": "occupied"})
    assert seated.json()["status"] == "occupied"
    assert [t["number"] for t in client.get(base, headers=staff, params={"status": "occupied"}).json()] == ["1"]

    product = make_product(db, branch)
    order = {"items": [{"product_id": product.id}], "service_type": "table",
             "customer_name": "Cy", "payment_method": "card", "table_number": "9"}
    assert client.post(branch_url(branch, "/orders"), headers=manager, json=order).status_code == 422
    order["table_number"] = "1"
    assert client.post(branch_url(branch, "/orders"), headers=manager, json=order).status_code == 201

    assert client.delete(f"{base}/{table_id}", headers=manager).status_code == 422


def test_audit_log_is_tenant_scoped(client, db, branch, other_branch):
    product = make_product(db, branch)
    admin = auth_headers("admin", tenant_id=branch.tenant_id)
    client.post(branch_url(branch, "/orders"), headers=admin, json={
        "items": [{"product_id": product.id}], "service_type": "dine_in",
        "customer_name": "Cy", "payment_method": "cash",
    })

    logs = client.get(f"/tenants/{branch.tenant_id}/logs", headers=admin).json()
    assert [entry["action"] for entry in logs["items"]] == ["ORDER_CREATE"]
    assert logs["items"][0]["user_id"] == "user-1"

    other = client.get(f"/tenants/{other_branch.tenant_id}/logs",
                       headers=auth_headers("admin", tenant_id=other_branch.tenant_id)).json()
    assert other["total"] == 0
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    assert client.get(f"/tenants/{branch.tenant_id}/logs", headers=staff).status_code == 403
