from conftest import auth_headers, branch_url, make_product


def _checkout_payload(product, **overrides):
    payload = {
        "items": [{"product_id": product.id, "quantity": 2}],
        "service_type": "delivery",
        "customer": {"name": "Ana", "phone": "+1 555 0101"},
        "delivery_address": {"street": "Main", "number": "12", "city": "Springfield"},
        "payment_method": "card",
    }
    payload.update(overrides)
    return payload


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200


def test_menu_lists_only_available_products(client, db, branch):
    make_product(db, branch, name="Burger", price=10.0, category="Mains")
    make_product(db, branch, name="Soda", price=2.0, category="Drinks")
    make_product(db, branch, name="Old special", available=False)

    categories = client.get(branch_url(branch, "/menu/categories"))
    products = client.get(branch_url(branch, "/menu/products"), params={"sort_by": "price"})

    assert categories.json() == ["Drinks", "Mains"]
    body = products.json()
    assert body["total"] == 2
    assert [p["name"] for p in body["items"]] == ["Soda", "Burger"]


def test_menu_search_and_category_filter(client, db, branch):
    make_product(db, branch, name="Cheeseburger", category="Mains")
    make_product(db, branch, name="Fries", category="Sides")

    by_name = client.get(branch_url(branch, "/menu/products"), params={"q": "cheese"}).json()
    by_category = client.get(branch_url(branch, "/menu/products"), params={"category": "Sides"}).json()

    assert [p["name"] for p in by_name["items"]] == ["Cheeseburger"]
    assert [p["name"] for p in by_category["items"]] == ["Fries"]


def test_branch_must_belong_to_tenant(client, branch, other_branch):
    url = f"/tenants/{branch.tenant_id}/branches/{other_branch.id}/menu/products"
    assert client.get(url).status_code == 404


def test_checkout_validate_reports_current_step(client, db, branch):
    product = make_product(db, branch)
    payload = _checkout_payload(product, customer={"name": "Ana", "phone": ""})

    response = client.post(branch_url(branch, "/checkout/validate"), json=payload)

    body = response.json()
    assert response.status_code == 200
    assert body["step"] == "customer"
    assert body["ready"] is False
    assert body["missing"] == ["customer.phone"]
    assert body["totals"]["total"] == 27.0


def test_checkout_places_order_with_message_link(client, db, branch):
    product = make_product(db, branch)

    response = client.post(branch_url(branch, "/checkout"), json=_checkout_payload(product))

    assert response.status_code == 201
    body = response.json()
    assert body["order"]["order_number"] == "ORD-000001"
    assert body["order"]["status"] == "pending"
    assert body["order"]["total"] == 27.0
    assert body["message_link"].startswith("https://wa.me/5491155550101?text=")
    assert "ORD-000001" in body["message_link"]


def test_incomplete_checkout_is_rejected(client, db, branch):
    product = make_product(db, branch)
    payload = _checkout_payload(product, delivery_address=None)

    response = client.post(branch_url(branch, "/checkout"), json=payload)

    assert response.status_code == 422
    assert response.json()["code"] == "validation_failed"
    assert "delivery_address.street" in response.json()["context"]["missing"]


def test_confirmation_needs_matching_phone(client, db, branch):
    product = make_product(db, branch)
    client.post(branch_url(branch, "/checkout"), json=_checkout_payload(product))
    url = branch_url(branch, "/checkout/confirmation/ORD-000001")

    ok = client.get(url, params={"phone": "1-555-0101"})
    wrong = client.get(url, params={"phone": "999 999"})

    assert ok.status_code == 200
    assert ok.json()["order"]["customer_name"] == "Ana"
    assert wrong.status_code == 404


def test_orders_require_token(client, branch):
    url = branch_url(branch, "/orders")
    assert client.get(url).status_code in (401, 403)
    bad = client.get(url, headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_staff_of_other_tenant_is_forbidden(client, branch, other_branch):
    headers = auth_headers("admin", tenant_id=other_branch.tenant_id)
    assert client.get(branch_url(branch, "/orders"), headers=headers).status_code == 403

    superadmin = auth_headers("superadmin")
    assert client.get(branch_url(branch, "/orders"), headers=superadmin).status_code == 200


def test_order_status_flow(client, db, branch):
    product = make_product(db, branch)
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    admin = auth_headers("admin", tenant_id=branch.tenant_id)

    created = client.post(branch_url(branch, "/orders"), headers=staff, json={
        "items": [{"product_id": product.id, "quantity": 1}],
        "service_type": "takeaway",
        "customer_name": "Ben",
        "payment_method": "card",
    })
    assert created.status_code == 201
    order_id = created.json()["id"]
    status_url = branch_url(branch, f"/orders/{order_id}/status")

    assert client.patch(status_url, headers=staff, json={"status": "preparing"}).status_code == 200
    skipped = client.patch(status_url, headers=staff, json={"status": "completed"})
    assert skipped.status_code == 422
    assert skipped.json()["code"] == "invalid_transition"

    assert client.delete(branch_url(branch, f"/orders/{order_id}"), headers=staff).status_code == 403
    assert client.delete(branch_url(branch, f"/orders/{order_id}"), headers=admin).status_code == 422

    listed = client.get(branch_url(branch, "/orders"), headers=staff, params={"status": "preparing"})
    assert listed.json()["total"] == 1


def test_unknown_order_is_404(client, branch):
    staff = auth_headers("staff", tenant_id=branch.tenant_id)
    response = client.get(branch_url(branch, "/orders/999"), headers=staff)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_orders_csv_export(client, db, branch):
    product = make_product(db, branch)
    client.post(branch_url(branch, "/checkout"), json=_checkout_payload(product))
    manager = auth_headers("manager", tenant_id=branch.tenant_id)

    response = client.get(branch_url(branch, "/orders/export"), headers=manager)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    header, row = response.text.strip().splitlines()
    assert header.startswith("order_number,created_at,status")
    assert row.startswith("ORD-000001,")
    assert "2 x Burger" in row


def test_shift_close_over_http(client, db, branch):
    product = make_product(db, branch)
    admin = auth_headers("admin", tenant_id=branch.tenant_id)

    shift = client.post(branch_url(branch, "/shifts/start"), headers=admin, json={})
    assert shift.status_code == 201
    client.post(branch_url(branch, "/checkout"), json=_checkout_payload(product))

    close_url = branch_url(branch, f"/shifts/{shift.json()['id']}/close")
    blocked = client.post(close_url, headers=admin, json={})
    assert blocked.status_code == 422
    assert blocked.json()["context"]["open_orders"] == ["ORD-000001"]

    orders = client.get(branch_url(branch, "/orders"), headers=admin).json()["items"]
    client.patch(branch_url(branch, f"/orders/{orders[0]['id']}/status"), headers=admin,
                 json={"status": "cancelled"})
    closed = client.post(close_url, headers=admin, json={"notes": "Quiet night"})

    assert closed.status_code == 200
    assert closed.json()["shift"]["status"] == "closed"
    assert closed.json()["shift"]["summary"]["total_orders"] == 0
