def test_create_and_search(cashier_client, make_customer):
    make_customer(name="Priya Sharma", phone="9811111111", email="priya@example.com")
    make_customer(name="Rahul Verma", phone="9822222222")

    found = cashier_client.get("/api/customers/search", params={"q": "98111"}).json()
    assert [c["name"] for c in found] == ["Priya Sharma"]

    page = cashier_client.get("/api/customers", params={"q": "verma"}).json()
    assert page["total"] == 1


def test_duplicate_phone_or_email(admin_client, make_customer):
    make_customer(phone="9811111111", email="priya@example.com")

    resp = admin_client.post("/api/customers", json={"name": "Other", "phone": "9811111111"})
    assert resp.status_code == 409

    resp = admin_client.post("/api/customers", json={"name": "Other", "email": "PRIYA@example.com"})
    assert resp.status_code == 409


def test_update_customer(cashier_client, make_customer):
    first = make_customer()
    second = make_customer()

    resp = cashier_client.put(f"/api/customers/{first['id']}", json={"address": "12 MG Road"})
    assert resp.json()["address"] == "12 MG Road"

    clash = cashier_client.put(f"/api/customers/{first['id']}", json={"phone": second["phone"]})
    assert clash.status_code == 409


def test_only_managers_set_points(cashier_client, manager_client, make_customer):
    customer = make_customer()

    assert cashier_client.put(f"/api/customers/{customer['id']}", json={"loyalty_points": 500}).status_code == 403
    resp = manager_client.put(f"/api/customers/{customer['id']}", json={"loyalty_points": 500})
    assert resp.json()["loyalty_points"] == 500


def test_redeem_points(cashier_client, make_customer):
    customer = make_customer(loyalty_points=40)
    path = f"/api/customers/{customer['id']}/loyalty/redeem"

    resp = cashier_client.post(path, json={"points": 30, "reason": "Gift voucher"})
    assert resp.status_code == 200
    assert resp.json()["loyalty_points"] == 10

    too_many = cashier_client.post(path, json={"points": 11})
    assert too_many.status_code == 400
    assert cashier_client.post(path, json={"points": 0}).status_code == 422


def test_purchase_history(cashier_client, make_customer, make_product):
    customer = make_customer()
    product = make_product()
    cashier_client.post("/api/sales", json={
        "items": [{"product_id": product["id"], "quantity": 1}], "customer_id": customer["id"],
    })
    cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]})

    history = cashier_client.get(f"/api/customers/{customer['id']}/sales").json()

    assert history["total"] == 1
    assert history["items"][0]["customer_id"] == customer["id"]
    assert cashier_client.get("/api/customers/999/sales").status_code == 404


def test_delete_customer(manager_client, cashier_client, make_customer, make_product):
    unused = make_customer()
    buyer = make_customer()
    product = make_product()
    cashier_client.post("/api/sales", json={
        "items": [{"product_id": product["id"], "quantity": 1}], "customer_id": buyer["id"],
    })

    assert cashier_client.delete(f"/api/customers/{unused['id']}").status_code == 403
    assert manager_client.delete(f"/api/customers/{buyer['id']}").status_code == 409
    assert manager_client.delete(f"/api/customers/{unused['id']}").status_code == 200
    assert manager_client.get(f"/api/customers/{unused['id']}").status_code == 404
