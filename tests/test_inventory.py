def adjust(client, product_id, adjustment_type, quantity, **extra):
    data = {"product_id": product_id, "adjustment_type": adjustment_type, "quantity": quantity}
    data.update(extra)
    return client.post("/api/inventory/adjustments", json=data)


def test_add_and_remove(manager_client, make_product, product_stock):
    product = make_product(stock_quantity=10, cost=60)

    added = adjust(manager_client, product["id"], "add", 5, unit_cost=65, batch_number="B-42")
    assert added.status_code == 201, added.text
    entry = added.json()
    assert (entry["previous_quantity"], entry["quantity"], entry["new_quantity"]) == (10, 5, 15)
    assert entry["user_email"] == "manager@example.com"
    assert entry["batch_number"] == "B-42"
    assert manager_client.get(f"/api/products/{product['id']}").json()["cost"] == 65

    removed = adjust(manager_client, product["id"], "remove", 3, reason="Damaged").json()
    assert removed["quantity"] == -3
    assert product_stock(product["id"]) == 12


def test_remove_cannot_go_negative(manager_client, make_product, product_stock):
    product = make_product(stock_quantity=2)

    resp = adjust(manager_client, product["id"], "remove", 3)

    assert resp.status_code == 400
    assert "below zero" in resp.json()["message"]
    assert product_stock(product["id"]) == 2


def test_correction_sets_absolute_count(manager_client, make_product, product_stock):
    product = make_product(stock_quantity=10)

    entry = adjust(manager_client, product["id"], "correction", 7, reason="Stock take").json()

    assert entry["quantity"] == -3
    assert product_stock(product["id"]) == 7


def test_transfer_moves_location_only(manager_client, admin_client, make_product, product_stock):
    product = make_product(stock_quantity=10, location="Back room")

    entry = adjust(manager_client, product["id"], "transfer", 10, location_to="Shelf A").json()

    assert entry["quantity"] == 0
    assert entry["location_from"] == "Back room"
    assert entry["location_to"] == "Shelf A"
    assert product_stock(product["id"]) == 10
    assert admin_client.get(f"/api/products/{product['id']}").json()["location"] == "Shelf A"


def test_adjustment_validation(manager_client, cashier_client, make_product):
    product = make_product()

    assert adjust(manager_client, product["id"], "add", 0).status_code == 422
    assert adjust(manager_client, product["id"], "transfer", 1).status_code == 422
    assert adjust(manager_client, product["id"], "sale", 1).status_code == 422
    assert adjust(manager_client, 999, "add", 1).status_code == 404
    assert adjust(cashier_client, product["id"], "add", 1).status_code == 403


def test_ledger_filters_and_order(manager_client, make_product):
    product = make_product(stock_quantity=10)
    other = make_product(stock_quantity=0)
    adjust(manager_client, product["id"], "add", 1)
    adjust(manager_client, product["id"], "remove", 2)
    adjust(manager_client, other["id"], "add", 4)

    history = manager_client.get("/api/inventory/adjustments",
                                 params={"product_id": product["id"], "order": "asc"}).json()
    assert [e["adjustment_type"] for e in history["items"]] == ["add", "add", "remove"]
    # Every entry chains onto the previous one
    for before, after in zip(history["items"], history["items"][1:]):
        assert after["previous_quantity"] == before["new_quantity"]

    removals = manager_client.get("/api/inventory/adjustments", params={"adjustment_type": "remove"}).json()
    assert removals["total"] == 1
    assert removals["items"][0]["product_name"] == product["name"]


def test_sales_show_up_in_ledger(cashier_client, make_product):
    product = make_product(stock_quantity=5)
    sale = cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 2}]}).json()

    entries = cashier_client.get("/api/inventory/adjustments",
                                 params={"product_id": product["id"], "adjustment_type": "sale"}).json()

    assert entries["items"][0]["quantity"] == -2
    assert entries["items"][0]["reference_document"] == sale["order_number"]


def test_overview_valuation(cashier_client, make_product):
    make_product(name="Oil", stock_quantity=10, cost=120, alert_threshold=2)
    make_product(name="Salt", stock_quantity=1, cost=15, alert_threshold=5)

    overview = cashier_client.get("/api/inventory").json()

    assert overview["total"] == 2
    assert overview["total_stock_value"] == 1215.0
    assert [row["name"] for row in overview["items"]] == ["Oil", "Salt"]

    low = cashier_client.get("/api/inventory", params={"low_stock": True}).json()
    assert [row["name"] for row in low["items"]] == ["Salt"]
    assert low["items"][0]["is_low_stock"] is True
