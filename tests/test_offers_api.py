def evaluate(client, items, customer_id=None):
    return client.post("/api/offers/evaluate", json={"items": items, "customer_id": customer_id})


def test_create_validates_type_fields(admin_client, cashier_client):
    resp = admin_client.post("/api/offers", json={"name": "Too much", "offer_type": "percentage", "discount_value": 120})
    assert resp.status_code == 422

    resp = admin_client.post("/api/offers", json={"name": "B2G1", "offer_type": "buy_x_get_y"})
    assert resp.status_code == 422

    resp = admin_client.post("/api/offers", json={
        "name": "Happy hour", "offer_type": "time_based", "discount_value": 5,
        "time_start": "25:00", "time_end": "18:00",
    })
    assert resp.status_code == 422

    resp = cashier_client.post("/api/offers", json={"name": "X", "offer_type": "flat_amount", "discount_value": 5})
    assert resp.status_code == 403


def test_id_lists_are_stored_as_csv(make_offer, make_category):
    category = make_category()

    offer = make_offer(offer_type="category_based", applicable_categories=[category["id"]])

    assert offer["applicable_categories"] == str(category["id"])


def test_evaluate_picks_by_priority(cashier_client, make_offer, make_product):
    product = make_product(price=100)
    make_offer(name="Flat 50", offer_type="flat_amount", discount_value=50, priority=1)
    make_offer(name="Ten percent", discount_value=10, priority=2)

    body = evaluate(cashier_client, [{"product_id": product["id"], "quantity": 3}]).json()

    assert body["cart_total"] == 300.0
    assert [o["name"] for o in body["applied_offers"]] == ["Flat 50", "Ten percent"]
    assert body["total_discount"] == 80.0
    assert body["final_total"] == 220.0


def test_evaluate_buy_x_get_y(cashier_client, make_offer, make_product):
    product = make_product(price=40)
    make_offer(name="Buy 2 get 1", offer_type="buy_x_get_y", buy_quantity=2, get_quantity=1,
               discount_value=100, applicable_products=[product["id"]])

    body = evaluate(cashier_client, [{"product_id": product["id"], "quantity": 7}]).json()

    # Two complete groups of three
    assert body["total_discount"] == 80.0


def test_evaluate_with_custom_price_and_unknown_product(cashier_client, make_offer, make_product):
    product = make_product(price=100)
    make_offer(discount_value=10)

    body = evaluate(cashier_client, [{"product_id": product["id"], "quantity": 1, "unit_price": 50}]).json()
    assert body["total_discount"] == 5.0

    assert evaluate(cashier_client, [{"product_id": 999, "quantity": 1}]).status_code == 404
    assert evaluate(cashier_client, [{"product_id": product["id"], "quantity": 1}], customer_id=999).status_code == 404


def test_loyalty_offer_needs_enough_points(cashier_client, make_offer, make_product, make_customer):
    product = make_product(price=100)
    make_offer(name="Loyalty", offer_type="loyalty_points", discount_value=30, points_threshold=100, points_reward=1)
    poor = make_customer(loyalty_points=20)
    rich = make_customer(loyalty_points=150)
    items = [{"product_id": product["id"], "quantity": 1}]

    assert evaluate(cashier_client, items).json()["applied_offers"] == []
    assert evaluate(cashier_client, items, poor["id"]).json()["applied_offers"] == []
    assert evaluate(cashier_client, items, rich["id"]).json()["total_discount"] == 30.0


def test_toggle_and_filters(admin_client, make_offer, make_product, cashier_client):
    offer = make_offer(discount_value=10)
    product = make_product()

    toggled = admin_client.patch(f"/api/offers/{offer['id']}/toggle").json()
    assert toggled["active"] is False
    assert evaluate(cashier_client, [{"product_id": product["id"], "quantity": 1}]).json()["total_discount"] == 0

    assert admin_client.get("/api/offers", params={"active": True}).json() == []
    assert len(admin_client.get("/api/offers", params={"offer_type": "percentage"}).json()) == 1


def test_update_validates_merged_record(admin_client, make_offer):
    offer = make_offer(offer_type="flat_amount", discount_value=50)

    resp = admin_client.put(f"/api/offers/{offer['id']}", json={"offer_type": "percentage"})
    assert resp.status_code == 200
    assert resp.json()["offer_type"] == "percentage"

    resp = admin_client.put(f"/api/offers/{offer['id']}", json={"discount_value": 150})
    assert resp.status_code == 422


def test_usage_limit_is_enforced(cashier_client, make_offer, make_product):
    product = make_product(price=100)
    make_offer(discount_value=10, usage_limit=1)
    items = [{"product_id": product["id"], "quantity": 1}]

    first = cashier_client.post("/api/sales", json={"items": items}).json()
    second = cashier_client.post("/api/sales", json={"items": items}).json()

    assert first["discount"] == 10.0
    assert second["discount"] == 0


def test_per_customer_limit(cashier_client, make_offer, make_product, make_customer):
    product = make_product(price=100)
    make_offer(discount_value=10, per_customer_limit=1)
    customer = make_customer()
    sale = {"items": [{"product_id": product["id"], "quantity": 1}], "customer_id": customer["id"]}

    assert cashier_client.post("/api/sales", json=sale).json()["discount"] == 10.0
    assert cashier_client.post("/api/sales", json=sale).json()["discount"] == 0
    # Other customers are unaffected
    other = make_customer()
    sale["customer_id"] = other["id"]
    assert cashier_client.post("/api/sales", json=sale).json()["discount"] == 10.0


def test_usage_reports_and_delete(admin_client, cashier_client, make_offer, make_product):
    product = make_product(price=100)
    used = make_offer(name="Used", discount_value=10)
    unused = make_offer(name="Unused", offer_type="flat_amount", discount_value=5, min_purchase_amount=10000)
    sale = cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 2}]}).json()

    usage = admin_client.get(f"/api/offers/{used['id']}/usage").json()
    assert [(u["sale_id"], u["discount_amount"]) for u in usage] == [(sale["id"], 20.0)]

    report = {row["name"]: row for row in admin_client.get("/api/offers/reports").json()}
    assert report["Used"]["usage_count"] == 1
    assert report["Used"]["total_discount"] == 20.0
    assert report["Unused"]["total_discount"] == 0
    assert cashier_client.get("/api/offers/reports").status_code == 403

    assert admin_client.delete(f"/api/offers/{used['id']}").status_code == 409
    assert admin_client.delete(f"/api/offers/{unused['id']}").status_code == 200
