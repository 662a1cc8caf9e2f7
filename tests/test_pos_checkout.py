import pytest


@pytest.fixture
def product(make_product):
    return make_product(name="Basmati Rice", price=100, stock_quantity=10)


def add(client, product_id, quantity=1):
    return client.post("/api/pos/cart/add", json={"product_id": product_id, "quantity": quantity})


def test_empty_cart(cashier_client):
    cart = cashier_client.get("/api/pos/cart").json()

    assert cart["items"] == []
    assert cart["total"] == 0


def test_add_to_cart_merges_lines_and_prices(cashier_client, product):
    add(cashier_client, product["id"])
    resp = add(cashier_client, product["id"])

    assert resp.status_code == 200, resp.text
    cart = resp.json()
    assert len(cart["items"]) == 1
    assert cart["item_count"] == 2
    assert cart["subtotal"] == 200.0
    assert cart["tax"] == 14.0
    assert cart["total"] == 214.0


def test_add_more_than_stock(cashier_client, product):
    add(cashier_client, product["id"], 8)

    resp = add(cashier_client, product["id"], 3)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Only 10 units available for Basmati Rice"


def test_out_of_stock_product(cashier_client, make_product):
    empty = make_product(stock_quantity=0)

    assert add(cashier_client, empty["id"]).status_code == 400


def test_inactive_product_cannot_be_sold(cashier_client, admin_client, product):
    admin_client.patch(f"/api/products/{product['id']}", json={"active": False})

    assert add(cashier_client, product["id"]).status_code == 400


def test_update_and_remove_cart_items(cashier_client, product, make_product):
    other = make_product(price=50)
    add(cashier_client, product["id"])
    cart = add(cashier_client, other["id"]).json()
    first, second = cart["items"]

    updated = cashier_client.put(f"/api/pos/cart/items/{first['id']}", json={"quantity": 3}).json()
    assert updated["subtotal"] == 350.0

    assert cashier_client.put(f"/api/pos/cart/items/{first['id']}", json={"quantity": 11}).status_code == 400

    removed = cashier_client.delete(f"/api/pos/cart/items/{second['id']}").json()
    assert [i["product_id"] for i in removed["items"]] == [product["id"]]

    assert cashier_client.delete("/api/pos/cart/items/999").status_code == 404

    cleared = cashier_client.delete("/api/pos/cart").json()
    assert cleared["items"] == []


def test_carts_are_per_user(cashier_client, manager_client, product):
    add(cashier_client, product["id"])

    assert manager_client.get("/api/pos/cart").json()["items"] == []


def test_checkout(cashier_client, product, product_stock):
    add(cashier_client, product["id"], 2)

    resp = cashier_client.post("/api/pos/checkout", json={"payment_method": "cash", "amount_tendered": 250})

    assert resp.status_code == 201, resp.text
    sale = resp.json()
    assert sale["order_number"].startswith("ORD-")
    assert sale["order_number"].endswith(f"-{sale['id']:05d}")
    assert (sale["subtotal"], sale["tax"], sale["total"]) == (200.0, 14.0, 214.0)
    assert sale["change_due"] == 36.0
    assert sale["status"] == "completed"
    assert sale["items"][0]["product_name"] == "Basmati Rice"
    assert product_stock(product["id"]) == 8

    # A fresh cart is opened after checkout
    assert cashier_client.get("/api/pos/cart").json()["items"] == []


def test_checkout_empty_cart(cashier_client):
    resp = cashier_client.post("/api/pos/checkout", json={})

    assert resp.status_code == 400
    assert resp.json()["message"] == "Cart is empty"


def test_checkout_underpaid_keeps_cart_and_stock(cashier_client, product, product_stock):
    add(cashier_client, product["id"], 2)

    resp = cashier_client.post("/api/pos/checkout", json={"amount_tendered": 100})

    assert resp.status_code == 400
    assert product_stock(product["id"]) == 10
    assert cashier_client.get("/api/pos/cart").json()["item_count"] == 2


def test_checkout_rechecks_stock(cashier_client, admin_client, product, product_stock):
    add(cashier_client, product["id"], 5)
    admin_client.patch(f"/api/products/{product['id']}", json={"stock_quantity": 3})

    resp = cashier_client.post("/api/pos/checkout", json={})

    assert resp.status_code == 400
    assert product_stock(product["id"]) == 3


def test_checkout_uses_price_snapshot(cashier_client, admin_client, product):
    add(cashier_client, product["id"])
    admin_client.patch(f"/api/products/{product['id']}", json={"price": 150})

    sale = cashier_client.post("/api/pos/checkout", json={}).json()

    assert sale["subtotal"] == 100.0


def test_checkout_with_customer_earns_points(cashier_client, admin_client, product, make_customer):
    customer = make_customer()
    add(cashier_client, product["id"], 2)
    attached = cashier_client.put("/api/pos/cart/customer", json={"customer_id": customer["id"]})
    assert attached.json()["customer_id"] == customer["id"]

    sale = cashier_client.post("/api/pos/checkout", json={}).json()

    assert sale["customer_name"] == customer["name"]
    assert sale["loyalty_points_earned"] == 2
    assert admin_client.get(f"/api/customers/{customer['id']}").json()["loyalty_points"] == 2


def test_cart_shows_and_checkout_applies_offers(cashier_client, admin_client, product, make_offer):
    offer = make_offer(name="Ten off", discount_value=10, min_purchase_amount=150)
    add(cashier_client, product["id"])

    assert cashier_client.get("/api/pos/cart").json()["applied_offers"] == []

    cart = add(cashier_client, product["id"]).json()
    assert cart["discount"] == 20.0
    assert cart["applied_offers"][0]["offer_id"] == offer["id"]

    sale = cashier_client.post("/api/pos/checkout", json={}).json()
    # Tax on 200 - 20
    assert sale["tax"] == 12.6
    assert sale["total"] == 192.6
    assert sale["applied_offers"][0]["discount"] == 20.0
    assert admin_client.get(f"/api/offers/{offer['id']}").json()["usage_count"] == 1


def test_checkout_can_skip_offers(cashier_client, product, make_offer):
    make_offer(discount_value=10)
    add(cashier_client, product["id"], 2)

    sale = cashier_client.post("/api/pos/checkout", json={"apply_offers": False}).json()

    assert sale["discount"] == 0
    assert sale["applied_offers"] == []


def test_loyalty_offer_spends_points(cashier_client, admin_client, product, make_customer, make_offer):
    make_offer(name="Loyalty", offer_type="loyalty_points", discount_value=25,
               points_threshold=50, points_reward=1)
    customer = make_customer(loyalty_points=60)

    sale = cashier_client.post("/api/sales", json={
        "items": [{"product_id": product["id"], "quantity": 2}], "customer_id": customer["id"],
    }).json()

    assert sale["discount"] == 25.0
    # 60 - 50 spent + floor(187.25 / 50) earned
    assert sale["loyalty_points_earned"] == 3
    assert admin_client.get(f"/api/customers/{customer['id']}").json()["loyalty_points"] == 13


def test_one_points_balance_pays_for_one_loyalty_offer(cashier_client, admin_client, product, make_customer, make_offer):
    for priority, name in enumerate(("L1", "L2"), start=1):
        make_offer(name=name, offer_type="loyalty_points", discount_value=20,
                   points_threshold=100, points_reward=1, priority=priority)
    customer = make_customer(loyalty_points=100)

    sale = cashier_client.post("/api/sales", json={
        "items": [{"product_id": product["id"], "quantity": 2}], "customer_id": customer["id"],
    }).json()

    assert [o["name"] for o in sale["applied_offers"]] == ["L1"]
    assert sale["discount"] == 20.0
    # 100 - 100 spent + floor(192.6 / 100) earned
    assert admin_client.get(f"/api/customers/{customer['id']}").json()["loyalty_points"] == 1


def test_expired_loyalty_offer_does_not_set_earn_rate(cashier_client, product, make_customer, make_offer):
    make_offer(name="Old loyalty", offer_type="loyalty_points", discount_value=5,
               points_threshold=10, points_reward=5,
               valid_from="2020-01-01T00:00:00", valid_to="2020-12-31T23:59:59")
    customer = make_customer()

    sale = cashier_client.post("/api/sales", json={
        "items": [{"product_id": product["id"], "quantity": 2}], "customer_id": customer["id"],
    }).json()

    # Default rate: 1 point per 100 of 214
    assert sale["loyalty_points_earned"] == 2


def test_direct_sale_rolls_back_on_bad_line(cashier_client, product, make_product, product_stock):
    scarce = make_product(stock_quantity=1)

    resp = cashier_client.post("/api/sales", json={"items": [
        {"product_id": product["id"], "quantity": 2},
        {"product_id": scarce["id"], "quantity": 2},
    ]})

    assert resp.status_code == 400
    assert product_stock(product["id"]) == 10
    assert product_stock(scarce["id"]) == 1


def test_direct_sale_merges_repeated_products(cashier_client, product, product_stock):
    resp = cashier_client.post("/api/sales", json={"items": [
        {"product_id": product["id"], "quantity": 6},
        {"product_id": product["id"], "quantity": 6},
    ]})

    assert resp.status_code == 400
    assert product_stock(product["id"]) == 10


def test_cashiers_only_list_their_own_sales(cashier_client, manager_client, admin_client, product):
    cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]})
    manager_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]})

    assert cashier_client.get("/api/sales").json()["total"] == 1
    assert admin_client.get("/api/sales").json()["total"] == 2
    assert len(cashier_client.get("/api/sales/recent").json()) == 2
    assert admin_client.get("/api/sales", params={"payment_method": "card"}).json()["total"] == 0


def test_receipt_pdf(cashier_client, product):
    sale = cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]}).json()

    resp = cashier_client.get(f"/api/sales/{sale['id']}/receipt")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
    assert cashier_client.get("/api/sales/999/receipt").status_code == 404


def test_cashier_cannot_open_other_users_sale(cashier_client, manager_client, product):
    sale = manager_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]}).json()

    assert cashier_client.get(f"/api/sales/{sale['id']}").status_code == 404
    assert cashier_client.get(f"/api/sales/{sale['id']}/receipt").status_code == 404
    assert manager_client.get(f"/api/sales/{sale['id']}").status_code == 200


def test_returns(cashier_client, manager_client, product, product_stock):
    sale = cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 3}]}).json()
    item_id = sale["items"][0]["id"]
    path = f"/api/sales/{sale['id']}/return"

    assert cashier_client.post(path, json={"items": [{"item_id": item_id, "quantity": 1}]}).status_code == 403

    partial = manager_client.post(path, json={"items": [{"item_id": item_id, "quantity": 1}], "reason": "Damaged"})
    assert partial.status_code == 200, partial.text
    assert partial.json()["status"] == "partially_returned"
    assert product_stock(product["id"]) == 8

    too_many = manager_client.post(path, json={"items": [{"item_id": item_id, "quantity": 3}]})
    assert too_many.status_code == 400

    full = manager_client.post(path, json={"items": [{"item_id": item_id, "quantity": 2}]})
    assert full.json()["status"] == "returned"
    assert full.json()["items"][0]["returned_quantity"] == 3
    assert product_stock(product["id"]) == 10

    assert manager_client.post(path, json={"items": [{"item_id": item_id, "quantity": 1}]}).status_code == 400
