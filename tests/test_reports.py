from datetime import date


def sell(client, product_id, quantity=1, **extra):
    resp = client.post("/api/sales", json={"items": [{"product_id": product_id, "quantity": quantity}], **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_dashboard_stats(cashier_client, make_product, make_customer):
    product = make_product(stock_quantity=10, alert_threshold=2)
    make_product(stock_quantity=1, alert_threshold=5)
    make_customer()
    sell(cashier_client, product["id"], 2)
    sell(cashier_client, product["id"], 1)

    stats = cashier_client.get("/api/dashboard/stats").json()

    assert stats["today_sales"] == 2
    assert stats["today_revenue"] == 321.0
    assert stats["month_revenue"] == 321.0
    assert stats["total_products"] == 2
    assert stats["low_stock_count"] == 1
    assert stats["total_customers"] == 1


def test_sales_chart_fills_missing_days(cashier_client, make_product):
    product = make_product()
    sell(cashier_client, product["id"], 2)

    points = cashier_client.get("/api/dashboard/sales-chart", params={"days": 7}).json()

    assert len(points) == 7
    assert points[-1]["date"] == date.today().isoformat()
    assert (points[-1]["orders"], points[-1]["revenue"]) == (1, 214.0)
    assert all(p["orders"] == 0 for p in points[:-1])


def test_top_products_net_of_returns(cashier_client, manager_client, make_product):
    tea = make_product(name="Tea")
    sugar = make_product(name="Sugar")
    sell(cashier_client, tea["id"], 3)
    sale = sell(cashier_client, sugar["id"], 5)
    manager_client.post(f"/api/sales/{sale['id']}/return",
                        json={"items": [{"item_id": sale["items"][0]["id"], "quantity": 4}]})

    top = cashier_client.get("/api/dashboard/top-products").json()

    assert [(p["name"], p["quantity"]) for p in top] == [("Tea", 3), ("Sugar", 1)]
    assert top[0]["revenue"] == 300.0


def test_sales_summary(manager_client, cashier_client, make_product):
    product = make_product()
    sell(cashier_client, product["id"], 2)
    sell(cashier_client, product["id"], 1)

    report = manager_client.get("/api/reports/sales-summary").json()

    assert report["total_orders"] == 2
    assert report["total_amount"] == 321.0
    assert report["items"][0]["tax"] == 21.0

    today = date.today().isoformat()
    bounded = manager_client.get("/api/reports/sales-summary", params={"date_from": today, "date_to": today}).json()
    assert bounded["total_orders"] == 2

    assert manager_client.get("/api/reports/sales-summary", params={"date_from": "yesterday"}).status_code == 400
    assert cashier_client.get("/api/reports/sales-summary").status_code == 403


def test_tax_report_groups_by_slab(manager_client, cashier_client, make_product):
    gst18 = make_product(cgst_rate="9", sgst_rate="9", igst_rate="18")
    exempt = make_product()
    sell(cashier_client, gst18["id"], 2)
    sell(cashier_client, exempt["id"], 1)

    report = manager_client.get("/api/reports/tax").json()

    rows = {row["gst_rate"]: row for row in report["items"]}
    assert rows[18.0]["taxable_amount"] == 200.0
    assert (rows[18.0]["cgst"], rows[18.0]["sgst"]) == (18.0, 18.0)
    assert rows[0.0]["total_tax"] == 0
    assert report["total_tax"] == 36.0
    assert report["pos_tax_collected"] == 21.0


def test_stock_report(manager_client, make_category, make_product):
    drinks = make_category(name="Drinks")
    make_product(category_id=drinks["id"], stock_quantity=10, cost=20)
    make_product(category_id=drinks["id"], stock_quantity=1, cost=50, alert_threshold=3)
    make_product(stock_quantity=4, cost=10)

    report = manager_client.get("/api/reports/stock").json()

    assert [r["category"] for r in report["items"]] == ["Drinks", "Uncategorized"]
    assert report["items"][0] == {"category": "Drinks", "products": 2, "units": 11, "stock_value": 250.0, "low_stock": 1}
    assert report["total_value"] == 290.0


def test_purchase_report(manager_client, make_supplier, make_product):
    supplier = make_supplier(name="Agro Traders")
    product = make_product()
    po = manager_client.post("/api/purchases", json={
        "supplier_id": supplier["id"], "items": [{"product_id": product["id"], "quantity": 10, "unit_cost": 50}],
    }).json()
    manager_client.post(f"/api/purchases/{po['id']}/receive",
                        json={"items": [{"item_id": po["items"][0]["id"], "quantity": 4}]})
    cancelled = manager_client.post("/api/purchases", json={
        "supplier_id": supplier["id"], "items": [{"product_id": product["id"], "quantity": 1, "unit_cost": 50}],
    }).json()
    manager_client.put(f"/api/purchases/{cancelled['id']}/status", json={"status": "cancelled"})

    report = manager_client.get("/api/reports/purchases").json()

    assert report["items"] == [{
        "supplier_id": supplier["id"], "supplier_name": "Agro Traders",
        "orders": 1, "total_amount": 500.0, "received_amount": 200.0,
    }]
    assert report["total_amount"] == 500.0
