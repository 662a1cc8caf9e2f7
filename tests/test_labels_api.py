import base64

import pytest


@pytest.fixture
def template(manager_client):
    resp = manager_client.post("/api/label-templates", json={"name": "Shelf 50x25", "width": 50, "height": 25})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_template_defaults_and_validation(manager_client, template):
    assert template["barcode_type"] == "CODE128"
    assert template["is_active"] is True

    bad_colour = manager_client.post("/api/label-templates",
                                     json={"name": "Bad", "width": 50, "height": 25, "text_color": "red"})
    assert bad_colour.status_code == 422

    duplicate = manager_client.post("/api/label-templates", json={"name": "Shelf 50x25", "width": 40, "height": 20})
    assert duplicate.status_code == 409


def test_single_default_template(manager_client, template):
    second = manager_client.post("/api/label-templates",
                                 json={"name": "Jar 30x30", "width": 30, "height": 30, "is_default": True}).json()
    manager_client.put(f"/api/label-templates/{template['id']}", json={"is_default": True})

    listed = manager_client.get("/api/label-templates").json()

    defaults = [t["id"] for t in listed if t["is_default"]]
    assert defaults == [template["id"]]
    assert listed[0]["id"] == template["id"]
    assert second["id"] in [t["id"] for t in listed]


def test_export_and_import(manager_client, template):
    exported = manager_client.get(f"/api/label-templates/{template['id']}/export").json()
    assert exported["version"] == 1
    assert exported["template"]["name"] == "Shelf 50x25"

    clash = manager_client.post("/api/label-templates/import", json={"template": exported["template"]})
    assert clash.status_code == 409

    exported["template"]["font_size"] = 14
    overwritten = manager_client.post("/api/label-templates/import",
                                      json={"template": exported["template"], "overwrite": True})
    assert overwritten.status_code == 201
    assert overwritten.json()["id"] == template["id"]
    assert overwritten.json()["font_size"] == 14

    exported["template"]["name"] = "Shelf copy"
    copy = manager_client.post("/api/label-templates/import", json={"template": exported["template"]}).json()
    assert copy["id"] != template["id"]


def test_preview(cashier_client, template, make_product):
    product = make_product(name="Ghee 500ml")

    resp = cashier_client.post(f"/api/label-templates/{template['id']}/preview",
                               json={"product_ids": [product["id"]], "copies": 20, "labels_per_row": 3})

    assert resp.status_code == 200
    layout = resp.json()
    assert layout["template_id"] == template["id"]
    assert layout["total_labels"] == 20
    assert layout["shown"] == 12
    assert layout["cells"][0]["lines"][0] == "Ghee 500ml"
    assert layout["cells"][0]["barcode"] == product["sku"]

    missing = cashier_client.post(f"/api/label-templates/{template['id']}/preview", json={"product_ids": [999]})
    assert missing.status_code == 404


def test_printers_and_config_check(manager_client, cashier_client):
    resp = manager_client.post("/api/printers", json={"name": "Till", "connection": "network"})
    assert resp.status_code == 422

    network = manager_client.post("/api/printers", json={
        "name": "Back office", "connection": "network", "ip_address": "192.168.1.50", "printer_type": "laser",
    }).json()
    result = cashier_client.post(f"/api/printers/{network['id']}/test").json()
    assert result["status"] == "ready"
    assert result["issues"] == ["Network printer has no port; 9100 will be assumed"]

    label = manager_client.post("/api/printers", json={"name": "Zebra", "printer_type": "label"}).json()
    result = cashier_client.post(f"/api/printers/{label['id']}/test").json()
    assert result["ok"] is False
    assert result["status"] == "misconfigured"

    cleared = manager_client.put(f"/api/printers/{network['id']}", json={"ip_address": None})
    assert cleared.status_code == 422


def test_print_labels_writes_pdf(cashier_client, template, make_product):
    products = [make_product(), make_product(barcode="8901234567890")]

    resp = cashier_client.post("/api/print-labels", json={
        "template_id": template["id"], "product_ids": [p["id"] for p in products],
        "copies": 3, "labels_per_row": 2, "paper_size": "a4",
    })

    assert resp.status_code == 201, resp.text
    job = resp.json()
    assert job["status"] == "completed"
    assert job["total_labels"] == 6
    assert job["paper_size"] == "A4"

    pdf = cashier_client.get(f"/api/print-jobs/{job['id']}/pdf")
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")

    assert [j["id"] for j in cashier_client.get("/api/print-jobs").json()] == [job["id"]]
    assert cashier_client.delete(f"/api/label-templates/{template['id']}").status_code == 403


def test_print_with_inactive_template(manager_client, template, make_product):
    product = make_product()
    manager_client.put(f"/api/label-templates/{template['id']}", json={"is_active": False})

    resp = manager_client.post("/api/print-labels", json={"template_id": template["id"], "product_ids": [product["id"]]})

    assert resp.status_code == 400


def test_template_with_jobs_cannot_be_deleted(manager_client, template, make_product):
    product = make_product()
    manager_client.post("/api/print-labels", json={"template_id": template["id"], "product_ids": [product["id"]]})

    assert manager_client.delete(f"/api/label-templates/{template['id']}").status_code == 409


def test_generate_barcode(cashier_client):
    resp = cashier_client.post("/api/generate-barcode", json={"value": "SKU-1", "barcode_type": "code128"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["barcode_type"] == "CODE128"
    svg = base64.b64decode(body["data_url"].split(",", 1)[1])
    assert b"<svg" in svg

    assert cashier_client.post("/api/generate-barcode", json={"value": "   "}).status_code == 400
