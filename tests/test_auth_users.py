PASSWORD = "secret123"


def register(client, email="new.cashier@example.com", password="pass1234", name="New Cashier"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


def test_register_creates_cashier(client):
    resp = register(client, email="New.Cashier@Example.com")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["email"] == "new.cashier@example.com"
    assert body["role"] == "cashier"
    assert body["active"] is True
    assert "password_hash" not in body


def test_register_duplicate_email(client):
    register(client)
    resp = register(client)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already registered"


def test_register_validation_error_has_message(client):
    resp = register(client, password="123")

    assert resp.status_code == 422
    assert resp.json()["message"].startswith("password:")


def test_login_and_current_user(client, cashier_user):
    resp = client.post("/api/auth/login", json={"email": cashier_user.email, "password": PASSWORD})

    assert resp.status_code == 200, resp.text
    token = resp.json()["access_token"]
    assert resp.json()["user"]["role"] == "cashier"

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == cashier_user.email


def test_login_wrong_password(client, cashier_user):
    resp = client.post("/api/auth/login", json={"email": cashier_user.email, "password": "wrong-password"})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


def test_missing_or_bad_token(client):
    assert client.get("/api/auth/user").status_code in (401, 403)
    resp = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_user_list_is_admin_only(admin_client, cashier_client, manager_user):
    resp = admin_client.get("/api/users", params={"role": "manager"})

    assert resp.status_code == 200
    assert [u["email"] for u in resp.json()["items"]] == [manager_user.email]
    assert cashier_client.get("/api/users").status_code == 403


def test_change_role(admin_client, cashier_user):
    resp = admin_client.put(f"/api/users/{cashier_user.id}/role", json={"role": "Manager"})

    assert resp.status_code == 200
    assert resp.json()["role"] == "manager"


def test_admin_cannot_demote_self(admin_client, admin_user):
    resp = admin_client.put(f"/api/users/{admin_user.id}/role", json={"role": "cashier"})

    assert resp.status_code == 400


def test_deactivated_user_is_locked_out(client, admin_client, cashier_user, cashier_client):
    resp = admin_client.put(f"/api/users/{cashier_user.id}/status", json={"active": False})
    assert resp.status_code == 200
    assert resp.json()["active"] is False

    assert cashier_client.get("/api/auth/user").status_code == 403
    login = client.post("/api/auth/login", json={"email": cashier_user.email, "password": PASSWORD})
    assert login.status_code == 403


def test_delete_user(admin_client, admin_user, cashier_user):
    assert admin_client.delete(f"/api/users/{admin_user.id}").status_code == 400

    resp = admin_client.delete(f"/api/users/{cashier_user.id}")
    assert resp.status_code == 200
    assert admin_client.delete(f"/api/users/{cashier_user.id}").status_code == 404


def test_user_with_sales_cannot_be_deleted(admin_client, cashier_client, cashier_user, make_product):
    product = make_product()
    sale = cashier_client.post("/api/sales", json={"items": [{"product_id": product["id"], "quantity": 1}]})
    assert sale.status_code == 201, sale.text

    resp = admin_client.delete(f"/api/users/{cashier_user.id}")

    assert resp.status_code == 409


def test_login_attempts_are_logged(client, admin_client, cashier_user):
    client.post("/api/auth/login", json={"email": cashier_user.email, "password": "wrong-password"})
    client.post("/api/auth/login", json={"email": cashier_user.email, "password": PASSWORD})

    resp = admin_client.get("/api/logs", params={"action": "LOGIN"})

    assert resp.status_code == 200
    statuses = sorted(item["status"] for item in resp.json()["items"])
    assert statuses == ["FAIL", "SUCCESS"]

    failed = admin_client.get("/api/logs", params={"action": "LOGIN", "status": "fail"}).json()
    assert failed["total"] == 1
    assert failed["items"][0]["user_email"] == cashier_user.email


def test_logs_are_admin_only(manager_client):
    assert manager_client.get("/api/logs").status_code == 403


def test_business_settings(admin_client, cashier_client):
    resp = admin_client.patch("/api/business-settings", json={"business_name": "Corner Store", "state": "MH"})
    assert resp.status_code == 200
    assert resp.json()["business_name"] == "Corner Store"

    assert cashier_client.get("/api/business-settings").json()["state"] == "MH"
    assert cashier_client.patch("/api/business-settings", json={"business_name": "X"}).status_code == 403
