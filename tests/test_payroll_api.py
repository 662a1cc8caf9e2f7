import pytest

MARCH = {"pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31"}


@pytest.fixture
def make_employee(manager_client):
    def _make(code="EMP001", **overrides):
        data = {
            "employee_code": code, "first_name": "Asha", "last_name": "Patel",
            "hire_date": "2025-06-01", "position": "Cashier",
        }
        data.update(overrides)
        resp = manager_client.post("/api/payroll/employees", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def employee(manager_client, make_employee):
    employee = make_employee()
    resp = manager_client.post("/api/payroll/salary-structures", json={
        "employee_id": employee["id"], "basic_salary": 26000, "hra": 5000,
        "transport_allowance": 1000, "tax_deduction": 500, "effective_from": "2026-01-01",
    })
    assert resp.status_code == 201, resp.text
    return employee


def test_employee_crud(manager_client, admin_client, cashier_client, make_employee):
    employee = make_employee(email="asha@example.com")
    assert employee["full_name"] == "Asha Patel"

    dup = manager_client.post("/api/payroll/employees", json={
        "employee_code": "EMP001", "first_name": "A", "last_name": "B", "hire_date": "2025-01-01", "position": "X",
    })
    assert dup.status_code == 409

    updated = manager_client.put(f"/api/payroll/employees/{employee['id']}", json={"department": "Front desk"})
    assert updated.json()["department"] == "Front desk"

    assert cashier_client.get("/api/payroll/employees").status_code == 403
    assert manager_client.delete(f"/api/payroll/employees/{employee['id']}").status_code == 403
    assert admin_client.delete(f"/api/payroll/employees/{employee['id']}").status_code == 200


def test_new_structure_replaces_active_one(manager_client, employee):
    manager_client.post("/api/payroll/salary-structures", json={
        "employee_id": employee["id"], "basic_salary": 28000, "effective_from": "2026-04-01",
    })

    history = manager_client.get(f"/api/payroll/employees/{employee['id']}/salary-structures").json()

    assert [(s["basic_salary"], s["is_active"]) for s in history] == [(28000, True), (26000, False)]
    assert history[1]["effective_to"] == "2026-04-01"


def test_attendance_hours(manager_client, employee):
    path = "/api/payroll/attendance"
    day = {"employee_id": employee["id"], "date": "2026-03-02",
           "check_in_time": "09:00", "check_out_time": "19:00", "break_minutes": 60}

    row = manager_client.post(path, json=day).json()
    assert (row["total_hours"], row["overtime_hours"]) == (9.0, 1.0)

    assert manager_client.post(path, json=day).status_code == 409
    backwards = dict(day, date="2026-03-03", check_in_time="18:00", check_out_time="09:00")
    assert manager_client.post(path, json=backwards).status_code == 400
    assert manager_client.post(path, json=dict(day, date="2026-03-04", check_in_time="9am")).status_code == 422


def test_leave_workflow(manager_client, employee):
    leave = manager_client.post("/api/payroll/leaves", json={
        "employee_id": employee["id"], "leave_type": "casual",
        "start_date": "2026-03-10", "end_date": "2026-03-12", "reason": "Family function",
    }).json()
    assert leave["total_days"] == 3
    assert leave["employee_name"] == "Asha Patel"

    approved = manager_client.put(f"/api/payroll/leaves/{leave['id']}/approve").json()
    assert approved["status"] == "approved"
    assert manager_client.put(f"/api/payroll/leaves/{leave['id']}/cancel").status_code == 400

    other = manager_client.post("/api/payroll/leaves", json={
        "employee_id": employee["id"], "leave_type": "sick",
        "start_date": "2026-03-20", "end_date": "2026-03-20", "reason": "Fever",
    }).json()
    rejected = manager_client.put(f"/api/payroll/leaves/{other['id']}/reject",
                                  json={"rejection_reason": "Stock take day"}).json()
    assert rejected["rejection_reason"] == "Stock take day"

    bad = manager_client.post("/api/payroll/leaves", json={
        "employee_id": employee["id"], "leave_type": "casual",
        "start_date": "2026-03-12", "end_date": "2026-03-10", "reason": "x",
    })
    assert bad.status_code == 422


def test_advance_approval_clamps_recovery(manager_client, employee):
    advance = manager_client.post("/api/payroll/advances",
                                  json={"employee_id": employee["id"], "amount": 1000, "reason": "Rent"}).json()
    assert advance["status"] == "pending"

    approved = manager_client.put(f"/api/payroll/advances/{advance['id']}/approve",
                                  json={"monthly_recovery_amount": 1500}).json()

    assert approved["monthly_recovery_amount"] == 1000
    assert approved["remaining_amount"] == 1000
    assert manager_client.put(f"/api/payroll/advances/{advance['id']}/reject").status_code == 400


def test_generate_payroll(manager_client, employee, make_employee):
    make_employee(code="EMP002", first_name="Ravi")
    manager_client.post("/api/payroll/attendance", json={
        "employee_id": employee["id"], "date": "2026-03-02",
        "check_in_time": "09:00", "check_out_time": "19:00", "break_minutes": 60,
    })
    leave = manager_client.post("/api/payroll/leaves", json={
        "employee_id": employee["id"], "leave_type": "unpaid",
        "start_date": "2026-03-30", "end_date": "2026-04-02", "reason": "Travel",
    }).json()
    manager_client.put(f"/api/payroll/leaves/{leave['id']}/approve")
    advance = manager_client.post("/api/payroll/advances",
                                  json={"employee_id": employee["id"], "amount": 1000, "reason": "Rent"}).json()
    manager_client.put(f"/api/payroll/advances/{advance['id']}/approve", json={"monthly_recovery_amount": 1500})

    resp = manager_client.post("/api/payroll/generate", json=MARCH)

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert [s["reason"] for s in body["skipped"]] == ["No active salary structure"]
    record = body["created"][0]
    assert record["overtime_hours"] == 1.0
    assert record["overtime_amount"] == 187.5
    assert record["gross_salary"] == 32187.5
    # Only the two March days of the leave count
    assert record["leave_deduction"] == 2000.0
    assert record["deductions"] == pytest.approx(5861.41, abs=0.01)
    assert record["advance_recovery"] == 1000.0
    assert record["net_salary"] == pytest.approx(25326.09, abs=0.01)
    assert record["payment_status"] == "pending"

    advances = manager_client.get("/api/payroll/advances", params={"employee_id": employee["id"]}).json()
    assert advances[0]["status"] == "recovered"
    assert advances[0]["remaining_amount"] == 0

    again = manager_client.post("/api/payroll/generate", json=MARCH)
    assert again.status_code == 409


def test_generate_without_active_employees(manager_client):
    resp = manager_client.post("/api/payroll/generate", json=MARCH)

    assert resp.status_code == 400


def test_pay_record_and_summary(manager_client, employee):
    record = manager_client.post("/api/payroll/generate", json=MARCH).json()["created"][0]

    summary = manager_client.get("/api/payroll/summary").json()
    assert summary["active_employees"] == 1
    assert summary["pending_payroll_amount"] == pytest.approx(record["net_salary"], abs=0.01)

    paid = manager_client.put(f"/api/payroll/records/{record['id']}/pay",
                              json={"payment_method": "upi", "bank_reference": "UTR123"}).json()
    assert paid["payment_status"] == "paid"
    assert paid["payment_date"] is not None
    assert manager_client.put(f"/api/payroll/records/{record['id']}/pay", json={}).status_code == 400

    listed = manager_client.get("/api/payroll", params={"payment_status": "paid"}).json()
    assert [r["id"] for r in listed] == [record["id"]]

    summary = manager_client.get("/api/payroll/summary").json()
    assert summary["pending_payroll_amount"] == 0
    assert summary["paid_this_month"] == pytest.approx(record["net_salary"], abs=0.01)


def test_settings_change_rates(manager_client, admin_client, employee):
    assert manager_client.get("/api/payroll/settings").json()["working_days_per_month"] == 26
    assert manager_client.put("/api/payroll/settings", json={"pf_rate": 10}).status_code == 403

    admin_client.put("/api/payroll/settings", json={"pf_rate": 0, "esi_rate": 0})
    record = manager_client.post("/api/payroll/generate", json=MARCH).json()["created"][0]

    assert record["deductions"] == 500.0
    assert record["net_salary"] == 31500.0


def test_employee_with_payroll_cannot_be_deleted(manager_client, admin_client, employee):
    manager_client.post("/api/payroll/generate", json=MARCH)

    assert admin_client.delete(f"/api/payroll/employees/{employee['id']}").status_code == 409
