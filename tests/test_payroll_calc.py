from datetime import date
from types import SimpleNamespace

import pytest

from utils import payroll as calc


def make_structure(**overrides):
    data = dict(
        basic_salary=26000.0, hra=5000.0, da=0.0, medical_allowance=0.0,
        transport_allowance=1000.0, other_allowances=0.0,
        pf_deduction=0.0, esi_deduction=0.0, tax_deduction=500.0, other_deductions=0.0,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def test_attendance_hours_with_break_and_overtime():
    assert calc.attendance_hours("09:00", "18:30", break_minutes=30, hours_per_day=8) == (9.0, 1.0)
    assert calc.attendance_hours("09:00", "13:00") == (4.0, 0.0)


def test_attendance_hours_missing_times():
    assert calc.attendance_hours(None, "18:00") == (0.0, 0.0)
    assert calc.attendance_hours("09:00", None) == (0.0, 0.0)


def test_attendance_hours_rejects_bad_times():
    with pytest.raises(ValueError, match="before check-in"):
        calc.attendance_hours("18:00", "09:00")
    with pytest.raises(ValueError, match="Invalid time"):
        calc.attendance_hours("25:00", "26:00")


def test_leave_days_are_inclusive():
    assert calc.leave_days(date(2026, 3, 1), date(2026, 3, 3)) == 3
    assert calc.leave_days(date(2026, 3, 1), date(2026, 3, 1)) == 1
    with pytest.raises(ValueError):
        calc.leave_days(date(2026, 3, 3), date(2026, 3, 1))


def test_overlap_days():
    march = (date(2026, 3, 1), date(2026, 3, 31))

    assert calc.overlap_days(date(2026, 2, 27), date(2026, 3, 3), *march) == 3
    assert calc.overlap_days(date(2026, 3, 30), date(2026, 4, 2), *march) == 2
    assert calc.overlap_days(date(2026, 2, 1), date(2026, 2, 5), *march) == 0


def test_compute_payroll_full_run():
    result = calc.compute_payroll(
        make_structure(),
        overtime_hours=4, unpaid_leave_days=2,
        advance_monthly=3000, advance_remaining=1000,
    )

    # hourly rate 26000 / (26 * 8) = 125
    assert result["overtime_amount"] == 750.0
    assert result["allowances"] == 6000.0
    assert result["gross_salary"] == 32750.0
    assert result["leave_deduction"] == 2000.0
    # PF 3120 + ESI 245.625 + tax 500 + leave 2000
    assert result["deductions"] == pytest.approx(5865.63, abs=0.01)
    assert result["advance_recovery"] == 1000.0
    assert result["net_salary"] == pytest.approx(25884.38, abs=0.01)


def test_structure_deductions_override_rates():
    result = calc.compute_payroll(make_structure(pf_deduction=1000, esi_deduction=100, tax_deduction=0))

    assert result["deductions"] == 1100.0
    assert result["net_salary"] == 32000.0 - 1100.0


def test_net_salary_never_negative():
    result = calc.compute_payroll(
        make_structure(other_deductions=100000),
        advance_monthly=500, advance_remaining=500,
    )

    assert result["net_salary"] == 0.0
    assert result["advance_recovery"] == 0.0
