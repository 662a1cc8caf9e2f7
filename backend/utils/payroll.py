# utils/payroll.py
"""Attendance hours, leave days and the monthly payroll calculation."""
from datetime import date
from typing import Optional


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    hours, minutes = int(hours), int(minutes)
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time: {hhmm}")
    return hours * 60 + minutes


def attendance_hours(check_in: Optional[str], check_out: Optional[str],
                     break_minutes: int = 0, hours_per_day: float = 8) -> tuple:
    """(total_hours, overtime_hours) for one attendance day."""
    if not check_in or not check_out:
        return 0.0, 0.0
    worked = _minutes(check_out) - _minutes(check_in)
    if worked < 0:
        raise ValueError("Check-out time is before check-in time")
    worked = max(worked - (break_minutes or 0), 0)
    total = round(worked / 60, 2)
    overtime = round(max(total - hours_per_day, 0), 2)
    return total, overtime


def leave_days(start: date, end: date) -> int:
    if end < start:
        raise ValueError("End date must be on or after start date")
    return (end - start).days + 1


def overlap_days(start: date, end: date, period_start: date, period_end: date) -> int:
    lo, hi = max(start, period_start), min(end, period_end)
    return (hi - lo).days + 1 if hi >= lo else 0


def compute_payroll(structure, *, working_days: int = 26, hours_per_day: float = 8,
                    overtime_rate: float = 1.5, pf_rate: float = 12.0, esi_rate: float = 0.75,
                    overtime_hours: float = 0, unpaid_leave_days: int = 0,
                    advance_monthly: float = 0, advance_remaining: float = 0) -> dict:
    """
    structure: anything with the SalaryStructure amount fields.

    PF / ESI come from the structure; when zero they are derived from the
    settings rates (PF on basic, ESI on gross).
    """
    basic = structure.basic_salary or 0
    allowances = (
        (structure.hra or 0) + (structure.da or 0) + (structure.medical_allowance or 0)
        + (structure.transport_allowance or 0) + (structure.other_allowances or 0)
    )

    hourly = basic / (working_days * hours_per_day) if working_days and hours_per_day else 0
    overtime_amount = overtime_hours * hourly * overtime_rate
    gross = basic + allowances + overtime_amount

    pf = structure.pf_deduction or basic * pf_rate / 100
    esi = structure.esi_deduction or gross * esi_rate / 100
    deductions = pf + esi + (structure.tax_deduction or 0) + (structure.other_deductions or 0)

    leave_deduction = basic / working_days * unpaid_leave_days if working_days else 0
    deductions += leave_deduction

    net_before_recovery = max(gross - deductions, 0)
    advance_recovery = max(min(advance_monthly or 0, advance_remaining or 0, net_before_recovery), 0)
    net = max(net_before_recovery - advance_recovery, 0)

    return {
        "basic_salary": round(basic, 2),
        "allowances": round(allowances, 2),
        "overtime_hours": round(overtime_hours, 2),
        "overtime_amount": round(overtime_amount, 2),
        "gross_salary": round(gross, 2),
        "deductions": round(deductions, 2),
        "leave_deduction": round(leave_deduction, 2),
        "advance_recovery": round(advance_recovery, 2),
        "net_salary": round(net, 2),
    }
