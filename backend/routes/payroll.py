# backend/routes/payroll.py
import logging
from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.payroll import (
    Employee, SalaryStructure, Attendance, LeaveApplication, EmployeeAdvance,
    PayrollRecord, PayrollSettings,
)
from models.users import User
from utils.tokenJWT import manager_or_admin, admin_only
from utils.audit import write_log, client_ip
from utils import payroll as calc
import schemas.payroll as payroll_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payroll", tags=["Payroll"])


# ---- HELPERS ----
def get_payroll_settings(db: Session) -> PayrollSettings:
    row = db.query(PayrollSettings).first()
    if not row:
        row = PayrollSettings()
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


def active_structure(db: Session, employee_id: int) -> Optional[SalaryStructure]:
    return (
        db.query(SalaryStructure)
        .filter(SalaryStructure.employee_id == employee_id, SalaryStructure.is_active.is_(True))
        .order_by(SalaryStructure.effective_from.desc())
        .first()
    )


def _with_employee_name(schema, row) -> dict:
    data = schema.model_validate(row).model_dump()
    data["employee_name"] = row.employee.full_name if row.employee else None
    return data


def _pending_or_400(row, label: str) -> None:
    if row.status != "pending":
        raise HTTPException(status_code=400, detail=f"{label} is already {row.status}")


# =========================
# EMPLOYEES
# =========================
@router.get("/employees", response_model=List[payroll_schemas.EmployeeOut])
def list_employees(
    status_filter: Optional[str] = Query(None, alias="status"),
    department: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    query = db.query(Employee)
    if status_filter:
        query = query.filter(Employee.status == status_filter)
    if department:
        query = query.filter(Employee.department == department)
    return query.order_by(Employee.employee_code.asc()).all()


@router.get("/employees/{employee_id}", response_model=payroll_schemas.EmployeeOut)
def get_employee(employee_id: int, db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    return get_employee_or_404(db, employee_id)


@router.post("/employees", response_model=payroll_schemas.EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: payroll_schemas.EmployeeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    if db.query(Employee.id).filter(Employee.employee_code == payload.employee_code).first():
        raise HTTPException(status_code=409, detail="Employee code already exists")
    if payload.email and db.query(Employee.id).filter(func.lower(Employee.email) == payload.email.lower()).first():
        raise HTTPException(status_code=409, detail="Employee email already exists")

    employee = Employee(**payload.model_dump())
    db.add(employee)
    db.commit()
    db.refresh(employee)
    write_log(db, user_id=current_user.id, action="EMPLOYEE_CREATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": employee.id, "code": employee.employee_code})
    return employee


@router.put("/employees/{employee_id}", response_model=payroll_schemas.EmployeeOut)
def update_employee(
    employee_id: int,
    payload: payroll_schemas.EmployeeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    employee = get_employee_or_404(db, employee_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("email"):
        dup = (
            db.query(Employee.id)
            .filter(func.lower(Employee.email) == changes["email"].lower(), Employee.id != employee_id)
            .first()
        )
        if dup:
            raise HTTPException(status_code=409, detail="Employee email already exists")
    for key, value in changes.items():
        setattr(employee, key, value)
    db.commit()
    db.refresh(employee)
    write_log(db, user_id=current_user.id, action="EMPLOYEE_UPDATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": employee.id, "fields": sorted(changes)})
    return employee


@router.delete("/employees/{employee_id}")
def delete_employee(
    employee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    employee = get_employee_or_404(db, employee_id)
    if db.query(PayrollRecord.id).filter(PayrollRecord.employee_id == employee_id).first():
        raise HTTPException(status_code=409, detail="Employee has payroll records; mark them inactive instead")
    for model in (Attendance, LeaveApplication, EmployeeAdvance):
        db.query(model).filter(model.employee_id == employee_id).delete()
    db.delete(employee)
    db.commit()
    write_log(db, user_id=current_user.id, action="EMPLOYEE_DELETE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": employee_id})
    return {"message": "Employee deleted"}


# =========================
# SALARY STRUCTURES
# =========================
@router.post("/salary-structures", response_model=payroll_schemas.SalaryStructureOut,
             status_code=status.HTTP_201_CREATED)
def create_salary_structure(
    payload: payroll_schemas.SalaryStructureCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_employee_or_404(db, payload.employee_id)

    # The new structure replaces the active one
    previous = active_structure(db, payload.employee_id)
    if previous:
        previous.is_active = False
        previous.effective_to = payload.effective_from

    structure = SalaryStructure(**payload.model_dump(), is_active=True)
    db.add(structure)
    db.commit()
    db.refresh(structure)
    write_log(db, user_id=current_user.id, action="SALARY_STRUCTURE_CREATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request),
              meta={"id": structure.id, "employee_id": structure.employee_id,
                    "replaced": previous.id if previous else None})
    return structure


@router.get("/employees/{employee_id}/salary-structures", response_model=List[payroll_schemas.SalaryStructureOut])
def list_salary_structures(employee_id: int, db: Session = Depends(get_db),
                           current_user: User = Depends(manager_or_admin)):
    get_employee_or_404(db, employee_id)
    return (
        db.query(SalaryStructure)
        .filter(SalaryStructure.employee_id == employee_id)
        .order_by(SalaryStructure.effective_from.desc(), SalaryStructure.id.desc())
        .all()
    )


# =========================
# ATTENDANCE
# =========================
@router.post("/attendance", response_model=payroll_schemas.AttendanceOut, status_code=status.HTTP_201_CREATED)
def record_attendance(
    payload: payroll_schemas.AttendanceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_employee_or_404(db, payload.employee_id)
    exists = (
        db.query(Attendance.id)
        .filter(Attendance.employee_id == payload.employee_id, Attendance.date == payload.date)
        .first()
    )
    if exists:
        raise HTTPException(status_code=409, detail="Attendance already recorded for this date")

    settings_row = get_payroll_settings(db)
    try:
        total, overtime = calc.attendance_hours(payload.check_in_time, payload.check_out_time,
                                                payload.break_minutes, settings_row.working_hours_per_day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    row = Attendance(**payload.model_dump(), total_hours=total, overtime_hours=overtime)
    db.add(row)
    db.commit()
    db.refresh(row)
    write_log(db, user_id=current_user.id, action="ATTENDANCE_CREATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": row.id, "employee_id": row.employee_id, "date": str(row.date)})
    return row


@router.get("/attendance", response_model=List[payroll_schemas.AttendanceOut])
def list_attendance(
    employee_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    query = db.query(Attendance)
    if employee_id is not None:
        query = query.filter(Attendance.employee_id == employee_id)
    if date_from:
        query = query.filter(Attendance.date >= date_from)
    if date_to:
        query = query.filter(Attendance.date <= date_to)
    return query.order_by(Attendance.date.desc(), Attendance.id.desc()).all()


# =========================
# LEAVES
# =========================
@router.post("/leaves", response_model=payroll_schemas.LeaveOut, status_code=status.HTTP_201_CREATED)
def apply_leave(
    payload: payroll_schemas.LeaveCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_employee_or_404(db, payload.employee_id)
    leave = LeaveApplication(
        **payload.model_dump(),
        total_days=calc.leave_days(payload.start_date, payload.end_date),
        status="pending",
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)
    write_log(db, user_id=current_user.id, action="LEAVE_APPLY", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": leave.id, "employee_id": leave.employee_id, "days": leave.total_days})
    return _with_employee_name(payroll_schemas.LeaveOut, leave)


@router.get("/leaves", response_model=List[payroll_schemas.LeaveOut])
def list_leaves(
    employee_id: Optional[int] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    query = db.query(LeaveApplication)
    if employee_id is not None:
        query = query.filter(LeaveApplication.employee_id == employee_id)
    if status_filter:
        query = query.filter(LeaveApplication.status == status_filter)
    rows = query.order_by(LeaveApplication.start_date.desc(), LeaveApplication.id.desc()).all()
    return [_with_employee_name(payroll_schemas.LeaveOut, r) for r in rows]


def _get_leave_or_404(db: Session, leave_id: int) -> LeaveApplication:
    leave = db.query(LeaveApplication).filter(LeaveApplication.id == leave_id).first()
    if not leave:
        raise HTTPException(status_code=404, detail="Leave application not found")
    return leave


@router.put("/leaves/{leave_id}/approve", response_model=payroll_schemas.LeaveOut)
def approve_leave(leave_id: int, request: Request, db: Session = Depends(get_db),
                  current_user: User = Depends(manager_or_admin)):
    leave = _get_leave_or_404(db, leave_id)
    _pending_or_400(leave, "Leave application")
    leave.status = "approved"
    leave.approved_by = current_user.id
    leave.approved_at = datetime.now()
    db.commit()
    db.refresh(leave)
    write_log(db, user_id=current_user.id, action="LEAVE_APPROVE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": leave.id})
    return _with_employee_name(payroll_schemas.LeaveOut, leave)


@router.put("/leaves/{leave_id}/reject", response_model=payroll_schemas.LeaveOut)
def reject_leave(leave_id: int, payload: payroll_schemas.LeaveReject, request: Request,
                 db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    leave = _get_leave_or_404(db, leave_id)
    _pending_or_400(leave, "Leave application")
    leave.status = "rejected"
    leave.rejection_reason = payload.rejection_reason
    leave.approved_by = current_user.id
    leave.approved_at = datetime.now()
    db.commit()
    db.refresh(leave)
    write_log(db, user_id=current_user.id, action="LEAVE_REJECT", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": leave.id, "reason": payload.rejection_reason})
    return _with_employee_name(payroll_schemas.LeaveOut, leave)


@router.put("/leaves/{leave_id}/cancel", response_model=payroll_schemas.LeaveOut)
def cancel_leave(leave_id: int, request: Request, db: Session = Depends(get_db),
                 current_user: User = Depends(manager_or_admin)):
    leave = _get_leave_or_404(db, leave_id)
    _pending_or_400(leave, "Leave application")
    leave.status = "cancelled"
    db.commit()
    db.refresh(leave)
    write_log(db, user_id=current_user.id, action="LEAVE_CANCEL", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": leave.id})
    return _with_employee_name(payroll_schemas.LeaveOut, leave)


# =========================
# ADVANCES
# =========================
@router.post("/advances", response_model=payroll_schemas.AdvanceOut, status_code=status.HTTP_201_CREATED)
def request_advance(
    payload: payroll_schemas.AdvanceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    get_employee_or_404(db, payload.employee_id)
    data = payload.model_dump()
    data["request_date"] = data["request_date"] or date.today()
    advance = EmployeeAdvance(**data, status="pending")
    db.add(advance)
    db.commit()
    db.refresh(advance)
    write_log(db, user_id=current_user.id, action="ADVANCE_REQUEST", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": advance.id, "amount": advance.amount})
    return _with_employee_name(payroll_schemas.AdvanceOut, advance)


@router.get("/advances", response_model=List[payroll_schemas.AdvanceOut])
def list_advances(
    employee_id: Optional[int] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    query = db.query(EmployeeAdvance)
    if employee_id is not None:
        query = query.filter(EmployeeAdvance.employee_id == employee_id)
    if status_filter:
        query = query.filter(EmployeeAdvance.status == status_filter)
    rows = query.order_by(EmployeeAdvance.request_date.desc(), EmployeeAdvance.id.desc()).all()
    return [_with_employee_name(payroll_schemas.AdvanceOut, r) for r in rows]


def _get_advance_or_404(db: Session, advance_id: int) -> EmployeeAdvance:
    advance = db.query(EmployeeAdvance).filter(EmployeeAdvance.id == advance_id).first()
    if not advance:
        raise HTTPException(status_code=404, detail="Advance not found")
    return advance


@router.put("/advances/{advance_id}/approve", response_model=payroll_schemas.AdvanceOut)
def approve_advance(advance_id: int, payload: payroll_schemas.AdvanceApprove, request: Request,
                    db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    advance = _get_advance_or_404(db, advance_id)
    _pending_or_400(advance, "Advance")
    advance.status = "approved"
    advance.approved_by = current_user.id
    advance.approval_date = date.today()
    advance.monthly_recovery_amount = min(payload.monthly_recovery_amount, advance.amount)
    advance.remaining_amount = advance.amount
    if payload.notes:
        advance.notes = payload.notes
    db.commit()
    db.refresh(advance)
    write_log(db, user_id=current_user.id, action="ADVANCE_APPROVE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": advance.id, "monthly": advance.monthly_recovery_amount})
    return _with_employee_name(payroll_schemas.AdvanceOut, advance)


@router.put("/advances/{advance_id}/reject", response_model=payroll_schemas.AdvanceOut)
def reject_advance(advance_id: int, request: Request, db: Session = Depends(get_db),
                   current_user: User = Depends(manager_or_admin)):
    advance = _get_advance_or_404(db, advance_id)
    _pending_or_400(advance, "Advance")
    advance.status = "rejected"
    advance.approved_by = current_user.id
    db.commit()
    db.refresh(advance)
    write_log(db, user_id=current_user.id, action="ADVANCE_REJECT", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": advance.id})
    return _with_employee_name(payroll_schemas.AdvanceOut, advance)


# =========================
# SETTINGS
# =========================
@router.get("/settings", response_model=payroll_schemas.PayrollSettingsOut)
def read_payroll_settings(db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    return get_payroll_settings(db)


@router.put("/settings", response_model=payroll_schemas.PayrollSettingsOut)
def update_payroll_settings(
    payload: payroll_schemas.PayrollSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    row = get_payroll_settings(db)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    write_log(db, user_id=current_user.id, action="PAYROLL_SETTINGS_UPDATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"fields": sorted(changes)})
    return row


# =========================
# PAYROLL RUNS
# =========================
@router.post("/generate", response_model=payroll_schemas.PayrollGenerateResult, status_code=status.HTTP_201_CREATED)
def generate_payroll(
    payload: payroll_schemas.PayrollGenerate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    start, end = payload.pay_period_start, payload.pay_period_end
    cfg = get_payroll_settings(db)

    query = db.query(Employee).filter(Employee.status == "active")
    if payload.employee_ids:
        query = query.filter(Employee.id.in_(payload.employee_ids))
    employees = query.order_by(Employee.id.asc()).all()
    if not employees:
        raise HTTPException(status_code=400, detail="No active employees for this payroll run")

    done = {
        eid for (eid,) in db.query(PayrollRecord.employee_id).filter(
            PayrollRecord.employee_id.in_([e.id for e in employees]),
            PayrollRecord.pay_period_start == start,
            PayrollRecord.pay_period_end == end,
        ).all()
    }
    if done:
        raise HTTPException(status_code=409, detail=f"Payroll already generated for employees {sorted(done)}")

    created, skipped = [], []
    try:
        for employee in employees:
            structure = active_structure(db, employee.id)
            if not structure:
                skipped.append({"employee_id": employee.id, "reason": "No active salary structure"})
                continue

            overtime = (
                db.query(func.coalesce(func.sum(Attendance.overtime_hours), 0))
                .filter(Attendance.employee_id == employee.id, Attendance.date >= start, Attendance.date <= end)
                .scalar()
            )
            unpaid = sum(
                calc.overlap_days(l.start_date, l.end_date, start, end)
                for l in db.query(LeaveApplication).filter(
                    LeaveApplication.employee_id == employee.id,
                    LeaveApplication.status == "approved",
                    LeaveApplication.leave_type == "unpaid",
                    LeaveApplication.start_date <= end,
                    LeaveApplication.end_date >= start,
                ).all()
            )
            advances = (
                db.query(EmployeeAdvance)
                .filter(EmployeeAdvance.employee_id == employee.id, EmployeeAdvance.status == "approved",
                        EmployeeAdvance.remaining_amount > 0)
                .order_by(EmployeeAdvance.approval_date.asc(), EmployeeAdvance.id.asc())
                .all()
            )

            amounts = calc.compute_payroll(
                structure,
                working_days=cfg.working_days_per_month,
                hours_per_day=cfg.working_hours_per_day,
                overtime_rate=cfg.overtime_rate,
                pf_rate=cfg.pf_rate,
                esi_rate=cfg.esi_rate,
                overtime_hours=float(overtime or 0),
                unpaid_leave_days=unpaid,
                advance_monthly=sum(a.monthly_recovery_amount or 0 for a in advances),
                advance_remaining=sum(a.remaining_amount or 0 for a in advances),
            )

            # Oldest advance is recovered first
            left = amounts["advance_recovery"]
            for advance in advances:
                if left <= 0:
                    break
                take = min(advance.monthly_recovery_amount or 0, advance.remaining_amount or 0, left)
                advance.remaining_amount = round((advance.remaining_amount or 0) - take, 2)
                left = round(left - take, 2)
                if advance.remaining_amount <= 0:
                    advance.remaining_amount = 0
                    advance.status = "recovered"

            record = PayrollRecord(employee_id=employee.id, pay_period_start=start, pay_period_end=end,
                                   payment_status="pending", **amounts)
            db.add(record)
            created.append(record)

        db.commit()
    except HTTPException:
        db.rollback()
        raise

    for record in created:
        db.refresh(record)
    logger.info("Payroll %s..%s: %d created, %d skipped", start, end, len(created), len(skipped))
    write_log(db, user_id=current_user.id, action="PAYROLL_GENERATE", resource="payroll", status="SUCCESS",
              ip=client_ip(request),
              meta={"period": [str(start), str(end)], "created": len(created), "skipped": len(skipped)})
    return {
        "created": [_with_employee_name(payroll_schemas.PayrollRecordOut, r) for r in created],
        "skipped": skipped,
    }


@router.put("/records/{record_id}/pay", response_model=payroll_schemas.PayrollRecordOut)
def mark_paid(
    record_id: int,
    payload: payroll_schemas.PayrollPay,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    record = db.query(PayrollRecord).filter(PayrollRecord.id == record_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Payroll record not found")
    if record.payment_status == "paid":
        raise HTTPException(status_code=400, detail="Payroll record is already paid")

    record.payment_status = "paid"
    record.payment_method = payload.payment_method
    record.bank_reference = payload.bank_reference
    record.payment_date = payload.payment_date or date.today()
    db.commit()
    db.refresh(record)
    write_log(db, user_id=current_user.id, action="PAYROLL_PAY", resource="payroll", status="SUCCESS",
              ip=client_ip(request), meta={"id": record.id, "net": record.net_salary})
    return _with_employee_name(payroll_schemas.PayrollRecordOut, record)


@router.get("", response_model=List[payroll_schemas.PayrollRecordOut])
def list_payroll(
    employee_id: Optional[int] = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    payment_status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    query = db.query(PayrollRecord)
    if employee_id is not None:
        query = query.filter(PayrollRecord.employee_id == employee_id)
    if period_start:
        query = query.filter(PayrollRecord.pay_period_start >= period_start)
    if period_end:
        query = query.filter(PayrollRecord.pay_period_end <= period_end)
    if payment_status:
        query = query.filter(PayrollRecord.payment_status == payment_status)
    rows = query.order_by(PayrollRecord.pay_period_start.desc(), PayrollRecord.id.desc()).all()
    return [_with_employee_name(payroll_schemas.PayrollRecordOut, r) for r in rows]


@router.get("/summary", response_model=payroll_schemas.PayrollSummary)
def payroll_summary(db: Session = Depends(get_db), current_user: User = Depends(manager_or_admin)):
    month_start = date.today().replace(day=1)
    return {
        "active_employees": db.query(Employee).filter(Employee.status == "active").count(),
        "pending_leaves": db.query(LeaveApplication).filter(LeaveApplication.status == "pending").count(),
        "pending_advances": db.query(EmployeeAdvance).filter(EmployeeAdvance.status == "pending").count(),
        "outstanding_advances": round(float(
            db.query(func.coalesce(func.sum(EmployeeAdvance.remaining_amount), 0))
            .filter(EmployeeAdvance.status == "approved").scalar() or 0), 2),
        "pending_payroll_amount": round(float(
            db.query(func.coalesce(func.sum(PayrollRecord.net_salary), 0))
            .filter(PayrollRecord.payment_status == "pending").scalar() or 0), 2),
        "paid_this_month": round(float(
            db.query(func.coalesce(func.sum(PayrollRecord.net_salary), 0))
            .filter(PayrollRecord.payment_status == "paid", PayrollRecord.payment_date >= month_start)
            .scalar() or 0), 2),
    }
