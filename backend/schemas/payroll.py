# schemas/payroll.py
import re
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator, model_validator
from datetime import date, datetime
from typing import List, Literal, Optional

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

EmploymentType = Literal["full_time", "part_time", "contract", "intern"]
EmployeeStatus = Literal["active", "inactive", "terminated"]
LeaveType = Literal["casual", "sick", "annual", "unpaid", "maternity", "paternity"]


def _hhmm(v):
    if v is not None and not _HHMM.match(v):
        raise ValueError("time must be HH:MM")
    return v


# Employees
class EmployeeBase(BaseModel):
    employee_code: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    hire_date: date
    department: Optional[str] = None
    position: str = Field(min_length=1)
    employment_type: EmploymentType = "full_time"
    status: EmployeeStatus = "active"
    address: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_number: Optional[str] = None


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = Field(None, min_length=1)
    employment_type: Optional[EmploymentType] = None
    status: Optional[EmployeeStatus] = None
    address: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_number: Optional[str] = None


class EmployeeOut(EmployeeBase):
    id: int
    email: Optional[str] = None
    full_name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Salary structures
class SalaryStructureCreate(BaseModel):
    employee_id: int
    basic_salary: float = Field(gt=0)
    hra: float = Field(0, ge=0)
    da: float = Field(0, ge=0)
    medical_allowance: float = Field(0, ge=0)
    transport_allowance: float = Field(0, ge=0)
    other_allowances: float = Field(0, ge=0)
    pf_deduction: float = Field(0, ge=0)
    esi_deduction: float = Field(0, ge=0)
    tax_deduction: float = Field(0, ge=0)
    other_deductions: float = Field(0, ge=0)
    effective_from: date


class SalaryStructureOut(SalaryStructureCreate):
    id: int
    effective_to: Optional[date] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# Attendance
class AttendanceCreate(BaseModel):
    employee_id: int
    date: date
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    break_minutes: int = Field(0, ge=0)
    status: Literal["present", "absent", "half_day", "leave", "holiday"] = "present"
    notes: Optional[str] = None

    check_times = field_validator("check_in_time", "check_out_time")(_hhmm)


class AttendanceOut(AttendanceCreate):
    id: int
    total_hours: float
    overtime_hours: float

    model_config = ConfigDict(from_attributes=True)


# Leave applications
class LeaveCreate(BaseModel):
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveReject(BaseModel):
    rejection_reason: str = Field(min_length=1)


class LeaveOut(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Advances
class AdvanceCreate(BaseModel):
    employee_id: int
    amount: float = Field(gt=0)
    reason: str = Field(min_length=1)
    request_date: Optional[date] = None
    notes: Optional[str] = None


class AdvanceApprove(BaseModel):
    monthly_recovery_amount: float = Field(gt=0)
    notes: Optional[str] = None


class AdvanceOut(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    amount: float
    reason: str
    request_date: date
    approval_date: Optional[date] = None
    status: str
    monthly_recovery_amount: Optional[float] = None
    remaining_amount: Optional[float] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Settings
class PayrollSettingsOut(BaseModel):
    id: int
    company_name: Optional[str] = None
    pay_frequency: str
    working_days_per_month: int
    working_hours_per_day: int
    overtime_rate: float
    pf_rate: float
    esi_rate: float
    casual_leaves_per_year: int
    sick_leaves_per_year: int
    annual_leaves_per_year: int

    model_config = ConfigDict(from_attributes=True)


class PayrollSettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    pay_frequency: Optional[Literal["monthly", "weekly", "biweekly"]] = None
    working_days_per_month: Optional[int] = Field(None, ge=1, le=31)
    working_hours_per_day: Optional[int] = Field(None, ge=1, le=24)
    overtime_rate: Optional[float] = Field(None, ge=1)
    pf_rate: Optional[float] = Field(None, ge=0, le=100)
    esi_rate: Optional[float] = Field(None, ge=0, le=100)
    casual_leaves_per_year: Optional[int] = Field(None, ge=0)
    sick_leaves_per_year: Optional[int] = Field(None, ge=0)
    annual_leaves_per_year: Optional[int] = Field(None, ge=0)


# Payroll runs
class PayrollGenerate(BaseModel):
    pay_period_start: date
    pay_period_end: date
    employee_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def check_period(self):
        if self.pay_period_end < self.pay_period_start:
            raise ValueError("pay_period_end must be on or after pay_period_start")
        return self


class PayrollRecordOut(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    pay_period_start: date
    pay_period_end: date
    basic_salary: float
    allowances: float
    overtime_hours: float
    overtime_amount: float
    gross_salary: float
    deductions: float
    leave_deduction: float
    advance_recovery: float
    net_salary: float
    payment_date: Optional[date] = None
    payment_method: str
    payment_status: str
    bank_reference: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PayrollGenerateResult(BaseModel):
    created: List[PayrollRecordOut]
    skipped: List[dict] = []


class PayrollPay(BaseModel):
    payment_method: Literal["bank_transfer", "cash", "cheque", "upi"] = "bank_transfer"
    bank_reference: Optional[str] = None
    payment_date: Optional[date] = None


class PayrollSummary(BaseModel):
    active_employees: int
    pending_leaves: int
    pending_advances: int
    outstanding_advances: float
    pending_payroll_amount: float
    paid_this_month: float
