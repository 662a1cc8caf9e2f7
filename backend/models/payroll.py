from sqlalchemy import (
    Column, Integer, String, Float, Boolean, Date, DateTime, ForeignKey,
    UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String, unique=True, nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    phone = Column(String, nullable=True)
    hire_date = Column(Date, nullable=False)
    department = Column(String, nullable=True)
    position = Column(String, nullable=False)
    employment_type = Column(String, nullable=False, default="full_time")
    status = Column(String, nullable=False, default="active", index=True)
    address = Column(String, nullable=True)
    bank_account_number = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    ifsc_code = Column(String, nullable=True)
    pan_number = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    salary_structures = relationship("SalaryStructure", back_populates="employee", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Monthly pay components of an employee; one active row per employee
class SalaryStructure(Base):
    __tablename__ = "salary_structures"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    basic_salary = Column(Float, nullable=False)
    hra = Column(Float, nullable=False, default=0)
    da = Column(Float, nullable=False, default=0)
    medical_allowance = Column(Float, nullable=False, default=0)
    transport_allowance = Column(Float, nullable=False, default=0)
    other_allowances = Column(Float, nullable=False, default=0)
    pf_deduction = Column(Float, nullable=False, default=0)
    esi_deduction = Column(Float, nullable=False, default=0)
    tax_deduction = Column(Float, nullable=False, default=0)
    other_deductions = Column(Float, nullable=False, default=0)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", back_populates="salary_structures")


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    check_in_time = Column(String, nullable=True)   # HH:MM
    check_out_time = Column(String, nullable=True)
    break_minutes = Column(Integer, nullable=False, default=0)
    total_hours = Column(Float, nullable=False, default=0)
    overtime_hours = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default="present")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )


class LeaveApplication(Base):
    __tablename__ = "leave_applications"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee")


class EmployeeAdvance(Base):
    __tablename__ = "employee_advances"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    reason = Column(String, nullable=False)
    request_date = Column(Date, nullable=False)
    approval_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    monthly_recovery_amount = Column(Float, nullable=True)
    remaining_amount = Column(Float, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee")


# Result of a payroll run for one employee and pay period
class PayrollRecord(Base):
    __tablename__ = "payroll_records"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    pay_period_start = Column(Date, nullable=False)
    pay_period_end = Column(Date, nullable=False)
    basic_salary = Column(Float, nullable=False)
    allowances = Column(Float, nullable=False, default=0)
    overtime_hours = Column(Float, nullable=False, default=0)
    overtime_amount = Column(Float, nullable=False, default=0)
    gross_salary = Column(Float, nullable=False)
    deductions = Column(Float, nullable=False, default=0)
    leave_deduction = Column(Float, nullable=False, default=0)
    advance_recovery = Column(Float, nullable=False, default=0)
    net_salary = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=True)
    payment_method = Column(String, nullable=False, default="bank_transfer")
    payment_status = Column(String, nullable=False, default="pending", index=True)
    bank_reference = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee")

    __table_args__ = (
        UniqueConstraint("employee_id", "pay_period_start", "pay_period_end", name="uq_payroll_employee_period"),
    )


# Company-wide payroll parameters (single row)
class PayrollSettings(Base):
    __tablename__ = "payroll_settings"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String, nullable=True)
    pay_frequency = Column(String, nullable=False, default="monthly")
    working_days_per_month = Column(Integer, nullable=False, default=26)
    working_hours_per_day = Column(Integer, nullable=False, default=8)
    overtime_rate = Column(Float, nullable=False, default=1.5)
    pf_rate = Column(Float, nullable=False, default=12.0)
    esi_rate = Column(Float, nullable=False, default=0.75)
    casual_leaves_per_year = Column(Integer, nullable=False, default=12)
    sick_leaves_per_year = Column(Integer, nullable=False, default=12)
    annual_leaves_per_year = Column(Integer, nullable=False, default=21)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
