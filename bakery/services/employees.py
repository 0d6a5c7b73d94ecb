from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from bakery.gateway import operation
from bakery.utils import as_flag

EMPLOYEE_STATUSES = {"active", "inactive"}
BIRTHDAY_WINDOW_DAYS = 7


@dataclass
class EmployeeInput:
    name: str
    position: str
    base_salary: float
    base_overtime: float
    contact: str
    hire_date: str
    address: Optional[str] = None
    birth_date: Optional[str] = None
    status: str = "active"


@dataclass
class PayrollInput:
    employee_id: int
    period: str
    attendance_days: int
    overtime_days: int
    base_salary: float
    base_overtime: float
    total_salary: Optional[float] = None
    additional_amount: float = 0.0
    additional_description: Optional[str] = None
    additional_show_in_print: bool = True
    deduction_amount: float = 0.0
    deduction_description: Optional[str] = None
    deduction_show_in_print: bool = True

    def computed_total(self) -> float:
        if self.total_salary is not None:
            return float(self.total_salary)
        return (
            int(self.attendance_days) * float(self.base_salary)
            + int(self.overtime_days) * float(self.base_overtime)
            + float(self.additional_amount)
            - float(self.deduction_amount)
        )


def _employee_params(e: EmployeeInput) -> tuple:
    if not str(e.name or "").strip():
        raise ValueError("Employee name is required.")
    if e.status not in EMPLOYEE_STATUSES:
        raise ValueError("Invalid employee status. Use 'active' or 'inactive'.")
    return (
        e.name.strip(),
        e.position,
        float(e.base_salary),
        float(e.base_overtime),
        e.contact,
        e.address or None,
        e.hire_date,
        e.birth_date or None,
    )


@operation
def get_employees(db) -> list[dict]:
    return db.query("SELECT * FROM employees ORDER BY name")


@operation
def add_employee(db, employee: EmployeeInput) -> int:
    return db.insert(
        """
        INSERT INTO employees (
            name, position, base_salary, base_overtime,
            contact, address, hire_date, birth_date, status
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (*_employee_params(employee), employee.status),
    )


@operation
def update_employee(db, employee_id: int, employee: EmployeeInput) -> bool:
    return db.execute(
        """
        UPDATE employees SET
            name = ?,
            position = ?,
            base_salary = ?,
            base_overtime = ?,
            contact = ?,
            address = ?,
            hire_date = ?,
            birth_date = ?,
            status = ?
        WHERE id = ?
        """,
        (*_employee_params(employee), employee.status, int(employee_id)),
    )


@operation
def delete_employee(db, employee_id: int) -> bool:
    return db.execute("DELETE FROM employees WHERE id = ?", (int(employee_id),))


def _next_birthday(birth: date, today: date) -> date:
    for year in (today.year, today.year + 1):
        try:
            candidate = birth.replace(year=year)
        except ValueError:
            # 29 February outside a leap year
            candidate = date(year, 2, 28)
        if candidate >= today:
            return candidate
    return candidate


@operation
def get_upcoming_birthdays(db, today: Optional[date] = None) -> list[dict]:
    """Employees whose birthday falls within the next week (today included)."""
    today = today or date.today()
    out = []
    for e in db.query("SELECT * FROM employees WHERE birth_date IS NOT NULL AND birth_date != ''"):
        try:
            birth = date.fromisoformat(str(e["birth_date"])[:10])
        except ValueError:
            continue
        upcoming = _next_birthday(birth, today)
        days = (upcoming - today).days
        if days <= BIRTHDAY_WINDOW_DAYS:
            e["days_until_birthday"] = days
            e["next_birthday"] = upcoming.isoformat()
            out.append(e)
    out.sort(key=lambda e: (e["days_until_birthday"], e["name"]))
    return out


# ---- payrolls ----

def _payroll_params(p: PayrollInput) -> tuple:
    return (
        int(p.employee_id),
        p.period,
        int(p.attendance_days),
        int(p.overtime_days),
        float(p.base_salary),
        float(p.base_overtime),
        float(p.additional_amount),
        p.additional_description,
        as_flag(p.additional_show_in_print),
        float(p.deduction_amount),
        p.deduction_description,
        as_flag(p.deduction_show_in_print),
        p.computed_total(),
    )


@operation
def get_payrolls(db) -> list[dict]:
    return db.query(
        """
        SELECT p.*, e.name AS employee_name, e.position AS employee_position
        FROM payrolls p
        LEFT JOIN employees e ON p.employee_id = e.id
        ORDER BY p.period DESC, p.id DESC
        """
    )


@operation
def add_payroll(db, payroll: PayrollInput) -> int:
    return db.insert(
        """
        INSERT INTO payrolls (
            employee_id, period, attendance_days, overtime_days,
            base_salary, base_overtime, additional_amount, additional_description,
            additional_show_in_print, deduction_amount, deduction_description,
            deduction_show_in_print, total_salary
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        _payroll_params(payroll),
    )


@operation
def update_payroll(db, payroll_id: int, payroll: PayrollInput) -> bool:
    return db.execute(
        """
        UPDATE payrolls SET
            employee_id = ?,
            period = ?,
            attendance_days = ?,
            overtime_days = ?,
            base_salary = ?,
            base_overtime = ?,
            additional_amount = ?,
            additional_description = ?,
            additional_show_in_print = ?,
            deduction_amount = ?,
            deduction_description = ?,
            deduction_show_in_print = ?,
            total_salary = ?
        WHERE id = ?
        """,
        (*_payroll_params(payroll), int(payroll_id)),
    )


@operation
def delete_payroll(db, payroll_id: int) -> bool:
    return db.execute("DELETE FROM payrolls WHERE id = ?", (int(payroll_id),))
