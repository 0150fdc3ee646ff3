# portal/invportal/apps/administration/pages.py
"""Departments, units of measure, employees and user accounts."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from invportal import lookups
from invportal.crud import (
    Cell,
    Column,
    FormDialog,
    FormField,
    PageMessages,
    ResourcePage,
    initial_values,
)
from invportal.formatting import generate_strong_password, person_name
from invportal.listing import ListFilter, Row, equals, field_of

from .schemas import DepartmentForm, EmployeeForm, UnitForm, UserForm

# ---------------------------------------------------------------------------
# DEPARTMENTS
# ---------------------------------------------------------------------------

_department_fields = (
    FormField("name", "Name", required=True, full_width=True),
    FormField("code", "Code", required=True, placeholder="e.g. NOD"),
    FormField("description", "Description", kind="textarea", full_width=True),
)

DEPARTMENTS = ResourcePage(
    slug="departments",
    title="Departments",
    subtitle="Manage organizational departments",
    noun="Department",
    resource=lambda api: api.departments,
    columns=(
        Column("Code", field_of("code"), mono=True),
        Column("Name", field_of("name")),
    ),
    search_fields=(field_of("name"), field_of("code")),
    search_placeholder="Search departments…",
    create_dialog=FormDialog(
        title="Add Department",
        submit_label="Save",
        fields=_department_fields,
        schema=DepartmentForm,
        success_message="Department created.",
    ),
    edit_dialog=FormDialog(
        title="Edit Department",
        submit_label="Update",
        fields=_department_fields,
        schema=DepartmentForm,
        success_message="Department updated.",
    ),
    initial=lambda row: initial_values(row, ("name", "code", "description")),
    messages=PageMessages(
        deleted="Department deleted.",
        delete_failed="Cannot delete: department has related records.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete department "{row.get("name")}"?',
    empty_message="No departments found.",
)

# ---------------------------------------------------------------------------
# UNITS
# ---------------------------------------------------------------------------

_unit_fields = (
    FormField("name", "Name", required=True, placeholder="e.g. Kilogram"),
    FormField("abbreviation", "Abbreviation", required=True, placeholder="e.g. kg"),
)

UNITS = ResourcePage(
    slug="units",
    title="Units of Measure",
    subtitle="Define measurement units for items",
    noun="Unit",
    resource=lambda api: api.units,
    columns=(
        Column("Name", field_of("name")),
        Column("Abbreviation", field_of("abbreviation"), mono=True),
        Column("Items", lambda row: row.get("items_count") or 0),
    ),
    search_fields=(field_of("name"), field_of("abbreviation")),
    search_placeholder="Search units…",
    create_dialog=FormDialog(
        title="Add Unit",
        submit_label="Save",
        fields=_unit_fields,
        schema=UnitForm,
        success_message="Unit created.",
        size="sm",
    ),
    edit_dialog=FormDialog(
        title="Edit Unit",
        submit_label="Update",
        fields=_unit_fields,
        schema=UnitForm,
        success_message="Unit updated.",
        size="sm",
    ),
    initial=lambda row: initial_values(row, ("name", "abbreviation")),
    messages=PageMessages(
        deleted="Unit deleted.",
        delete_failed="Cannot delete: unit is in use.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete unit "{row.get("name")}"?',
    empty_message="No units found.",
)

# ---------------------------------------------------------------------------
# EMPLOYEES
# ---------------------------------------------------------------------------

EMPLOYEE_STATUSES = (("active", "Active"), ("inactive", "Inactive"))

_employee_fields = (
    FormField("employee_id", "Employee ID", required=True, locked_on_edit=True),
    FormField(
        "department_id",
        "Department",
        kind="select",
        required=True,
        lookup="departments",
        blank_label="Select department",
    ),
    FormField("first_name", "First Name", required=True),
    FormField("last_name", "Last Name", required=True),
    FormField("position", "Position"),
    FormField("status", "Status", kind="select", choices=EMPLOYEE_STATUSES),
    FormField("email", "Email", kind="email"),
    FormField("phone", "Phone"),
)


EMPLOYEES = ResourcePage(
    slug="employees",
    title="Employees",
    subtitle="Manage employee records",
    noun="Employee",
    resource=lambda api: api.employees,
    columns=(
        Column("Employee ID", field_of("employee_id"), mono=True),
        Column("Name", person_name),
        Column("Department", field_of("department", "name")),
        Column("Position", field_of("position")),
        Column("Email", field_of("email")),
        Column("Status", field_of("status"), badge=True),
    ),
    search_fields=(
        field_of("first_name"),
        field_of("last_name"),
        field_of("employee_id"),
        field_of("position"),
    ),
    search_placeholder="Search by name, ID, position…",
    filters=(
        ListFilter("status", "All Status", EMPLOYEE_STATUSES, equals("status")),
    ),
    create_dialog=FormDialog(
        title="Add Employee",
        submit_label="Save",
        fields=_employee_fields,
        schema=EmployeeForm,
        success_message="Employee created.",
        size="lg",
    ),
    edit_dialog=FormDialog(
        title="Edit Employee",
        submit_label="Update",
        fields=_employee_fields,
        schema=EmployeeForm,
        success_message="Employee updated.",
        size="lg",
    ),
    initial=lambda row: initial_values(
        row,
        ("employee_id", "department_id", "first_name", "last_name", "position", "status", "email", "phone"),
        {"status": "active"},
    ),
    lookups={"departments": lookups.departments},
    messages=PageMessages(
        deleted="Employee deleted.",
        delete_failed="Cannot delete: employee has active assignments.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete employee "{row.get("first_name")} {row.get("last_name")}"?',
    empty_message="No employees found.",
)

# ---------------------------------------------------------------------------
# USER ACCOUNTS
# ---------------------------------------------------------------------------

USER_TYPES = (("system_administrator", "Administrator"), ("employee", "Employee"))


def _role_cell(row: Row) -> Cell:
    user_type = row.get("user_type")
    if user_type == "system_administrator":
        return Cell("Administrator", badge=user_type)
    count = len(row.get("permissions") or [])
    note = f"{count} permission{'s' if count != 1 else ''}"
    return Cell("Employee", badge="employee", note=note)


def _user_fields(editing: bool):
    password_label = "New Password" if editing else "Password"
    password_hint = "Leave blank to keep the current password." if editing else ""
    return (
        FormField("name", "Full Name", required=True, full_width=True),
        FormField("email", "Email Address", kind="email", required=True, full_width=True),
        FormField("user_type", "Role", kind="select", choices=USER_TYPES),
        FormField(
            "department_id",
            "Department",
            kind="select",
            lookup="departments",
            blank_label="Select department",
            depends_on=("user_type", "employee"),
        ),
        FormField("password", password_label, kind="password", required=not editing, hint=password_hint),
        FormField("password_confirmation", "Confirm Password", kind="password", required=not editing),
        FormField(
            "permissions",
            "Permissions",
            kind="permissions",
            full_width=True,
            depends_on=("user_type", "employee"),
        ),
    )


def _suggested_password(params: Mapping[str, str]) -> Dict[str, Any]:
    if not params.get("generate"):
        return {}
    password = generate_strong_password()
    return {
        "password": password,
        "password_confirmation": password,
        "suggested_password": password,
    }


def _user_initial(row: Optional[Row]) -> Dict[str, Any]:
    values = initial_values(
        row,
        ("name", "email", "user_type", "department_id", "permissions"),
        {"user_type": "employee", "permissions": []},
    )
    if values.get("permissions") == "":
        values["permissions"] = []
    values["password"] = ""
    values["password_confirmation"] = ""
    return values


def _own_account(row: Row, user) -> Optional[str]:
    if str(row.get("id")) == str(user.id):
        return "Cannot delete own account"
    return None


USERS = ResourcePage(
    slug="users",
    title="User Accounts",
    subtitle="Manage system user accounts and roles",
    noun="User",
    resource=lambda api: api.users,
    columns=(
        Column("Name", field_of("name")),
        Column("Email", field_of("email")),
        Column("Role", _role_cell),
        Column("Department", field_of("department", "name")),
    ),
    search_fields=(field_of("name"), field_of("email")),
    search_placeholder="Search by name or email…",
    filters=(
        ListFilter("role", "All Roles", USER_TYPES, equals("user_type")),
    ),
    create_dialog=FormDialog(
        title="Add User",
        submit_label="Create User",
        fields=_user_fields(False),
        schema=UserForm,
        success_message="User created.",
        surface_backend_message=True,
        size="lg",
    ),
    edit_dialog=FormDialog(
        title="Edit User",
        submit_label="Update User",
        fields=_user_fields(True),
        schema=UserForm,
        success_message="User updated.",
        surface_backend_message=True,
        size="lg",
    ),
    initial=_user_initial,
    create_defaults=_suggested_password,
    lookups={"departments": lookups.departments},
    messages=PageMessages(
        deleted="User deleted.",
        delete_failed="Cannot delete this user.",
        surface_delete_message=True,
    ),
    deletable=True,
    delete_prompt=lambda row: (
        f'Permanently delete "{row.get("name")}" ({row.get("email")})? '
        "This action cannot be undone."
    ),
    delete_blocked=_own_account,
    create_label="Add User",
    empty_message="No users found.",
    admin_only=True,
)

PAGES = (DEPARTMENTS, UNITS, EMPLOYEES, USERS)
