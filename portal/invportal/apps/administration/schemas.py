# portal/invportal/apps/administration/schemas.py

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from invportal.forms import FormSchema
from invportal.navigation import PERMISSION_KEYS


class DepartmentForm(FormSchema):
    name: str
    code: str
    description: Optional[str] = None


class UnitForm(FormSchema):
    name: str
    abbreviation: str


class EmployeeForm(FormSchema):
    employee_id: str
    department_id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class UserForm(FormSchema):
    """
    User account form.

    Department and permissions only apply to employees; administrators get
    both as null. A blank password on edit keeps the current one.
    """

    verbatim_fields = frozenset({"password", "password_confirmation"})

    name: str
    email: EmailStr
    user_type: Literal["system_administrator", "employee"] = "employee"
    department_id: Optional[int] = None
    password: Optional[str] = Field(default=None, validate_default=True)
    password_confirmation: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)

    @field_validator("password")
    @classmethod
    def _password_required_on_create(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        editing = bool((info.context or {}).get("editing"))
        if not value and not editing:
            raise ValueError("The password field is required.")
        return value

    @field_validator("password_confirmation")
    @classmethod
    def _confirmation_matches(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if password and value != password:
            raise ValueError("The password field confirmation does not match.")
        return value

    @field_validator("permissions", mode="before")
    @classmethod
    def _known_permissions(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [p for p in value if p in PERMISSION_KEYS]

    @property
    def is_employee(self) -> bool:
        return self.user_type == "employee"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "user_type": self.user_type,
            "department_id": self.department_id if self.is_employee else None,
            "permissions": list(self.permissions) if self.is_employee else None,
        }
        if self.password:
            payload["password"] = self.password
            payload["password_confirmation"] = self.password_confirmation
        return payload
