# portal/invportal/apps/accounts/schemas.py

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from invportal.forms import FormSchema

# ---------------------------------------------------------------------------
# CURRENT USER (GET /api/user)
# ---------------------------------------------------------------------------

UserType = Literal["system_administrator", "employee"]


class CurrentUser(BaseModel):
    id: int
    name: str
    email: str
    user_type: UserType
    department_id: Optional[int] = None
    permissions: Optional[List[str]] = None

    @property
    def is_admin(self) -> bool:
        return self.user_type == "system_administrator"

    @property
    def initials(self) -> str:
        words = (self.name or "").split()
        return "".join(word[0] for word in words[:2]).upper()

    def can_access(self, permission: Optional[str]) -> bool:
        """Administrators see everything; employees need the permission key."""
        if not permission:
            return True
        if self.is_admin:
            return True
        return permission in (self.permissions or [])


# ---------------------------------------------------------------------------
# FORMS
# ---------------------------------------------------------------------------


class LoginForm(FormSchema):
    verbatim_fields = frozenset({"password"})

    email: str
    password: str


class ProfileForm(FormSchema):
    name: str
    email: EmailStr


class PasswordForm(FormSchema):
    """Checked here before anything is sent; each message sits on its field."""

    current_password: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)
    password_confirmation: Optional[str] = Field(default=None, validate_default=True)

    verbatim_fields = frozenset({"current_password", "password", "password_confirmation"})

    @field_validator("current_password")
    @classmethod
    def _current_required(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            raise ValueError("Current password is required.")
        return value

    @field_validator("password")
    @classmethod
    def _new_required(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            raise ValueError("New password is required.")
        return value

    @field_validator("password_confirmation")
    @classmethod
    def _confirmation_matches(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if password and value != password:
            raise ValueError("Passwords do not match.")
        return value
