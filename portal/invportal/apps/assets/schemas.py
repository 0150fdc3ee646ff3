# portal/invportal/apps/assets/schemas.py

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import Field, field_validator

from invportal.forms import FormSchema

Condition = Literal["new", "good", "fair", "poor", "damaged"]

RECIPIENT_TYPES = ("employee", "department")


def split_recipient(value: str) -> Tuple[str, int]:
    """'employee:12' -> ('employee', 12)."""
    kind, _, raw_id = value.partition(":")
    if kind not in RECIPIENT_TYPES or not raw_id.isdigit():
        raise ValueError("Select an employee or a department.")
    return kind, int(raw_id)


class ItemAssetForm(FormSchema):
    item_id: int
    item_code: str
    serial_number: Optional[str] = None
    condition: Condition = "new"
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    warranty_expiry: Optional[date] = None
    department_id: Optional[int] = None
    notes: Optional[str] = None


class AssignAssetForm(FormSchema):
    assignee: str
    assigned_at: date
    expected_return_date: Optional[date] = None
    condition_on_assign: Condition = "good"
    purpose: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("assignee")
    @classmethod
    def _known_recipient(cls, value: str) -> str:
        split_recipient(value)
        return value

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"assignee"})
        assignable_type, assignable_id = split_recipient(self.assignee)
        payload["assignable_type"] = assignable_type
        payload["assignable_id"] = assignable_id
        return payload


class ReturnAssetForm(FormSchema):
    returned_at: date
    condition_on_return: Condition = "good"
    notes: Optional[str] = None
