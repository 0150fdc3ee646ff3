# portal/invportal/apps/stock/schemas.py

from __future__ import annotations

from datetime import date
from typing import Any, ClassVar, Dict, Optional, Union

from pydantic import Field, field_validator

from invportal.apps.assets.schemas import split_recipient
from invportal.forms import FormSchema


class _QuantityForm(FormSchema):
    # "5" validates as an int and "2.5" as a float.
    quantity: Union[int, float]

    allow_zero_quantity: ClassVar[bool] = False

    @field_validator("quantity")
    @classmethod
    def _positive(cls, value: Union[int, float]) -> Union[int, float]:
        if value < 0 or (value == 0 and not cls.allow_zero_quantity):
            raise ValueError("The quantity must be greater than zero.")
        return value


class StockAdjustForm(_QuantityForm):
    allow_zero_quantity = True

    item_id: int
    department_id: int
    notes: Optional[str] = None


class StockReceivalForm(_QuantityForm):
    item_id: int
    department_id: int
    unit_cost: Optional[float] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    reference_no: Optional[str] = None
    received_at: date
    notes: Optional[str] = None


class StockIssuanceForm(_QuantityForm):
    item_id: int
    from_department_id: int
    recipient: str
    issued_at: date
    purpose: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("recipient")
    @classmethod
    def _known_recipient(cls, value: str) -> str:
        split_recipient(value)
        return value

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"recipient"})
        issuable_type, issuable_id = split_recipient(self.recipient)
        payload["issuable_type"] = issuable_type
        payload["issuable_id"] = issuable_id
        return payload
