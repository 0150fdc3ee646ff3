# portal/invportal/apps/catalog/schemas.py

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import EmailStr, Field

from invportal.forms import FormSchema


class CategoryForm(FormSchema):
    name: str
    code: str
    parent_id: Optional[int] = None
    description: Optional[str] = None


class SupplierForm(FormSchema):
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None


class ItemForm(FormSchema):
    name: str
    category_id: int
    unit_id: int
    item_type: Literal["fixed_asset", "consumable"] = "consumable"
    brand: Optional[str] = None
    model: Optional[str] = None
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        # Minimum stock only means something for consumables.
        if self.item_type != "consumable":
            payload["min_stock_level"] = None
        return payload
