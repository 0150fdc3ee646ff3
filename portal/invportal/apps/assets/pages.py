# portal/invportal/apps/assets/pages.py
"""Fixed-asset units and their assignment history."""

from __future__ import annotations

from typing import Any, Dict, Optional

from invportal import lookups
from invportal.crud import (
    Column,
    FormDialog,
    FormField,
    PageMessages,
    ResourcePage,
    RowAction,
    initial_values,
)
from invportal.formatting import current_date, format_currency, format_date, party_name
from invportal.listing import ListFilter, Row, equals, field_of

from .schemas import AssignAssetForm, ItemAssetForm, ReturnAssetForm

CONDITIONS = (
    ("new", "New"),
    ("good", "Good"),
    ("fair", "Fair"),
    ("poor", "Poor"),
    ("damaged", "Damaged"),
)

ASSET_STATUSES = (
    ("available", "Available"),
    ("assigned", "Assigned"),
    ("under_repair", "Under Repair"),
    ("disposed", "Disposed"),
)

ASSIGNMENT_STATUSES = (
    ("active", "Active"),
    ("returned", "Returned"),
    ("lost", "Lost"),
)

# ---------------------------------------------------------------------------
# ITEM ASSETS
# ---------------------------------------------------------------------------

_asset_fields = (
    FormField(
        "item_id",
        "Item",
        kind="select",
        required=True,
        lookup="fixed_asset_items",
        blank_label="Select item",
        locked_on_edit=True,
    ),
    FormField("item_code", "Item Code", required=True, placeholder="e.g. NOD-LAP-001", locked_on_edit=True),
    FormField("serial_number", "Serial Number"),
    FormField("condition", "Condition", kind="select", required=True, choices=CONDITIONS),
    FormField("purchase_date", "Purchase Date", kind="date"),
    FormField("purchase_price", "Purchase Price", kind="number", step="0.01"),
    FormField("warranty_expiry", "Warranty Expiry", kind="date"),
    FormField(
        "department_id",
        "Department",
        kind="select",
        lookup="departments",
        blank_label="None",
    ),
    FormField("notes", "Notes", kind="textarea", full_width=True),
)


def _asset_initial(row: Optional[Row]) -> Dict[str, Any]:
    return initial_values(
        row,
        (
            "item_id",
            "item_code",
            "serial_number",
            "condition",
            "purchase_date",
            "purchase_price",
            "warranty_expiry",
            "department_id",
            "notes",
        ),
        {"condition": "new"},
        dates=("purchase_date", "warranty_expiry"),
    )


ASSIGN_DIALOG = FormDialog(
    title="Assign Asset",
    submit_label="Assign",
    fields=(
        FormField(
            "assignee",
            "Assign To",
            kind="select",
            required=True,
            lookup="recipients",
            grouped=True,
            blank_label="Select employee or department",
            error_keys=("assignable_id", "assignable_type"),
            full_width=True,
        ),
        FormField("assigned_at", "Assigned Date", kind="date", required=True),
        FormField("expected_return_date", "Expected Return", kind="date"),
        FormField("condition_on_assign", "Condition on Assign", kind="select", required=True, choices=CONDITIONS),
        FormField("purpose", "Purpose"),
        FormField("notes", "Notes", kind="textarea", full_width=True),
    ),
    schema=AssignAssetForm,
    success_message="Asset assigned successfully.",
    failure_message="Failed to assign asset.",
)

RETURN_DIALOG = FormDialog(
    title="Return Asset",
    submit_label="Confirm Return",
    fields=(
        FormField("returned_at", "Return Date", kind="date", required=True, full_width=True),
        FormField(
            "condition_on_return",
            "Condition on Return",
            kind="select",
            required=True,
            choices=CONDITIONS,
            full_width=True,
        ),
        FormField("notes", "Notes", kind="textarea", full_width=True),
    ),
    schema=ReturnAssetForm,
    success_message="Asset returned.",
    failure_message="Failed to return asset.",
    size="sm",
)


def assign_defaults() -> Dict[str, Any]:
    return {
        "assignee": "",
        "assigned_at": current_date(),
        "expected_return_date": "",
        "condition_on_assign": "good",
        "purpose": "",
        "notes": "",
    }


def return_defaults() -> Dict[str, Any]:
    return {"returned_at": current_date(), "condition_on_return": "good", "notes": ""}


ITEM_ASSETS = ResourcePage(
    slug="item-assets",
    title="Fixed Assets",
    subtitle="Manage physical fixed-asset units with unique item codes",
    noun="Asset",
    resource=lambda api: api.item_assets,
    columns=(
        Column("Item Code", field_of("item_code"), mono=True),
        Column("Item", field_of("item", "name")),
        Column("Dept.", field_of("department", "name")),
        Column("Condition", field_of("condition"), badge=True),
        Column("Status", field_of("status"), badge=True),
        Column("Value", lambda row: format_currency(row.get("purchase_price"))),
        Column("Modified By", field_of("modified_by")),
    ),
    search_fields=(field_of("item_code"), field_of("item", "name"), field_of("serial_number")),
    search_placeholder="Search by code, item name, or serial…",
    filters=(
        ListFilter("status", "All Statuses", ASSET_STATUSES, equals("status")),
    ),
    create_dialog=FormDialog(
        title="Register Asset",
        submit_label="Save",
        fields=_asset_fields,
        schema=ItemAssetForm,
        success_message="Asset created.",
        size="lg",
    ),
    edit_dialog=FormDialog(
        title="Edit Asset",
        submit_label="Update",
        fields=_asset_fields,
        schema=ItemAssetForm,
        success_message="Asset updated.",
        size="lg",
    ),
    initial=_asset_initial,
    lookups={
        "fixed_asset_items": lookups.fixed_asset_items,
        "departments": lookups.departments,
        "recipients": lookups.recipients,
    },
    messages=PageMessages(
        deleted="Asset deleted.",
        delete_failed="Cannot delete: asset has active assignment.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete asset "{row.get("item_code")}"?',
    row_actions=(
        RowAction(
            "Assign",
            lambda row: f"/item-assets/{row.get('id')}/assign",
            when=lambda row: row.get("status") == "available",
            style="success",
        ),
        RowAction(
            "Return",
            lambda row: f"/item-assets/{row.get('id')}/return",
            when=lambda row: row.get("status") == "assigned",
        ),
    ),
    create_label="Add Asset",
    empty_message="No assets found.",
)

# ---------------------------------------------------------------------------
# ASSET ASSIGNMENTS (read-only history)
# ---------------------------------------------------------------------------


def recipient_kind(row: Row) -> str:
    """Backends send either a short type or a model class name."""
    return "Employee" if "employee" in str(row.get("assignable_type") or "").lower() else "Department"


ASSET_ASSIGNMENTS = ResourcePage(
    slug="asset-assignments",
    title="Asset Assignments",
    subtitle="History of fixed-asset assignments and returns (read-only)",
    noun="Assignment",
    resource=lambda api: api.asset_assignments,
    columns=(
        Column("Asset Code", field_of("asset", "item_code"), mono=True),
        Column("Item", field_of("asset", "item", "name")),
        Column("Assigned To", lambda row: party_name(row.get("assignable"))),
        Column("Type", recipient_kind),
        Column("Assigned", lambda row: format_date(row.get("assigned_at"))),
        Column("Expected Return", lambda row: format_date(row.get("expected_return_date"))),
        Column("Returned", lambda row: format_date(row.get("returned_at"))),
        Column("Condition", field_of("condition_on_assign"), badge=True),
        Column("Status", field_of("status"), badge=True),
        Column("Purpose", field_of("purpose")),
    ),
    search_fields=(
        field_of("asset", "item_code"),
        field_of("asset", "item", "name"),
        lambda row: party_name(row.get("assignable")),
    ),
    search_placeholder="Search by asset code, item, or assignee…",
    filters=(
        ListFilter("status", "All Statuses", ASSIGNMENT_STATUSES, equals("status")),
    ),
    empty_message="No assignments found.",
)

PAGES = (ITEM_ASSETS, ASSET_ASSIGNMENTS)
