# portal/invportal/apps/stock/pages.py
"""Consumable stock levels, receivals and issuances."""

from __future__ import annotations

from typing import Any, Dict, Optional

from invportal import lookups
from invportal.crud import Cell, Column, FormDialog, FormField, HeaderAction, ResourcePage, initial_values
from invportal.formatting import current_date, format_currency, format_date, format_number, party_name
from invportal.listing import ListFilter, Row, field_of

from .schemas import StockAdjustForm, StockIssuanceForm, StockReceivalForm


def quantity_with_unit(row: Row) -> str:
    unit = field_of("item", "unit", "abbreviation")(row) or ""
    return f"{format_number(row.get('quantity'))} {unit}".strip()


def recipient_kind(row: Row) -> str:
    return "Employee" if "employee" in str(row.get("issuable_type") or "").lower() else "Department"


# ---------------------------------------------------------------------------
# STOCK LEVELS
# ---------------------------------------------------------------------------

STOCK_LEVELS = (("low", "Below Minimum"), ("ok", "Above Minimum"))


def _below_minimum(row: Row, selected: str) -> bool:
    low = bool(row.get("is_below_minimum"))
    return low if selected == "low" else not low


def _min_level(row: Row) -> Optional[str]:
    level = field_of("item", "min_stock_level")(row)
    return format_number(level) if level is not None else None


def _stock_alert(row: Row) -> Cell:
    if row.get("is_below_minimum"):
        return Cell("Low Stock", badge="low_stock")
    return Cell("OK", badge="ok")


ADJUST_DIALOG = FormDialog(
    title="Adjust Stock",
    submit_label="Apply",
    fields=(
        FormField(
            "item_id",
            "Item (Consumable)",
            kind="select",
            required=True,
            lookup="consumable_items",
            blank_label="Select item",
            full_width=True,
        ),
        FormField(
            "department_id",
            "Department",
            kind="select",
            required=True,
            lookup="departments",
            blank_label="Select department",
            full_width=True,
        ),
        FormField("quantity", "New Quantity", kind="number", required=True, step="any", full_width=True),
        FormField("notes", "Notes", kind="textarea", full_width=True),
    ),
    schema=StockAdjustForm,
    success_message="Stock adjusted.",
    surface_backend_message=True,
    size="sm",
)


def adjust_defaults() -> Dict[str, Any]:
    return {"item_id": "", "department_id": "", "quantity": "", "notes": ""}


INVENTORY_STOCKS = ResourcePage(
    slug="inventory-stocks",
    title="Inventory Stock Levels",
    subtitle="Consumable stock quantities per item per department",
    noun="Stock Level",
    resource=lambda api: api.inventory_stocks,
    columns=(
        Column("Item", field_of("item", "name")),
        Column("Department", field_of("department", "name")),
        Column("Quantity", quantity_with_unit),
        Column("Min Level", _min_level),
        Column("Alert", _stock_alert),
    ),
    search_fields=(field_of("item", "name"),),
    search_placeholder="Search by item name…",
    filters=(
        ListFilter("level", "All Stock Levels", STOCK_LEVELS, _below_minimum),
    ),
    lookups={
        "consumable_items": lookups.consumable_items,
        "departments": lookups.departments,
    },
    header_actions=(
        HeaderAction("Adjust Stock", "/inventory-stocks/adjust", icon="sliders"),
    ),
    empty_message="No stock records found.",
)

# ---------------------------------------------------------------------------
# STOCK RECEIVALS
# ---------------------------------------------------------------------------

_receival_names = (
    "item_id",
    "department_id",
    "quantity",
    "unit_cost",
    "supplier_id",
    "reference_no",
    "received_at",
    "notes",
)

STOCK_RECEIVALS = ResourcePage(
    slug="stock-receivals",
    title="Stock Receivals",
    subtitle="Record incoming consumable stock (automatically updates stock levels)",
    noun="Receival",
    resource=lambda api: api.stock_receivals,
    columns=(
        Column("Item", field_of("item", "name")),
        Column("Department", field_of("department", "name")),
        Column("Quantity", quantity_with_unit),
        Column("Unit Cost", lambda row: format_currency(row.get("unit_cost"))),
        Column("Supplier", field_of("supplier", "name")),
        Column("Ref No.", field_of("reference_no"), mono=True),
        Column("Received", lambda row: format_date(row.get("received_at"))),
        Column("Notes", field_of("notes")),
    ),
    search_fields=(field_of("item", "name"), field_of("reference_no"), field_of("supplier", "name")),
    search_placeholder="Search by item, reference no., or supplier…",
    create_dialog=FormDialog(
        title="Record Stock Receival",
        submit_label="Save",
        fields=(
            FormField(
                "item_id",
                "Item (Consumable)",
                kind="select",
                required=True,
                lookup="consumable_items",
                blank_label="Select item",
            ),
            FormField(
                "department_id",
                "Receiving Department",
                kind="select",
                required=True,
                lookup="departments",
                blank_label="Select department",
            ),
            FormField("quantity", "Quantity", kind="number", required=True, step="any"),
            FormField("unit_cost", "Unit Cost (PHP)", kind="number", step="0.01"),
            FormField("supplier_id", "Supplier", kind="select", lookup="suppliers", blank_label="None"),
            FormField("reference_no", "Reference No."),
            FormField("received_at", "Date Received", kind="date", required=True, full_width=True),
            FormField("notes", "Notes", kind="textarea", full_width=True),
        ),
        schema=StockReceivalForm,
        success_message="Stock receival recorded. Stock updated.",
        surface_backend_message=True,
        size="lg",
    ),
    initial=lambda row: initial_values(row, _receival_names, {"received_at": current_date()}),
    lookups={
        "consumable_items": lookups.consumable_items,
        "departments": lookups.departments,
        "suppliers": lookups.suppliers,
    },
    create_label="Record Receival",
    empty_message="No receivals recorded yet.",
)

# ---------------------------------------------------------------------------
# STOCK ISSUANCES
# ---------------------------------------------------------------------------

_issuance_names = (
    "item_id",
    "from_department_id",
    "recipient",
    "quantity",
    "issued_at",
    "purpose",
    "notes",
)

STOCK_ISSUANCES = ResourcePage(
    slug="stock-issuances",
    title="Stock Issuances",
    subtitle="Record consumable stock issued to employees or departments",
    noun="Issuance",
    resource=lambda api: api.stock_issuances,
    columns=(
        Column("Item", field_of("item", "name")),
        Column("From Dept.", field_of("from_department", "name")),
        Column("Issued To", lambda row: party_name(row.get("issuable"))),
        Column("Type", recipient_kind),
        Column("Quantity", quantity_with_unit),
        Column("Issued", lambda row: format_date(row.get("issued_at"))),
        Column("Purpose", field_of("purpose")),
    ),
    search_fields=(field_of("item", "name"), lambda row: party_name(row.get("issuable"))),
    search_placeholder="Search by item or recipient…",
    create_dialog=FormDialog(
        title="Record Stock Issuance",
        submit_label="Save",
        fields=(
            FormField(
                "item_id",
                "Item (Consumable)",
                kind="select",
                required=True,
                lookup="consumable_items",
                blank_label="Select item",
            ),
            FormField(
                "from_department_id",
                "From Department",
                kind="select",
                required=True,
                lookup="departments",
                blank_label="Select department",
            ),
            FormField(
                "recipient",
                "Issue To",
                kind="select",
                required=True,
                lookup="recipients",
                grouped=True,
                blank_label="Select employee or department",
                error_keys=("issuable_id", "issuable_type"),
                full_width=True,
            ),
            FormField("quantity", "Quantity", kind="number", required=True, step="any"),
            FormField("issued_at", "Date Issued", kind="date", required=True),
            FormField("purpose", "Purpose", full_width=True),
            FormField("notes", "Notes", kind="textarea", full_width=True),
        ),
        schema=StockIssuanceForm,
        success_message="Stock issued. Stock decremented.",
        failure_message="Insufficient stock or invalid request.",
        surface_backend_message=True,
        size="lg",
    ),
    initial=lambda row: initial_values(row, _issuance_names, {"issued_at": current_date()}),
    lookups={
        "consumable_items": lookups.consumable_items,
        "departments": lookups.departments,
        "recipients": lookups.recipients,
    },
    create_label="Record Issuance",
    empty_message="No issuances recorded yet.",
)

PAGES = (INVENTORY_STOCKS, STOCK_RECEIVALS, STOCK_ISSUANCES)
