# portal/invportal/apps/catalog/pages.py
"""Item categories, suppliers and item definitions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from invportal import lookups
from invportal.crud import Column, FormDialog, FormField, PageMessages, ResourcePage, initial_values
from invportal.formatting import format_number, truncate
from invportal.listing import ListFilter, Row, equals, field_of

from .schemas import CategoryForm, ItemForm, SupplierForm

# ---------------------------------------------------------------------------
# CATEGORIES
# ---------------------------------------------------------------------------

CATEGORY_LEVELS = (("top", "Top-level"), ("sub", "Sub-category"))


def _category_level(row: Row, selected: str) -> bool:
    is_top = row.get("parent_id") is None
    return is_top if selected == "top" else not is_top


_category_fields = (
    FormField("name", "Name", required=True),
    FormField("code", "Code", required=True, placeholder="e.g. ICT"),
    FormField(
        "parent_id",
        "Parent Category",
        kind="select",
        lookup="top_level_categories",
        blank_label="None (top-level)",
        full_width=True,
    ),
    FormField("description", "Description", kind="textarea", full_width=True),
)

CATEGORIES = ResourcePage(
    slug="categories",
    title="Categories",
    subtitle="Organize items into categories and sub-categories",
    noun="Category",
    resource=lambda api: api.categories,
    columns=(
        Column("Name", field_of("name")),
        Column("Code", field_of("code"), mono=True),
        Column("Parent", field_of("parent", "name")),
        Column("Sub-cats", lambda row: row.get("children_count") or 0),
        Column("Items", lambda row: row.get("items_count") or 0),
    ),
    search_fields=(field_of("name"), field_of("code")),
    search_placeholder="Search categories…",
    filters=(
        ListFilter("level", "All Levels", CATEGORY_LEVELS, _category_level),
    ),
    create_dialog=FormDialog(
        title="Add Category",
        submit_label="Save",
        fields=_category_fields,
        schema=CategoryForm,
        success_message="Category created.",
    ),
    edit_dialog=FormDialog(
        title="Edit Category",
        submit_label="Update",
        fields=_category_fields,
        schema=CategoryForm,
        success_message="Category updated.",
    ),
    initial=lambda row: initial_values(row, ("name", "code", "parent_id", "description")),
    lookups={"top_level_categories": lookups.top_level_categories},
    messages=PageMessages(
        deleted="Category deleted.",
        delete_failed="Cannot delete: category has sub-categories or items.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete category "{row.get("name")}"?',
    empty_message="No categories found.",
)

# ---------------------------------------------------------------------------
# SUPPLIERS
# ---------------------------------------------------------------------------

_supplier_fields = (
    FormField("name", "Supplier Name", required=True, full_width=True),
    FormField("contact_person", "Contact Person"),
    FormField("phone", "Phone"),
    FormField("email", "Email", kind="email", full_width=True),
    FormField("address", "Address", kind="textarea", full_width=True),
)

SUPPLIERS = ResourcePage(
    slug="suppliers",
    title="Suppliers",
    subtitle="Manage supplier contacts",
    noun="Supplier",
    resource=lambda api: api.suppliers,
    columns=(
        Column("Name", field_of("name")),
        Column("Contact", field_of("contact_person")),
        Column("Email", field_of("email")),
        Column("Phone", field_of("phone")),
        Column("Address", lambda row: truncate(row.get("address"), 40)),
        Column("Modified By", field_of("modified_by")),
    ),
    search_fields=(
        field_of("name"),
        field_of("contact_person"),
        field_of("email"),
        field_of("phone"),
    ),
    search_placeholder="Search suppliers…",
    create_dialog=FormDialog(
        title="Add Supplier",
        submit_label="Save",
        fields=_supplier_fields,
        schema=SupplierForm,
        success_message="Supplier created.",
    ),
    edit_dialog=FormDialog(
        title="Edit Supplier",
        submit_label="Update",
        fields=_supplier_fields,
        schema=SupplierForm,
        success_message="Supplier updated.",
    ),
    initial=lambda row: initial_values(row, ("name", "contact_person", "phone", "email", "address")),
    messages=PageMessages(
        deleted="Supplier deleted.",
        delete_failed="Cannot delete: supplier has related receivals.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete supplier "{row.get("name")}"?',
    empty_message="No suppliers found.",
)

# ---------------------------------------------------------------------------
# ITEMS
# ---------------------------------------------------------------------------

ITEM_TYPES = (("fixed_asset", "Fixed Asset"), ("consumable", "Consumable"))


def stock_summary(row: Row) -> str:
    """Fixed assets count units; consumables show the stock on hand."""
    if row.get("item_type") == "fixed_asset":
        return f"{row.get('available_units') or 0} / {row.get('total_units') or 0} avail"
    return format_number(row.get("total_stock") or 0)


def _specifications(row: Row) -> Optional[str]:
    specs = row.get("specifications")
    if not specs:
        return None
    return ", ".join(str(s) for s in specs)


_item_fields = (
    FormField("name", "Item Name", required=True, full_width=True),
    FormField(
        "category_id",
        "Category",
        kind="select",
        required=True,
        lookup="categories",
        blank_label="Select category",
    ),
    FormField(
        "unit_id",
        "Unit",
        kind="select",
        required=True,
        lookup="units",
        blank_label="Select unit",
    ),
    FormField(
        "item_type",
        "Item Type",
        kind="select",
        required=True,
        choices=ITEM_TYPES,
        locked_on_edit=True,
        full_width=True,
    ),
    FormField("brand", "Brand"),
    FormField("model", "Model"),
    FormField(
        "min_stock_level",
        "Min Stock Level",
        kind="number",
        step="1",
        depends_on=("item_type", "consumable"),
        full_width=True,
    ),
    FormField("description", "Description", kind="textarea", full_width=True),
)


def _item_initial(row: Optional[Row]) -> Dict[str, Any]:
    return initial_values(
        row,
        ("name", "description", "category_id", "unit_id", "item_type", "brand", "model", "min_stock_level"),
        {"item_type": "consumable"},
    )


ITEMS = ResourcePage(
    slug="items",
    title="Items",
    subtitle="Manage fixed-asset and consumable item definitions",
    noun="Item",
    resource=lambda api: api.items,
    columns=(
        Column("Category", field_of("category", "name")),
        Column("Brand", field_of("brand")),
        Column("Model", field_of("model")),
        Column("Name", field_of("name")),
        Column("Specifications", _specifications),
        Column("Item Type", field_of("item_type"), badge=True),
        Column("Stock/Units", stock_summary),
        Column("Unit", field_of("unit", "abbreviation")),
        Column("Department", field_of("department", "name"), admin_only=True),
        Column("Modified By", field_of("modified_by")),
    ),
    search_fields=(field_of("name"), field_of("brand")),
    search_placeholder="Search by name or brand…",
    filters=(
        ListFilter("type", "All Types", ITEM_TYPES, equals("item_type")),
    ),
    create_dialog=FormDialog(
        title="Add Item",
        submit_label="Save",
        fields=_item_fields,
        schema=ItemForm,
        success_message="Item created.",
    ),
    edit_dialog=FormDialog(
        title="Edit Item",
        submit_label="Update",
        fields=_item_fields,
        schema=ItemForm,
        success_message="Item updated.",
    ),
    initial=_item_initial,
    lookups={"categories": lookups.categories, "units": lookups.units},
    messages=PageMessages(
        deleted="Item deleted.",
        delete_failed="Cannot delete: item has assets or stock.",
    ),
    deletable=True,
    delete_prompt=lambda row: f'Delete item "{row.get("name")}"?',
    empty_message="No items found.",
)

PAGES = (CATEGORIES, SUPPLIERS, ITEMS)
