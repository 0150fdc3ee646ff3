# portal/invportal/navigation.py
"""
Sidebar navigation and the permission keys it is built from.

The same keys label the permission checkboxes on the user-account form, so
granting "items" to an employee both shows the Items link and opens the
Items page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .apps.accounts.schemas import CurrentUser


@dataclass(frozen=True)
class NavItem:
    label: str
    href: str
    icon: str
    permission: Optional[str] = None


@dataclass(frozen=True)
class NavGroup:
    label: Optional[str]
    items: Tuple[NavItem, ...]


NAV_GROUPS: Tuple[NavGroup, ...] = (
    NavGroup(
        label=None,
        items=(NavItem("Dashboard", "/", "layout-dashboard"),),
    ),
    NavGroup(
        label="Administration",
        items=(
            NavItem("Departments", "/departments", "building-2", "departments"),
            NavItem("Units", "/units", "ruler", "units"),
            NavItem("Employees", "/employees", "users", "employees"),
            NavItem("User Accounts", "/users", "user-cog", "users"),
        ),
    ),
    NavGroup(
        label="Catalog",
        items=(
            NavItem("Categories", "/categories", "tags", "categories"),
            NavItem("Suppliers", "/suppliers", "truck", "suppliers"),
            NavItem("Items", "/items", "package", "items"),
        ),
    ),
    NavGroup(
        label="Fixed Assets",
        items=(
            NavItem("Assets", "/item-assets", "monitor", "item-assets"),
            NavItem("Assignments", "/asset-assignments", "clipboard-list", "asset-assignments"),
        ),
    ),
    NavGroup(
        label="Consumable Stock",
        items=(
            NavItem("Stock Levels", "/inventory-stocks", "boxes", "inventory-stocks"),
            NavItem("Stock Receivals", "/stock-receivals", "package-plus", "stock-receivals"),
            NavItem("Stock Issuances", "/stock-issuances", "package-minus", "stock-issuances"),
        ),
    ),
)

# Checkbox groups on the user form: (group label, ((key, label), ...)).
PERMISSION_GROUPS: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = (
    (
        "Administration",
        (
            ("departments", "Departments"),
            ("units", "Units"),
            ("employees", "Employees"),
            ("users", "User Accounts"),
        ),
    ),
    (
        "Catalog",
        (
            ("categories", "Categories"),
            ("suppliers", "Suppliers"),
            ("items", "Items"),
        ),
    ),
    (
        "Fixed Assets",
        (
            ("item-assets", "Assets"),
            ("asset-assignments", "Assignments"),
        ),
    ),
    (
        "Consumable Stock",
        (
            ("inventory-stocks", "Stock Levels"),
            ("stock-receivals", "Stock Receivals"),
            ("stock-issuances", "Stock Issuances"),
        ),
    ),
)

PERMISSION_KEYS = frozenset(key for _, perms in PERMISSION_GROUPS for key, _ in perms)


def visible_groups(
    user: Optional[CurrentUser],
    groups: Sequence[NavGroup] = NAV_GROUPS,
) -> List[NavGroup]:
    """Drop links the user cannot open, then groups left empty."""
    if user is None:
        return []
    visible = []
    for group in groups:
        items = tuple(item for item in group.items if user.can_access(item.permission))
        if items:
            visible.append(NavGroup(label=group.label, items=items))
    return visible


def is_active(item: NavItem, path: str) -> bool:
    if item.href == "/":
        return path == "/"
    return path == item.href or path.startswith(item.href + "/")
