# portal/invportal/lookups.py
"""Select options loaded from the backend for dialog forms."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from .client import Endpoints
from .formatting import person_name

Options = List[Tuple[str, str]]


def _options(rows: List[Any], label) -> Options:
    return [
        (str(row["id"]), label(row))
        for row in rows
        if isinstance(row, dict) and row.get("id") is not None
    ]


def departments(api: Endpoints) -> Options:
    return _options(api.departments.list(), lambda d: str(d.get("name") or d["id"]))


def employees(api: Endpoints) -> Options:
    return _options(api.employees.list(), person_name)


def units(api: Endpoints) -> Options:
    return _options(
        api.units.list(),
        lambda u: f"{u.get('name')} ({u.get('abbreviation')})",
    )


def categories(api: Endpoints) -> Options:
    return _options(api.categories.list(), lambda c: str(c.get("name") or c["id"]))


def top_level_categories(api: Endpoints) -> Options:
    """Only top-level categories may parent another category."""
    rows = [c for c in api.categories.list() if isinstance(c, dict) and c.get("parent_id") is None]
    return _options(rows, lambda c: str(c.get("name") or c["id"]))


def suppliers(api: Endpoints) -> Options:
    return _options(api.suppliers.list(), lambda s: str(s.get("name") or s["id"]))


def items_of_type(item_type: Optional[str]):
    def _lookup(api: Endpoints) -> Options:
        rows = [
            i for i in api.items.list()
            if isinstance(i, dict) and (item_type is None or i.get("item_type") == item_type)
        ]
        return _options(rows, lambda i: str(i.get("name") or i["id"]))

    return _lookup


fixed_asset_items = items_of_type("fixed_asset")
consumable_items = items_of_type("consumable")


def recipients(api: Endpoints) -> List[Tuple[str, Options]]:
    """Employees and departments as one grouped select, values "type:id"."""
    return [
        (
            "Employees",
            [(f"employee:{value}", label) for value, label in employees(api)],
        ),
        (
            "Departments",
            [(f"department:{value}", label) for value, label in departments(api)],
        ),
    ]
