# portal/invportal/apps/dashboard/services.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from invportal.apps.accounts.schemas import CurrentUser
from invportal.client import BackendError, BackendUnavailable, Endpoints, Resource, Unauthorized

logger = logging.getLogger(__name__)


@dataclass
class StatCard:
    label: str
    value: int
    icon: str
    href: Optional[str] = None
    alert: bool = False


def _collection(name: str, resource: Resource) -> List[Any]:
    """A collection that fails to load counts as empty; 401 still signs out."""
    try:
        return resource.list()
    except (Unauthorized, BackendUnavailable):
        raise
    except BackendError as exc:
        logger.warning(
            "Dashboard collection failed to load",
            extra={"collection": name, "status_code": exc.status_code},
        )
        return []


def _count(rows: List[Any], predicate: Callable[[dict], bool] = lambda row: True) -> int:
    return sum(1 for row in rows if isinstance(row, dict) and predicate(row))


def build_cards(api: Endpoints, user: CurrentUser) -> List[StatCard]:
    items = _collection("items", api.items)
    assets = _collection("item-assets", api.item_assets)
    stocks = _collection("inventory-stocks", api.inventory_stocks)

    cards: List[StatCard] = []
    if user.is_admin:
        departments = _collection("departments", api.departments)
        cards.append(StatCard("Departments", _count(departments), "building-2", "/departments"))

    cards.append(StatCard("Total Items", _count(items), "package", "/items"))

    if user.is_admin:
        employees = _collection("employees", api.employees)
        cards.append(StatCard("Employees", _count(employees), "users", "/employees"))

    low_stock = _count(stocks, lambda row: bool(row.get("is_below_minimum")))
    cards.extend(
        [
            StatCard(
                "Fixed Assets",
                _count(items, lambda row: row.get("item_type") == "fixed_asset"),
                "monitor",
                "/item-assets",
            ),
            StatCard(
                "Consumable Items",
                _count(items, lambda row: row.get("item_type") == "consumable"),
                "boxes",
                "/inventory-stocks",
            ),
            StatCard(
                "Active Assignments",
                _count(assets, lambda row: row.get("status") == "assigned"),
                "clipboard-list",
                "/asset-assignments",
            ),
            StatCard(
                "Low Stock Alerts",
                low_stock,
                "alert-triangle",
                "/inventory-stocks?level=low",
                alert=low_stock > 0,
            ),
        ]
    )
    return cards
