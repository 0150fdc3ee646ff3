# portal/invportal/client/endpoints.py
"""
Backend endpoints used by the portal, one resource per entity.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .http import BackendClient
from .resource import Key, Resource

# ---------------------------------------------------------------------------
# ROUTES
# ---------------------------------------------------------------------------

DEPARTMENTS = "/api/departments"
EMPLOYEES = "/api/employees"
CATEGORIES = "/api/categories"
UNITS = "/api/units"
SUPPLIERS = "/api/suppliers"
ITEMS = "/api/items"
ITEM_ASSETS = "/api/item-assets"
INVENTORY_STOCKS = "/api/inventory-stocks"
STOCK_RECEIVALS = "/api/stock-receivals"
STOCK_ISSUANCES = "/api/stock-issuances"
ASSET_ASSIGNMENTS = "/api/asset-assignments"
USERS = "/api/users"
ACCOUNT = "/api/account"


class ItemAssetResource(Resource):
    def assign(self, id: Key, payload: Dict[str, Any]) -> Any:
        return self.client.post(self._path(id, "assign"), json=payload)

    def return_asset(self, id: Key, payload: Dict[str, Any]) -> Any:
        return self.client.post(self._path(id, "return"), json=payload)


class InventoryStockResource(Resource):
    def adjust(self, payload: Dict[str, Any]) -> Any:
        return self.client.post(self._path("adjust"), json=payload)


class AccountApi:
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    def update(self, payload: Dict[str, Any]) -> Any:
        return self.client.put(ACCOUNT, json=payload)


class AuthApi:
    """Login, OTP verification and session endpoints."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    def login(self, email: str, password: str) -> Any:
        return self.client.post("/api/login", json={"email": email, "password": password})

    def verify_code(self, user_id: int, code: str) -> Any:
        return self.client.post(
            "/api/verify-code",
            json={"user_id": int(user_id), "code": code},
        )

    def resend_verification(self, user_id: int) -> Any:
        return self.client.post("/api/resend-verification", json={"user_id": user_id})

    def logout(self) -> Any:
        return self.client.post("/api/logout")

    def current_user(self) -> Any:
        # /api/user returns the bare user object, not a `data` wrapper.
        return self.client.get("/api/user")


class Endpoints:
    """Every backend resource, bound to one client (one request)."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client
        self.departments = Resource(client, DEPARTMENTS)
        self.employees = Resource(client, EMPLOYEES)
        self.categories = Resource(client, CATEGORIES)
        self.units = Resource(client, UNITS)
        self.suppliers = Resource(client, SUPPLIERS)
        self.items = Resource(client, ITEMS)
        self.item_assets = ItemAssetResource(client, ITEM_ASSETS)
        self.inventory_stocks = InventoryStockResource(client, INVENTORY_STOCKS)
        self.stock_receivals = Resource(client, STOCK_RECEIVALS)
        self.stock_issuances = Resource(client, STOCK_ISSUANCES)
        self.asset_assignments = Resource(client, ASSET_ASSIGNMENTS)
        self.users = Resource(client, USERS)
        self.account = AccountApi(client)
        self.auth = AuthApi(client)

    @property
    def token(self) -> Optional[str]:
        return self.client.token
