# portal/invportal/apps/catalog/router.py

from __future__ import annotations

from invportal.crud import resource_router

from .pages import PAGES

router = resource_router(PAGES, tag="catalog")
