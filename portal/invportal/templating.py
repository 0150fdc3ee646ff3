# portal/invportal/templating.py
"""Jinja2 environment and the page renderer every router uses."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from . import formatting
from .apps.accounts import models as account_models
from .apps.accounts import services as account_services
from .apps.accounts.schemas import CurrentUser
from .navigation import PERMISSION_GROUPS, is_active, visible_groups

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

templates.env.filters["format_date"] = formatting.format_date
templates.env.filters["format_currency"] = formatting.format_currency
templates.env.filters["format_number"] = formatting.format_number
templates.env.filters["format_status"] = formatting.format_status
templates.env.filters["status_color"] = formatting.status_color
templates.env.filters["truncate_text"] = formatting.truncate
templates.env.filters["display"] = formatting.display
templates.env.globals["current_date"] = formatting.current_date
templates.env.globals["EMPTY"] = formatting.EMPTY
templates.env.globals["PERMISSION_GROUPS"] = PERMISSION_GROUPS


def query_string(**params: Any) -> str:
    """`?a=1&b=2` with empty values dropped; "" when nothing is left."""
    clean = {k: v for k, v in params.items() if v not in (None, "")}
    return "?" + urlencode(clean) if clean else ""


templates.env.globals["query_string"] = query_string


def render(
    request: Request,
    name: str,
    *,
    db: Optional[Session] = None,
    portal_session: Optional[account_models.PortalSession] = None,
    user: Optional[CurrentUser] = None,
    status_code: int = 200,
    **context: Any,
) -> HTMLResponse:
    """Render a page with the shell context (user, navigation, flashes)."""
    flashes = []
    if db is not None and portal_session is not None:
        flashes = account_services.pop_flashes(db, portal_session)

    page_context = {
        "user": user,
        "nav_groups": visible_groups(user),
        "nav_is_active": is_active,
        "path": request.url.path,
        "flashes": flashes,
    }
    page_context.update(context)
    return templates.TemplateResponse(
        request,
        name,
        page_context,
        status_code=status_code,
    )
