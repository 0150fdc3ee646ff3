# portal/invportal/apps/dashboard/router.py

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from invportal.crud import PageContext, page_context
from invportal.security import get_current_user
from invportal.templating import render

from . import services

router = APIRouter(tags=["dashboard"])

dashboard_context = page_context(get_current_user)


@router.get("/", response_class=HTMLResponse)
def dashboard(ctx: PageContext = Depends(dashboard_context)):
    return render(
        ctx.request,
        "dashboard.html",
        db=ctx.db,
        portal_session=ctx.portal_session,
        user=ctx.user,
        cards=services.build_cards(ctx.api, ctx.user),
    )
