# portal/invportal/apps/stock/router.py

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from invportal.crud import (
    PageContext,
    build_resource_router,
    open_dialog,
    page_context,
    read_form,
    submit_dialog,
)
from invportal.forms import form_values

from .pages import ADJUST_DIALOG, INVENTORY_STOCKS, STOCK_ISSUANCES, STOCK_RECEIVALS, adjust_defaults

router = APIRouter(tags=["stock"])

stock_context = page_context(INVENTORY_STOCKS.guard)


@router.get("/inventory-stocks/adjust", response_class=HTMLResponse)
def adjust_stock_form(ctx: PageContext = Depends(stock_context)):
    return open_dialog(
        ctx,
        INVENTORY_STOCKS,
        ADJUST_DIALOG,
        action="/inventory-stocks/adjust",
        values=adjust_defaults(),
    )


@router.post("/inventory-stocks/adjust")
def adjust_stock(
    ctx: PageContext = Depends(stock_context),
    form: FormData = Depends(read_form),
):
    return submit_dialog(
        ctx,
        INVENTORY_STOCKS,
        ADJUST_DIALOG,
        action="/inventory-stocks/adjust",
        values=form_values(form),
        call=lambda payload: ctx.api.inventory_stocks.adjust(payload),
    )


for _page in (INVENTORY_STOCKS, STOCK_RECEIVALS, STOCK_ISSUANCES):
    build_resource_router(_page, router)
