# portal/invportal/apps/assets/router.py

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from invportal.crud import (
    PageContext,
    build_resource_router,
    load_row,
    open_dialog,
    page_context,
    read_form,
    submit_dialog,
)
from invportal.forms import form_values

from .pages import (
    ASSET_ASSIGNMENTS,
    ASSIGN_DIALOG,
    ITEM_ASSETS,
    RETURN_DIALOG,
    assign_defaults,
    return_defaults,
)

router = APIRouter(tags=["assets"])

asset_context = page_context(ITEM_ASSETS.guard)


def _asset_label(row: dict) -> str:
    item = row.get("item") or {}
    name = item.get("name") if isinstance(item, dict) else None
    return f"{row.get('item_code')} · {name}" if name else str(row.get("item_code"))


# ---------------------------------------------------------------------------
# ASSIGN / RETURN
# ---------------------------------------------------------------------------


@router.get("/item-assets/{record_id}/assign", response_class=HTMLResponse)
def assign_asset_form(record_id: int, ctx: PageContext = Depends(asset_context)):
    row = load_row(ITEM_ASSETS, ctx.api, record_id)
    return open_dialog(
        ctx,
        ITEM_ASSETS,
        ASSIGN_DIALOG,
        action=f"/item-assets/{record_id}/assign",
        values=assign_defaults(),
        subtitle=_asset_label(row),
    )


@router.post("/item-assets/{record_id}/assign")
def assign_asset(
    record_id: int,
    ctx: PageContext = Depends(asset_context),
    form: FormData = Depends(read_form),
):
    return submit_dialog(
        ctx,
        ITEM_ASSETS,
        ASSIGN_DIALOG,
        action=f"/item-assets/{record_id}/assign",
        values=form_values(form),
        call=lambda payload: ctx.api.item_assets.assign(record_id, payload),
    )


@router.get("/item-assets/{record_id}/return", response_class=HTMLResponse)
def return_asset_form(record_id: int, ctx: PageContext = Depends(asset_context)):
    row = load_row(ITEM_ASSETS, ctx.api, record_id)
    return open_dialog(
        ctx,
        ITEM_ASSETS,
        RETURN_DIALOG,
        action=f"/item-assets/{record_id}/return",
        values=return_defaults(),
        subtitle=_asset_label(row),
    )


@router.post("/item-assets/{record_id}/return")
def return_asset(
    record_id: int,
    ctx: PageContext = Depends(asset_context),
    form: FormData = Depends(read_form),
):
    return submit_dialog(
        ctx,
        ITEM_ASSETS,
        RETURN_DIALOG,
        action=f"/item-assets/{record_id}/return",
        values=form_values(form),
        call=lambda payload: ctx.api.item_assets.return_asset(record_id, payload),
    )


build_resource_router(ITEM_ASSETS, router)
build_resource_router(ASSET_ASSIGNMENTS, router)
