# portal/invportal/crud.py
"""
Declarative resource pages.

Every inventory page is the same screen: a backend collection rendered as a
searchable, filterable, paginated table with create/edit/delete dialogs
that proxy to the backend. A `ResourcePage` describes one such screen and
`build_resource_router` turns it into routes:

    GET  /{slug}                    list (q, filters, page)
    GET  /{slug}/new                list + create dialog
    POST /{slug}                    create
    GET  /{slug}/{record_id}/edit   list + edit dialog
    POST /{slug}/{record_id}        update
    GET  /{slug}/{record_id}/delete list + confirm dialog
    POST /{slug}/{record_id}/delete delete

Pages with extra dialogs (assign/return an asset, adjust stock) reuse
`render_list`, `open_dialog` and `submit_dialog` from their own routers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from .apps.accounts import models as account_models
from .apps.accounts import services as account_services
from .apps.accounts.schemas import CurrentUser
from .client import BackendError, BackendUnavailable, Endpoints, Resource, Unauthorized, ValidationFailed
from .database import get_db
from .formatting import EMPTY, display, format_status
from .forms import FormSchema, first_errors, form_values, parse_form
from .listing import ListFilter, Page, Row, filter_rows, paginate
from .security import get_backend, get_portal_session, require_admin, require_permission
from .templating import query_string, render

logger = logging.getLogger(__name__)

Options = List[Tuple[str, str]]
GroupedOptions = List[Tuple[str, Options]]
Lookup = Callable[[Endpoints], Union[Options, GroupedOptions]]

GENERIC_FAILURE = "An error occurred."


# ---------------------------------------------------------------------------
# REQUEST CONTEXT
# ---------------------------------------------------------------------------


@dataclass
class PageContext:
    request: Request
    db: Session
    portal_session: Optional[account_models.PortalSession]
    api: Endpoints
    user: CurrentUser

    def flash(self, level: str, message: str) -> None:
        if self.portal_session is not None:
            account_services.add_flash(self.db, self.portal_session, level, message)


def page_context(guard: Callable[..., CurrentUser]):
    """Dependency factory bundling what a page handler needs behind `guard`."""

    def _dependency(
        request: Request,
        db: Session = Depends(get_db),
        portal_session: Optional[account_models.PortalSession] = Depends(get_portal_session),
        api: Endpoints = Depends(get_backend),
        user: CurrentUser = Depends(guard),
    ) -> PageContext:
        return PageContext(
            request=request,
            db=db,
            portal_session=portal_session,
            api=api,
            user=user,
        )

    return _dependency


async def read_form(request: Request) -> FormData:
    return await request.form()


# ---------------------------------------------------------------------------
# TABLE
# ---------------------------------------------------------------------------


@dataclass
class Cell:
    text: Any
    badge: Optional[str] = None
    note: Optional[str] = None
    mono: bool = False
    muted: bool = False


@dataclass
class Column:
    label: str
    value: Callable[[Row], Any]
    badge: bool = False
    mono: bool = False
    admin_only: bool = False

    def cell(self, row: Row) -> Cell:
        value = self.value(row)
        if isinstance(value, Cell):
            return value
        if self.badge:
            if not value:
                return Cell(EMPTY, muted=True)
            return Cell(format_status(value), badge=str(value))
        shown = display(value)
        return Cell(shown, mono=self.mono, muted=shown == EMPTY)


@dataclass
class RowAction:
    label: str
    href: Callable[[Row], str]
    when: Callable[[Row], bool] = lambda row: True
    style: str = "default"


@dataclass
class ActionLink:
    label: str
    href: Optional[str]
    style: str = "default"
    disabled_reason: Optional[str] = None


@dataclass
class TableRow:
    id: Any
    cells: List[Cell]
    actions: List[ActionLink]


# ---------------------------------------------------------------------------
# DIALOGS
# ---------------------------------------------------------------------------


@dataclass
class FormField:
    name: str
    label: str
    kind: str = "text"  # text, email, number, date, password, textarea, select, permissions
    required: bool = False
    placeholder: str = ""
    lookup: Optional[str] = None
    choices: Sequence[Tuple[str, str]] = ()
    blank_label: Optional[str] = None
    grouped: bool = False
    locked_on_edit: bool = False
    full_width: bool = False
    step: Optional[str] = None
    hint: str = ""
    error_keys: Sequence[str] = ()
    # (field, value): only shown while another field holds that value.
    depends_on: Optional[Tuple[str, str]] = None

    def error(self, errors: Mapping[str, str]) -> Optional[str]:
        for key in (self.name, *self.error_keys):
            if key in errors:
                return errors[key]
        return None

    def is_visible(self, values: Mapping[str, Any]) -> bool:
        if self.depends_on is None:
            return True
        name, expected = self.depends_on
        return values.get(name) == expected


@dataclass
class FormDialog:
    title: str
    submit_label: str
    fields: Sequence[FormField]
    schema: Type[FormSchema]
    success_message: str
    failure_message: str = GENERIC_FAILURE
    surface_backend_message: bool = False
    size: str = "md"

    @property
    def multi_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.kind == "permissions"]


@dataclass
class DialogState:
    """A dialog as rendered: definition plus current values/errors/options."""

    dialog: FormDialog
    action: str
    cancel_href: str
    values: Dict[str, Any]
    editing: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    status: Optional[str] = None
    subtitle: Optional[str] = None

    @property
    def fields(self) -> Sequence[FormField]:
        return self.dialog.fields


@dataclass
class ConfirmState:
    title: str
    message: str
    action: str
    cancel_href: str
    confirm_label: str = "Delete"


# ---------------------------------------------------------------------------
# PAGE DEFINITION
# ---------------------------------------------------------------------------


@dataclass
class PageMessages:
    deleted: str = ""
    delete_failed: str = GENERIC_FAILURE
    surface_delete_message: bool = False


@dataclass
class HeaderAction:
    label: str
    href: str
    icon: str = "plus"


@dataclass
class ResourcePage:
    slug: str
    title: str
    subtitle: str
    noun: str
    resource: Callable[[Endpoints], Resource]
    columns: Sequence[Column]
    search_fields: Sequence[Callable[[Row], Any]]
    search_placeholder: str = "Search…"
    filters: Sequence[ListFilter] = ()
    create_dialog: Optional[FormDialog] = None
    edit_dialog: Optional[FormDialog] = None
    initial: Callable[[Optional[Row]], Dict[str, Any]] = lambda row: {}
    create_defaults: Optional[Callable[[Mapping[str, str]], Dict[str, Any]]] = None
    lookups: Mapping[str, Lookup] = field(default_factory=dict)
    messages: PageMessages = field(default_factory=PageMessages)
    deletable: bool = False
    delete_prompt: Callable[[Row], str] = lambda row: "Delete this record?"
    delete_blocked: Callable[[Row, CurrentUser], Optional[str]] = lambda row, user: None
    row_actions: Sequence[RowAction] = ()
    header_actions: Sequence[HeaderAction] = ()
    create_label: Optional[str] = None
    empty_message: str = "No records found."
    permission: Optional[str] = None
    admin_only: bool = False

    @property
    def href(self) -> str:
        return f"/{self.slug}"

    @property
    def creatable(self) -> bool:
        return self.create_dialog is not None

    @property
    def editable(self) -> bool:
        return self.edit_dialog is not None

    @property
    def guard(self) -> Callable[..., CurrentUser]:
        if self.admin_only:
            return require_admin
        return require_permission(self.permission or self.slug)

    def visible_columns(self, user: CurrentUser) -> List[Column]:
        return [c for c in self.columns if user.is_admin or not c.admin_only]

    def actions_for(self, row: Row, user: CurrentUser) -> List[ActionLink]:
        links = [
            ActionLink(action.label, action.href(row), action.style)
            for action in self.row_actions
            if action.when(row)
        ]
        if self.editable:
            links.append(ActionLink("Edit", f"{self.href}/{row.get('id')}/edit"))
        if self.deletable:
            reason = self.delete_blocked(row, user)
            href = None if reason else f"{self.href}/{row.get('id')}/delete"
            links.append(ActionLink("Delete", href, "danger", disabled_reason=reason))
        return links

    def all_header_actions(self) -> List[HeaderAction]:
        actions = list(self.header_actions)
        if self.creatable:
            actions.append(HeaderAction(self.create_label or f"Add {self.noun}", f"{self.href}/new"))
        return actions


# ---------------------------------------------------------------------------
# RENDERING
# ---------------------------------------------------------------------------


def fetch_rows(page: ResourcePage, api: Endpoints) -> List[Row]:
    return [row for row in page.resource(api).list() if isinstance(row, dict)]


def load_row(page: ResourcePage, api: Endpoints, record_id: int) -> Row:
    try:
        row = page.resource(api).get(record_id)
    except (Unauthorized, BackendUnavailable):
        raise
    except BackendError as exc:
        if exc.status_code == 404:
            raise HTTPException(status_code=404, detail=f"{page.noun} not found.") from exc
        raise
    if not isinstance(row, dict):
        raise HTTPException(status_code=404, detail=f"{page.noun} not found.")
    return row


def load_options(fields: Sequence[FormField], lookups: Mapping[str, Lookup], api: Endpoints) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    for form_field in fields:
        if form_field.lookup and form_field.lookup not in options:
            options[form_field.lookup] = lookups[form_field.lookup](api)
    return options


def render_list(
    ctx: PageContext,
    page: ResourcePage,
    *,
    dialog: Optional[DialogState] = None,
    confirm: Optional[ConfirmState] = None,
    status_code: int = 200,
) -> HTMLResponse:
    params = ctx.request.query_params
    query = params.get("q", "")
    selected = {f.name: params.get(f.name, "") for f in page.filters}

    rows = filter_rows(
        fetch_rows(page, ctx.api),
        query=query,
        search_fields=page.search_fields,
        filters=page.filters,
        selected=selected,
    )
    pagination: Page = paginate(rows, params.get("page", 1))
    columns = page.visible_columns(ctx.user)
    table = [
        TableRow(
            id=row.get("id"),
            cells=[column.cell(row) for column in columns],
            actions=page.actions_for(row, ctx.user),
        )
        for row in pagination.rows
    ]

    return render(
        ctx.request,
        "pages/resource_list.html",
        db=ctx.db,
        portal_session=ctx.portal_session,
        user=ctx.user,
        status_code=status_code,
        page=page,
        columns=columns,
        table=table,
        pagination=pagination,
        query=query,
        selected=selected,
        list_params={"q": query, **selected},
        page_href=lambda number: page.href + query_string(q=query, page=number, **selected),
        dialog=dialog,
        confirm=confirm,
    )


def open_dialog(
    ctx: PageContext,
    page: ResourcePage,
    dialog: FormDialog,
    *,
    action: str,
    values: Dict[str, Any],
    editing: bool = False,
    subtitle: Optional[str] = None,
) -> HTMLResponse:
    state = DialogState(
        dialog=dialog,
        action=action,
        cancel_href=page.href,
        values=values,
        editing=editing,
        options=load_options(dialog.fields, page.lookups, ctx.api),
        subtitle=subtitle,
    )
    return render_list(ctx, page, dialog=state)


def submit_dialog(
    ctx: PageContext,
    page: ResourcePage,
    dialog: FormDialog,
    *,
    action: str,
    values: Dict[str, Any],
    call: Callable[[Dict[str, Any]], Any],
    editing: bool = False,
    subtitle: Optional[str] = None,
) -> Union[HTMLResponse, RedirectResponse]:
    """
    Validate `values` with the dialog schema and send the payload.

    Success flashes and redirects to the list; field errors (local or 422)
    and other backend failures re-open the dialog.
    """
    model, errors = parse_form(dialog.schema, values, context={"editing": editing})
    status: Optional[str] = None
    status_code = 422

    if model is not None:
        try:
            call(model.to_payload())
        except ValidationFailed as exc:
            errors = exc.errors or {}
            if not errors:
                status = exc.backend_message or dialog.failure_message
        except (Unauthorized, BackendUnavailable):
            raise
        except BackendError as exc:
            status_code = 400
            status = dialog.failure_message
            if dialog.surface_backend_message and exc.backend_message:
                status = exc.backend_message
        else:
            ctx.flash("success", dialog.success_message)
            return RedirectResponse(page.href, status_code=303)

    state = DialogState(
        dialog=dialog,
        action=action,
        cancel_href=page.href,
        values=values,
        editing=editing,
        errors=first_errors(errors),
        options=load_options(dialog.fields, page.lookups, ctx.api),
        status=status,
        subtitle=subtitle,
    )
    return render_list(ctx, page, dialog=state, status_code=status_code)


# ---------------------------------------------------------------------------
# ROUTER FACTORY
# ---------------------------------------------------------------------------


def build_resource_router(page: ResourcePage, router: Optional[APIRouter] = None) -> APIRouter:
    router = router or APIRouter(tags=[page.slug])
    context = page_context(page.guard)

    @router.get(page.href, response_class=HTMLResponse)
    def list_records(ctx: PageContext = Depends(context)):
        return render_list(ctx, page)

    if page.create_dialog is not None:
        create_dialog = page.create_dialog

        @router.get(f"{page.href}/new", response_class=HTMLResponse)
        def new_record(ctx: PageContext = Depends(context)):
            values = page.initial(None)
            if page.create_defaults is not None:
                values.update(page.create_defaults(ctx.request.query_params))
            return open_dialog(
                ctx,
                page,
                create_dialog,
                action=page.href,
                values=values,
            )

        @router.post(page.href)
        def create_record(
            ctx: PageContext = Depends(context),
            form: FormData = Depends(read_form),
        ):
            values = form_values(form, multi=create_dialog.multi_fields)
            return submit_dialog(
                ctx,
                page,
                create_dialog,
                action=page.href,
                values=values,
                call=lambda payload: page.resource(ctx.api).store(payload),
            )

    if page.edit_dialog is not None:
        edit_dialog = page.edit_dialog

        @router.get(f"{page.href}/{{record_id}}/edit", response_class=HTMLResponse)
        def edit_record(record_id: int, ctx: PageContext = Depends(context)):
            row = load_row(page, ctx.api, record_id)
            return open_dialog(
                ctx,
                page,
                edit_dialog,
                action=f"{page.href}/{record_id}",
                values=page.initial(row),
                editing=True,
            )

        @router.post(f"{page.href}/{{record_id}}")
        def update_record(
            record_id: int,
            ctx: PageContext = Depends(context),
            form: FormData = Depends(read_form),
        ):
            values = form_values(form, multi=edit_dialog.multi_fields)
            return submit_dialog(
                ctx,
                page,
                edit_dialog,
                action=f"{page.href}/{record_id}",
                values=values,
                editing=True,
                call=lambda payload: page.resource(ctx.api).update(record_id, payload),
            )

    if page.deletable:

        @router.get(f"{page.href}/{{record_id}}/delete", response_class=HTMLResponse)
        def confirm_delete(record_id: int, ctx: PageContext = Depends(context)):
            row = load_row(page, ctx.api, record_id)
            reason = page.delete_blocked(row, ctx.user)
            if reason:
                ctx.flash("error", reason)
                return RedirectResponse(page.href, status_code=303)
            confirm = ConfirmState(
                title=f"Delete {page.noun}",
                message=page.delete_prompt(row),
                action=f"{page.href}/{record_id}/delete",
                cancel_href=page.href,
            )
            return render_list(ctx, page, confirm=confirm)

        @router.post(f"{page.href}/{{record_id}}/delete")
        def delete_record(record_id: int, ctx: PageContext = Depends(context)):
            reason = page.delete_blocked({"id": record_id}, ctx.user)
            if reason:
                ctx.flash("error", reason)
                return RedirectResponse(page.href, status_code=303)
            try:
                page.resource(ctx.api).destroy(record_id)
            except (Unauthorized, BackendUnavailable):
                raise
            except BackendError as exc:
                logger.info(
                    "Delete rejected by backend",
                    extra={"resource": page.slug, "record_id": record_id, "status_code": exc.status_code},
                )
                message = page.messages.delete_failed
                if page.messages.surface_delete_message and exc.backend_message:
                    message = exc.backend_message
                ctx.flash("error", message)
            else:
                ctx.flash("success", page.messages.deleted)
            return RedirectResponse(page.href, status_code=303)

    return router


def resource_router(pages: Sequence[ResourcePage], tag: str) -> APIRouter:
    router = APIRouter(tags=[tag])
    for page in pages:
        build_resource_router(page, router)
    return router


# ---------------------------------------------------------------------------
# FORM VALUES
# ---------------------------------------------------------------------------


def as_input(value: Any) -> Any:
    """Backend value -> form input value (None becomes "")."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def as_date_input(value: Any) -> str:
    """ISO date or timestamp -> YYYY-MM-DD for <input type="date">."""
    if not value:
        return ""
    return str(value)[:10]


def initial_values(
    row: Optional[Row],
    names: Sequence[str],
    defaults: Optional[Mapping[str, Any]] = None,
    *,
    dates: Sequence[str] = (),
) -> Dict[str, Any]:
    """Form values for a dialog: the row's fields when editing, defaults otherwise."""
    values: Dict[str, Any] = {name: "" for name in names}
    if row is None:
        values.update(defaults or {})
        return values
    for name in names:
        if name in dates:
            values[name] = as_date_input(row.get(name))
        else:
            values[name] = as_input(row.get(name))
    return values
