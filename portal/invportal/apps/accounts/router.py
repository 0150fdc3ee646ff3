# portal/invportal/apps/accounts/router.py
"""
Sign-in, email code verification, sign-out and account settings.

Login and verification pages are guest-only: a session that already holds
a token is sent to the dashboard.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from invportal.client import BackendError, BackendUnavailable, Endpoints, Unauthorized, ValidationFailed
from invportal.crud import PageContext, page_context, read_form
from invportal.database import get_db
from invportal.forms import first_errors, form_values, parse_form
from invportal.security import (
    clear_session_cookie,
    get_backend,
    get_current_user,
    get_portal_session,
    set_session_cookie,
)
from invportal.templating import render

from . import models, services
from .schemas import LoginForm, PasswordForm, ProfileForm

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])

account_context = page_context(get_current_user)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def _verify_code_from(values: dict) -> str:
    """Either one `code` field or six `digit_N` boxes."""
    if values.get("code"):
        return values["code"]
    return "".join(values.get(f"digit_{i}", "") for i in range(services.OTP_CODE_LENGTH))


# ---------------------------------------------------------------------------
# LOGIN
# ---------------------------------------------------------------------------


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
):
    if portal_session is not None and portal_session.is_authenticated:
        return _redirect("/")
    return render(
        request,
        "login.html",
        db=db,
        portal_session=portal_session,
        values={"email": ""},
        errors={},
        status=None,
    )


@router.post("/login")
def login(
    request: Request,
    form: FormData = Depends(read_form),
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
    api: Endpoints = Depends(get_backend),
):
    values = form_values(form)
    credentials, errors = parse_form(LoginForm, values)
    if credentials is None:
        return render(
            request,
            "login.html",
            values={"email": values.get("email", "")},
            errors=first_errors(errors),
            status=None,
            status_code=422,
        )

    is_new_session = portal_session is None
    if portal_session is None:
        portal_session = services.open_session(db)

    outcome = services.login(
        db,
        portal_session,
        api.auth,
        email=credentials.email,
        password=credentials.password,
    )
    if outcome.ok:
        response = _redirect(outcome.redirect_to)
    else:
        response = render(
            request,
            "login.html",
            values={"email": credentials.email},
            errors=first_errors(outcome.errors),
            status=outcome.status,
            status_code=422 if outcome.errors else 401,
        )
    if outcome.session is not None:
        set_session_cookie(response, outcome.session)
    elif is_new_session:
        set_session_cookie(response, portal_session)
    return response


# ---------------------------------------------------------------------------
# EMAIL CODE VERIFICATION
# ---------------------------------------------------------------------------


def _verify_page(
    request: Request,
    db: Session,
    portal_session: models.PortalSession,
    *,
    errors: Optional[dict] = None,
    status: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    remaining = services.resend_seconds_remaining(portal_session)
    cooldown = services.OTP_RESEND_COOLDOWN_SEC
    return render(
        request,
        "verify_code.html",
        db=db,
        portal_session=portal_session,
        digits=services.OTP_CODE_LENGTH,
        errors=first_errors(errors or {}),
        status=status,
        resend_remaining=remaining,
        resend_progress=round(remaining / cooldown * 100) if cooldown else 0,
        status_code=status_code,
    )


@router.get("/verify-code", response_class=HTMLResponse)
def verify_code_page(
    request: Request,
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
):
    if portal_session is None or portal_session.pending_user_id is None:
        if portal_session is not None and portal_session.is_authenticated:
            return _redirect("/")
        return _redirect("/login")
    return _verify_page(request, db, portal_session)


@router.post("/verify-code")
def verify_code(
    request: Request,
    form: FormData = Depends(read_form),
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
    api: Endpoints = Depends(get_backend),
):
    if portal_session is None:
        return _redirect("/login")
    outcome = services.verify_code(db, portal_session, api.auth, _verify_code_from(form_values(form)))
    if outcome.ok:
        response = _redirect(outcome.redirect_to)
        if outcome.session is not None:
            set_session_cookie(response, outcome.session)
        return response
    return _verify_page(
        request,
        db,
        portal_session,
        errors=outcome.errors,
        status=outcome.status,
        status_code=422 if outcome.errors else 400,
    )


@router.post("/verify-code/resend")
def resend_code(
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
    api: Endpoints = Depends(get_backend),
):
    if portal_session is None or portal_session.pending_user_id is None:
        return _redirect("/login")
    sent, message = services.resend_code(db, portal_session, api.auth)
    services.add_flash(db, portal_session, "success" if sent else "error", message)
    return _redirect("/verify-code")


@router.post("/verify-code/cancel")
def cancel_verification(
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
):
    if portal_session is not None:
        services.clear_pending_user(db, portal_session)
    return _redirect("/login")


# ---------------------------------------------------------------------------
# LOGOUT
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    db: Session = Depends(get_db),
    portal_session: Optional[models.PortalSession] = Depends(get_portal_session),
    api: Endpoints = Depends(get_backend),
):
    if portal_session is not None:
        services.logout(db, portal_session, api.auth)
    response = _redirect("/login")
    clear_session_cookie(response)
    return response


# ---------------------------------------------------------------------------
# ACCOUNT SETTINGS
# ---------------------------------------------------------------------------

PROFILE_UPDATED = "Profile updated successfully."
PROFILE_FAILED = "Failed to update profile."
PASSWORD_UPDATED = "Password updated successfully."
PASSWORD_FAILED = "Failed to update password."


def _account_page(
    ctx: PageContext,
    *,
    profile: Optional[dict] = None,
    profile_errors: Optional[dict] = None,
    password_errors: Optional[dict] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        ctx.request,
        "account.html",
        db=ctx.db,
        portal_session=ctx.portal_session,
        user=ctx.user,
        profile=profile or {"name": ctx.user.name, "email": ctx.user.email},
        profile_errors=first_errors(profile_errors or {}),
        password_errors=first_errors(password_errors or {}),
        status_code=status_code,
    )


def _send_account_update(ctx: PageContext, payload: dict, failure: str) -> Tuple[bool, dict]:
    """PUT /api/account; returns (saved, field errors), flashing other failures."""
    try:
        ctx.api.account.update(payload)
    except ValidationFailed as exc:
        if exc.errors:
            return False, exc.errors
        ctx.flash("error", failure)
        return False, {}
    except (Unauthorized, BackendUnavailable):
        raise
    except BackendError as exc:
        logger.info(
            "Account update rejected by backend",
            extra={"user_id": ctx.user.id, "status_code": exc.status_code},
        )
        ctx.flash("error", failure)
        return False, {}
    return True, {}


@router.get("/account", response_class=HTMLResponse)
def account_page(ctx: PageContext = Depends(account_context)):
    return _account_page(ctx)


@router.post("/account/profile")
def update_profile(
    ctx: PageContext = Depends(account_context),
    form: FormData = Depends(read_form),
):
    values = form_values(form)
    profile, errors = parse_form(ProfileForm, values)
    if profile is None:
        return _account_page(ctx, profile=values, profile_errors=errors, status_code=422)

    saved, errors = _send_account_update(ctx, profile.to_payload(), PROFILE_FAILED)
    if errors:
        return _account_page(ctx, profile=values, profile_errors=errors, status_code=422)
    if saved:
        ctx.flash("success", PROFILE_UPDATED)
    return _redirect("/account")


@router.post("/account/password")
def update_password(
    ctx: PageContext = Depends(account_context),
    form: FormData = Depends(read_form),
):
    passwords, errors = parse_form(PasswordForm, form_values(form))
    if passwords is None:
        return _account_page(ctx, password_errors=errors, status_code=422)

    payload = {
        "name": ctx.user.name,
        "email": ctx.user.email,
        "current_password": passwords.current_password,
        "password": passwords.password,
        "password_confirmation": passwords.password_confirmation,
    }
    saved, errors = _send_account_update(ctx, payload, PASSWORD_FAILED)
    if errors:
        return _account_page(ctx, password_errors=errors, status_code=422)
    if saved:
        ctx.flash("success", PASSWORD_UPDATED)
    return _redirect("/account")
