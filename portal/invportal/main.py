# portal/invportal/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .client import BackendError, BackendUnavailable, Unauthorized
from .security import LoginRequired, PermissionDenied
from .templating import render

from .apps.accounts.router import router as accounts_router
from .apps.dashboard.router import router as dashboard_router
from .apps.administration.router import router as administration_router
from .apps.catalog.router import router as catalog_router
from .apps.assets.router import router as assets_router
from .apps.stock.router import router as stock_router

logger = logging.getLogger(__name__)

BACKEND_UNAVAILABLE = "The inventory service is unavailable. Please try again shortly."
BACKEND_FAILED = "The inventory service could not complete the request."


app = FastAPI(title="Inventory Portal", version="1.0.0")


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# ERROR HANDLERS
# ---------------------------------------------------------------------------


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    # The backend client already dropped the stored token.
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(request: Request, exc: PermissionDenied):
    return render(
        request,
        "access_denied.html",
        message=exc.message,
        status_code=403,
    )


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    unreachable = isinstance(exc, BackendUnavailable)
    logger.error(
        "Backend request failed",
        extra={
            "path": request.url.path,
            "status_code": exc.status_code,
            "unreachable": unreachable,
        },
    )
    return render(
        request,
        "error.html",
        title="Service unavailable" if unreachable else "Something went wrong",
        message=BACKEND_UNAVAILABLE if unreachable else BACKEND_FAILED,
        status_code=502,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    title = "Page not found" if exc.status_code == 404 else "Request failed"
    message = exc.detail if isinstance(exc.detail, str) else title
    return render(
        request,
        "error.html",
        title=title,
        message=message,
        status_code=exc.status_code,
    )


app.include_router(accounts_router)
app.include_router(dashboard_router)
app.include_router(administration_router)
app.include_router(catalog_router)
app.include_router(assets_router)
app.include_router(stock_router)
