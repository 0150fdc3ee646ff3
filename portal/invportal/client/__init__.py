# portal/invportal/client/__init__.py
from .http import (  # noqa: F401
    BackendClient,
    BackendError,
    BackendUnavailable,
    Unauthorized,
    ValidationFailed,
    unwrap,
    unwrap_list,
)
from .resource import Resource  # noqa: F401
from .endpoints import AccountApi, AuthApi, Endpoints  # noqa: F401
