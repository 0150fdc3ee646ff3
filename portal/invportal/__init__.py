# portal/invportal/__init__.py
"""
Inventory portal: the server-rendered front-end of the inventory and
fixed-asset management system.

The portal owns no inventory data. Every page fetches from, and writes to,
the inventory REST backend through `invportal.client`. The only local table
is the portal session store in `invportal.apps.accounts.models`.
"""

from .apps.accounts import models as accounts_models  # portal sessions

__all__ = [
    "accounts_models",
]
