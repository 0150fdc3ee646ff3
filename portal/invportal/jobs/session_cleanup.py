from __future__ import annotations

import logging

from invportal.database import SessionLocal
from invportal.apps.accounts import services as account_services


def run() -> int:
    """Delete portal sessions past their expiry; returns how many went."""
    db = SessionLocal()
    try:
        return account_services.purge_expired_sessions(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = run()
    print("Session cleanup completed:", result)
