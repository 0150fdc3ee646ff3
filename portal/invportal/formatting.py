# portal/invportal/formatting.py
"""
Display helpers shared by every page and registered as Jinja2 filters.
"""

from __future__ import annotations

import secrets
import string
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

EMPTY = "—"

Number = Union[int, float, Decimal, str]

# ---------------------------------------------------------------------------
# DATES
# ---------------------------------------------------------------------------

DEFAULT_DATE_FORMAT = "MMMM d, yyyy"

_DATE_FORMATS = {
    "yyyy-mm-dd": lambda d: d.strftime("%Y-%m-%d"),
    "d F, Y": lambda d: f"{d.day} {d.strftime('%B')}, {d.year}",
    "mm/dd/yyyy": lambda d: d.strftime("%m/%d/%Y"),
    "MMMM d, yyyy": lambda d: f"{d.strftime('%B')} {d.day}, {d.year}",
    "yyyy-mm-dd hh:mm:ss": lambda d: d.strftime("%Y-%m-%d %H:%M:%S"),
}


def current_date() -> str:
    """Today as YYYY-MM-DD, the value HTML date inputs expect."""
    return date.today().isoformat()


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d")
    except ValueError:
        return None


def format_date(value: Any, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    if value is None or value == "":
        return EMPTY
    parsed = _parse_date(value)
    if parsed is None:
        return str(value)
    formatter = _DATE_FORMATS.get(fmt, _DATE_FORMATS[DEFAULT_DATE_FORMAT])
    return formatter(parsed)


# ---------------------------------------------------------------------------
# NUMBERS
# ---------------------------------------------------------------------------


def _to_decimal(value: Number) -> Optional[Decimal]:
    """Parse to a finite Decimal; NaN and Infinity count as unparseable."""
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None


def format_currency(amount: Optional[Number]) -> str:
    """Philippine peso with two decimals, e.g. ₱1,234.50."""
    if amount is None or amount == "":
        return EMPTY
    value = _to_decimal(amount)
    if value is None:
        return EMPTY
    sign = "-" if value < 0 else ""
    return f"{sign}₱{abs(value):,.2f}"


def format_number(num: Optional[Number]) -> str:
    if num is None or num == "":
        return "0"
    value = _to_decimal(num)
    if value is None:
        return "0"
    if value == value.to_integral_value():
        return f"{int(value):,}"
    text = f"{value.quantize(Decimal('0.001')):,}"
    return text.rstrip("0").rstrip(".")


# ---------------------------------------------------------------------------
# STATUS BADGES
# ---------------------------------------------------------------------------

DEFAULT_STATUS_COLOR = "bg-slate-100 text-slate-600 border border-slate-200"

STATUS_COLORS = {
    # asset status
    "available": "bg-emerald-50 text-emerald-700 border border-emerald-200",
    "assigned": "bg-blue-50 text-blue-700 border border-blue-200",
    "under_repair": "bg-amber-50 text-amber-700 border border-amber-200",
    "disposed": "bg-slate-100 text-slate-500 border border-slate-200",
    # assignment / employee status
    "active": "bg-emerald-50 text-emerald-700 border border-emerald-200",
    "returned": "bg-slate-100 text-slate-600 border border-slate-200",
    "lost": "bg-red-50 text-red-700 border border-red-200",
    "inactive": "bg-slate-100 text-slate-500 border border-slate-200",
    # condition
    "new": "bg-sky-50 text-sky-700 border border-sky-200",
    "good": "bg-emerald-50 text-emerald-700 border border-emerald-200",
    "fair": "bg-yellow-50 text-yellow-700 border border-yellow-200",
    "poor": "bg-orange-50 text-orange-700 border border-orange-200",
    "damaged": "bg-red-50 text-red-700 border border-red-200",
    # item type
    "fixed_asset": "bg-violet-50 text-violet-700 border border-violet-200",
    "consumable": "bg-teal-50 text-teal-700 border border-teal-200",
    # roles
    "system_administrator": "bg-indigo-50 text-indigo-700 border border-indigo-200",
    "employee": "bg-slate-100 text-slate-600 border border-slate-200",
    # stock alert
    "low_stock": "bg-red-50 text-red-700 border border-red-200",
    "ok": "bg-emerald-50 text-emerald-700 border border-emerald-200",
}


def status_color(status: Optional[str]) -> str:
    if not status:
        return DEFAULT_STATUS_COLOR
    return STATUS_COLORS.get(str(status), DEFAULT_STATUS_COLOR)


def format_status(status: Optional[str]) -> str:
    """available -> Available, under_repair -> Under Repair."""
    if not status:
        return EMPTY
    return " ".join(word.capitalize() for word in str(status).replace("_", " ").split())


# ---------------------------------------------------------------------------
# TEXT
# ---------------------------------------------------------------------------


def truncate(text: Optional[str], length: int = 50) -> str:
    if not text:
        return EMPTY
    text = str(text)
    if len(text) <= length:
        return text
    return text[:length] + "…"


def display(value: Any) -> Any:
    """Render None and blank strings as the empty-cell marker."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return EMPTY
    return value


# ---------------------------------------------------------------------------
# PASSWORDS
# ---------------------------------------------------------------------------

PASSWORD_SPECIALS = "@$!%*?&"
PASSWORD_LENGTH = 8


def generate_strong_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Random password with at least one lowercase, uppercase, digit and
    special character, in shuffled order.
    """
    pools = [
        string.ascii_lowercase,
        string.ascii_uppercase,
        string.digits,
        PASSWORD_SPECIALS,
    ]
    length = max(length, len(pools))
    everything = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars.extend(secrets.choice(everything) for _ in range(length - len(chars)))

    # Fisher-Yates with a CSPRNG so the required characters are not always first.
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)


def party_name(entity: Any) -> str:
    """Name of an employee or department an asset/stock went to."""
    if not isinstance(entity, dict):
        return EMPTY
    if entity.get("full_name"):
        return str(entity["full_name"])
    if entity.get("name"):
        return str(entity["name"])
    full = f"{entity.get('first_name') or ''} {entity.get('last_name') or ''}".strip()
    return full or EMPTY


def person_name(entity: Any) -> str:
    """Employee display name: full_name, else first and last name."""
    if not isinstance(entity, dict):
        return EMPTY
    if entity.get("full_name"):
        return str(entity["full_name"])
    full = f"{entity.get('first_name') or ''} {entity.get('last_name') or ''}".strip()
    return full or EMPTY
