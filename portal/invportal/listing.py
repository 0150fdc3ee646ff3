# portal/invportal/listing.py
"""
In-memory search, filtering and pagination of fetched collections.

The backend returns whole collections; every list page narrows them down
here before rendering.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

try:
    PAGE_SIZE: int = int(os.getenv("LIST_PAGE_SIZE", "10"))
except ValueError:
    PAGE_SIZE = 10

# Pages shown in full below this many; above it the window collapses.
FULL_WINDOW_PAGES = 7

Row = Dict[str, Any]
Accessor = Callable[[Row], Any]


def field_of(*path: str) -> Accessor:
    """Accessor for a possibly nested key, e.g. field_of("item", "name")."""

    def _get(row: Row) -> Any:
        value: Any = row
        for key in path:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
        return value

    return _get


# ---------------------------------------------------------------------------
# FILTERS
# ---------------------------------------------------------------------------


@dataclass
class ListFilter:
    """A select above the table; an empty selection means "all"."""

    name: str
    all_label: str
    options: Sequence[Tuple[str, str]]
    predicate: Callable[[Row, str], bool]

    def allows(self, row: Row, selected: str) -> bool:
        if not selected:
            return True
        return self.predicate(row, selected)


def equals(*path: str) -> Callable[[Row, str], bool]:
    getter = field_of(*path)
    return lambda row, selected: str(getter(row)) == selected


def matches_search(row: Row, query: str, fields: Sequence[Accessor]) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    for accessor in fields:
        value = accessor(row)
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def filter_rows(
    rows: Sequence[Row],
    *,
    query: str = "",
    search_fields: Sequence[Accessor] = (),
    filters: Sequence[ListFilter] = (),
    selected: Optional[Mapping[str, str]] = None,
) -> List[Row]:
    selected = selected or {}
    result = []
    for row in rows:
        if not matches_search(row, query, search_fields):
            continue
        if not all(f.allows(row, selected.get(f.name, "")) for f in filters):
            continue
        result.append(row)
    return result


# ---------------------------------------------------------------------------
# PAGINATION
# ---------------------------------------------------------------------------


def total_pages_for(total: int, per_page: int = PAGE_SIZE) -> int:
    return math.ceil(total / per_page) if total > 0 else 0


def page_window(page: int, total_pages: int) -> List[Optional[int]]:
    """
    Page numbers for the pager; None marks an ellipsis.

    >>> page_window(5, 10)
    [1, None, 4, 5, 6, None, 10]
    """
    if total_pages <= FULL_WINDOW_PAGES:
        return list(range(1, total_pages + 1))

    pages: List[Optional[int]] = [1]
    if page > 3:
        pages.append(None)
    for p in range(max(2, page - 1), min(total_pages - 1, page + 1) + 1):
        pages.append(p)
    if page < total_pages - 2:
        pages.append(None)
    pages.append(total_pages)
    return pages


@dataclass
class Page:
    rows: List[Row]
    page: int
    per_page: int
    total: int
    total_pages: int
    window: List[Optional[int]] = field(default_factory=list)

    @property
    def first_index(self) -> int:
        if self.total == 0:
            return 0
        return (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int:
        return min(self.page * self.per_page, self.total)

    @property
    def show_pager(self) -> bool:
        return self.total_pages > 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def clamp_page(page: Any, total_pages: int) -> int:
    try:
        number = int(page)
    except (TypeError, ValueError):
        number = 1
    return min(max(number, 1), max(total_pages, 1))


def paginate(rows: Sequence[Row], page: Any = 1, per_page: int = PAGE_SIZE) -> Page:
    total = len(rows)
    total_pages = total_pages_for(total, per_page)
    current = clamp_page(page, total_pages)
    start = (current - 1) * per_page
    return Page(
        rows=list(rows[start:start + per_page]),
        page=current,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
        window=page_window(current, total_pages),
    )
