"""
Derived table views.

derive_view() recomputes what a table shows from the fetched record set plus
the current search/sort/page parameters. It never mutates its input, so the
fetched set stays the single source the view is rebuilt from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

Record = Dict[str, Any]

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class ViewParams:
    search: str = ""
    sort_key: Optional[str] = None
    direction: str = "asc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def toggle_sort(self, key: str) -> "ViewParams":
        """Clicking a column header: asc first, then flip to desc."""
        direction = "desc" if self.sort_key == key and self.direction == "asc" else "asc"
        return ViewParams(self.search, key, direction, self.page, self.page_size)


@dataclass(frozen=True)
class View:
    items: List[Record] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0


def _display_text(value: Any) -> str:
    # falsy values (None, "", 0) never match a search
    return str(value) if value else ""


def matches(record: Record, search: str) -> bool:
    """Case-insensitive substring match against every field except id."""
    needle = search.strip().lower()
    if not needle:
        return True
    return any(
        needle in _display_text(value).lower()
        for key, value in record.items()
        if key != "id"
    )


def _sort_key(record: Record, key: str):
    value = record.get(key)
    if value is None or value == "":
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))


def sort_records(records: Sequence[Record], key: Optional[str], direction: str = "asc") -> List[Record]:
    """
    Return a sorted copy. Empty values sort first ascending, last descending.
    """
    if not key:
        return list(records)
    return sorted(records, key=lambda r: _sort_key(r, key), reverse=(direction == "desc"))


def derive_view(records: Sequence[Record], params: ViewParams) -> View:
    filtered = [r for r in records if matches(r, params.search)]
    ordered = sort_records(filtered, params.sort_key, params.direction)

    page_size = params.page_size if params.page_size > 0 else DEFAULT_PAGE_SIZE
    total = len(ordered)
    total_pages = (total + page_size - 1) // page_size
    page = max(params.page, 1)

    start = (page - 1) * page_size
    return View(
        items=ordered[start:start + page_size],
        total=total,
        page=page,
        total_pages=total_pages,
    )
