"""
Dashboard aggregates over the fetched record set.

Pure functions: records in, numbers out. Only records with a parseable
delivery_date inside the selected range take part.
"""

from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from stockroom.time_utils import parse_calendar_date, today

Record = Dict[str, Any]

ALL = "all"
LOW_STOCK_THRESHOLD = 100
TOP_SUPPLIERS = 5
RECENT_ACTIVITY = 5


@dataclass(frozen=True)
class DashboardFilters:
    start_date: date
    end_date: date
    supplier: str = ALL
    status: str = ALL

    @classmethod
    def for_month(cls, day: Optional[date] = None, supplier: str = ALL, status: str = ALL) -> "DashboardFilters":
        """The calendar month containing day (default: today)."""
        day = day or today()
        last = calendar.monthrange(day.year, day.month)[1]
        return cls(day.replace(day=1), day.replace(day=last), supplier, status)


@dataclass(frozen=True)
class DashboardSummary:
    status_distribution: Dict[str, int] = field(default_factory=dict)
    monthly: List[Dict[str, Any]] = field(default_factory=list)
    top_suppliers: List[Dict[str, Any]] = field(default_factory=list)
    total_items: int = 0
    total_quantity: int = 0
    low_stock: int = 0
    recent_activity: List[Record] = field(default_factory=list)


def _qty(record: Record) -> int:
    return record.get("qty") or 0


def _delivery_date(record: Record) -> Optional[date]:
    try:
        return parse_calendar_date(record.get("delivery_date"))
    except ValueError:
        return None


def filter_records(records: Sequence[Record], filters: DashboardFilters) -> List[Record]:
    selected = []
    for record in records:
        delivered = _delivery_date(record)
        if delivered is None:
            continue
        if not (filters.start_date <= delivered <= filters.end_date):
            continue
        if filters.supplier != ALL and record.get("supplier_name") != filters.supplier:
            continue
        if filters.status != ALL and record.get("refill_status") != filters.status:
            continue
        selected.append(record)
    return selected


def summarize_dashboard(records: Sequence[Record], filters: DashboardFilters) -> DashboardSummary:
    selected = filter_records(records, filters)

    statuses = Counter(r.get("refill_status") or "" for r in selected)

    months: Dict[tuple, Dict[str, Any]] = {}
    suppliers: Dict[str, Dict[str, Any]] = {}
    for record in selected:
        delivered = _delivery_date(record)
        bucket = months.setdefault(
            (delivered.year, delivered.month),
            {"month": delivered.strftime("%b %Y"), "quantity": 0, "deliveries": 0},
        )
        bucket["quantity"] += _qty(record)
        bucket["deliveries"] += 1

        name = record.get("supplier_name") or "Unknown"
        entry = suppliers.setdefault(name, {"supplier": name, "total": 0, "count": 0})
        entry["total"] += _qty(record)
        entry["count"] += 1

    top = sorted(suppliers.values(), key=lambda s: s["total"], reverse=True)[:TOP_SUPPLIERS]
    recent = sorted(selected, key=lambda r: r.get("updated_at") or "", reverse=True)[:RECENT_ACTIVITY]

    return DashboardSummary(
        status_distribution=dict(statuses),
        monthly=[months[k] for k in sorted(months)],
        top_suppliers=top,
        total_items=len(selected),
        total_quantity=sum(_qty(r) for r in selected),
        low_stock=sum(1 for r in selected if _qty(r) < LOW_STOCK_THRESHOLD),
        recent_activity=recent,
    )
