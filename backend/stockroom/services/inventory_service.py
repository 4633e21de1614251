# Overview: Service-layer operations for inventory records; encapsulates business logic and database work.

"""
Inventory Record Service

Every operation takes the caller's Claims explicitly. Reads are open to any
authenticated role; every write is admin-only.

Auditing fields:
- recorded_by / created_at are set once, at creation (or duplication)
- edited_by / updated_at are overwritten by every update, refill and
  duplicate, even when no other column changes

Updates are sparse: only keys present in the request body are touched. See
validation.UPDATE_RULES for how present-but-empty values are treated per field.

Concurrency: last write wins at the row level. No version column, no locking.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import InventoryRecord
from ..validation import (
    MAX_INTEGER,
    NotFoundError,
    PersistenceError,
    InventoryPatch,
    build_update_patch,
    validate_create_payload,
    require_refill_status,
)
from .permission_service import ALL_ROLES, WRITE_ROLES, require_role
from .token_service import Claims
from stockroom.time_utils import utcnow, today

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("delivery_date", "item_description", "qty", "date_counted", "created_at")
DEFAULT_SORT = "created_at"
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000
# Keeps offset = (page - 1) * limit inside a signed 64-bit INTEGER
MAX_PAGE = 2 ** 31

# Columns carried over when a record is duplicated for a re-count
DUPLICATE_FIELDS = ("item_description", "qty", "color", "storage")


@dataclass(frozen=True)
class ListQuery:
    """Normalized list parameters (after allow-listing and clamping)."""
    search: str
    sort: str
    order: str
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_list_query(
    search: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    page=None,
    limit=None,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> ListQuery:
    """
    Clamp raw query parameters to safe values.

    Unknown sort keys silently fall back to created_at; order is "asc" only
    when asked for explicitly. page and limit are clamped to
    [1, MAX_PAGE] and [1, MAX_PAGE_SIZE].
    """
    limit = _to_int(limit, default_limit)
    if limit < 1:
        limit = default_limit
    limit = min(limit, MAX_PAGE_SIZE)

    return ListQuery(
        search=(search or "").strip(),
        sort=sort if sort in SORTABLE_COLUMNS else DEFAULT_SORT,
        order="asc" if order == "asc" else "desc",
        page=min(max(_to_int(page, 1), 1), MAX_PAGE),
        limit=limit,
    )


def _apply_search(query, search: str):
    if not search:
        return query
    return query.filter(
        db.or_(
            InventoryRecord.item_code.icontains(search, autoescape=True),
            InventoryRecord.delivery_no.icontains(search, autoescape=True),
        )
    )


def _get_or_404(record_id: int) -> InventoryRecord:
    if not 0 < record_id <= MAX_INTEGER:
        raise NotFoundError("Item not found")
    record = db.session.get(InventoryRecord, record_id)
    if record is None:
        raise NotFoundError("Item not found")
    return record


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except (SQLAlchemyError, OverflowError) as e:
        db.session.rollback()
        logger.error("Failed to %s: %s", action, e)
        raise PersistenceError(f"Failed to {action}") from e


def _next_updated_at(previous: datetime | None) -> datetime:
    """Current time, nudged forward so updated_at strictly increases."""
    now = utcnow()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _touch(record: InventoryRecord, caller: Claims) -> None:
    record.updated_at = _next_updated_at(record.updated_at)
    record.edited_by = caller.user_id


def list_inventory(
    caller: Claims,
    search: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    page=None,
    limit=None,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> dict:
    """
    Paginated, searchable listing.

    Returns a dict with 'data' (serialized records) and 'pagination'
    (total, page, limit, totalPages). total counts the filtered set
    without limit/offset.
    """
    require_role(caller, ALL_ROLES, action="inventory.list")
    q = normalize_list_query(search, sort, order, page, limit, default_limit)

    column = getattr(InventoryRecord, q.sort)
    if q.order == "asc":
        ordering = (column.asc(), InventoryRecord.id.asc())
    else:
        ordering = (column.desc(), InventoryRecord.id.desc())

    try:
        base_query = _apply_search(db.session.query(InventoryRecord), q.search)
        total = base_query.count()
        records = base_query.order_by(*ordering).offset(q.offset).limit(q.limit).all()
    except (SQLAlchemyError, OverflowError) as e:
        db.session.rollback()
        raise PersistenceError("Failed to fetch inventory") from e

    return {
        "data": [r.to_dict() for r in records],
        "pagination": {
            "total": total,
            "page": q.page,
            "limit": q.limit,
            "totalPages": (total + q.limit - 1) // q.limit,
        },
    }


def get_record(caller: Claims, record_id: int) -> InventoryRecord:
    require_role(caller, ALL_ROLES, action="inventory.get")
    return _get_or_404(record_id)


def create_record(caller: Claims, payload: dict) -> InventoryRecord:
    """
    Create a record from a client payload.

    recorded_by is the caller; refill fields start unset.
    """
    require_role(caller, WRITE_ROLES, action="inventory.create")
    fields = validate_create_payload(payload)

    now = utcnow()
    record = InventoryRecord(
        **fields,
        recorded_by=caller.user_id,
        refill_status="",
        created_at=now,
        updated_at=now,
    )

    db.session.add(record)
    _commit("create item")

    logger.info("Inventory record %s created by user %s", record.id, caller.user_id)
    return record


def apply_patch(record: InventoryRecord, patch: InventoryPatch, caller: Claims) -> None:
    for key, value in patch.changes.items():
        setattr(record, key, value)
    _touch(record, caller)


def update_record(caller: Claims, record_id: int, payload: dict | None) -> InventoryRecord:
    """
    Apply a sparse patch.

    An empty payload is valid: only updated_at and edited_by change.
    """
    require_role(caller, WRITE_ROLES, action="inventory.update")
    patch = build_update_patch(payload)
    record = _get_or_404(record_id)

    apply_patch(record, patch, caller)
    _commit("update item")

    logger.info(
        "Inventory record %s updated by user %s (fields: %s)",
        record.id,
        caller.user_id,
        ", ".join(sorted(patch.changes)) or "none",
    )
    return record


def duplicate_record(caller: Claims, record_id: int) -> InventoryRecord:
    """
    Start a fresh count from an existing record.

    Only the item identity and quantity are copied; delivery, supplier and
    refill metadata are dropped and the caller becomes counter, recorder
    and editor.
    """
    require_role(caller, WRITE_ROLES, action="inventory.duplicate")
    source = _get_or_404(record_id)

    now = utcnow()
    copy = InventoryRecord(
        **{name: getattr(source, name) for name in DUPLICATE_FIELDS},
        counted_by=str(caller.user_id),
        date_counted=today(),
        recorded_by=caller.user_id,
        edited_by=caller.user_id,
        refill_status="",
        created_at=now,
        updated_at=now,
    )

    db.session.add(copy)
    _commit("duplicate item")

    logger.info("Inventory record %s duplicated as %s by user %s", source.id, copy.id, caller.user_id)
    return copy


def set_refill_status(caller: Claims, record_id: int, refill_status) -> InventoryRecord:
    """Mark refill disposition; stamps date_of_refill and refill_by."""
    require_role(caller, WRITE_ROLES, action="inventory.refill")
    status = require_refill_status(refill_status)
    record = _get_or_404(record_id)

    record.refill_status = status
    record.date_of_refill = today()
    record.refill_by = str(caller.user_id)
    _touch(record, caller)
    _commit("update refill status")

    logger.info("Inventory record %s refill_status=%s by user %s", record.id, status, caller.user_id)
    return record


def delete_record(caller: Claims, record_id: int) -> None:
    """Hard delete. No tombstone is kept."""
    require_role(caller, WRITE_ROLES, action="inventory.delete")
    record = _get_or_404(record_id)

    db.session.delete(record)
    _commit("delete item")

    logger.info("Inventory record %s deleted by user %s", record_id, caller.user_id)
