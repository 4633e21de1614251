from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from stockroom.models import REFILL_STATUSES
from stockroom.time_utils import parse_calendar_date


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level uniqueness conflict (e.g., email already registered)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(LookupError):
    """404-level: no row matches the requested id."""


class PersistenceError(RuntimeError):
    """500-level: the store rejected or failed the operation."""


# Fields a client may send when creating a record; anything else is ignored
CREATE_FIELDS = (
    "delivery_date",
    "delivery_no",
    "supplier_name",
    "delivery_details",
    "stockman",
    "item_description",
    "item_code",
    "color",
    "qty",
    "storage",
    "counted_by",
    "date_counted",
)

DATE_FIELDS = {"delivery_date", "date_counted", "date_of_refill"}

# Largest value an INTEGER column holds (signed 64-bit)
MAX_INTEGER = 2 ** 63 - 1

_SANITIZE_RE = re.compile(r"[^\w\s-]", re.ASCII)


def sanitize_text(value: str) -> str:
    """Strip characters outside word chars, whitespace and hyphen, then trim."""
    return _SANITIZE_RE.sub("", str(value)).strip()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def coerce_date(key: str, value: Any):
    try:
        return parse_calendar_date(value)
    except (ValueError, TypeError):
        raise ValidationError(f"{key} must be a valid date (YYYY-MM-DD)")


def coerce_qty(value: Any) -> int | None:
    """
    Coerce a quantity to an integer.

    Zero and negative values are accepted; non-numeric input and values that
    do not fit an INTEGER column are rejected.
    """
    qty = _coerce_int(value)
    if qty is not None and not -MAX_INTEGER - 1 <= qty <= MAX_INTEGER:
        raise ValidationError("qty is out of range")
    return qty


def _coerce_int(value: Any) -> int | None:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError("qty must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("qty must be a whole number")
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            pass
        try:
            as_float = float(stripped)
        except ValueError:
            raise ValidationError("qty must be a number")
        if not as_float.is_integer():
            raise ValidationError("qty must be a whole number")
        return int(as_float)
    raise ValidationError("qty must be a number")


def coerce_refill_status(value: Any) -> str:
    status = str(value).strip()
    if status not in REFILL_STATUSES:
        allowed = ", ".join(s for s in REFILL_STATUSES if s)
        raise ValidationError(f"refill_status must be one of: {allowed}")
    return status


def _text(value: Any) -> str | None:
    return None if value is None else str(value).strip()


# -----------------------------------------------------------------------------
# Field update rules
#
# Each rule receives the raw value of a key that IS present in the payload and
# returns either (True, value_to_write) or (False, None) for "do not write".
# -----------------------------------------------------------------------------

FieldRule = Callable[[str, Any], "tuple[bool, Any]"]


def _nullable_text(key: str, raw: Any):
    # present-but-empty clears the column
    return True, (None if _is_blank(raw) else _text(raw))


def _as_is(key: str, raw: Any):
    # "" and None are written verbatim so the column can be cleared
    return True, (raw if raw is None or isinstance(raw, str) else str(raw))


def _nullable_qty(key: str, raw: Any):
    return True, coerce_qty(raw)


def _nullable_date(key: str, raw: Any):
    return True, (None if _is_blank(raw) else coerce_date(key, raw))


def _truthy_date(key: str, raw: Any):
    if _is_blank(raw):
        return False, None
    return True, coerce_date(key, raw)


def _truthy_description(key: str, raw: Any):
    if _is_blank(raw):
        return False, None
    cleaned = sanitize_text(raw)
    if not cleaned:
        raise ValidationError("item_description must contain letters or digits")
    return True, cleaned


def _truthy_refill_status(key: str, raw: Any):
    if _is_blank(raw):
        return False, None
    return True, coerce_refill_status(raw)


UPDATE_RULES: dict[str, FieldRule] = {
    "delivery_date": _nullable_date,
    "delivery_no": _nullable_text,
    "supplier_name": _nullable_text,
    "delivery_details": _nullable_text,
    "stockman": _nullable_text,
    "item_description": _truthy_description,
    "item_code": _nullable_text,
    "color": _as_is,
    "qty": _nullable_qty,
    "storage": _as_is,
    "date_counted": _truthy_date,
    "counted_by": _nullable_text,
    "refill_status": _truthy_refill_status,
    "date_of_refill": _truthy_date,
    "refill_by": _nullable_text,
}


@dataclass(frozen=True)
class InventoryPatch:
    """
    A validated sparse patch.

    provided: every writable key the client sent, including empty ones.
    changes: the subset that will actually be written, with coerced values.
    A key in provided but not in changes was sent empty for a field that
    ignores empty input.
    """
    provided: frozenset[str] = frozenset()
    changes: dict[str, Any] = field(default_factory=dict)

    def is_provided(self, key: str) -> bool:
        return key in self.provided

    def writes(self, key: str) -> bool:
        return key in self.changes


def build_update_patch(payload: Any) -> InventoryPatch:
    """
    Turn a raw JSON body into an InventoryPatch.

    Keys outside UPDATE_RULES (id, created_at, recorded_by, edited_by, ...)
    are ignored, so write-once columns can never be patched.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    provided = []
    changes: dict[str, Any] = {}
    for key, rule in UPDATE_RULES.items():
        if key not in payload:
            continue
        provided.append(key)
        should_write, value = rule(key, payload[key])
        if should_write:
            changes[key] = value

    return InventoryPatch(provided=frozenset(provided), changes=changes)


def validate_create_payload(payload: Any) -> dict:
    """
    Validate and normalize a creation body.

    Requires a non-empty item_description and a quantity. Unknown keys are
    dropped; optional fields default to None.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    description = payload.get("item_description")
    if _is_blank(description) or _is_blank(payload.get("qty")):
        raise ValidationError("Item description and quantity are required")

    cleaned: dict[str, Any] = {}
    for key in CREATE_FIELDS:
        raw = payload.get(key)
        if key in DATE_FIELDS:
            cleaned[key] = None if _is_blank(raw) else coerce_date(key, raw)
        elif key == "qty":
            cleaned[key] = coerce_qty(raw)
        else:
            cleaned[key] = None if _is_blank(raw) else _text(raw)

    return cleaned


def require_refill_status(value: Any) -> str:
    if _is_blank(value):
        raise ValidationError("Refill status is required")
    return coerce_refill_status(value)
