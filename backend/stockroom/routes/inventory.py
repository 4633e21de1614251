# backend/stockroom/routes/inventory.py
"""
Inventory record routes.

SECURITY: All routes require authentication.
- Listing and fetching one record are open to every role
- Create, update, duplicate, refill and delete require the admin role

The caller's claims are passed explicitly into each service call.
"""
from flask import Blueprint, request, current_app, g

from ..validation import ValidationError, NotFoundError, PersistenceError
from ..decorators import require_auth, require_role
from ..services import inventory_service
from ..services.permission_service import ROLE_ADMIN, PermissionDeniedError


inventory_bp = Blueprint("inventory", __name__, url_prefix="/inventory")


@inventory_bp.get("")
@require_auth
def list_inventory_route():
    """
    List inventory records.

    Query params:
    - search: substring of item_code or delivery_no (case-insensitive)
    - sort:   delivery_date | item_description | qty | date_counted | created_at
    - order:  asc | desc (default desc)
    - page:   1-indexed page number (default 1)
    - limit:  page size (default 100)
    """
    try:
        return inventory_service.list_inventory(
            g.claims,
            search=request.args.get("search"),
            sort=request.args.get("sort"),
            order=request.args.get("order"),
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            default_limit=current_app.config.get("DEFAULT_PAGE_SIZE", inventory_service.DEFAULT_PAGE_SIZE),
        ), 200
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to fetch inventory")
        return {"error": "Failed to fetch inventory"}, 500


@inventory_bp.get("/<int:record_id>")
@require_auth
def get_inventory_route(record_id: int):
    try:
        record = inventory_service.get_record(g.claims, record_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403

    return record.to_dict(), 200


@inventory_bp.post("")
@require_auth
@require_role(ROLE_ADMIN)
def create_inventory_route():
    """Create a record. Requires item_description and qty."""
    payload = request.get_json(silent=True) or {}

    try:
        record = inventory_service.create_record(g.claims, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to create inventory record")
        return {"error": "Database operation failed"}, 500

    return record.to_dict(), 201


@inventory_bp.put("/<int:record_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_inventory_route(record_id: int):
    """
    Sparse update: only keys present in the body are written.

    updated_at and edited_by are always refreshed, even for an empty body.
    """
    payload = request.get_json(silent=True)

    try:
        record = inventory_service.update_record(g.claims, record_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to update inventory record %s", record_id)
        return {"error": "Failed to update item"}, 500

    return record.to_dict(), 200


@inventory_bp.delete("/<int:record_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_inventory_route(record_id: int):
    try:
        inventory_service.delete_record(g.claims, record_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to delete inventory record %s", record_id)
        return {"error": "Failed to delete item"}, 500

    return {"message": "Item deleted successfully"}, 200


@inventory_bp.post("/<int:record_id>/duplicate")
@require_auth
@require_role(ROLE_ADMIN)
def duplicate_inventory_route(record_id: int):
    """Copy item identity and qty into a new record for a fresh count."""
    try:
        record = inventory_service.duplicate_record(g.claims, record_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to duplicate inventory record %s", record_id)
        return {"error": "Failed to duplicate item"}, 500

    return record.to_dict(), 201


@inventory_bp.post("/<int:record_id>/refill")
@require_auth
@require_role(ROLE_ADMIN)
def refill_inventory_route(record_id: int):
    """Set refill_status; stamps date_of_refill and refill_by."""
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        record = inventory_service.set_refill_status(g.claims, record_id, payload.get("refill_status"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PermissionDeniedError as e:
        return {"error": str(e)}, 403
    except PersistenceError:
        current_app.logger.exception("Failed to update refill status for record %s", record_id)
        return {"error": "Failed to update refill status"}, 500

    return record.to_dict(), 200
