# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import token_service, permission_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return hasattr(g, 'claims')


def bearer_token() -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.claims to the decoded Claims. Routes pass g.claims explicitly
    into service calls; services never read g themselves.

    Returns 401 if the header is missing, or the token is malformed,
    tampered with or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Access denied"}), 401

        try:
            claims = token_service.verify_token(token)
        except token_service.TokenError as e:
            return jsonify({"error": str(e)}), 401

        g.claims = claims
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the caller to hold one of the given roles.

    Must be stacked below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Access denied"}), 401

            try:
                permission_service.require_role(g.claims, roles, action=f"{request.method} {request.path}")
            except PermissionDeniedError as e:
                return jsonify({"error": str(e)}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
