# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockroom/routes/auth.py
"""
Authentication API routes

- POST /auth/signup: self-registration, always as role "user"
- POST /auth/login:  email + password, returns a one-hour bearer token
- GET  /auth/me:     decode the caller's token and return their profile
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import token_service
from ..services.auth_service import InvalidCredentialsError
from ..validation import ValidationError, ConflictError, NotFoundError, PersistenceError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/signup")
def signup_route():
    """
    Register a new account.

    Returns 201 with the user and a token, 400 on invalid input and 409 when
    the email or username is taken (the clashing field is named in "field").
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        user = auth_service.create_user(
            username=data.get("username"),
            email=data.get("email"),
            password=data.get("password"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e), "field": e.field}), 409
    except PersistenceError:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Registration failed"}), 500

    token = token_service.issue_token(auth_service.claims_for(user))

    return jsonify({
        "message": "User created successfully",
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role,
        },
        "token": token,
    }), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password and issue a bearer token.

    404 when no account uses the email, 401 when the password is wrong.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        user = auth_service.authenticate(data.get("email"), data.get("password"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvalidCredentialsError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    token = token_service.issue_token(auth_service.claims_for(user))

    return jsonify({
        "user": {"id": user.id, "name": user.username, "role": user.role},
        "token": token,
    }), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """
    Validate the bearer token and return the caller's profile.

    The claims are returned as signed; the profile reflects the database
    (a role change takes effect on the next login).
    """
    try:
        user = auth_service.get_user(g.claims.user_id)
    except NotFoundError:
        return jsonify({"error": "Invalid token"}), 401

    return jsonify({
        "user": user.to_dict(),
        "claims": g.claims.to_dict(),
    }), 200
