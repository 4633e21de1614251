# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Uses bcrypt for password hashing. Users sign up with a username, email and
password and always start with the "user" role; admins are promoted through
the CLI (flask users set-role).

Lookup for login is by email. A missing account and a wrong password are
reported separately (404 vs 401), which the web client relies on to show
"user not found" vs "invalid password".
"""

import logging
import re

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import User
from ..validation import ValidationError, ConflictError, NotFoundError, PersistenceError
from .permission_service import ALL_ROLES, ROLE_USER
from .token_service import Claims

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
# bcrypt only hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


class InvalidCredentialsError(Exception):
    """Raised when the password does not match the stored hash."""
    pass


def validate_signup(username: str | None, email: str | None, password: str | None) -> None:
    """
    Validate signup fields.

    Raises ValidationError with the first problem found.
    """
    for name, value in (("Username", username), ("Email", email), ("Password", password)):
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be a string")

    if not username or len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if not email or not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with the configured cost factor."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def find_conflict(username: str, email: str) -> str | None:
    """Return the name of the first clashing unique field, email first."""
    existing = db.session.query(User).filter(
        db.or_(User.email == email, User.username == username)
    ).all()
    if any(u.email == email for u in existing):
        return "email"
    if existing:
        return "username"
    return None


def create_user(username: str, email: str, password: str, role: str = ROLE_USER) -> User:
    """
    Create a new user with a bcrypt password hash.

    Raises:
        ValidationError: invalid username, email, password or role
        ConflictError: email or username already taken (ConflictError.field names it)
        PersistenceError: the store failed the insert
    """
    if isinstance(username, str):
        username = username.strip()
    if isinstance(email, str):
        email = email.strip()
    validate_signup(username, email, password)

    if role not in ALL_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ALL_ROLES)}")

    conflict = find_conflict(username, email)
    if conflict:
        raise ConflictError(f"{conflict} already exists", field=conflict)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent signup
        db.session.rollback()
        conflict = find_conflict(username, email) or "email"
        raise ConflictError(f"{conflict} already exists", field=conflict)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError("Registration failed") from e

    logger.info("Created user id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def authenticate(email: str | None, password: str | None) -> User:
    """
    Authenticate user by email and password.

    Raises:
        ValidationError: email or password missing
        NotFoundError: no user with this email
        InvalidCredentialsError: password does not match
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError("Email and password must be strings")

    user = db.session.query(User).filter(User.email == email.strip()).first()
    if not user:
        raise NotFoundError("User not found")

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid password")

    return user


def claims_for(user: User) -> Claims:
    return Claims(user_id=user.id, role=user.role)


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def set_role(email: str, role: str) -> User:
    """Change a user's role. Only reachable from the CLI."""
    if role not in ALL_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ALL_ROLES)}")

    user = db.session.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")

    user.role = role
    db.session.commit()
    logger.info("Changed role for user id=%s to %s", user.id, role)
    return user
