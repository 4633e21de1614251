from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import format_timestamp


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Role is a single flag: "admin" may write inventory, "user" and "counter"
    are read-only. Every inventory write records the acting user id.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_users_username"),
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password, never serialized
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="user")

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "created_at": format_timestamp(self.created_at),
        }
