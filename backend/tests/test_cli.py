"""Tests for the `system` and `users` Flask CLI groups."""

from stockroom.models import User
from stockroom.extensions import db


def _user(email):
    return db.session.query(User).filter_by(email=email).one_or_none()


def test_users_create(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create",
        "--username", "boss",
        "--email", "boss@stockroom.com",
        "--password", "Password123!",
        "--role", "admin",
    ])

    assert result.exit_code == 0, result.output
    assert "PASS Created user: boss" in result.output
    assert _user("boss@stockroom.com").role == "admin"


def test_users_create_rejects_duplicate_email(app, admin_user):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create",
        "--username", "other",
        "--email", admin_user.email,
        "--password", "Password123!",
    ])

    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_users_create_rejects_short_password(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create",
        "--username", "shorty",
        "--email", "shorty@stockroom.com",
        "--password", "short",
    ])

    assert result.exit_code == 1
    assert _user("shorty@stockroom.com") is None


def test_users_set_role(app, regular_user):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "set-role", regular_user.email, "counter"])

    assert result.exit_code == 0, result.output
    db.session.expire_all()
    assert _user(regular_user.email).role == "counter"


def test_users_set_role_unknown_email(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "set-role", "ghost@stockroom.com", "admin"])

    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_users_list(app, admin_user, regular_user):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "list"])

    assert result.exit_code == 0
    assert "admin@stockroom.com" in result.output
    assert "staff@stockroom.com" in result.output


def test_reset_db_requires_confirmation(app, admin_user):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["system", "reset-db"])

    assert result.exit_code == 1
    assert _user(admin_user.email) is not None
