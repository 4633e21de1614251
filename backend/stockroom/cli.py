# Overview: Flask CLI command groups for bootstrap and user administration.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to stockroom (PowerShell: $env:FLASK_APP="stockroom").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User administration:
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users create --username admin --email admin@stockroom.com --password "Password123!" --role admin
#   Create a user (prompts if options are omitted).
# - python -m flask users set-role admin@stockroom.com admin
#   Promote or demote an existing user. Signup always creates role "user".

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import auth_service
from .services.permission_service import ALL_ROLES, ROLE_USER
from .validation import ValidationError, ConflictError, NotFoundError, PersistenceError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """
    Drop and recreate every table.

    DEV/TEST only: all inventory records and users are deleted.
    """
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)

    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found")
        return

    for user in users:
        click.echo(f"{user.id:>4}  {user.username:<20} {user.email:<32} {user.role}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ALL_ROLES), default=ROLE_USER, show_default=True)
@with_appcontext
def create_user_command(username, email, password, role):
    """Create a user with the given role."""
    try:
        user = auth_service.create_user(username=username, email=email, password=password, role=role)
    except (ValidationError, ConflictError, PersistenceError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('set-role')
@click.argument('email')
@click.argument('role', type=click.Choice(ALL_ROLES))
@with_appcontext
def set_role_command(email, role):
    """Change the role of the user with EMAIL."""
    try:
        user = auth_service.set_role(email, role)
    except (ValidationError, NotFoundError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS {user.email} is now '{user.role}'")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
