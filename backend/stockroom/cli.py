# Overview: Flask CLI command groups for bootstrap and operator recovery.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--username admin] [--password "..."]
#   Idempotent bootstrap: creates tables and provisions the administrator if none exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Administrator recovery:
# - python -m flask users show
#   Show the provisioned administrator.
# - python -m flask users set-password [--password "..."]
#   Reset the administrator password (prompts if omitted).

import click
from flask.cli import with_appcontext

from .errors import StockroomError
from .extensions import db
from .services import auth_service
from .services.concurrency import store_access
from .services.storage_service import provision_admin


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--username', default=None, help='Administrator username (defaults to ADMIN_USERNAME)')
@click.option('--password', default=None, help='Administrator password (generated when omitted)')
@with_appcontext
def init_system(username, password):
    """
    Create the schema and provision the administrator on first run.

    Does nothing to an existing administrator.
    """
    click.echo("START Initializing database...")

    with store_access():
        db.create_all()
    click.echo("PASS Tables ready: users, products, sales")

    if password is not None:
        try:
            auth_service.validate_password_strength(password)
        except StockroomError as e:
            raise click.ClickException(str(e))

    created = provision_admin(username=username, password=password)
    if created is None:
        click.echo("PASS Administrator already provisioned")
        return

    user, generated = created
    click.echo(f"PASS Created administrator: {user['username']} (ID: {user['id']})")
    if generated:
        click.echo(f"WARN Generated password: {generated}")
        click.echo("WARN Sign in and change it immediately!")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    with store_access():
        click.echo("DELETE  Dropping all tables...")
        db.drop_all()

        click.echo("BUILD  Creating all tables...")
        db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """Administrator account commands."""


@users_group.command('show')
@with_appcontext
def show_admin():
    """Show the provisioned administrator."""
    with store_access():
        user = auth_service.get_admin_user()
        if user is None:
            click.echo("FAIL No administrator provisioned. Run 'python -m flask system init'.")
            return
        click.echo(f"{user.id}\t{user.username}")


@users_group.command('set-password')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='New password')
@with_appcontext
def set_password(password):
    """Reset the administrator password."""
    try:
        user = auth_service.set_admin_password(password)
    except StockroomError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Password updated for {user['username']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
