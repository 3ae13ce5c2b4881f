# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/shoppos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to shoppos (PowerShell: $env:FLASK_APP="shoppos").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create missing tables and a default admin (admin / "Password123!").
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
# - python -m flask users create --username maria --password "Password123!" --role cashier
#
# Products:
# - python -m flask products seed
#   Insert a small demo catalogue if the products table is empty.

import click
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .models import Product, User, ROLES, ROLE_ADMIN
from .money import format_cents, to_cents
from .services.auth_service import create_user

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "Password123!"

DEMO_PRODUCTS = [
    # (name, price, stock, category)
    ("Whole Milk 1L", "1.50", 24, "Dairy"),
    ("Brown Eggs (12)", "3.20", 18, "Dairy"),
    ("Sourdough Loaf", "4.00", 10, "Bakery"),
    ("Bananas (kg)", "1.10", 30, "Produce"),
    ("Sparkling Water", "0.90", 48, "Drinks"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create missing tables and the default admin account.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing shoppos...")
    db.create_all()
    click.echo("PASS Tables ready")

    if db.session.query(User).filter_by(username=DEFAULT_ADMIN_USERNAME).first():
        click.echo(f"PASS Using existing user: {DEFAULT_ADMIN_USERNAME}")
    else:
        create_user(DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD, role=ROLE_ADMIN)
        click.echo(f"PASS Created admin user: {DEFAULT_ADMIN_USERNAME} / {DEFAULT_ADMIN_PASSWORD}")

    click.echo("DONE")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        raise click.UsageError("Refusing to reset without --yes")
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with role and active status."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<24} {user.role:<8} {status}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), default='cashier', show_default=True)
@with_appcontext
def create_user_command(username, password, role):
    """Create a user with the given role."""
    try:
        user = create_user(username, password, role=role)
    except AppError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created {user.role} {user.username} (ID: {user.id})")


@click.group('products')
def products_group():
    """Product catalogue commands."""


@products_group.command('seed')
@with_appcontext
def seed_products():
    """Insert demo products when the catalogue is empty."""
    if db.session.query(Product.id).first():
        click.echo("SKIP Products already exist")
        return
    for name, price, stock, category in DEMO_PRODUCTS:
        db.session.add(Product(
            name=name,
            price_cents=to_cents(price),
            stock_quantity=stock,
            category=category,
        ))
    db.session.commit()
    for name, price, stock, _ in DEMO_PRODUCTS:
        click.echo(f"PASS {name:<20} {format_cents(to_cents(price)):>8} x{stock}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
