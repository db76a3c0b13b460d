# Overview: Flask CLI command group for bootstrap, inspection, and maintenance.

# backend/shopdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to shopdesk (PowerShell: $env:FLASK_APP="shopdesk").
# - Use: python -m flask <group> <command> [options]
#
# - python -m flask shop init
#   Create tables and seed collections that were never saved (idempotent).
# - python -m flask shop reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask shop hash-pin
#   Print a bcrypt hash to use as OPERATOR_PIN_HASH instead of a plaintext PIN.
# - python -m flask shop low-stock [--threshold 5]
#   List products whose stock is below the threshold.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db, shop
from .money import format_brl
from .services.auth_service import hash_pin as hash_pin_service, PinValidationError
from .services.products_service import LOW_STOCK_THRESHOLD, low_stock as low_stock_service


@click.group('shop')
def shop_group():
    """Shop bootstrap and maintenance commands."""


@shop_group.command('init')
@with_appcontext
def init():
    """
    Create tables and load every collection.

    Collections that were never saved are seeded (SEED_DEFAULTS) and written
    back, so running this twice changes nothing.
    """
    click.echo("BUILD  Creating tables...")
    db.create_all()

    shop.context.reload()
    for marker in shop.context.persistence.describe():
        click.echo(f"  {marker['name']:<12} v{marker['version']}  {marker['record_count']} records")

    click.echo("PASS Shop initialized.")


@shop_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask shop init' to seed.")


@shop_group.command('hash-pin')
@click.option('--pin', prompt=True, hide_input=True, confirmation_prompt=True, help='Operator PIN (4-12 digits)')
@with_appcontext
def hash_pin(pin):
    """Print the bcrypt hash of an operator PIN."""
    try:
        click.echo(hash_pin_service(pin, rounds=current_app.config.get("PIN_HASH_ROUNDS", 12)))
    except PinValidationError as e:
        raise click.ClickException(str(e))


@shop_group.command('low-stock')
@click.option('--threshold', type=float, default=LOW_STOCK_THRESHOLD, show_default=True)
@with_appcontext
def low_stock(threshold):
    """List products whose stock is below the threshold."""
    products = low_stock_service(shop.catalog, threshold)
    if not products:
        click.echo("No products below threshold.")
        return
    for product in products:
        click.echo(f"{product.id:<16} {product.name:<32} {product.stock:>8g} {product.unit}  {format_brl(product.price_cents)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(shop_group)
