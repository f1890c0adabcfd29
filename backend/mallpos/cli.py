# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/mallpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to mallpos (PowerShell: $env:FLASK_APP="mallpos").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Insert the demo products if the catalog is empty.
#
# Vendor ledger inspection:
# - python -m flask vendors list
#   List vendors with their outstanding balance.
# - python -m flask vendors balance 3
#   Show purchases, payments and balance for one vendor.
#
# Sales:
# - python -m flask sales summary --period week
#   Bill count, takings and best sellers for today/week/month/year.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .money import from_cents
from .services import (
    balance_service,
    billing_service,
    purchase_service,
    vendor_payment_service,
    vendor_service,
)
from .services.vendor_service import VendorNotFoundError
from .validation import ValidationError

SEED_PRODUCTS = [
    {"name": "Bottle Water 500ml", "price_cents": 150, "stock": 50, "barcode": "BW500"},
    {"name": "Chocolate Bar", "price_cents": 200, "stock": 40, "barcode": "CHOC123"},
    {"name": "Chips Pack", "price_cents": 175, "stock": 30, "barcode": "CHIPS99"},
    {"name": "Notebook A5", "price_cents": 350, "stock": 20, "barcode": "NOTEA5"},
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (idempotent)."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("Database reset.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Insert demo products when the catalog is empty."""
    if db.session.query(Product.id).first():
        click.echo("Products already exist; nothing seeded.")
        return
    for row in SEED_PRODUCTS:
        db.session.add(Product(**row))
    db.session.commit()
    click.echo(f"Seeded {len(SEED_PRODUCTS)} products.")


@click.group('vendors')
def vendors_group():
    """Vendor ledger inspection commands."""


@vendors_group.command('list')
@with_appcontext
def list_vendors_cli():
    """List vendors with their outstanding balance."""
    vendors = vendor_service.list_vendors()
    if not vendors:
        click.echo("No vendors.")
        return
    for v in vendors:
        balance = balance_service.get_vendor_balance(v.id)
        click.echo(
            f"{v.id:>5}  {v.name:<30}  {from_cents(balance.outstanding_balance_cents):>12.2f}  {balance.status}"
        )


@vendors_group.command('balance')
@click.argument('vendor_id', type=int)
@with_appcontext
def vendor_balance_cli(vendor_id):
    """Show purchases, payments and balance for one vendor."""
    try:
        vendor = vendor_service.get_vendor(vendor_id)
    except VendorNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Vendor {vendor.id}: {vendor.name}")
    click.echo("Purchases:")
    for p in purchase_service.list_purchases(vendor_id=vendor_id):
        click.echo(
            f"  #{p.id:<5} product={p.product_id:<5} qty={p.quantity:<5} "
            f"price={from_cents(p.unit_price_cents):.2f} total={from_cents(p.total_cents):.2f}"
        )
    click.echo("Payments:")
    for pay in vendor_payment_service.list_payments(vendor_id):
        click.echo(f"  #{pay.id:<5} {pay.payment_mode:<14} {from_cents(pay.amount_cents):.2f}")

    balance = balance_service.get_vendor_balance(vendor_id).to_dict()
    click.echo(
        f"Total purchases: {balance['totalPurchases']:.2f}  "
        f"Total payments: {balance['totalPayments']:.2f}  "
        f"Outstanding: {balance['outstandingBalance']:.2f} ({balance['status']})"
    )


@click.group('sales')
def sales_group():
    """Sales reporting commands."""


@sales_group.command('summary')
@click.option('--period', type=click.Choice(sorted(billing_service.PERIOD_DAYS)), default='today')
@click.option('--top', type=int, default=5, help='How many best sellers to list')
@with_appcontext
def sales_summary_cli(period, top):
    """Bill count, takings and best sellers for a period."""
    stats = billing_service.sales_analytics(period)
    click.echo(
        f"{period}: {stats['total_transactions']} bills, "
        f"total {stats['total_sales']:.2f}, average {stats['avg_transaction_value']:.2f}"
    )
    try:
        best_sellers = billing_service.top_products(period, top)
    except ValidationError as e:
        raise click.ClickException(str(e))
    for row in best_sellers:
        click.echo(f"  {row['name']:<30} x{row['total_quantity']:<5} {row['total_revenue']:>10.2f}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(vendors_group)
    app.cli.add_command(sales_group)
