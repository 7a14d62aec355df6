# Overview: Flask CLI command groups; the operator surface over the catalog, ledger and checkout services.

# backend/omnimarket/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to omnimarket (PowerShell: $env:FLASK_APP="omnimarket").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create the storage table and persist the starter catalog and default branches.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system config [--name "OmniMarket"] [--logo "https://..."]
#   Show or update the app name/logo.
#
# Catalog:
# - python -m flask catalog list --branch B001 [--search kopi] [--low-stock] [--threshold 10]
# - python -m flask catalog show P001
# - python -m flask catalog create --branch B001 --name "Teh Botol" --base-unit Botol --base-price 4000 --stock 48
# - python -m flask catalog add-unit P001 --name Slop --reference Renceng --multiplier 12 --price 160000
#   "12 Renceng = 1 Slop"; stored as 120 Sachet.
# - python -m flask catalog edit-unit P001 0 --name Renceng --reference Sachet --multiplier 10 --price 14000
# - python -m flask catalog remove-unit P001 0
# - python -m flask catalog delete P001
#
# Inventory:
# - python -m flask inventory adjust P001 --mode add --amount 50 --reason "New Stock In" [--actor "Ani"]
# - python -m flask inventory history [--branch B001] [--product P001]
# - python -m flask inventory low-stock-limit [VALUE]
#
# Sales:
# - python -m flask sales checkout --item P001:Karton:1 --item P002::3 --method CASH --cash 200000
#   Item format is PRODUCT_ID:UNIT:QTY; an empty UNIT means the base unit.
# - python -m flask sales list [--branch B001]
# - python -m flask sales summary [--branch B001]
#
# Branches and field visits:
# - python -m flask branches list | add --name ... | delete B002
# - python -m flask visits record --shop "Toko Maju" --lat -6.2 --lng 106.8 [--notes ...]
# - python -m flask visits list [--motorist "Demo User"]

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Actor, AdjustmentMode, ADJUSTMENT_REASONS, REASON_NEW_STOCK
from .services import (
    conversion_service,
    inventory_service,
    ledger_service,
    products_service,
    sales_service,
    store_service,
    storage_service,
)
from .services.storage_service import KEY_PRODUCTS


def _actor(actor_name: str | None, branch_id: str | None) -> Actor:
    return Actor(
        name=actor_name or current_app.config["DEFAULT_ACTOR_NAME"],
        branch_id=branch_id or current_app.config["DEFAULT_BRANCH_ID"],
    )


def _print_product(product) -> None:
    click.echo(
        f"{product.id:<16} {product.sku:<12} {product.name:<28} "
        f"{product.stock} {product.base_unit} @ {product.base_price}"
    )
    for idx, conv in enumerate(product.conversions):
        click.echo(f"    [{idx}] 1 {conv.name} = {conv.quantity} {product.base_unit} @ {conv.price}")


def _parse_item(raw: str) -> tuple[str, str | None, str]:
    parts = raw.split(":")
    if len(parts) != 3 or not parts[0]:
        raise click.BadParameter(f"'{raw}' is not PRODUCT_ID:UNIT:QTY", param_hint="--item")
    product_id, unit, qty = parts
    return product_id, (unit or None), qty


actor_option = click.option('--actor', 'actor_name', default=None, help='Who performs the operation (defaults to DEFAULT_ACTOR_NAME)')
branch_option = click.option('--branch', 'branch_id', default=None, help='Branch id (defaults to DEFAULT_BRANCH_ID)')


# =============================================================================
# SYSTEM
# =============================================================================

@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the storage table and persist the starter data.

    Idempotent: existing keys are left untouched.
    """
    click.echo("START Initializing OmniMarket storage...")
    db.create_all()

    if storage_service.get_value(KEY_PRODUCTS) is None:
        products_service.save_products(products_service.list_all_products())
        click.echo("PASS Persisted starter catalog")
    else:
        click.echo("PASS Using existing catalog")

    branches = store_service.list_branches()
    click.echo(f"PASS Branches: {', '.join(b.id for b in branches)}")


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

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@system_group.command('config')
@click.option('--name', 'app_name', default=None, help='Application name')
@click.option('--logo', 'app_logo', default=None, help='Logo URL or data URL')
@with_appcontext
def app_config(app_name, app_logo):
    """Show the app config, or update it when --name/--logo is given."""
    config = store_service.get_app_config()
    if app_name is not None or app_logo is not None:
        try:
            config = store_service.save_app_config(
                app_name=app_name if app_name is not None else config.app_name,
                app_logo=app_logo if app_logo is not None else config.app_logo,
            )
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo("PASS Saved app config")
    click.echo(json.dumps(config.to_dict(), indent=2))


# =============================================================================
# CATALOG
# =============================================================================

@click.group('catalog')
def catalog_group():
    """Product catalog and unit conversions."""


@catalog_group.command('seed')
@click.option('--force', is_flag=True, help='Overwrite an existing catalog')
@with_appcontext
def seed_catalog(force):
    """Persist the starter catalog (P001, P002)."""
    if storage_service.get_value(KEY_PRODUCTS) is not None and not force:
        click.echo("SKIP Catalog already exists (use --force to overwrite)")
        return
    products_service.save_products(products_service.starter_catalog())
    click.echo("PASS Seeded starter catalog")


@catalog_group.command('list')
@branch_option
@click.option('--search', default=None, help='Name (case-insensitive) or SKU substring')
@click.option('--low-stock', is_flag=True, help='Only products at or below the low-stock threshold')
@click.option('--threshold', type=float, default=None, help='Override the persisted low-stock limit')
@with_appcontext
def list_catalog(branch_id, search, low_stock, threshold):
    """List products of a branch in catalog order."""
    branch_id = branch_id or current_app.config["DEFAULT_BRANCH_ID"]
    products = products_service.list_by_branch(
        branch_id,
        search=search,
        low_stock_only=low_stock,
        threshold=threshold,
    )
    if not products:
        click.echo("No products found.")
        return
    for product in products:
        _print_product(product)
    click.echo(f"\n{len(products)} product(s); {products_service.low_stock_count(branch_id, threshold)} low on stock")


@catalog_group.command('show')
@click.argument('product_id')
@with_appcontext
def show_product(product_id):
    """Print one product as stored."""
    product = products_service.get_product(product_id)
    if product is None:
        raise click.ClickException(f"Product {product_id} not found")
    click.echo(json.dumps(product.to_dict(), indent=2, ensure_ascii=False))


@catalog_group.command('create')
@branch_option
@click.option('--name', required=True)
@click.option('--sku', default='')
@click.option('--category', default='')
@click.option('--base-unit', required=True, help='Unit stock is counted in, e.g. Pcs')
@click.option('--base-price', required=True, type=float)
@click.option('--stock', default=0, type=float, show_default=True, help='Initial stock in base units')
@click.option('--image', default=None)
@with_appcontext
def create_product(branch_id, name, sku, category, base_unit, base_price, stock, image):
    """Create a product with no conversions."""
    try:
        product = products_service.create_product(
            branch_id=branch_id or current_app.config["DEFAULT_BRANCH_ID"],
            name=name,
            sku=sku,
            category=category,
            base_unit=base_unit,
            base_price=base_price,
            stock=stock,
            image=image,
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created product {product.id}")
    _print_product(product)


def _unit_options(func):
    for option in reversed([
        click.option('--name', required=True, help='New unit name, e.g. Karton'),
        click.option('--reference', 'reference_unit', default=None, help='Unit the multiplier counts (defaults to the base unit)'),
        click.option('--multiplier', required=True, type=float, help='How many reference units make one new unit'),
        click.option('--price', required=True, type=float, help='Fixed price of one new unit'),
    ]):
        func = option(func)
    return func


@catalog_group.command('add-unit')
@click.argument('product_id')
@_unit_options
@with_appcontext
def add_unit(product_id, name, reference_unit, multiplier, price):
    """Define a unit relative to the base unit or an existing unit."""
    try:
        product = products_service.require_product(product_id)
        conversions = conversion_service.add_conversion(
            product.conversions,
            base_unit=product.base_unit,
            name=name,
            reference_unit=reference_unit or product.base_unit,
            multiplier=multiplier,
            price=price,
        )
        product = products_service.update_product(product_id, {"conversions": conversions})
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Added unit {name}")
    _print_product(product)


@catalog_group.command('edit-unit')
@click.argument('product_id')
@click.argument('index', type=int)
@_unit_options
@with_appcontext
def edit_unit(product_id, index, name, reference_unit, multiplier, price):
    """Redefine the unit at INDEX in place."""
    try:
        product = products_service.require_product(product_id)
        conversions = conversion_service.edit_conversion(
            product.conversions,
            index,
            base_unit=product.base_unit,
            name=name,
            reference_unit=reference_unit or product.base_unit,
            multiplier=multiplier,
            price=price,
        )
        product = products_service.update_product(product_id, {"conversions": conversions})
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Updated unit [{index}]")
    _print_product(product)


@catalog_group.command('remove-unit')
@click.argument('product_id')
@click.argument('index', type=int)
@with_appcontext
def remove_unit(product_id, index):
    """Remove the unit at INDEX."""
    try:
        product = products_service.require_product(product_id)
        conversions = conversion_service.remove_conversion(product.conversions, index)
        product = products_service.update_product(product_id, {"conversions": conversions})
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Removed unit [{index}]")
    _print_product(product)


@catalog_group.command('delete')
@click.argument('product_id')
@with_appcontext
def delete_product(product_id):
    """Permanently delete a product. Deleting an unknown id is a no-op."""
    if products_service.delete_product(product_id):
        click.echo(f"PASS Deleted product {product_id}")
    else:
        click.echo(f"SKIP Product {product_id} not found; nothing to delete")


# =============================================================================
# INVENTORY
# =============================================================================

@click.group('inventory')
def inventory_group():
    """Manual stock adjustments and their audit history."""


@inventory_group.command('adjust')
@click.argument('product_id')
@click.option('--mode', type=click.Choice([m.value for m in AdjustmentMode]), default=AdjustmentMode.ADD.value, show_default=True)
@click.option('--amount', required=True, type=float, help='Quantity in base units (new total for --mode set)')
@click.option('--reason', type=click.Choice(ADJUSTMENT_REASONS), default=REASON_NEW_STOCK, show_default=True)
@click.option('--custom-reason', default=None, help='Free text stored when --reason is Other')
@actor_option
@branch_option
@with_appcontext
def adjust(product_id, mode, amount, reason, custom_reason, actor_name, branch_id):
    """Add, remove or set stock; writes one audit record."""
    if amount < 0:
        raise click.BadParameter("amount must be >= 0", param_hint="--amount")
    try:
        adjustment = inventory_service.apply_adjustment(
            product_id=product_id,
            mode=mode,
            amount=amount,
            reason=reason,
            custom_reason=custom_reason,
            actor=_actor(actor_name, branch_id),
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"PASS {adjustment.product_name}: {adjustment.old_stock} -> {adjustment.new_stock} "
        f"(delta {adjustment.delta}, {adjustment.reason})"
    )


@inventory_group.command('history')
@click.option('--branch', 'branch_id', default=None, help='Only this branch')
@click.option('--product', 'product_id', default=None, help='Only this product')
@with_appcontext
def history(branch_id, product_id):
    """Print the adjustment ledger in append order."""
    adjustments = ledger_service.list_adjustments(branch_id=branch_id, product_id=product_id)
    if not adjustments:
        click.echo("No adjustments recorded.")
        return
    for a in adjustments:
        click.echo(
            f"{a.date}  {a.id:<18} {a.product_name:<28} {a.old_stock} -> {a.new_stock} "
            f"({a.delta:+}) {a.reason} by {a.adjusted_by}"
        )


@inventory_group.command('low-stock-limit')
@click.argument('value', type=float, required=False)
@with_appcontext
def low_stock_limit(value):
    """Show or set the persisted low-stock threshold."""
    if value is not None:
        try:
            products_service.set_low_stock_limit(value)
        except ValueError as e:
            raise click.ClickException(str(e))
    click.echo(f"Low-stock limit: {products_service.get_low_stock_limit()}")


# =============================================================================
# SALES
# =============================================================================

@click.group('sales')
def sales_group():
    """Checkout and sales history."""


@sales_group.command('checkout')
@click.option('--item', 'items', multiple=True, required=True, help='PRODUCT_ID:UNIT:QTY (repeatable)')
@click.option('--method', type=click.Choice(['CASH', 'QRIS']), default='CASH', show_default=True)
@click.option('--cash', type=float, default=None, help='Cash received (CASH only)')
@actor_option
@branch_option
@with_appcontext
def checkout(items, method, cash, actor_name, branch_id):
    """Sell the given items and deduct stock."""
    selections = [_parse_item(raw) for raw in items]
    try:
        cart = sales_service.build_cart(selections)
        transaction = sales_service.checkout(
            cart,
            actor=_actor(actor_name, branch_id),
            payment_method=method,
            cash_received=cash,
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Transaction {transaction.id}")
    for item in transaction.items:
        click.echo(f"  {item.product.name} x{item.qty} {item.selected_unit} @ {item.unit_price} = {item.subtotal}")
    click.echo(f"  TOTAL {transaction.total}")
    if transaction.cash_received is not None:
        click.echo(f"  CASH {transaction.cash_received}  CHANGE {transaction.change}")


@sales_group.command('list')
@click.option('--branch', 'branch_id', default=None, help='Only this branch')
@with_appcontext
def list_sales(branch_id):
    transactions = sales_service.list_transactions(branch_id)
    if not transactions:
        click.echo("No transactions recorded.")
        return
    for t in transactions:
        click.echo(f"{t.date}  {t.id:<18} {t.payment_method.value:<5} {t.total} by {t.cashier_name}")


@sales_group.command('summary')
@click.option('--branch', 'branch_id', default=None, help='Only this branch')
@with_appcontext
def summary(branch_id):
    """Revenue, transaction count and average ticket."""
    click.echo(json.dumps(sales_service.sales_summary(branch_id), indent=2))


# =============================================================================
# BRANCHES & FIELD VISITS
# =============================================================================

@click.group('branches')
def branches_group():
    """Branch directory."""


@branches_group.command('list')
@with_appcontext
def list_branches():
    for b in store_service.list_branches():
        click.echo(f"{b.id:<16} {b.name:<28} {b.city} ({b.latitude}, {b.longitude})")


@branches_group.command('add')
@click.option('--name', required=True)
@click.option('--location', default='')
@click.option('--street', default='')
@click.option('--city', default='')
@click.option('--state', default='')
@click.option('--zip-code', default='')
@click.option('--lat', 'latitude', type=float, default=0)
@click.option('--lng', 'longitude', type=float, default=0)
@with_appcontext
def add_branch(name, location, street, city, state, zip_code, latitude, longitude):
    try:
        branch = store_service.add_branch(
            name=name,
            location=location,
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            latitude=latitude,
            longitude=longitude,
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created branch {branch.id}")


@branches_group.command('delete')
@click.argument('branch_id')
@with_appcontext
def delete_branch(branch_id):
    if store_service.delete_branch(branch_id):
        click.echo(f"PASS Deleted branch {branch_id}")
    else:
        click.echo(f"SKIP Branch {branch_id} not found; nothing to delete")


@click.group('visits')
def visits_group():
    """Motorist field visits."""


@visits_group.command('record')
@click.option('--shop', 'shop_name', required=True)
@click.option('--lat', 'latitude', type=float, required=True)
@click.option('--lng', 'longitude', type=float, required=True)
@click.option('--notes', default='')
@click.option('--photo-url', default=None)
@actor_option
@with_appcontext
def record_visit(shop_name, latitude, longitude, notes, photo_url, actor_name):
    try:
        visit = store_service.record_visit(
            actor=_actor(actor_name, None),
            shop_name=shop_name,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
            photo_url=photo_url,
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Recorded visit {visit.id}")


@visits_group.command('list')
@click.option('--motorist', 'motorist_name', default=None)
@with_appcontext
def list_visits(motorist_name):
    for v in store_service.list_visits(motorist_name):
        click.echo(f"{v.timestamp}  {v.motorist_name:<16} {v.shop_name:<24} ({v.latitude}, {v.longitude}) {v.notes}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(sales_group)
    app.cli.add_command(branches_group)
    app.cli.add_command(visits_group)
