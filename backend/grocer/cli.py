# Overview: Flask CLI command groups for setup, catalog inspection, imports and reports.

# backend/grocer/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Store data:
# - python -m flask store init
#   Create the data directory, seed default categories and write settings.
# - python -m flask store info
#   Show where data lives plus catalog, ledger and settings summary.
#
# Catalog inspection:
# - python -m flask catalog categories
# - python -m flask catalog products [--search milk] [--category-id 2] [--in-stock]
# - python -m flask catalog low-stock
#
# Bulk import (CSV, TSV or XLSX):
# - python -m flask import products products.csv
# - python -m flask import categories categories.xlsx
#
# Reports:
# - python -m flask reports summary --start 2024-01-01 --end 2024-01-31
# - python -m flask reports export --start 2024-01-01 --end 2024-01-31 [--out DIR]
#   Writes SalesReport_yyyyMMdd_yyyyMMdd.csv (defaults to the Desktop).

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import get_store
from .money import format_money, round_money
from .services import catalog_service, export_service, import_service, reporting_service, settings_service


def _echo_import_result(result: import_service.ImportResult) -> None:
    click.echo(f"Imported: {result.imported}  Skipped: {result.skipped}")
    for error in result.errors:
        click.echo(f"  - {error}")


@click.group('store')
def store_group():
    """Data directory setup and inspection."""


@store_group.command('init')
@with_appcontext
def init_store():
    """
    Idempotent setup: loading the store already seeds default categories when
    none exist, so this only makes sure settings are written too.
    """
    store = get_store()
    settings_service.save_settings(store, store.settings)
    click.echo(f"OK Data store ready: {current_app.config['GROCER_DATA_DIR']}")
    click.echo(f"   {len(store.categories)} categories, {len(store.products)} products")


@store_group.command('info')
@with_appcontext
def store_info():
    """Show data location and a short summary."""
    store = get_store()
    settings = store.settings
    click.echo(f"Backend:      {current_app.config['RECORD_STORE_BACKEND']}")
    click.echo(f"Data dir:     {current_app.config['GROCER_DATA_DIR']}")
    click.echo(f"Store name:   {settings.store_name}")
    click.echo(f"Tax rate:     {settings.tax_rate}%")
    click.echo(f"Low stock at: < {settings.low_stock_threshold}")
    click.echo(f"Categories:   {len(store.categories)}")
    click.echo(f"Products:     {len(store.products)}")
    click.echo(f"Transactions: {len(store.transactions)}")


@click.group('catalog')
def catalog_group():
    """Catalog inspection commands."""


@catalog_group.command('categories')
@with_appcontext
def list_categories_cli():
    rows = catalog_service.list_categories_with_counts(get_store())
    if not rows:
        click.echo("No categories found.")
        return

    click.echo(f"{'ID':<5} {'Name':<30} {'Products'}")
    for row in rows:
        click.echo(f"{row['id']:<5} {row['name']:<30} {row['product_count']}")


@catalog_group.command('products')
@click.option('--search', help='Match on name or barcode')
@click.option('--category-id', type=int, help='Filter by category')
@click.option('--in-stock', is_flag=True, help='Only products with stock on hand')
@with_appcontext
def list_products_cli(search, category_id, in_stock):
    store = get_store()
    products = catalog_service.list_products(store, search=search, category_id=category_id, in_stock=in_stock)
    if not products:
        click.echo("No products found.")
        return

    symbol = store.settings.currency_symbol
    click.echo(f"{'ID':<5} {'Name':<30} {'Category':<22} {'Price':>10} {'Qty':>6}")
    for p in products:
        flag = " LOW" if p.is_low_stock else ""
        click.echo(
            f"{p.id:<5} {p.name:<30} {p.category_name:<22} "
            f"{format_money(p.price, symbol):>10} {p.quantity:>6}{flag}"
        )


@catalog_group.command('low-stock')
@with_appcontext
def low_stock_cli():
    store = get_store()
    products = reporting_service.low_stock_products(store)
    if not products:
        click.echo("No low stock products.")
        return

    click.echo(f"Below {store.settings.low_stock_threshold} units:")
    for p in products:
        click.echo(f"  {p.name} ({p.category_name}): {p.quantity} {p.unit}")


@click.group('import')
def import_group():
    """Bulk import from CSV, TSV or XLSX."""


@import_group.command('products')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def import_products_cli(path):
    _echo_import_result(import_service.import_products(get_store(), path))


@import_group.command('categories')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def import_categories_cli(path):
    _echo_import_result(import_service.import_categories(get_store(), path))


@click.group('reports')
def reports_group():
    """Sales reports."""


date_option = click.DateTime(formats=["%Y-%m-%d"])


@reports_group.command('summary')
@click.option('--start', type=date_option, required=True)
@click.option('--end', type=date_option, required=True)
@with_appcontext
def summary_cli(start, end):
    store = get_store()
    symbol = store.settings.currency_symbol
    try:
        summary = reporting_service.sales_summary(store, start, end)
    except reporting_service.ReportError as exc:
        raise click.BadParameter(str(exc))

    click.echo(f"Sales {summary['start']} to {summary['end']}")
    click.echo(f"  Total sales:        {format_money(summary['total_sales'], symbol)}")
    click.echo(f"  Transactions:       {summary['total_transactions']}")
    click.echo(f"  Average:            {format_money(summary['average_transaction'], symbol)}")
    if summary['category_sales']:
        click.echo("  By category:")
        for row in summary['category_sales']:
            click.echo(f"    {row['category_name']:<25} {format_money(round_money(row['amount']), symbol)}")
    if summary['top_products']:
        click.echo("  Top products:")
        for row in summary['top_products']:
            click.echo(f"    {row['product_name']:<25} {row['quantity_sold']}")


@reports_group.command('export')
@click.option('--start', type=date_option, required=True)
@click.option('--end', type=date_option, required=True)
@click.option('--out', 'out_dir', type=click.Path(file_okay=False), help='Target directory (default: Desktop)')
@with_appcontext
def export_cli(start, end, out_dir):
    try:
        path = export_service.export_report(
            get_store(), start, end, out_dir or export_service.default_export_dir()
        )
    except reporting_service.ReportError as exc:
        raise click.BadParameter(str(exc))
    click.echo(f"OK Report exported: {path}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(store_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(import_group)
    app.cli.add_command(reports_group)
