# posledger/cli.py
import click
from flask.cli import FlaskGroup, with_appcontext

from . import create_app
from .extensions import ledger
from .model import CATALOG, TIMESTAMP_FORMAT
from .services import (
    CheckoutError,
    InsufficientPayment,
    InvalidCard,
    build_line_item,
    export_transactions,
    mask_card,
    summarize,
)
from .storage import FieldContainsDelimiter, StorageError

SEPARATOR = "=" * 50
RULE = "-" * 50


# ---- output ----------------------------------------------------------------

def _print_transactions(transactions):
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo("\n--- ALL TRANSACTIONS ---")
    click.echo(f"{'ID':<5} {'Date':<20} {'Subtotal':<10} {'Tax':<10} {'Total':<10} {'Method':<8} {'Paid':<10}")
    click.echo("-" * 80)
    for t in transactions:
        click.echo(
            f"{t.transaction_id:<5} {t.timestamp.strftime(TIMESTAMP_FORMAT):<20} "
            f"${t.subtotal:<9.2f} ${t.tax_amount:<9.2f} ${t.total_due:<9.2f} "
            f"{t.payment_method.value:<8} ${t.amount_paid:<9.2f}"
        )
    click.echo(f"\nTotal transactions: {len(transactions)}")


def _print_summary(transactions):
    if not transactions:
        click.echo("No transactions found.")
        return

    s = summarize(transactions)
    click.echo("\n--- TRANSACTION SUMMARY ---")
    click.echo(f"Total Transactions: {s['transactions']}")
    click.echo(f"Total Sales: ${s['totalSales']:.2f}")
    click.echo(f"Total Tax Collected: ${s['totalTax']:.2f}")
    click.echo(f"Average Transaction: ${s['averageTransaction']:.2f}")
    click.echo()
    click.echo(f"Cash Transactions: {s['cashTransactions']} ({s['cashPercent']:.1f}%) - ${s['cashTotal']:.2f}")
    click.echo(f"Card Transactions: {s['cardTransactions']} ({s['cardPercent']:.1f}%) - ${s['cardTotal']:.2f}")


def _print_products():
    click.echo("\n--- PRODUCT MENU ---")
    for i, p in enumerate(CATALOG, 1):
        click.echo(f"{i}. {p.name:<15} ${p.price:<6.2f} - {p.description}")


def _print_order_summary(items, totals, tax_rate):
    click.echo("\n--- ORDER SUMMARY ---")
    click.echo(f"{'Item':<20} {'Qty':<8} {'Price':<10} {'Total':<10}")
    click.echo(RULE)
    for item in items:
        click.echo(f"{item.description:<20} {item.quantity:<8} ${item.unit_price:<9.2f} ${item.line_total:<9.2f}")
    click.echo(RULE)
    click.echo(f"{'Subtotal':<20} {'':<8} {'':<10} ${totals.subtotal:<9.2f}")
    click.echo(f"{'Tax (' + str(tax_rate) + '%)':<20} {'':<8} {'':<10} ${totals.tax_amount:<9.2f}")
    click.echo(f"{'TOTAL':<20} {'':<8} {'':<10} ${totals.total_due:<9.2f}")


# ---- console ---------------------------------------------------------------

def _collect_items():
    items = []
    while True:
        _print_products()
        index = click.prompt(f"Select product (1-{len(CATALOG)})", type=int)
        if index < 1 or index > len(CATALOG):
            click.echo("Invalid product selection.")
            continue

        product = CATALOG[index - 1]
        quantity = click.prompt("Enter quantity", type=int)
        if quantity <= 0:
            click.echo("Quantity must be positive.")
            continue

        item = build_line_item(product.name, product.price, quantity)
        items.append(item)
        click.echo(f"Added: {quantity} x {product.name} = ${item.line_total:.2f}")

        if not click.confirm("Add another item?", default=False):
            return items


def _process_payment(items):
    checkout = ledger.checkout
    click.echo("\n--- PAYMENT PROCESSING ---")
    click.echo("1. Cash")
    click.echo("2. Card")
    choice = click.prompt("Select payment method (1=Cash, 2=Card) or type 'Cash'/'Card'").strip().lower()

    if choice in ("1", "cash"):
        click.echo(f"Total due: ${checkout.quote(items).total_due:.2f}")
        paid = click.prompt("Enter amount paid: $", prompt_suffix="")
        tx = checkout.pay_cash(items, paid.strip())
        click.echo(f"Change due: ${tx.change_amount:.2f}")
        click.echo("Transaction completed successfully!")
    elif choice in ("2", "card"):
        click.echo("Card Payment Processing")
        last4 = click.prompt("Enter card number (last 4 digits)").strip()
        mask_card(last4)
        holder = click.prompt("Enter cardholder name").strip()
        expiry = click.prompt("Enter expiry date (MM/YY)").strip()
        checkout.pay_card(items, last4, holder, expiry)
        click.echo("Card payment processed successfully!")
    else:
        click.echo("Invalid payment method. Please enter 1 for Cash or 2 for Card.")


def _process_new_transaction():
    click.echo("\n=== NEW TRANSACTION ===")
    items = _collect_items()

    totals = ledger.checkout.quote(items)
    _print_order_summary(items, totals, ledger.checkout.tax_rate)

    try:
        _process_payment(items)
    except InsufficientPayment:
        click.echo("Insufficient payment. Transaction cancelled.")
    except InvalidCard:
        click.echo("Invalid card number format. Transaction cancelled.")
    except (CheckoutError, FieldContainsDelimiter) as e:
        click.echo(f"{e}. Transaction cancelled.")
    except (StorageError, OSError) as e:
        click.echo(f"Error saving transaction: {e}", err=True)


def _main_menu():
    click.echo("\n" + SEPARATOR)
    click.echo("PAYMENT CONSOLE MAIN MENU")
    click.echo(SEPARATOR)
    click.echo("1. Process New Transaction")
    click.echo("2. View All Transactions")
    click.echo("3. View Transaction Summary")
    click.echo("4. Exit")
    click.echo(SEPARATOR)


@click.command("console")
@with_appcontext
def console():
    """Menu-driven payment console."""
    click.echo("=== Menu-Driven Payment Console ===")
    click.echo("Welcome to the Payment Processing System")

    while True:
        _main_menu()
        choice = click.prompt("Enter your choice", default="", show_default=False).strip()
        if choice == "1":
            _process_new_transaction()
        elif choice == "2":
            click.echo("\n=== VIEWING TRANSACTIONS ===")
            _print_transactions(ledger.store.load_all())
        elif choice == "3":
            click.echo("\n=== TRANSACTION SUMMARY ===")
            _print_summary(ledger.store.load_all())
        elif choice == "4":
            click.echo("Thank you for using the Payment Console!")
            return
        else:
            click.echo("Invalid choice. Please try again.")


# ---- viewer & export -------------------------------------------------------

@click.command("transactions")
@with_appcontext
def list_transactions():
    """Show every stored transaction."""
    _print_transactions(ledger.store.load_all())


@click.command("summary")
@with_appcontext
def transaction_summary():
    """Show sales totals and the cash/card split."""
    _print_summary(ledger.store.load_all())


@click.command("export-transactions")
@click.argument("path", type=click.Path(dir_okay=False))
@with_appcontext
def export_transactions_command(path):
    """Export the log to PATH (.xlsx, otherwise CSV), one row per line item."""
    rows = export_transactions(ledger.store.load_all(), path)
    click.echo(f"{rows} rows have been exported to {path}")


def register_cli(app):
    app.cli.add_command(console)
    app.cli.add_command(list_transactions)
    app.cli.add_command(transaction_summary)
    app.cli.add_command(export_transactions_command)


@click.group(cls=FlaskGroup, create_app=create_app)
def cli():
    """Point-of-sale transaction ledger."""
