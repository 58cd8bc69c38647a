"""CLI interface for the store manager."""

import logging
from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import StoreConfig, get_config
from .discounts import discount_for
from .exceptions import CustomerNotFoundError, StoreError
from .ledger import Purchase
from .products import ProductCategory, profile_for
from .sales import LineOutcome, SaleResult
from .snapshot import export_snapshot, load_snapshot, restore_snapshot, save_snapshot
from .store import StoreContext

app = typer.Typer(
    name="storemgr",
    help="""
    [bold]Store Management CLI[/bold]

    Manage a product catalog, sell carts to customers and review invoices.
    State is kept in a JSON snapshot file between commands.

    [cyan]Examples:[/cyan]
      storemgr products
      storemgr sell alice@example.com --name Alice --item E1=1 --item C1=3
      storemgr history alice@example.com
      storemgr report --top 3
    """,
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

_OUTCOME_LABELS = {
    LineOutcome.FULFILLED: "[green]sold[/green]",
    LineOutcome.SKIPPED_NOT_FOUND: "[yellow]skipped: unknown product[/yellow]",
    LineOutcome.SKIPPED_INSUFFICIENT_STOCK: "[yellow]skipped: insufficient stock[/yellow]",
}

StateOption = typer.Option(
    None,
    "--state",
    help="Snapshot file (default: STATE_FILE setting)",
    resolve_path=True,
)
VerboseOption = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Show debug logging",
)


def _setup(state: Optional[Path], verbose: bool) -> StoreConfig:
    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if state is not None:
        config = config.model_copy(update={"state_file": state})
    return config


def _open_store(config: StoreConfig) -> StoreContext:
    if config.state_file.exists():
        logger.debug("Loading store state from %s", config.state_file)
        return restore_snapshot(load_snapshot(config.state_file), config)
    return StoreContext(config)


def _persist(store: StoreContext) -> None:
    save_snapshot(store.config.state_file, export_snapshot(store))


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]✗ Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def _parse_items(items: List[str]) -> Dict[str, int]:
    cart: Dict[str, int] = {}
    for item in items:
        product_id, sep, qty = item.partition("=")
        if not sep or not product_id.strip():
            raise typer.BadParameter(f"expected ID=QTY, got '{item}'", param_hint="--item")
        try:
            quantity = int(qty)
        except ValueError:
            raise typer.BadParameter(f"invalid quantity in '{item}'", param_hint="--item") from None
        if quantity <= 0:
            raise typer.BadParameter(f"quantity must be positive in '{item}'", param_hint="--item")
        cart[product_id.strip()] = quantity
    return cart


def _money(amount, currency: str) -> str:
    return f"{amount:.2f} {currency}"


def _print_invoice(purchase: Purchase, currency: str) -> None:
    console.print(f"\nInvoice ID: [bold]{purchase.invoice_id}[/bold]")
    console.print(f"Date: {purchase.created_at.strftime('%d-%m-%Y %H:%M:%S')}")
    console.print(
        f"Customer: {escape(purchase.customer.name)} ({escape(purchase.customer.contact)})"
    )
    for line in purchase.lines:
        console.print(
            f"{escape(line.product_id):<20} {line.quantity:<5} x "
            f"{_money(line.unit_price, currency)} = {_money(line.line_total, currency)}",
            highlight=False,
        )
    console.print(
        f"Total (incl. tax): [bold]{_money(purchase.total_with_tax, currency)}[/bold]",
        highlight=False,
    )


def _print_sale(result: SaleResult, currency: str) -> None:
    for line in result.lines:
        console.print(
            f"  {escape(line.product_id)} x{line.quantity}: {_OUTCOME_LABELS[line.outcome]}"
        )
    if result.purchase is None:
        console.print("[yellow]No items could be fulfilled; nothing was sold.[/yellow]")
        return
    _print_invoice(result.purchase, currency)
    console.print("\n[bold green]✓ Sale processed successfully![/bold green]")


@app.command()
def products(
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """List products with stock, price and discount."""
    config = _setup(state, verbose)
    try:
        store = _open_store(config)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    table = Table(title="Products")
    table.add_column("ID")
    table.add_column("Details")
    table.add_column("Price", justify="right")
    table.add_column("Discount", justify="right")
    table.add_column("Sold", justify="right")
    for product in store.list_products():
        table.add_row(
            escape(product.id),
            escape(product.details),
            f"{product.base_price:.2f}",
            f"{discount_for(product):.2f}",
            str(product.sales_count),
        )
    console.print(table)


@app.command("add-product")
def add_product(
    category: str = typer.Option(..., "--type", help="Electronics or Clothing"),
    product_id: str = typer.Option(..., "--id", help="Product ID"),
    name: str = typer.Option(..., "--name", help="Product name"),
    price: str = typer.Option(..., "--price", help="Base price"),
    total: int = typer.Option(..., "--total", help="Total available (capacity)"),
    initial: int = typer.Option(..., "--initial", help="Initial stock"),
    warranty: Optional[str] = typer.Option(None, "--warranty", help="Electronics warranty"),
    size: Optional[str] = typer.Option(None, "--size", help="Clothing size"),
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """Register a product in the catalog."""
    config = _setup(state, verbose)
    try:
        parsed = ProductCategory.parse(category)
        attribute = profile_for(parsed).attribute
        given = {"warranty": warranty, "size": size}
        attributes = {attribute: given[attribute]} if given.get(attribute) else {}

        store = _open_store(config)
        product = store.register_product(
            id=product_id,
            name=name,
            category=parsed,
            base_price=price,
            total_available=total,
            initial_stock=initial,
            attributes=attributes,
        )
        _persist(store)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    console.print(f"[bold green]✓ Product added successfully![/bold green] {escape(product.details)}")


@app.command()
def restock(
    product_id: str = typer.Argument(..., help="Product ID"),
    amount: int = typer.Argument(..., help="Units to add"),
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """Add stock to a product, up to its capacity."""
    config = _setup(state, verbose)
    try:
        store = _open_store(config)
        product = store.restock(product_id, amount)
        _persist(store)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    console.print(f"[bold green]✓ Restocked[/bold green] {escape(product.details)}")


@app.command()
def sell(
    contact: str = typer.Argument(..., help="Customer contact"),
    items: List[str] = typer.Option(..., "--item", "-i", help="Cart line as ID=QTY (repeatable)"),
    name: Optional[str] = typer.Option(
        None, "--name", help="Customer name (required for new customers)"
    ),
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """Sell a cart to a customer. Unfulfillable lines are skipped."""
    config = _setup(state, verbose)
    cart = _parse_items(items)
    try:
        store = _open_store(config)
        result = store.process_sale(contact, cart, name=name)
        _persist(store)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    _print_sale(result, config.currency)


@app.command()
def history(
    contact: str = typer.Argument(..., help="Customer contact"),
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """Show a customer's purchase history."""
    config = _setup(state, verbose)
    try:
        store = _open_store(config)
        purchases = store.customer_history(contact)
    except CustomerNotFoundError:
        console.print("No customer found with that contact.")
        raise typer.Exit(code=1)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    customer = purchases[0].customer if purchases else store.get_customer(contact)

    console.print(f"\n[bold]=== Purchase History ({escape(customer.name)}) ===[/bold]")
    if not purchases:
        console.print("No purchases yet.")
    for purchase in purchases:
        _print_invoice(purchase, config.currency)


@app.command()
def report(
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Number of products"),
    state: Optional[Path] = StateOption,
    verbose: bool = VerboseOption,
):
    """Show the best selling products."""
    config = _setup(state, verbose)
    try:
        store = _open_store(config)
    except (StoreError, ValueError) as exc:
        _fail(exc)

    console.print("\n[bold]=== Best Selling Products ===[/bold]")
    for entry in store.top_sellers(top):
        console.print(
            f"{escape(entry.product.details)} - Sold: {entry.sales_count}", highlight=False
        )


@app.command()
def version():
    """Show version information."""
    console.print("storemgr version 0.1.0")


if __name__ == "__main__":
    app()
