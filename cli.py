# cli.py
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.posclient import PosClient, cart_total, line_item

console = Console()
c = PosClient(base_url=os.environ.get("SPICEPOS_URL", "http://127.0.0.1:8085"))


# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

FLASH_STYLES = {"success": "green", "warning": "yellow", "error": "red"}


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Products",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=26)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Category", width=15)
    table.add_column("Price", justify="right", width=14)
    table.add_column("Stock", justify="right", width=12)

    for p in products:
        stock = p.get("stock", 0)
        stock_style = "red" if stock <= 0 else "white"
        table.add_row(
            p.get("id", "N/A"),
            p.get("name", "N/A"),
            p.get("category") or "-",
            f"LKR {p.get('price_lkr', 0):,.2f} / {p.get('unit', '')}",
            f"[{stock_style}]{stock:g} {p.get('unit', '')}[/{stock_style}]",
        )
    console.print(table)


def show_cart(items: List[Dict[str, Any]]):
    title = Text()
    title.append("🛒 Cart", style="bold")
    title.append(f" - Total: LKR {cart_total(items):,.2f}", style="bold green")

    if not items:
        console.print(Panel("Cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=10)
    table.add_column("Price", justify="right", width=14)
    table.add_column("Subtotal", justify="right", width=14)

    for it in items:
        table.add_row(
            it["name"],
            f"{it['quantity']:g} {it['unit']}",
            f"LKR {it['price_at_sale_lkr']:,.2f}",
            f"LKR {it['price_at_sale_lkr'] * it['quantity']:,.2f}",
        )
    console.print(Panel(table, title=title, border_style="blue"))


def show_report(report: Dict[str, Any]):
    table = Table(
        title=f"📋 Sales on {report.get('date', '?')}",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Sale ID", style="dim", width=26)
    table.add_column("Time", width=10)
    table.add_column("Contents", width=40)
    table.add_column("Total", justify="right", width=14)

    for sale in report.get("sales", []):
        names = [f"{it['name']} x{it['quantity']:g}" for it in sale.get("items", [])[:3]]
        contents = ", ".join(names) if names else "No items"
        if len(sale.get("items", [])) > 3:
            contents += f" +{len(sale['items']) - 3} more"
        table.add_row(
            sale.get("sale_id", "N/A"),
            sale.get("timestamp", "")[11:19],
            contents,
            f"LKR {sale.get('total_lkr', 0):,.2f}",
        )

    console.print(table)
    console.print(Panel.fit(
        f"Sales: [bold]{report.get('number_of_sales', 0)}[/bold]\n"
        f"Revenue: [bold green]LKR {report.get('total_revenue', 0):,.2f}[/bold green]",
        title="Summary",
        border_style="green"
    ))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def show_flash(page: Optional[Dict[str, Any]]):
    """Print the flash message a form endpoint redirected with."""
    global status_message
    if not page or not page.get("message"):
        return
    style = FLASH_STYLES.get(page.get("message_type"), "white")
    status_message = page["message"]
    console.print(Panel.fit(f"[{style}]{page['message']}[/{style}]", title="Result"))


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the decoded result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_products():
    global product_cache
    product_cache = try_api(c.list_products) or []
    return product_cache


def get_product_completer():
    if not product_cache:
        refresh_products()
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def find_cached(product_id: str) -> Optional[Dict[str, Any]]:
    for p in product_cache:
        if p.get("id") == product_id:
            return p
    return None


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🌶️ spice-pos",
        "[bold blue]Point of Sale[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: Optional[float] = None, allow_blank: bool = False) -> Optional[float]:
    while True:
        raw = Prompt.ask(message, default="" if default is None else str(default))
        if allow_blank and not raw.strip():
            return None
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


# ---------------------------
# Workflows
# ---------------------------
def build_cart() -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    refresh_products()
    while True:
        pid = prompt_with_autocomplete(
            "Product ID (blank to finish)", completer=get_product_completer()
        ).strip()
        if not pid:
            return items
        product = find_cached(pid)
        if product is None:
            console.print(f"[red]Unknown product {pid}[/red]")
            continue
        if product.get("stock", 0) <= 0:
            console.print("[red]Product is out of stock.[/red]")
            continue
        qty = ask_float(f"Quantity ({product['unit']})", default=1)
        if qty is None or qty <= 0:
            console.print("[red]Quantity must be greater than zero.[/red]")
            continue
        if qty > product["stock"]:
            console.print("[yellow]Quantity cannot exceed available stock; capped.[/yellow]")
            qty = product["stock"]
        existing = next((it for it in items if it["product_id"] == pid), None)
        if existing:
            existing["quantity"] = min(existing["quantity"] + qty, product["stock"])
        else:
            items.append(line_item(product, qty))
        show_cart(items)


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, product_cache

    console.clear()
    console.print(create_header())
    refresh_products()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "5", "🛒 New sale"),
            ("2", "➕ Add product", "6", "📋 Daily report"),
            ("3", "✏️ Edit product", "q", "👋 Quit"),
            ("4", "🗑️ Delete product", "", ""),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 7)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded")
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "2":
            name = prompt_with_autocomplete("Product name")
            category = prompt_with_autocomplete("🏷️ Category (optional)")
            price = ask_float("💰 Price (LKR)", default=100.0)
            unit = prompt_with_autocomplete("Unit", default="kg")
            stock = ask_float("📦 Stock", default=0)
            show_flash(try_api(c.add_product, name, price, unit, stock, category))
            refresh_products()

        elif choice == "3":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer()).strip()
            page = try_api(c.products_page, pid)
            if not page or not page.get("edit_product"):
                show_flash(page)
                continue
            current = page["edit_product"]
            name = prompt_with_autocomplete("Name", default=current["name"])
            category = prompt_with_autocomplete("Category", default=current.get("category") or "")
            price = ask_float("Price (LKR)", default=current["price_lkr"])
            unit = prompt_with_autocomplete("Unit", default=current["unit"])
            stock = ask_float("Stock", default=current["stock"])
            show_flash(try_api(
                c.update_product, pid,
                name=name, category=category, price_lkr=price, unit=unit, stock=stock,
            ))
            refresh_products()

        elif choice == "4":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer()).strip()
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                show_flash(try_api(c.delete_product, pid))
                refresh_products()

        elif choice == "5":
            items = build_cart()
            if not items:
                console.print("[italic yellow]Cart is empty, nothing to record[/italic yellow]")
                continue
            show_cart(items)
            if Confirm.ask("Complete sale?"):
                show_flash(try_api(c.submit_sale, items, cart_total(items)))
                refresh_products()

        elif choice == "6":
            day = Prompt.ask("Date (YYYY-MM-DD, blank for today)", default="").strip()
            report = try_api(c.daily_report, day or None, success_msg=f"Report loaded for {day or 'today'}")
            if report:
                show_report(report)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Goodbye 👋[/bold green]", title="spice-pos"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main():
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
