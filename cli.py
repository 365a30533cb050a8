# cli.py - interactive catalog browser with autocomplete
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.catalog_client import CatalogClient

console = Console()
c = CatalogClient(
    base_url=os.getenv("CATALOG_API_URL", "http://127.0.0.1:8085"),
    api_key=os.getenv("CATALOG_API_TOKEN"),
)

STATUSES = ["in_stock", "out_of_stock", "low_on_stock"]

status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
category_cache = set()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan",
                  title_style="bold magenta", show_lines=True)
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Categories", width=24)
    table.add_column("Updated", width=20)

    for p in products:
        table.add_row(
            str(p.get("id", "-"))[:12],
            p.get("name", "N/A"),
            f"{float(p.get('price', 0)):.2f}",
            ", ".join(p.get("category", [])) or "-",
            p.get("updated_at", "-"),
        )
    console.print(table)


def show_listing(listing: Dict[str, Any]):
    pagination = listing.get("pagination", {})
    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Name", style="bold", width=30)
    table.add_column("Price", justify="right", width=12)
    for p in listing.get("products", []):
        table.add_row(p.get("name", "N/A"), f"{float(p.get('price', 0)):.2f}")
    title = (f"📦 Page {pagination.get('currentPage', 1)} of {pagination.get('totalPages', 0)}"
             f" ({pagination.get('totalItems', 0)} products)")
    console.print(Panel(table, title=title, border_style="cyan"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner and reports the outcome.
    Returns the result, or None when the call raised.
    """
    global status_message
    try:
        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                      transient=True) as progress:
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
def remember(products: List[Dict[str, Any]]):
    global product_cache
    product_cache = products
    for p in products:
        category_cache.update(p.get("category", []))


def get_product_completer():
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_category_completer():
    return WordCompleter(sorted(category_cache), ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_optional_float(message: str) -> Optional[float]:
    while True:
        raw = Prompt.ask(message, default="")
        if not raw.strip():
            return None
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row("🗂️ Catalog SDK", "[bold blue]Product Catalog CLI[/bold blue]", f"[dim]{now}[/dim]")
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    console.clear()
    console.print(create_header())

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        for row in [
            ("1", "📦 List products", "4", "➕ Create product"),
            ("2", "🔍 Search products", "5", "🗑️ Delete product"),
            ("3", "ℹ️ Get product by ID", "q", "👋 Quit"),
        ]:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["1", "2", "3", "4", "5", "q", "quit", "exit"]),
        ).strip()

        if choice == "1":
            page = IntPrompt.ask("Page", default=1)
            limit = IntPrompt.ask("Per page", default=10)
            listing = try_api(c.list_products, page, limit, success_msg="Products loaded")
            if listing:
                show_listing(listing)

        elif choice == "2":
            term = prompt_with_autocomplete("Product name contains")
            category = prompt_with_autocomplete("Category (blank for any)", completer=get_category_completer())
            min_price = ask_optional_float("Min price (blank for none)")
            max_price = ask_optional_float("Max price (blank for none)")
            status = prompt_with_autocomplete("Stock status (blank for any)", completer=WordCompleter(STATUSES))
            res = try_api(c.search_products, term, category or None, min_price, max_price,
                          status or None, success_msg=f"Search for '{term}' completed")
            if res is not None:
                remember(res)
                show_products(res, title=f"🔍 Results for '{term}'")

        elif choice == "3":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            resp = try_api(c.get_product, pid, success_msg=f"Product {pid} loaded")
            if resp:
                show_products([resp])

        elif choice == "4":
            name = prompt_with_autocomplete("Product name")
            description = prompt_with_autocomplete("Description")
            price = ask_optional_float("Price") or 0
            raw_categories = prompt_with_autocomplete("Categories (comma separated)",
                                                      completer=get_category_completer())
            categories = [x.strip() for x in raw_categories.split(",") if x.strip()]
            status = prompt_with_autocomplete("Initial variant status", completer=WordCompleter(STATUSES),
                                              default="in_stock")
            resp = try_api(c.create_product, name, description, price, categories, [status] if status else [],
                           success_msg=f"Product '{name}' created")
            if resp:
                category_cache.update(categories)
                console.print(Panel(f"Created product: [green]{resp['data']['product_id']}[/green]"))

        elif choice == "5":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                resp = try_api(c.delete_product, pid)
                if resp:
                    ok = "error" not in resp
                    console.print(show_status(resp.get("message", str(resp)), ok))

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Goodbye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
