"""CLI commands for archive items."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..config.constants import ITEM_KINDS, TITLE_DISPLAY_WIDTH
from ..exceptions import NotFoundError
from ..services.group_view import item_matches
from ..utils.error_handling import handle_cli_error
from ..utils.output import console, format_size, is_non_interactive, print_json, truncate
from ._helpers import JSON_OPTION, OWNER_OPTION, get_services, get_store, kind_icon

app = typer.Typer(help="Save, list and delete archive items")


@app.command()
@handle_cli_error("saving item")
def save(
    title: str = typer.Argument(..., help="Item title"),
    kind: str = typer.Option(
        "note", "--kind", "-k", help=f"Item kind: {', '.join(ITEM_KINDS)}"
    ),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description"),
    tags: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    size: Optional[int] = typer.Option(None, "--size", "-s", help="Size in bytes"),
    url: Optional[str] = typer.Option(None, "--url", help="Source URL"),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Save a new item to the archive."""
    item = get_store().insert({
        "owner": owner,
        "kind": kind,
        "title": title,
        "description": description,
        "tags": tags or [],
        "size": size,
        "url": url,
    })

    if as_json:
        print_json(item)
        return

    console.print(f"[green]✅ Saved {item['kind']}:[/green] [cyan]{escape(item['title'])}[/cyan]")
    console.print(f"   [dim]ID: {item['id']}[/dim]")


@app.command(name="list")
@handle_cli_error("listing items")
def list_items(
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Only this kind"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search text"),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """List every item, grouped or not, newest first."""
    items = [i for i in get_store().list_by_owner(owner) if item_matches(i, query, kind)]
    items.sort(key=lambda i: i["created_at"], reverse=True)

    if as_json:
        print_json(items)
        return

    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Kind", style="dim", width=8)
    table.add_column("Group", style="dim")
    table.add_column("Size", style="green", justify="right")

    for item in items:
        if item["is_group_parent"]:
            group_str = f"★ {item['group_name']}"
        elif item["group_id"]:
            group_str = f"part {item['part_number'] or '?'}"
        else:
            group_str = "-"
        table.add_row(
            item["id"],
            f"{kind_icon(item)} {escape(truncate(item['title'], TITLE_DISPLAY_WIDTH))}",
            item["kind"],
            escape(group_str),
            format_size(item["size"]),
        )

    console.print(table)


@app.command()
@handle_cli_error("showing item")
def show(
    item_id: str = typer.Argument(..., help="Item ID"),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Show one item."""
    item = get_store().get(item_id)
    if item is None or item["owner"] != owner:
        raise NotFoundError(item_id=item_id)

    if as_json:
        print_json(item)
        return

    console.print(f"\n{kind_icon(item)} [bold]{escape(item['title'])}[/bold]")
    console.print("=" * 50)
    console.print(f"[dim]ID:[/dim] {item['id']}")
    console.print(f"[dim]Kind:[/dim] {item['kind']}")
    if item["description"]:
        console.print(f"[dim]Description:[/dim] {escape(item['description'])}")
    if item["tags"]:
        console.print(f"[dim]Tags:[/dim] {escape(', '.join(item['tags']))}")
    if item["url"]:
        console.print(f"[dim]URL:[/dim] {escape(item['url'])}")
    console.print(f"[dim]Size:[/dim] {format_size(item['size'])}")
    console.print(f"[dim]Created:[/dim] {item['created_at']}")
    if item["is_group_parent"]:
        console.print(
            f"[dim]Group:[/dim] parent of {escape(item['group_name'] or '')} "
            f"({item['total_parts'] or 1} parts)"
        )
    elif item["group_id"]:
        console.print(f"[dim]Group:[/dim] {item['group_id']} part {item['part_number']}")


@app.command()
@handle_cli_error("deleting item")
def delete(
    item_id: str = typer.Argument(..., help="Item ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    owner: str = OWNER_OPTION,
) -> None:
    """Delete an item. Deleting a group parent dissolves its group."""
    manager, aggregator = get_services()
    item = manager.store.get(item_id)
    if item is None or item["owner"] != owner:
        raise NotFoundError(item_id=item_id)

    if not force and not is_non_interactive():
        console.print(f"\n[bold]Will delete:[/bold] {escape(item['title'])}")
        if item["is_group_parent"] and item["group_id"]:
            children = aggregator.get_group_items(item["group_id"], owner)
            console.print(
                f"[yellow]This is the parent of '{escape(item['group_name'] or '')}'; "
                f"{len(children)} item(s) will be ungrouped[/yellow]"
            )
        if not typer.confirm("Continue?"):
            raise typer.Abort()

    deletion = manager.delete_item(item_id, owner)
    console.print(f"[green]✅ Deleted item {item_id}[/green]")
    if deletion is not None and deletion.detached_ids:
        console.print(f"   [dim]Ungrouped {len(deletion.detached_ids)} item(s)[/dim]")
