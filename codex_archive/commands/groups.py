"""CLI commands for item groups.

Groups collect related audio, video and link items (a multi-part
interview, a cluster of sources) under one parent item that carries the
group's name and description.
"""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ..config.constants import MAX_SHOW_CHILDREN, MAX_TREE_CHILDREN, TITLE_DISPLAY_WIDTH
from ..services import find_invariant_violations
from ..utils.error_handling import handle_cli_error
from ..utils.output import console, format_size, is_non_interactive, print_json, truncate
from ._helpers import JSON_OPTION, OWNER_OPTION, get_services, kind_icon

app = typer.Typer(help="Organize audio, video and link items into ordered groups")


@app.command()
@handle_cli_error("creating group")
def create(
    name: str = typer.Argument(..., help="Group name"),
    item_id: str = typer.Argument(..., help="Item that becomes the group parent"),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Group description"
    ),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Create a group from an existing audio, video or link item."""
    manager, _ = get_services()
    parent = manager.create_group(owner, name, description, item_id)

    if as_json:
        print_json(parent)
        return

    console.print(
        f"[green]✅ Created group {parent['group_id']}:[/green] "
        f"[cyan]{escape(parent['group_name'] or '')}[/cyan]"
    )
    console.print(f"   [dim]Parent: {escape(parent['title'])}[/dim]")


@app.command()
@handle_cli_error("adding items")
def add(
    group_id: str = typer.Argument(..., help="Group ID to add items to"),
    item_ids: list[str] = typer.Argument(..., help="Item IDs to add, in part order"),
    part: Optional[int] = typer.Option(
        None, "--part", "-p", help="Part number for the first item (default: next free)"
    ),
    owner: str = OWNER_OPTION,
) -> None:
    """Add items to a group as its next parts."""
    manager, aggregator = get_services()

    part_number = part if part is not None else aggregator.suggest_next_part_number(group_id, owner)
    added = []
    for item_id in item_ids:
        item = manager.add_item_to_group(item_id, group_id, part_number, owner)
        added.append(item)
        part_number += 1

    console.print(f"[green]✅ Added {len(added)} item(s) to group {group_id}:[/green]")
    for item in added:
        console.print(
            f"   [dim]Part {item['part_number']}: "
            f"{escape(truncate(item['title'], TITLE_DISPLAY_WIDTH))}[/dim]"
        )


@app.command()
@handle_cli_error("removing items")
def remove(
    item_ids: list[str] = typer.Argument(..., help="Item IDs to take out of their group"),
    owner: str = OWNER_OPTION,
) -> None:
    """Remove items from their group. The items are kept."""
    manager, _ = get_services()

    removed = []
    not_grouped = []
    for item_id in item_ids:
        before = manager.store.get(item_id)
        manager.remove_item_from_group(item_id, owner)
        if before is not None and before["group_id"] is not None:
            removed.append(item_id)
        else:
            not_grouped.append(item_id)

    if removed:
        console.print(f"[green]✅ Removed {len(removed)} item(s) from their group[/green]")
    if not_grouped:
        console.print(f"[yellow]Not in a group: {', '.join(not_grouped)}[/yellow]")


@app.command()
@handle_cli_error("deleting group")
def delete(
    group_id: str = typer.Argument(..., help="Group ID to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    owner: str = OWNER_OPTION,
) -> None:
    """Delete a group: its parent item is deleted, its parts are ungrouped."""
    manager, aggregator = get_services()

    if not force and not is_non_interactive():
        view = aggregator.expand_group(group_id, owner)
        name = view["parent"]["group_name"] if view["parent"] else group_id
        console.print(f"\n[bold]Will delete group:[/bold] {escape(name or group_id)}")
        console.print("[yellow]The parent item will be deleted[/yellow]")
        if view["items"]:
            console.print(
                f"[dim]Note: {len(view['items'])} item(s) will be ungrouped (not deleted)[/dim]"
            )
        if not typer.confirm("Continue?"):
            raise typer.Abort()

    deletion = manager.delete_group(group_id, owner)
    console.print(f"[green]✅ Deleted group {group_id}[/green]")
    if deletion.detached_ids:
        console.print(f"   [dim]Ungrouped {len(deletion.detached_ids)} item(s)[/dim]")


@app.command()
@handle_cli_error("editing group")
def edit(
    group_id: str = typer.Argument(..., help="Group ID to edit"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="New description"
    ),
    owner: str = OWNER_OPTION,
) -> None:
    """Rename a group or change its description."""
    if name is None and description is None:
        console.print("[yellow]No changes specified[/yellow]")
        return

    manager, _ = get_services()
    manager.update_group_info(group_id, owner, name=name, description=description)

    console.print(f"[green]✅ Updated group {group_id}[/green]")
    if name is not None:
        console.print(f"   [dim]name: {escape(name)}[/dim]")
    if description is not None:
        console.print(f"   [dim]description: {escape(description)}[/dim]")


@app.command()
@handle_cli_error("showing group")
def show(
    group_id: str = typer.Argument(..., help="Group ID to show"),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Show a group's parent, parts and statistics."""
    _, aggregator = get_services()
    view = aggregator.expand_group(group_id, owner)

    if as_json:
        print_json(view)
        return

    parent = view["parent"]
    title = parent["group_name"] if parent else "Unnamed group"
    console.print(f"\n📁 [bold cyan]{group_id}:[/bold cyan] [bold]{escape(title or '')}[/bold]")
    console.print("=" * 50)

    if parent:
        if parent["group_description"]:
            console.print(f"[dim]Description:[/dim] {escape(parent['group_description'])}")
        console.print(f"[dim]Parent:[/dim] {kind_icon(parent)} {escape(parent['title'])}")
        console.print(f"[dim]Created:[/dim] {parent['created_at']}")

    stats = view["stats"]
    console.print("\n[bold]Statistics:[/bold]")
    console.print(f"  Parts: {stats['item_count']}")
    console.print(f"  Total size: {format_size(stats['total_size'])}")
    console.print(f"  Next part number: {view['next_part_number']}")

    items = view["items"]
    if not items:
        console.print("\n[dim]No parts in this group yet[/dim]")
        return

    console.print(f"\n[bold]Parts ({len(items)}):[/bold]")
    for item in items[:MAX_SHOW_CHILDREN]:
        console.print(
            f"  {item['part_number'] or '?':>3}. {kind_icon(item)} "
            f"[cyan]{item['id']}[/cyan] {escape(truncate(item['title'], TITLE_DISPLAY_WIDTH))}"
        )
    if len(items) > MAX_SHOW_CHILDREN:
        console.print(f"  [dim]... and {len(items) - MAX_SHOW_CHILDREN} more parts[/dim]")


@app.command(name="list")
@handle_cli_error("listing groups")
def list_groups_cmd(
    tree: bool = typer.Option(False, "--tree", help="Show as tree structure"),
    expand: Optional[list[str]] = typer.Option(
        None, "--expand", "-e", help="Group ID to expand in the tree (repeatable, 'all' for every group)"
    ),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search text"),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Only this item kind"),
    owner: str = OWNER_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """List the archive's top level: groups first, then standalone items."""
    _, aggregator = get_services()

    expanded = set(expand or [])
    if "all" in expanded:
        expanded = {g["group_id"] for g in aggregator.list_user_groups(owner) if g["group_id"]}

    entries = aggregator.nested_view(owner, expanded=expanded, query=query, kind=kind)

    if as_json:
        print_json(entries)
        return

    if not entries:
        console.print("[yellow]No items found[/yellow]")
        return

    if tree:
        _display_tree(entries)
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Kind", style="dim", width=8)
    table.add_column("Parts", style="green", width=5)

    for entry in entries:
        item = entry["item"]
        if item["is_group_parent"]:
            label = f"📁 {item['group_name'] or item['title']}"
            parts = str(item["total_parts"] or 1)
        else:
            label = item["title"]
            parts = "-"
        table.add_row(
            item["group_id"] or item["id"],
            escape(truncate(label, TITLE_DISPLAY_WIDTH)),
            item["kind"],
            parts,
        )

    console.print(table)


def _display_tree(entries: list) -> None:
    """Display the nested view as a tree."""
    root = Tree("📚 [bold]Codex[/bold]")

    for entry in entries:
        item = entry["item"]
        if not item["is_group_parent"]:
            root.add(f"{kind_icon(item)} [dim]{item['id']}[/dim] {escape(item['title'])}")
            continue

        label = (
            f"📁 [cyan]{item['group_id']}[/cyan] {escape(item['group_name'] or '')} "
            f"[dim]({item['total_parts'] or 1} parts)[/dim]"
        )
        branch = root.add(label)

        children = entry["children"]
        if children is None:
            continue
        stats = entry["stats"]
        if stats is not None:
            branch.add(f"[dim]{stats['item_count']} parts, {format_size(stats['total_size'])}[/dim]")
        for child in children[:MAX_TREE_CHILDREN]:
            branch.add(
                f"{child['part_number'] or '?'}. {kind_icon(child)} "
                f"{escape(truncate(child['title'], TITLE_DISPLAY_WIDTH))}"
            )
        if len(children) > MAX_TREE_CHILDREN:
            branch.add(f"[dim]... and {len(children) - MAX_TREE_CHILDREN} more[/dim]")

    console.print(root)


@app.command()
@handle_cli_error("checking groups")
def check(
    owner: str = OWNER_OPTION,
) -> None:
    """Check the owner's items for broken grouping rules."""
    manager, _ = get_services()
    problems = find_invariant_violations(manager.store.list_by_owner(owner))

    if not problems:
        console.print("[green]✅ All groups are consistent[/green]")
        return

    console.print(f"[red]Found {len(problems)} problem(s):[/red]")
    for problem in problems:
        console.print(f"  • {escape(problem)}")
    raise typer.Exit(1)
