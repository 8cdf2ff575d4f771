"""History commands for the Tubecast CLI."""

import json
import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tubecast.config.manager import ConfigManager
from tubecast.history.ledger import HistoryLedger
from tubecast.history.models import HistoryEntry
from tubecast.utils.display import truncate_text, truncate_url
from tubecast.utils.paths import get_history_file

app = typer.Typer(
    name="history",
    help="Browse previously converted playlists",
    invoke_without_command=True,
)
console = Console()


def _get_ledger(ctx: typer.Context) -> HistoryLedger:
    config_dir = (ctx.obj or {}).get("config_dir")
    manager = ConfigManager(config_dir=config_dir)
    return HistoryLedger(get_history_file(manager.config_dir))


def _print_entries(entries: list[HistoryEntry], title: str, output_json: bool) -> None:
    if output_json:
        payload = [entry.model_dump(mode="json") for entry in entries]
        console.print_json(json.dumps(payload))
        return

    if not entries:
        console.print("[yellow]No podcasts found.[/yellow]")
        return

    table = Table(title=f"[bold]{title}[/bold]", show_lines=False)
    table.add_column("Created", style="green", no_wrap=True)
    table.add_column("Podcast", style="cyan")
    table.add_column("Channel", style="magenta")
    table.add_column("Episodes", justify="right")
    table.add_column("Feed URL", style="dim")

    for entry in entries:
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(truncate_text(entry.playlist_title, 40)),
            escape(truncate_text(entry.channel_name, 25)),
            str(entry.episode_count),
            truncate_url(entry.feed_url, 60),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(entries)} podcast(s)[/dim]")


@app.callback()
def list_history(
    ctx: typer.Context,
    limit: Annotated[
        int, typer.Option("--limit", "-l", min=1, help="Number of entries to show")
    ] = 10,
    output_json: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON")
    ] = False,
) -> None:
    """List recently converted playlists, newest first.

    Examples:
        tubecast history

        tubecast history --limit 25 --json
    """
    if ctx.invoked_subcommand is not None:
        return

    ledger = _get_ledger(ctx)
    _print_entries(ledger.recent(limit), "Recent Podcasts", output_json)


@app.command("search")
def search_history(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to match in title, channel or URL")],
    output_json: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON")
    ] = False,
) -> None:
    """Search history by playlist title, channel name or URL."""
    if not query.strip():
        console.print("[red]✗[/red] Search query cannot be empty")
        sys.exit(1)

    ledger = _get_ledger(ctx)
    _print_entries(ledger.search(query), f"Matches for '{escape(query)}'", output_json)
