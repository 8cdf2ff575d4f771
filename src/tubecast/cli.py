"""CLI entry point for Tubecast."""

import asyncio
import logging
import signal
import sys
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tubecast.cli_history import app as history_app
from tubecast.config.logging import setup_logging
from tubecast.config.manager import ConfigManager
from tubecast.config.schema import StorageConfig
from tubecast.history.error_log import ErrorLog
from tubecast.history.ledger import HistoryLedger
from tubecast.pipeline import PipelineResult, PlaylistPipeline
from tubecast.ui.progress import RichProgressObserver
from tubecast.utils.display import mask_secret, truncate_text
from tubecast.utils.errors import (
    ConfigError,
    ConfigNotFoundError,
    DependencyError,
    ProcessingError,
    RunCancelledError,
    TubecastError,
    ValidationError,
)
from tubecast.utils.paths import get_error_log_file, get_history_file
from tubecast.utils.validators import (
    ensure_playlist_url,
    validate_bucket_name,
    validate_endpoint,
    validate_public_url,
)

app = typer.Typer(
    name="tubecast",
    help="Turn a YouTube playlist into a podcast feed",
    no_args_is_help=True,
)
app.add_typer(history_app, name="history")
console = Console()
logger = logging.getLogger(__name__)

INSTALL_HINTS = (
    "On macOS: brew install yt-dlp ffmpeg",
    "On Ubuntu: sudo apt install yt-dlp ffmpeg",
)


def get_manager(ctx: typer.Context) -> ConfigManager:
    config_dir = (ctx.obj or {}).get("config_dir")
    return ConfigManager(config_dir=config_dir)


def _interrupt_handler(
    pipeline: PlaylistPipeline, task: "asyncio.Task[PipelineResult]"
) -> Callable[[], None]:
    """First Ctrl-C stops the run at the next stage boundary, a second aborts it."""
    requested = False

    def handle() -> None:
        nonlocal requested
        if requested:
            task.cancel()
            return
        requested = True
        pipeline.cancel()
        console.print(
            "\n[yellow]Stopping after the current step. Press Ctrl-C again to abort.[/yellow]"
        )

    return handle


async def _run_conversion(
    pipeline: PlaylistPipeline, playlist_url: str, observer: RichProgressObserver
) -> PipelineResult:
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    installed = False
    if task is not None:
        try:
            loop.add_signal_handler(signal.SIGINT, _interrupt_handler(pipeline, task))
            installed = True
        except (NotImplementedError, RuntimeError) as e:
            logger.debug("Ctrl-C will abort without a graceful stop: %s", e)

    try:
        return await pipeline.process(playlist_url, observer=observer)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
    config_dir: Path | None = typer.Option(
        None,
        "--config-dir",
        envvar="TUBECAST_CONFIG_DIR",
        help="Directory for config, history and error log",
    ),
) -> None:
    """Tubecast - Turn YouTube playlists into podcasts."""
    setup_logging(verbose=verbose, log_file=log_file)
    ctx.obj = {"config_dir": config_dir, "verbose": verbose, "log_file": log_file}


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from tubecast import __version__

    console.print(f"[bold cyan]Tubecast[/bold cyan] v{__version__}")


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    url: str | None = typer.Argument(None, help="YouTube playlist URL"),
) -> None:
    """Convert a playlist into a podcast and publish its feed.

    Complete pipeline: fetch → download → artwork → upload → feed → publish

    Examples:
        tubecast convert "https://www.youtube.com/playlist?list=PL..."

        tubecast convert  # Prompts for the URL
    """
    if url is None:
        url = typer.prompt("Enter YouTube playlist URL")

    try:
        playlist_url = ensure_playlist_url(url)
        manager = get_manager(ctx)
        config = manager.require_configured()
        manager.require_dependencies(config)

    except ConfigNotFoundError as e:
        console.print(f"[red]✗[/red] Tubecast is not configured yet. {e}")
        console.print("\nRun: [cyan]tubecast init[/cyan]")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]✗[/red] {e}")
        if e.suggestion:
            console.print(f"[dim]  {e.suggestion}[/dim]")
        sys.exit(1)
    except DependencyError as e:
        console.print(f"[red]✗[/red] {e}")
        for hint in INSTALL_HINTS:
            console.print(f"[dim]  {hint}[/dim]")
        sys.exit(1)
    except TubecastError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    options = ctx.obj or {}
    setup_logging(
        verbose=options.get("verbose", False),
        log_file=options.get("log_file"),
        level=config.log_level,
    )

    ledger = HistoryLedger(get_history_file(manager.config_dir))
    previous = ledger.find_by_playlist_url(playlist_url)
    if previous:
        console.print(
            f"[yellow]⚠[/yellow] This playlist was converted on "
            f"{previous.created_at:%Y-%m-%d %H:%M}; its feed will be republished."
        )

    console.print("[bold cyan]Tubecast Conversion Pipeline[/bold cyan]\n")

    pipeline = PlaylistPipeline(config, ledger=ledger, config_dir=manager.config_dir)
    observer = RichProgressObserver(console)

    try:
        result = asyncio.run(_run_conversion(pipeline, playlist_url, observer))
    except (KeyboardInterrupt, asyncio.CancelledError, RunCancelledError):
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except ProcessingError:
        console.print(
            f"[dim]  Details logged to {get_error_log_file(manager.config_dir)}[/dim]"
        )
        sys.exit(1)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="white")
    table.add_row("Playlist:", escape(result.playlist_title))
    table.add_row("Channel:", escape(result.channel_name))
    table.add_row("Episodes:", str(len(result.episodes)))
    if result.skipped_count:
        table.add_row("Skipped:", f"{result.skipped_count} unavailable")
    table.add_row("Artwork:", "uploaded" if result.artwork_url else "source thumbnail")
    console.print()
    console.print(table)


def _prompt_valid(
    label: str,
    validator: Callable[[str], bool],
    error: str,
    default: str | None = None,
) -> str:
    while True:
        value: str = typer.prompt(label, default=default or None).strip()
        if validator(value):
            return value
        console.print(f"[red]✗[/red] {error}")


def _prompt_secret(label: str) -> str:
    while True:
        value: str = typer.prompt(label, hide_input=True).strip()
        if value:
            return value
        console.print(f"[red]✗[/red] {label} cannot be empty")


@app.command("init")
def init_command(ctx: typer.Context) -> None:
    """Set up object storage credentials and check external tools.

    Credentials are encrypted before they are written to disk.
    """
    try:
        manager = get_manager(ctx)
        config = manager.load_config()

        console.print("[bold cyan]Tubecast Setup[/bold cyan]\n")
        if manager.is_configured():
            console.print(f"[dim]Updating existing configuration in {manager.config_file}[/dim]\n")

        deps = manager.check_dependencies(config)
        missing = [name for name, path in deps.items() if path is None]
        if missing:
            console.print("[red]✗[/red] Missing dependencies:")
            for name in missing:
                console.print(f"  • {name} is not installed")
            console.print("\nPlease install the missing dependencies:")
            for hint in INSTALL_HINTS:
                console.print(f"[dim]  {hint}[/dim]")
            sys.exit(1)

        config.tools.yt_dlp_path = deps["yt-dlp"] or config.tools.yt_dlp_path
        config.tools.ffmpeg_path = deps["ffmpeg"] or config.tools.ffmpeg_path
        console.print("[green]✓[/green] yt-dlp and ffmpeg found\n")

        storage = config.storage
        endpoint = _prompt_valid(
            "S3 endpoint URL (e.g. https://<account>.r2.cloudflarestorage.com)",
            validate_endpoint,
            "Invalid endpoint. It must be an https URL.",
            default=storage.endpoint,
        )
        public_url = _prompt_valid(
            "Public base URL (e.g. https://pub-xxx.r2.dev)",
            validate_public_url,
            "Invalid public URL. It must be an https URL.",
            default=storage.public_url,
        )
        access_key = _prompt_secret("Access key ID")
        secret_key = _prompt_secret("Secret access key")
        bucket_name = _prompt_valid(
            "Bucket name",
            validate_bucket_name,
            "Invalid bucket name. Use 3-63 lowercase letters, digits and hyphens.",
            default=storage.bucket_name,
        )

        config.storage = StorageConfig(
            endpoint=endpoint,
            public_url=public_url,
            access_key=access_key,
            secret_key=secret_key,
            bucket_name=bucket_name,
            region=storage.region,
        )
        manager.save_config(config)

        console.print(f"\n[green]✓[/green] Configuration saved to {manager.config_file}")
        console.print("[dim]  Credentials encrypted and stored securely[/dim]")
        console.print("\nNext: [cyan]tubecast convert <playlist-url>[/cyan]")

    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


@app.command("check")
def check_command(ctx: typer.Context) -> None:
    """Check that yt-dlp and ffmpeg are installed."""
    try:
        manager = get_manager(ctx)
        config = manager.load_config()
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    deps = manager.check_dependencies(config)

    table = Table(title="[bold]External Tools[/bold]")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Path")
    table.add_column("Status", justify="center")
    for name, path in deps.items():
        status = "[green]✓[/green]" if path else "[red]✗ missing[/red]"
        table.add_row(name, path or "—", status)
    console.print(table)

    if not all(deps.values()):
        for hint in INSTALL_HINTS:
            console.print(f"[dim]  {hint}[/dim]")
        sys.exit(1)


@app.command("config")
def config_command(
    ctx: typer.Context,
    action: str = typer.Argument("show", help="Action: show or path"),
) -> None:
    """Show the configuration or the path of the config file.

    Examples:
        tubecast config show

        tubecast config path
    """
    manager = get_manager(ctx)

    if action == "path":
        console.print(str(manager.config_file))
        return

    if action != "show":
        console.print(f"[red]✗[/red] Unknown action: {action}")
        console.print("Valid actions: show, path")
        sys.exit(1)

    try:
        config = manager.load_config()
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    storage = config.storage
    table.add_row("storage.endpoint", storage.endpoint or "—")
    table.add_row("storage.public_url", storage.public_url or "—")
    table.add_row("storage.bucket_name", storage.bucket_name or "—")
    table.add_row("storage.access_key", mask_secret(storage.access_key) or "—")
    table.add_row("storage.secret_key", mask_secret(storage.secret_key) or "—")
    table.add_row("tools.yt_dlp_path", config.tools.yt_dlp_path)
    table.add_row("tools.ffmpeg_path", config.tools.ffmpeg_path)
    table.add_row("tools.download_dir", str(config.tools.download_dir))
    table.add_row("feed.language", config.feed.language)
    table.add_row("feed.category", config.feed.category)
    table.add_row("feed.explicit", str(config.feed.explicit))
    table.add_row("log_level", config.log_level)

    console.print("\n[bold]Tubecast Configuration[/bold]\n")
    console.print(table)
    console.print(f"\n[dim]Config file: {manager.config_file}[/dim]")


@app.command("errors")
def errors_command(
    ctx: typer.Context,
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of entries to show"),
) -> None:
    """Show the most recent failures from the error log."""
    manager = get_manager(ctx)
    error_log = ErrorLog(get_error_log_file(manager.config_dir))
    entries = error_log.recent_errors(count)

    if not entries:
        console.print("[green]No errors logged.[/green]")
        return

    table = Table(title="[bold]Recent Errors[/bold]")
    table.add_column("Time", style="green", no_wrap=True)
    table.add_column("Stage", style="cyan")
    table.add_column("Error", style="red")
    table.add_column("Message")

    for entry in entries:
        error = entry.get("error", {})
        context = entry.get("context", {})
        table.add_row(
            str(entry.get("timestamp", ""))[:19].replace("T", " "),
            str(context.get("stage", "—")),
            str(error.get("name", "")),
            escape(truncate_text(str(error.get("message", "")), 80)),
        )

    console.print(table)
    console.print(f"\n[dim]Log file: {error_log.log_path}[/dim]")


if __name__ == "__main__":
    app()
