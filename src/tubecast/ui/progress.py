"""Rich terminal rendering of pipeline events."""

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from tubecast.pipeline.events import STAGE_ORDER, PipelineObserver, Stage

# COMPLETE is the terminal event, not a step
STEP_STAGES = STAGE_ORDER[:-1]


class RichProgressObserver(PipelineObserver):
    """Shows one numbered step line per stage and a live progress bar."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._task: TaskID | None = None
        self.last_message = ""

    def _ensure_started(self) -> TaskID:
        if self._task is None:
            self.progress.start()
            self._task = self.progress.add_task("Starting...", total=None)
        return self._task

    def _stop(self) -> None:
        if self._task is not None:
            self.progress.stop()
            self._task = None

    def on_stage_change(self, stage: Stage) -> None:
        if stage.is_terminal:
            self._stop()
            return

        task = self._ensure_started()
        step = STEP_STAGES.index(stage) + 1
        self.progress.console.print(
            f"[bold]Step {step}/{len(STEP_STAGES)}:[/bold] {stage.label}..."
        )
        self.progress.reset(task, total=None, description=stage.label)

    def on_progress(self, stage_label: str, current: int, total: int, message: str) -> None:
        task = self._ensure_started()
        self.last_message = message
        description = escape(message) if message else stage_label
        self.progress.update(
            task,
            description=description,
            completed=current,
            total=total or None,
        )

    def on_complete(self, feed_url: str) -> None:
        self._stop()
        self.console.print("\n[bold green]✓ Success! Your podcast is ready[/bold green]")
        self.console.print("\nPodcast RSS feed URL:")
        self.console.print(f"[bold yellow]{escape(feed_url)}[/bold yellow]")
        self.console.print("\n[dim]Add this URL to your favorite podcast app to subscribe.[/dim]")

    def on_error(self, message: str) -> None:
        self._stop()
        self.console.print(f"\n[red]✗[/red] Error: {escape(message)}")
