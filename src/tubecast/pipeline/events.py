"""Stage and progress events emitted by the pipeline.

The pipeline never renders anything. It reports to a single
:class:`PipelineObserver` through an :class:`EventChannel`, which enforces
forward-only stage transitions and exactly one terminal event per run.
"""

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Pipeline stages in execution order, plus the absorbing ERROR state."""

    FETCHING = "fetching"
    DOWNLOADING = "downloading"
    ARTWORK = "artwork"
    UPLOADING = "uploading"
    FEED_SYNTHESIS = "feed_synthesis"
    FEED_PUBLISH = "feed_publish"
    CLEANUP = "cleanup"
    HISTORY_COMMIT = "history_commit"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.COMPLETE, Stage.ERROR)


STAGE_ORDER: tuple[Stage, ...] = (
    Stage.FETCHING,
    Stage.DOWNLOADING,
    Stage.ARTWORK,
    Stage.UPLOADING,
    Stage.FEED_SYNTHESIS,
    Stage.FEED_PUBLISH,
    Stage.CLEANUP,
    Stage.HISTORY_COMMIT,
    Stage.COMPLETE,
)

STAGE_LABELS = {
    Stage.FETCHING: "Fetching playlist",
    Stage.DOWNLOADING: "Downloading audio",
    Stage.ARTWORK: "Preparing artwork",
    Stage.UPLOADING: "Uploading episodes",
    Stage.FEED_SYNTHESIS: "Generating feed",
    Stage.FEED_PUBLISH: "Publishing feed",
    Stage.CLEANUP: "Cleaning up",
    Stage.HISTORY_COMMIT: "Saving history",
    Stage.COMPLETE: "Complete",
    Stage.ERROR: "Error",
}


class PipelineObserver:
    """Receives pipeline events. Override the methods you care about."""

    def on_stage_change(self, stage: Stage) -> None:
        pass

    def on_progress(self, stage_label: str, current: int, total: int, message: str) -> None:
        pass

    def on_complete(self, feed_url: str) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass


class CallbackObserver(PipelineObserver):
    """Observer built from plain callables; any of them may be omitted."""

    def __init__(
        self,
        on_progress: Callable[[str, int, int, str], None] | None = None,
        on_stage_change: Callable[[Stage], None] | None = None,
        on_complete: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._on_progress = on_progress
        self._on_stage_change = on_stage_change
        self._on_complete = on_complete
        self._on_error = on_error

    def on_stage_change(self, stage: Stage) -> None:
        if self._on_stage_change:
            self._on_stage_change(stage)

    def on_progress(self, stage_label: str, current: int, total: int, message: str) -> None:
        if self._on_progress:
            self._on_progress(stage_label, current, total, message)

    def on_complete(self, feed_url: str) -> None:
        if self._on_complete:
            self._on_complete(feed_url)

    def on_error(self, message: str) -> None:
        if self._on_error:
            self._on_error(message)


class EventChannel:
    """Single-subscriber channel that owns the run's stage state."""

    def __init__(self, observer: PipelineObserver | None = None) -> None:
        self.observer = observer or PipelineObserver()
        self.stage: Stage | None = None
        self.finished = False

    def stage_change(self, stage: Stage) -> None:
        """Move to ``stage``.

        Raises:
            RuntimeError: On a backwards move, a repeated stage, or after the
                terminal event, or when ERROR/COMPLETE is requested here
        """
        if self.finished:
            raise RuntimeError(f"Run already finished; cannot enter {stage.value}")
        if stage.is_terminal:
            raise RuntimeError("Terminal stages are entered via complete() or error()")
        if self.stage is not None and STAGE_ORDER.index(stage) <= STAGE_ORDER.index(self.stage):
            raise RuntimeError(f"Cannot move from {self.stage.value} back to {stage.value}")

        self.stage = stage
        logger.debug("Stage: %s", stage.value)
        self.observer.on_stage_change(stage)

    def progress(self, current: int, total: int, message: str) -> None:
        stage_label = self.stage.value if self.stage else Stage.FETCHING.value
        self.observer.on_progress(stage_label, current, total, message)

    def complete(self, feed_url: str) -> None:
        if self.finished:
            raise RuntimeError("Terminal event already emitted")
        self.finished = True
        self.stage = Stage.COMPLETE
        self.observer.on_stage_change(Stage.COMPLETE)
        self.observer.on_complete(feed_url)

    def error(self, message: str) -> None:
        """Emit the ERROR terminal event. Ignored if the run already finished."""
        if self.finished:
            logger.debug("Ignoring error after terminal event: %s", message)
            return
        self.finished = True
        self.stage = Stage.ERROR
        self.observer.on_stage_change(Stage.ERROR)
        self.observer.on_error(message)
