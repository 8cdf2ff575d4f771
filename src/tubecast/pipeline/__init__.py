"""Playlist-to-podcast pipeline orchestration."""

from tubecast.pipeline.events import (
    CallbackObserver,
    EventChannel,
    PipelineObserver,
    Stage,
)
from tubecast.pipeline.orchestrator import PipelineResult, PlaylistPipeline

__all__ = [
    "CallbackObserver",
    "EventChannel",
    "PipelineObserver",
    "PipelineResult",
    "PlaylistPipeline",
    "Stage",
]
