"""Terminal UI for Tubecast."""

from tubecast.ui.progress import RichProgressObserver

__all__ = ["RichProgressObserver"]
