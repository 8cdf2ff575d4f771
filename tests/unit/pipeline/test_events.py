"""Tests for pipeline stage events."""

from unittest.mock import MagicMock

import pytest

from tubecast.pipeline.events import (
    STAGE_ORDER,
    CallbackObserver,
    EventChannel,
    PipelineObserver,
    Stage,
)


class TestStage:
    """Tests for the Stage enum."""

    def test_order_ends_with_complete(self) -> None:
        assert STAGE_ORDER[0] is Stage.FETCHING
        assert STAGE_ORDER[-1] is Stage.COMPLETE
        assert Stage.ERROR not in STAGE_ORDER

    def test_terminal_stages(self) -> None:
        assert Stage.COMPLETE.is_terminal
        assert Stage.ERROR.is_terminal
        assert not Stage.CLEANUP.is_terminal

    def test_every_stage_has_a_label(self) -> None:
        assert all(stage.label for stage in Stage)


class TestEventChannel:
    """Tests for EventChannel."""

    def test_forward_transitions(self) -> None:
        observer = MagicMock(spec=PipelineObserver)
        channel = EventChannel(observer)

        channel.stage_change(Stage.FETCHING)
        channel.stage_change(Stage.DOWNLOADING)
        channel.stage_change(Stage.UPLOADING)

        stages = [call.args[0] for call in observer.on_stage_change.call_args_list]
        assert stages == [Stage.FETCHING, Stage.DOWNLOADING, Stage.UPLOADING]

    def test_backward_transition_rejected(self) -> None:
        channel = EventChannel()
        channel.stage_change(Stage.UPLOADING)

        with pytest.raises(RuntimeError):
            channel.stage_change(Stage.DOWNLOADING)
        with pytest.raises(RuntimeError):
            channel.stage_change(Stage.UPLOADING)

    def test_terminal_stage_via_stage_change_rejected(self) -> None:
        channel = EventChannel()

        with pytest.raises(RuntimeError):
            channel.stage_change(Stage.COMPLETE)
        with pytest.raises(RuntimeError):
            channel.stage_change(Stage.ERROR)

    def test_progress_carries_stage_label(self) -> None:
        observer = MagicMock(spec=PipelineObserver)
        channel = EventChannel(observer)
        channel.stage_change(Stage.DOWNLOADING)

        channel.progress(1, 3, "Downloading: Intro")

        observer.on_progress.assert_called_once_with("downloading", 1, 3, "Downloading: Intro")

    def test_complete_is_exactly_once(self) -> None:
        observer = MagicMock(spec=PipelineObserver)
        channel = EventChannel(observer)

        channel.complete("https://pub-test.r2.dev/podcasts/x/feed.xml")

        with pytest.raises(RuntimeError):
            channel.complete("https://pub-test.r2.dev/podcasts/x/feed.xml")
        with pytest.raises(RuntimeError):
            channel.stage_change(Stage.CLEANUP)

        channel.error("late failure")
        observer.on_complete.assert_called_once()
        observer.on_error.assert_not_called()

    def test_error_after_error_is_ignored(self) -> None:
        observer = MagicMock(spec=PipelineObserver)
        channel = EventChannel(observer)
        channel.stage_change(Stage.FETCHING)

        channel.error("first")
        channel.error("second")

        observer.on_error.assert_called_once_with("first")
        assert channel.stage is Stage.ERROR
        assert channel.finished


def test_callback_observer_forwards_events() -> None:
    progress = MagicMock()
    complete = MagicMock()
    observer = CallbackObserver(on_progress=progress, on_complete=complete)
    channel = EventChannel(observer)

    channel.stage_change(Stage.FETCHING)
    channel.progress(0, 0, "Fetching playlist information...")
    channel.complete("https://feed")

    progress.assert_called_once_with("fetching", 0, 0, "Fetching playlist information...")
    complete.assert_called_once_with("https://feed")


def test_default_observer_is_silent() -> None:
    channel = EventChannel()
    channel.stage_change(Stage.FETCHING)
    channel.progress(0, 1, "x")
    channel.error("boom")
