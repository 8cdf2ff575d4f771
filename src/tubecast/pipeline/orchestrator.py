"""Pipeline orchestrator for playlist-to-podcast conversion.

Runs the stages strictly in order:

    fetching → downloading → artwork → uploading → feed synthesis
    → feed publish → cleanup → history commit → complete

Any failure moves the run to ERROR: it is written to the error log, the
observer receives ``on_error`` and the exception propagates. Artwork is the
one best-effort stage. Local files are removed on every exit path, while
objects already uploaded stay in the bucket.
"""

import asyncio
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from tubecast.config.schema import GlobalConfig
from tubecast.feed.builder import FeedBuilder
from tubecast.feed.models import Episode
from tubecast.history.error_log import ErrorLog
from tubecast.history.ledger import HistoryLedger
from tubecast.history.models import HistoryEntry
from tubecast.media.models import DownloadedAsset, PlaylistInfo, VideoMetadata
from tubecast.media.source import MediaSource
from tubecast.pipeline.events import EventChannel, PipelineObserver, Stage
from tubecast.storage.keys import (
    artwork_key,
    episode_key,
    fallback_slug,
    feed_key,
    podcast_slug,
)
from tubecast.storage.store import ObjectStore
from tubecast.utils.datetime import now_utc
from tubecast.utils.errors import (
    EmptyPlaylistError,
    ProcessingError,
    RunCancelledError,
    UploadError,
    ValidationError,
)
from tubecast.utils.paths import get_error_log_file, get_history_file
from tubecast.utils.validators import ensure_playlist_url, sanitize_filename

logger = logging.getLogger(__name__)

# Once the feed is live the run can no longer be cancelled
CANCELLABLE_STAGES = frozenset(
    {
        Stage.FETCHING,
        Stage.DOWNLOADING,
        Stage.ARTWORK,
        Stage.UPLOADING,
        Stage.FEED_SYNTHESIS,
        Stage.FEED_PUBLISH,
    }
)


class PipelineResult(BaseModel):
    """Outcome of a successful run."""

    feed_url: str
    slug: str
    playlist_title: str
    channel_name: str
    episodes: list[Episode] = Field(default_factory=list)
    artwork_url: str | None = None
    history_entry: HistoryEntry | None = None
    skipped_count: int = 0


@dataclass
class _RunState:
    """Local resources owned by one run."""

    playlist_url: str
    started_at: datetime = field(default_factory=now_utc)
    work_dir: Path | None = None
    assets: list[DownloadedAsset] = field(default_factory=list)
    artwork_path: Path | None = None
    cleaned: bool = False

    def local_files(self) -> list[Path]:
        files = [asset.local_path for asset in self.assets]
        if self.artwork_path is not None:
            files.append(self.artwork_path)
        return files


class PlaylistPipeline:
    """Converts one playlist into a published podcast feed.

    Example:
        >>> pipeline = PlaylistPipeline(config, config_dir=config_dir)
        >>> result = await pipeline.process(
        ...     "https://www.youtube.com/playlist?list=PL123",
        ...     observer=RichProgressObserver(console),
        ... )
        >>> print(result.feed_url)
    """

    def __init__(
        self,
        config: GlobalConfig,
        source: MediaSource | None = None,
        store: ObjectStore | None = None,
        feed_builder: FeedBuilder | None = None,
        ledger: HistoryLedger | None = None,
        error_log: ErrorLog | None = None,
        config_dir: Path | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Loaded configuration
            source: Media adapter (default: built from config.tools)
            store: Object store adapter (default: built from config.storage)
            feed_builder: Feed synthesizer (default: built from config.feed)
            ledger: History ledger (default: ``history.json`` in config_dir)
            error_log: Error log (default: ``errors.log`` in config_dir)
            config_dir: Directory holding the ledger and error log
        """
        self.config = config
        self.source = source or MediaSource(config.tools)
        self.store = store or ObjectStore(config.storage)
        self.feed_builder = feed_builder or FeedBuilder(config.feed)
        self.ledger = ledger or HistoryLedger(get_history_file(config_dir))
        self.error_log = error_log or ErrorLog(get_error_log_file(config_dir))
        self._cancel_requested = False

    def cancel(self) -> None:
        """Ask the current run to stop at the next stage boundary."""
        self._cancel_requested = True

    async def process(
        self,
        playlist_url: str,
        observer: PipelineObserver | None = None,
    ) -> PipelineResult:
        """Run the full conversion for ``playlist_url``.

        Returns:
            PipelineResult whose ``feed_url`` is the published feed

        Raises:
            ValidationError: If the URL is rejected (before any side effect)
            ProcessingError: If any stage other than artwork fails
        """
        channel = EventChannel(observer)
        self._cancel_requested = False

        try:
            playlist_url = ensure_playlist_url(playlist_url)
        except ValidationError as e:
            channel.error(str(e))
            raise

        run = _RunState(playlist_url=playlist_url)
        try:
            result = await self._run(run, channel)
        except asyncio.CancelledError:
            await self._record_failure(RunCancelledError("Cancelled by user"), run, channel)
            raise
        except ProcessingError as e:
            await self._record_failure(e, run, channel)
            raise
        except Exception as e:
            stage = channel.stage.value if channel.stage else "startup"
            wrapped = ProcessingError(f"Unexpected error during {stage}: {e}")
            await self._record_failure(wrapped, run, channel)
            raise wrapped from e
        finally:
            self._cleanup(run)

        channel.complete(result.feed_url)
        return result

    async def _run(self, run: _RunState, channel: EventChannel) -> PipelineResult:
        # Fetching
        self._enter(channel, Stage.FETCHING)
        channel.progress(0, 0, "Fetching playlist information...")
        playlist = await self.source.get_playlist_info(run.playlist_url)
        if not playlist.items:
            raise EmptyPlaylistError(run.playlist_url)
        if playlist.skipped_count:
            logger.warning("Skipped %d unavailable playlist entries", playlist.skipped_count)

        slug = podcast_slug(playlist.title) or fallback_slug(run.playlist_url)
        logger.info("Converting '%s' (%d items) as %s", playlist.title, len(playlist.items), slug)

        download_root = self.config.tools.download_dir
        download_root.mkdir(parents=True, exist_ok=True)
        run.work_dir = Path(tempfile.mkdtemp(prefix=f"{slug}-", dir=download_root))

        # Downloading
        self._enter(channel, Stage.DOWNLOADING)
        await self._download_all(playlist.items, run.work_dir, run, channel)

        # Artwork
        self._enter(channel, Stage.ARTWORK)
        run.artwork_path = await self._fetch_artwork(playlist.items, run.work_dir, run)

        # Uploading
        self._enter(channel, Stage.UPLOADING)
        episodes = await self._upload_all(playlist.items, slug, run, channel)
        artwork_url = await self._upload_artwork(slug, run)

        # Feed synthesis
        self._enter(channel, Stage.FEED_SYNTHESIS)
        channel.progress(0, 1, "Generating podcast feed...")
        podcast_info = self.feed_builder.podcast_info_from_playlist(
            playlist.title, playlist.channel_name, playlist.items
        )
        if artwork_url:
            podcast_info = podcast_info.model_copy(update={"image_url": artwork_url})
        key = feed_key(slug)
        feed_url = self.store.public_url(key)
        feed_xml = self.feed_builder.build(podcast_info, episodes, feed_url)
        channel.progress(1, 1, "Feed generated")

        # Feed publish
        self._enter(channel, Stage.FEED_PUBLISH)
        await self._log_feed_state(key)
        published = await self.store.upload_feed_document(feed_xml, key)

        # Cleanup
        self._enter(channel, Stage.CLEANUP)
        self._cleanup(run)

        # History commit
        self._enter(channel, Stage.HISTORY_COMMIT)
        entry = await self._commit_history(run, playlist, published.url, len(episodes))

        return PipelineResult(
            feed_url=published.url,
            slug=slug,
            playlist_title=playlist.title,
            channel_name=playlist.channel_name,
            episodes=episodes,
            artwork_url=artwork_url,
            history_entry=entry,
            skipped_count=playlist.skipped_count,
        )

    def _enter(self, channel: EventChannel, stage: Stage) -> None:
        if self._cancel_requested and stage in CANCELLABLE_STAGES:
            raise RunCancelledError(f"Run cancelled before {stage.label.lower()}")
        channel.stage_change(stage)

    async def _download_all(
        self,
        items: list[VideoMetadata],
        work_dir: Path,
        run: _RunState,
        channel: EventChannel,
    ) -> None:
        total = len(items)
        for ordinal, item in enumerate(items, start=1):
            channel.progress(ordinal - 1, total, f"Downloading: {item.title}")
            filename = f"{ordinal}-{sanitize_filename(item.title)}.mp3"
            local_path = await self.source.download(item, work_dir / filename)
            run.assets.append(
                DownloadedAsset(source_video_id=item.id, local_path=local_path, ordinal=ordinal)
            )
            channel.progress(ordinal, total, f"Downloaded: {item.title}")

    async def _fetch_artwork(
        self, items: list[VideoMetadata], work_dir: Path, run: _RunState
    ) -> Path | None:
        """Fetch the first available thumbnail. Failures are logged, not raised."""
        thumbnail_url = next((item.thumbnail_url for item in items if item.thumbnail_url), None)
        if thumbnail_url is None:
            logger.info("No thumbnail available; feed will use the fallback image")
            return None

        try:
            return await self.source.download_thumbnail(thumbnail_url, work_dir / "cover.jpg")
        except Exception as e:
            logger.warning("Artwork unavailable, continuing without it: %s", e)
            await self.error_log.log_error(
                e, {"playlist_url": run.playlist_url, "stage": Stage.ARTWORK.value}
            )
            return None

    async def _upload_all(
        self,
        items: list[VideoMetadata],
        slug: str,
        run: _RunState,
        channel: EventChannel,
    ) -> list[Episode]:
        episodes: list[Episode] = []
        total = len(run.assets)
        for index, (asset, item) in enumerate(zip(run.assets, items), start=1):
            channel.progress(index - 1, total, f"Uploading: {item.title}")
            uploaded = await self.store.upload(
                asset.local_path, episode_key(slug, asset.ordinal, asset.filename)
            )
            episodes.append(
                self.feed_builder.create_episode(
                    item, uploaded, asset.ordinal, fallback_date=run.started_at
                )
            )
            channel.progress(index, total, f"Uploaded: {item.title}")
        return episodes

    async def _upload_artwork(self, slug: str, run: _RunState) -> str | None:
        if run.artwork_path is None:
            return None
        try:
            uploaded = await self.store.upload(run.artwork_path, artwork_key(slug))
        except Exception as e:
            logger.warning("Artwork upload failed, using fallback image: %s", e)
            await self.error_log.log_error(
                e, {"playlist_url": run.playlist_url, "stage": Stage.ARTWORK.value}
            )
            return None
        return uploaded.url

    async def _log_feed_state(self, key: str) -> None:
        # Write-only credentials may be refused a HEAD; only the write matters
        try:
            existed = await self.store.exists(key)
        except UploadError as e:
            logger.info("Could not check for an existing feed at %s: %s", key, e)
            existed = False

        if existed:
            logger.info("Updating existing feed at %s", key)
        else:
            logger.info("Publishing feed at %s", key)

    async def _commit_history(
        self,
        run: _RunState,
        playlist: PlaylistInfo,
        feed_url: str,
        episode_count: int,
    ) -> HistoryEntry | None:
        """Record the run. The feed is already live, so failures only get logged."""
        try:
            return await asyncio.to_thread(
                self.ledger.add_entry,
                playlist_url=run.playlist_url,
                playlist_title=playlist.title,
                channel_name=playlist.channel_name,
                feed_url=feed_url,
                episode_count=episode_count,
            )
        except Exception as e:
            logger.error("Failed to save history entry: %s", e)
            await self.error_log.log_error(
                e, {"playlist_url": run.playlist_url, "stage": Stage.HISTORY_COMMIT.value}
            )
            return None

    async def _record_failure(
        self, error: ProcessingError, run: _RunState, channel: EventChannel
    ) -> None:
        stage = channel.stage.value if channel.stage else "startup"
        logger.error("Run failed during %s: %s", stage, error)
        await self.error_log.log_error(
            error,
            {
                "playlist_url": run.playlist_url,
                "stage": stage,
                "timestamp": now_utc().isoformat(),
            },
        )
        channel.error(str(error) or type(error).__name__)

    def _cleanup(self, run: _RunState) -> None:
        """Delete every local file of the run. Errors are ignored."""
        if run.cleaned:
            return
        run.cleaned = True

        for path in run.local_files():
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.debug("Could not delete %s: %s", path, e)

        if run.work_dir is not None:
            shutil.rmtree(run.work_dir, ignore_errors=True)
