"""Playlist enumeration and audio extraction using yt-dlp and ffmpeg.

yt-dlp picks the container of the best audio stream itself, so after each
download the actual file is located with :func:`find_downloaded_file` and
then transcoded to MP3 with ffmpeg.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import requests

from tubecast.config.schema import ToolsConfig
from tubecast.media.models import PlaylistInfo, VideoMetadata
from tubecast.media.process import ToolError, run_tool
from tubecast.utils.datetime import parse_upload_date
from tubecast.utils.errors import DownloadError, PlaylistFetchError

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={id}"
UNAVAILABLE_TITLES = frozenset({"[Private video]", "[Deleted video]"})
PARTIAL_SUFFIXES = (".part", ".ytdl", ".temp")

ARTWORK_SIZE = 1400
THUMBNAIL_TIMEOUT_SECONDS = 30
THUMBNAIL_MAX_BYTES = 20 * 1024 * 1024
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def find_downloaded_file(directory: Path, prefix: str) -> Path | None:
    """Locate the finished file yt-dlp wrote for ``prefix``.

    Partial and temporary files are ignored. When several candidates exist
    the lexically first one wins so the choice is deterministic.
    """
    if not directory.is_dir():
        return None

    candidates = sorted(
        path
        for path in directory.iterdir()
        if path.is_file()
        and path.name.startswith(prefix)
        and not path.name.endswith(PARTIAL_SUFFIXES)
        and ".temp." not in path.name
    )
    return candidates[0] if candidates else None


def _pick_thumbnail(entry: dict[str, Any]) -> str:
    if entry.get("thumbnail"):
        return entry["thumbnail"]
    # Flat playlist entries list thumbnails smallest first
    for thumb in reversed(entry.get("thumbnails") or []):
        if thumb.get("url"):
            return thumb["url"]
    return ""


def _source_url(entry: dict[str, Any]) -> str:
    if entry.get("webpage_url"):
        return entry["webpage_url"]
    url = entry.get("url") or ""
    if url.startswith(("http://", "https://")):
        return url
    return WATCH_URL.format(id=entry["id"])


class MediaSource:
    """Wraps the yt-dlp and ffmpeg executables.

    Example:
        >>> source = MediaSource(config.tools)
        >>> info = await source.get_playlist_info(url)
        >>> path = await source.download(info.items[0], run_dir / "1-Intro.mp3")
    """

    def __init__(self, tools: ToolsConfig, output_dir: Path | None = None) -> None:
        """Initialize the media source.

        Args:
            tools: Tool paths and limits
            output_dir: Base directory for relative destinations (default: tools.download_dir)
        """
        self.tools = tools
        self.output_dir = output_dir or tools.download_dir

    def _resolve(self, dest: Path | str) -> Path:
        dest = Path(dest)
        if not dest.is_absolute():
            dest = self.output_dir / dest
        dest.parent.mkdir(parents=True, exist_ok=True)
        return dest

    async def get_playlist_info(self, url: str) -> PlaylistInfo:
        """Enumerate a playlist without downloading anything.

        A single-video URL yields a one-item playlist. Entries that are
        missing, private or deleted are dropped and counted in
        ``skipped_count``.

        Raises:
            PlaylistFetchError: If yt-dlp fails or returns unusable output
        """
        args = [
            self.tools.yt_dlp_path,
            "--dump-single-json",
            "--flat-playlist",
            "--no-warnings",
            url,
        ]
        try:
            result = await run_tool(
                args,
                timeout=self.tools.metadata_timeout_seconds,
                max_output_bytes=self.tools.max_output_bytes,
            )
        except ToolError as e:
            raise PlaylistFetchError(f"Failed to get playlist info: {e}") from e

        if result.stdout_truncated:
            raise PlaylistFetchError(
                f"Playlist metadata exceeded {self.tools.max_output_bytes} bytes"
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise PlaylistFetchError(f"yt-dlp returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise PlaylistFetchError("yt-dlp returned unexpected metadata")

        return self._parse_playlist(data)

    def _parse_playlist(self, data: dict[str, Any]) -> PlaylistInfo:
        if "entries" in data:
            entries = data.get("entries") or []
        elif data.get("id"):
            entries = [data]
        else:
            raise PlaylistFetchError("No playlist entries found")

        title = data.get("title") or "Unknown Playlist"
        channel = data.get("uploader") or data.get("channel") or "Unknown Channel"

        items: list[VideoMetadata] = []
        skipped = 0
        for position, entry in enumerate(entries, start=1):
            if not entry or not entry.get("id") or entry.get("title") in UNAVAILABLE_TITLES:
                logger.warning("Skipping unavailable playlist entry at position %d", position)
                skipped += 1
                continue
            items.append(self._entry_to_metadata(entry, channel))

        return PlaylistInfo(
            title=title,
            channel_name=channel,
            items=items,
            skipped_count=skipped,
        )

    def _entry_to_metadata(self, entry: dict[str, Any], channel: str) -> VideoMetadata:
        return VideoMetadata(
            id=entry["id"],
            title=entry.get("title") or entry["id"],
            description=entry.get("description") or "",
            duration_seconds=entry.get("duration") or 0,
            upload_date=parse_upload_date(entry.get("upload_date")),
            uploader=entry.get("uploader") or entry.get("channel") or channel,
            thumbnail_url=_pick_thumbnail(entry),
            source_url=_source_url(entry),
        )

    async def download(self, item: VideoMetadata, dest: Path | str) -> Path:
        """Download the best audio stream of ``item`` and transcode it to MP3.

        Args:
            item: Playlist entry to fetch
            dest: Target ``.mp3`` path (relative paths land in output_dir)

        Returns:
            Path to the MP3 file

        Raises:
            DownloadError: If either tool fails, times out, or leaves no output
        """
        dest = self._resolve(dest)
        prefix = f"{dest.stem}.source."
        template = str(dest.parent / f"{prefix}%(ext)s")

        download_args = [
            self.tools.yt_dlp_path,
            "-f",
            "bestaudio/best",
            "--no-playlist",
            "--no-progress",
            "--no-warnings",
            "-o",
            template,
            item.source_url,
        ]

        source_file: Path | None = None
        try:
            logger.info("Downloading audio for %s", item.id)
            await run_tool(
                download_args,
                timeout=self.tools.download_timeout_seconds,
                max_output_bytes=self.tools.max_output_bytes,
            )

            source_file = find_downloaded_file(dest.parent, prefix)
            if source_file is None:
                raise DownloadError(
                    f"Downloaded file not found for '{item.title}'",
                    video_id=item.id,
                    video_title=item.title,
                )

            logger.info("Converting %s to MP3", source_file.name)
            await run_tool(
                [
                    self.tools.ffmpeg_path,
                    "-nostdin",
                    "-hide_banner",
                    "-loglevel",
                    "error",
                    "-y",
                    "-i",
                    str(source_file),
                    "-vn",
                    "-codec:a",
                    "libmp3lame",
                    "-b:a",
                    self.tools.audio_bitrate,
                    str(dest),
                ],
                timeout=self.tools.download_timeout_seconds,
                max_output_bytes=self.tools.max_output_bytes,
            )
        except ToolError as e:
            raise DownloadError(
                f"Failed to download '{item.title}': {e}",
                video_id=item.id,
                video_title=item.title,
            ) from e
        finally:
            if source_file is not None:
                source_file.unlink(missing_ok=True)

        if not dest.exists():
            raise DownloadError(
                f"Conversion finished but {dest.name} was not written",
                video_id=item.id,
                video_title=item.title,
            )
        return dest

    async def download_thumbnail(self, url: str, dest: Path | str) -> Path:
        """Fetch a thumbnail and normalize it to a square JPEG.

        The image is centre-cropped to its shorter side and scaled to
        1400x1400, the minimum podcast directories accept.

        Raises:
            DownloadError: If the fetch or the conversion fails
        """
        dest = self._resolve(dest)
        raw_file = dest.with_name(f"{dest.stem}.raw")

        try:
            await asyncio.to_thread(self._fetch_to_file, url, raw_file)
            side = "min(iw,ih)"
            await run_tool(
                [
                    self.tools.ffmpeg_path,
                    "-nostdin",
                    "-hide_banner",
                    "-loglevel",
                    "error",
                    "-y",
                    "-i",
                    str(raw_file),
                    "-vf",
                    f"crop={side}:{side},scale={ARTWORK_SIZE}:{ARTWORK_SIZE}",
                    "-frames:v",
                    "1",
                    "-q:v",
                    "2",
                    str(dest),
                ],
                timeout=self.tools.download_timeout_seconds,
                max_output_bytes=self.tools.max_output_bytes,
            )
        except requests.RequestException as e:
            raise DownloadError(f"Failed to fetch thumbnail {url}: {e}") from e
        except ToolError as e:
            raise DownloadError(f"Failed to normalize thumbnail: {e}") from e
        finally:
            raw_file.unlink(missing_ok=True)

        if not dest.exists():
            raise DownloadError(f"Thumbnail conversion did not produce {dest.name}")
        return dest

    @staticmethod
    def _fetch_to_file(url: str, path: Path) -> None:
        """Stream ``url`` into ``path``, refusing oversized responses."""
        with requests.get(url, stream=True, timeout=THUMBNAIL_TIMEOUT_SECONDS) as response:
            response.raise_for_status()
            written = 0
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    written += len(chunk)
                    if written > THUMBNAIL_MAX_BYTES:
                        raise requests.RequestException(
                            f"Thumbnail larger than {THUMBNAIL_MAX_BYTES} bytes"
                        )
                    f.write(chunk)
