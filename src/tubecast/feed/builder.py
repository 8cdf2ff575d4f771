"""RSS 2.0 feed synthesis with the iTunes podcast namespace."""

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from datetime import datetime
from email.utils import format_datetime

from tubecast import __version__
from tubecast.config.schema import FeedSettings
from tubecast.feed.models import Episode, PodcastInfo
from tubecast.media.models import VideoMetadata
from tubecast.storage.models import UploadedObject
from tubecast.utils.datetime import now_utc

logger = logging.getLogger(__name__)

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
ATOM_NS = "http://www.w3.org/2005/Atom"

ET.register_namespace("itunes", ITUNES_NS)
ET.register_namespace("atom", ATOM_NS)

GENERATOR = f"tubecast {__version__}"
FEED_TTL_MINUTES = 60
SUBTITLE_LENGTH = 255

# Characters that XML 1.0 forbids even when escaped
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _itunes(tag: str) -> str:
    return f"{{{ITUNES_NS}}}{tag}"


def _clean(text: str) -> str:
    return _INVALID_XML_CHARS.sub("", text)


def _text(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = _clean(text)
    return element


def format_duration(seconds: float) -> str:
    """Format seconds as ``H:MM:SS``, or ``M:SS`` under an hour."""
    total = int(max(seconds, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def site_url_for(feed_url: str) -> str:
    """The podcast's home link: the feed URL without its file name."""
    return feed_url.rsplit("/", 1)[0] if "/" in feed_url else feed_url


class FeedBuilder:
    """Maps playlist and episode metadata into a podcast feed document.

    Example:
        >>> builder = FeedBuilder(config.feed)
        >>> info = builder.podcast_info_from_playlist("Talks", "Channel", items)
        >>> xml_text = builder.build(info, episodes, feed_url)
    """

    def __init__(self, settings: FeedSettings | None = None) -> None:
        self.settings = settings or FeedSettings()

    def create_episode(
        self,
        video: VideoMetadata,
        uploaded: UploadedObject,
        ordinal: int,
        fallback_date: datetime | None = None,
    ) -> Episode:
        """Build a feed item for an uploaded episode.

        Args:
            video: Source video metadata
            uploaded: The published audio object
            ordinal: 1-based position in the playlist
            fallback_date: Publish date when the source has no upload date
        """
        return Episode(
            title=video.title,
            description=video.description or f"Episode {ordinal}",
            url=uploaded.url,
            size=uploaded.size,
            publish_date=video.upload_date or fallback_date or now_utc(),
            duration_formatted=format_duration(video.duration_seconds),
            guid=f"episode-{video.id}",
            author=video.uploader,
            ordinal=ordinal,
        )

    def podcast_info_from_playlist(
        self,
        playlist_title: str,
        channel_name: str,
        items: Sequence[VideoMetadata],
    ) -> PodcastInfo:
        """Channel metadata for a playlist.

        The image is the first available source thumbnail, falling back to
        the configured default image.
        """
        image_url = next((item.thumbnail_url for item in items if item.thumbnail_url), "")
        return PodcastInfo(
            title=playlist_title,
            description=f"{playlist_title} - A podcast series from {channel_name}",
            author=channel_name,
            image_url=image_url or self.settings.default_image_url or "",
            language=self.settings.language,
            category=self.settings.category,
            explicit=self.settings.explicit,
        )

    def build(
        self,
        info: PodcastInfo,
        episodes: Sequence[Episode],
        feed_url: str,
        build_date: datetime | None = None,
    ) -> str:
        """Serialize the feed.

        Episodes appear in the order given. ``feed_url`` is embedded as the
        atom self link, so it must be final before the document is built.

        Returns:
            The feed as UTF-8 XML text
        """
        explicit = "true" if info.explicit else "false"
        site_url = site_url_for(feed_url)

        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")

        _text(channel, "title", info.title)
        _text(channel, "link", site_url)
        _text(channel, "description", info.description)
        _text(channel, "language", info.language)
        _text(channel, "generator", GENERATOR)
        _text(channel, "lastBuildDate", format_datetime(build_date or now_utc()))
        _text(channel, "ttl", str(FEED_TTL_MINUTES))
        ET.SubElement(
            channel,
            f"{{{ATOM_NS}}}link",
            {"href": feed_url, "rel": "self", "type": "application/rss+xml"},
        )

        if info.image_url:
            image = ET.SubElement(channel, "image")
            _text(image, "url", info.image_url)
            _text(image, "title", info.title)
            _text(image, "link", site_url)
            ET.SubElement(channel, _itunes("image"), {"href": info.image_url})

        _text(channel, _itunes("author"), info.author)
        _text(channel, _itunes("summary"), info.description)
        _text(channel, _itunes("explicit"), explicit)
        ET.SubElement(channel, _itunes("category"), {"text": info.category})

        for episode in episodes:
            self._add_item(channel, episode, info, explicit)

        ET.indent(rss)
        xml_bytes = ET.tostring(rss, encoding="utf-8", xml_declaration=True)
        logger.debug("Built feed with %d episodes", len(episodes))
        return xml_bytes.decode("utf-8")

    def _add_item(
        self, channel: ET.Element, episode: Episode, info: PodcastInfo, explicit: str
    ) -> None:
        item = ET.SubElement(channel, "item")
        _text(item, "title", episode.title)
        _text(item, "description", episode.description)
        _text(item, "link", episode.url)
        guid = _text(item, "guid", episode.guid)
        guid.set("isPermaLink", "false")
        _text(item, "pubDate", format_datetime(episode.publish_date))
        ET.SubElement(
            item,
            "enclosure",
            {"url": episode.url, "length": str(episode.size), "type": "audio/mpeg"},
        )
        _text(item, _itunes("author"), episode.author or info.author)
        _text(item, _itunes("subtitle"), episode.description[:SUBTITLE_LENGTH])
        _text(item, _itunes("duration"), episode.duration_formatted)
        _text(item, _itunes("episode"), str(episode.ordinal))
        _text(item, _itunes("explicit"), explicit)
