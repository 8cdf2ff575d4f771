"""Tests for podcast feed synthesis."""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from tubecast.config.schema import FeedSettings
from tubecast.feed.builder import ATOM_NS, ITUNES_NS, FeedBuilder, format_duration, site_url_for
from tubecast.feed.models import Episode, PodcastInfo
from tubecast.media.models import VideoMetadata
from tubecast.storage.models import UploadedObject

NS = {"itunes": ITUNES_NS, "atom": ATOM_NS}
FEED_URL = "https://pub-test.r2.dev/podcasts/talks/feed.xml"


@pytest.fixture
def builder() -> FeedBuilder:
    return FeedBuilder(FeedSettings())


@pytest.fixture
def episodes(builder: FeedBuilder, sample_videos: list[VideoMetadata]) -> list[Episode]:
    fallback = datetime(2024, 6, 1, tzinfo=timezone.utc)
    return [
        builder.create_episode(
            video,
            UploadedObject(
                key=f"podcasts/talks/episodes/{i}-{i}-x.mp3",
                url=f"https://pub-test.r2.dev/podcasts/talks/episodes/{i}-{i}-x.mp3",
                size=1000 * i,
            ),
            i,
            fallback_date=fallback,
        )
        for i, video in enumerate(sample_videos, start=1)
    ]


def _parse(xml_text: str) -> ET.Element:
    return ET.fromstring(xml_text.encode("utf-8"))


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "0:00"), (59, "0:59"), (125, "2:05"), (3600, "1:00:00"), (3725, "1:02:05"), (-5, "0:00")],
    )
    def test_format(self, seconds: float, expected: str) -> None:
        assert format_duration(seconds) == expected


def test_site_url_for() -> None:
    assert site_url_for(FEED_URL) == "https://pub-test.r2.dev/podcasts/talks"


class TestCreateEpisode:
    """Tests for FeedBuilder.create_episode."""

    def test_fields(self, episodes: list[Episode]) -> None:
        first = episodes[0]
        assert first.guid == "episode-vid1"
        assert first.duration_formatted == "2:05"
        assert first.publish_date == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert first.ordinal == 1
        assert first.size == 1000

    def test_missing_description_and_date(self, episodes: list[Episode]) -> None:
        """Test fallbacks when the source lacks description or upload date."""
        second = episodes[1]
        assert second.description == "Episode 2"
        assert second.publish_date == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert second.duration_formatted == "1:02:05"


class TestPodcastInfo:
    """Tests for FeedBuilder.podcast_info_from_playlist."""

    def test_uses_first_thumbnail(
        self, builder: FeedBuilder, sample_videos: list[VideoMetadata]
    ) -> None:
        info = builder.podcast_info_from_playlist("Talks", "Test Channel", sample_videos)

        assert info.description == "Talks - A podcast series from Test Channel"
        assert info.author == "Test Channel"
        assert info.image_url == "https://i.ytimg.com/vi/vid1/hqdefault.jpg"

    def test_falls_back_to_default_image(self, sample_videos: list[VideoMetadata]) -> None:
        builder = FeedBuilder(FeedSettings(default_image_url="https://example.com/cover.jpg"))
        no_thumbs = [sample_videos[1]]

        info = builder.podcast_info_from_playlist("Talks", "Test Channel", no_thumbs)

        assert info.image_url == "https://example.com/cover.jpg"

    def test_no_image_at_all(self, builder: FeedBuilder, sample_videos: list[VideoMetadata]) -> None:
        info = builder.podcast_info_from_playlist("Talks", "Test Channel", [sample_videos[1]])
        assert info.image_url == ""


class TestBuild:
    """Tests for FeedBuilder.build."""

    def test_channel_elements(self, builder: FeedBuilder, episodes: list[Episode]) -> None:
        info = PodcastInfo(
            title="Talks",
            description="Talks - A podcast series from Test Channel",
            author="Test Channel",
            image_url="https://pub-test.r2.dev/podcasts/talks/cover.jpg",
        )

        root = _parse(builder.build(info, episodes, FEED_URL))
        channel = root.find("channel")

        assert root.tag == "rss"
        assert root.get("version") == "2.0"
        assert channel is not None
        assert channel.findtext("title") == "Talks"
        assert channel.findtext("link") == "https://pub-test.r2.dev/podcasts/talks"
        assert channel.findtext("language") == "en-US"
        assert channel.findtext("itunes:author", namespaces=NS) == "Test Channel"
        assert channel.findtext("itunes:explicit", namespaces=NS) == "false"
        assert channel.find("itunes:category", NS).get("text") == "Technology"
        assert channel.find("itunes:image", NS).get("href") == info.image_url
        assert channel.findtext("image/url") == info.image_url

        self_link = channel.find("atom:link", NS)
        assert self_link.get("href") == FEED_URL
        assert self_link.get("rel") == "self"

    def test_items_in_given_order(self, builder: FeedBuilder, episodes: list[Episode]) -> None:
        info = PodcastInfo(title="Talks", description="d", author="a")

        channel = _parse(builder.build(info, episodes, FEED_URL)).find("channel")
        items = channel.findall("item")

        assert [item.findtext("title") for item in items] == ["First Talk", "Second Talk"]
        assert [item.findtext("itunes:episode", namespaces=NS) for item in items] == ["1", "2"]

    def test_item_elements(self, builder: FeedBuilder, episodes: list[Episode]) -> None:
        info = PodcastInfo(title="Talks", description="d", author="a")

        item = _parse(builder.build(info, episodes, FEED_URL)).find("channel/item")

        enclosure = item.find("enclosure")
        assert enclosure.get("url") == episodes[0].url
        assert enclosure.get("length") == "1000"
        assert enclosure.get("type") == "audio/mpeg"
        guid = item.find("guid")
        assert guid.text == "episode-vid1"
        assert guid.get("isPermaLink") == "false"
        assert item.findtext("pubDate") == "Mon, 15 Jan 2024 00:00:00 +0000"
        assert item.findtext("itunes:duration", namespaces=NS) == "2:05"
        assert item.findtext("itunes:author", namespaces=NS) == "Test Channel"

    def test_no_image_elements_without_image(
        self, builder: FeedBuilder, episodes: list[Episode]
    ) -> None:
        info = PodcastInfo(title="Talks", description="d", author="a")

        channel = _parse(builder.build(info, episodes, FEED_URL)).find("channel")

        assert channel.find("image") is None
        assert channel.find("itunes:image", NS) is None

    def test_escapes_markup_and_strips_control_chars(self, builder: FeedBuilder) -> None:
        """Test that hostile titles still produce a well-formed document."""
        info = PodcastInfo(title="Q&A <live> \x01\x0b", description="\"quoted\" & 'single'", author="a")

        xml_text = builder.build(info, [], FEED_URL)
        channel = _parse(xml_text).find("channel")

        assert "&amp;" in xml_text
        assert "&lt;live&gt;" in xml_text
        assert channel.findtext("title") == "Q&A <live> "
        assert channel.findtext("description") == "\"quoted\" & 'single'"

    def test_explicit_flag(self, episodes: list[Episode]) -> None:
        builder = FeedBuilder(FeedSettings(explicit=True))
        info = PodcastInfo(title="Talks", description="d", author="a", explicit=True)

        channel = _parse(builder.build(info, episodes, FEED_URL)).find("channel")

        assert channel.findtext("itunes:explicit", namespaces=NS) == "true"
        assert channel.find("item").findtext("itunes:explicit", namespaces=NS) == "true"

    def test_declaration_and_build_date(self, builder: FeedBuilder) -> None:
        info = PodcastInfo(title="Talks", description="d", author="a")
        build_date = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)

        xml_text = builder.build(info, [], FEED_URL, build_date=build_date)

        assert xml_text.startswith("<?xml")
        assert _parse(xml_text).find("channel").findtext("lastBuildDate") == (
            "Thu, 01 Feb 2024 12:00:00 +0000"
        )
