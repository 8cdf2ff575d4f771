"""Media retrieval: playlist enumeration, audio extraction, artwork."""

from tubecast.media.models import DownloadedAsset, PlaylistInfo, VideoMetadata
from tubecast.media.process import ToolError, ToolResult, ToolTimeoutError, run_tool
from tubecast.media.source import MediaSource, find_downloaded_file

__all__ = [
    "DownloadedAsset",
    "MediaSource",
    "PlaylistInfo",
    "ToolError",
    "ToolResult",
    "ToolTimeoutError",
    "VideoMetadata",
    "find_downloaded_file",
    "run_tool",
]
