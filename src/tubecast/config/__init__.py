"""Configuration loading, schema and credential handling."""

from tubecast.config.manager import ConfigManager
from tubecast.config.schema import FeedSettings, GlobalConfig, StorageConfig, ToolsConfig

__all__ = ["ConfigManager", "FeedSettings", "GlobalConfig", "StorageConfig", "ToolsConfig"]
