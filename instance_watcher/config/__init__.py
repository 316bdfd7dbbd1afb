"""Configuration package."""

from .logging_config import configure_logging
from .watcher_config import WatcherConfig

__all__ = [
    "WatcherConfig",
    "configure_logging",
]
