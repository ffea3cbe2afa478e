"""Core module initialization."""

from .config import RelyingPartyConfig, settings
from .logging import LoggerAdapter, get_logger, setup_logging

__all__ = ["RelyingPartyConfig", "settings", "get_logger", "setup_logging", "LoggerAdapter"]
