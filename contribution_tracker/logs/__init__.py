"""Structured logging package."""

from contribution_tracker.logs.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
