"""Process-wide settings and logging configuration."""

from smartui_migrator.core.config import Settings, get_settings
from smartui_migrator.core.logging import bind_run_context, configure_structlog

__all__ = ["Settings", "get_settings", "bind_run_context", "configure_structlog"]
