"""
Core utilities for Receipt Printer.

This package groups non-Flask helpers used across the app:
- config: paths, JSON load, printer defaults
- logging: Request ID aware logging filters/formatters and root logger config
- archive: per-session event log and uploaded image copies

Exports are explicit to keep static analyzers (e.g., Pyright) happy.
"""

from .archive import SessionArchive
from .config import (
    DEFAULT_PRINTER_CONFIG,
    default_archive_path,
    default_config_path,
    env_bool,
    env_int,
    get_archive_path,
    get_config_path,
    get_printer_config,
    load_config,
)
from .logging import (
    JsonFormatter,
    RequestIdFilter,
    configure_logging,
)

__all__ = [
    # config
    "DEFAULT_PRINTER_CONFIG",
    "default_archive_path",
    "default_config_path",
    "env_bool",
    "env_int",
    "get_archive_path",
    "get_config_path",
    "get_printer_config",
    "load_config",
    # logging
    "configure_logging",
    "RequestIdFilter",
    "JsonFormatter",
    # archive
    "SessionArchive",
]
