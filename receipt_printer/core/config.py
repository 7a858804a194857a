"""
Config utilities for Receipt Printer.

Responsibilities:
- Resolve config/archive paths with environment and XDG support
- Load the saved JSON printer config
- Merge the saved config over built-in printer defaults
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

# Defaults for an Epson M244A (TM-T88V family) on the USB line-printer device
DEFAULT_PRINTER_CONFIG: dict[str, Any] = {
    "printer_type": "file",
    "device_path": "/dev/usb/lp0",
    "usb_vendor_id": "0x04b8",
    "usb_product_id": "0x0e28",
    "serial_port": "",
    "serial_baudrate": 19200,
    "network_ip": "",
    "network_port": 9100,
    "timeout": 5,
    "printer_profile": "TM-T88V",
    "printer_name": "Epson M244A",
    "line_width": 42,
    "line_character": "=",
    "raster_width": 384,
}


def env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except Exception:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def default_config_path() -> str:
    """
    Resolve the default config path using:
    1) $XDG_CONFIG_HOME/receiptprinter/config.json
    2) ~/.config/receiptprinter/config.json
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return str(Path(xdg) / "receiptprinter" / "config.json")
    return str(Path.home() / ".config" / "receiptprinter" / "config.json")


def default_archive_path() -> str:
    """
    Resolve the default session archive root using:
    1) $XDG_DATA_HOME/receiptprinter/logs
    2) ~/.local/share/receiptprinter/logs
    """
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return str(Path(xdg) / "receiptprinter" / "logs")
    return str(Path.home() / ".local" / "share" / "receiptprinter" / "logs")


def get_config_path() -> str:
    """
    Return the config path honoring RECEIPTPRINTER_CONFIG_PATH override.
    """
    return os.environ.get("RECEIPTPRINTER_CONFIG_PATH", default_config_path())


def get_archive_path() -> str:
    """
    Return the archive root honoring RECEIPTPRINTER_ARCHIVE_PATH override.
    """
    return os.environ.get("RECEIPTPRINTER_ARCHIVE_PATH", default_archive_path())


def load_config(path: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Load the JSON config if it exists; return None if missing.

    Raises:
        json.JSONDecodeError if the file exists but contains invalid JSON.
        OSError for I/O errors other than missing file.
    """
    cfg_path = Path(path or get_config_path())
    if not cfg_path.exists():
        return None
    with cfg_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def get_printer_config(path: Optional[str] = None) -> dict[str, Any]:
    """
    Return the effective printer config: saved values layered over
    DEFAULT_PRINTER_CONFIG. A missing config file yields the defaults.
    """
    merged = dict(DEFAULT_PRINTER_CONFIG)
    saved = load_config(path)
    if saved:
        merged.update(saved)
    return merged


__all__ = [
    "DEFAULT_PRINTER_CONFIG",
    "default_archive_path",
    "default_config_path",
    "env_bool",
    "env_int",
    "get_archive_path",
    "get_config_path",
    "get_printer_config",
    "load_config",
]
