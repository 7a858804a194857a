"""
ESC/POS device connection for Receipt Printer.

Builds a python-escpos printer object from the printer config. Supported
transports: a character device file (e.g. /dev/usb/lp0), USB, serial and
network. Transport errors surface as DeviceError so callers only need to
handle one exception type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)


class DeviceError(RuntimeError):
    """I/O or transport failure while talking to the printer."""


def _profile_kwargs(config: Mapping[str, Any]) -> dict[str, Any]:
    profile = config.get("printer_profile") or None
    return {"profile": profile} if profile else {}


def connect_printer(config: Mapping[str, Any]):
    """
    Create and return an ESC/POS printer instance based on the provided config.
    Raises DeviceError for an unknown printer_type or when the transport
    cannot be opened.
    """
    ptype = str(config.get("printer_type", "file")).lower()
    kwargs = _profile_kwargs(config)
    timeout = config.get("timeout")

    try:
        if ptype == "file":
            from escpos.printer import File

            p = File(str(config.get("device_path", "/dev/usb/lp0")), **kwargs)
        elif ptype == "usb":
            from escpos.printer import Usb

            vendor = int(str(config.get("usb_vendor_id", "0x04b8")), 16)
            product = int(str(config.get("usb_product_id", "0x0e28")), 16)
            # python-escpos takes the USB timeout in milliseconds
            if timeout:
                kwargs["timeout"] = int(float(timeout) * 1000)
            p = Usb(vendor, product, **kwargs)
        elif ptype == "serial":
            from escpos.printer import Serial

            port = str(config.get("serial_port", ""))
            baud = int(str(config.get("serial_baudrate", "19200")))
            if timeout:
                kwargs["timeout"] = float(timeout)
            p = Serial(port, baudrate=baud, **kwargs)
        elif ptype == "network":
            from escpos.printer import Network

            ip = str(config.get("network_ip", ""))
            port = int(str(config.get("network_port", "9100")))
            if timeout:
                kwargs["timeout"] = float(timeout)
            p = Network(ip, port, **kwargs)
        else:
            raise DeviceError(f"Unsupported printer type: {ptype}")
    except DeviceError:
        raise
    except Exception as e:
        raise DeviceError(f"Could not open {ptype} printer: {e}") from e

    # python-escpos 3.x opens the transport lazily; force it so failures show up here
    try:
        device = getattr(p, "device", None)
        if device is None or device is False:
            p.open()
            device = getattr(p, "device", None)
    except Exception as e:
        raise DeviceError(f"Could not open {ptype} printer: {e}") from e
    if device is None or device is False:
        raise DeviceError(f"{ptype} printer not available")
    return p


@contextmanager
def open_printer(config: Mapping[str, Any]) -> Iterator[Any]:
    """
    Connect to the configured printer and always close it afterwards.
    Exceptions raised inside the block are re-raised as DeviceError.
    """
    p = connect_printer(config)
    logger.debug("Printer connection established (%s)", config.get("printer_type", "file"))
    try:
        yield p
    except DeviceError:
        raise
    except Exception as e:
        raise DeviceError(f"Printer I/O failed: {e}") from e
    finally:
        try:
            p.close()
        except Exception as e:
            logger.debug("Printer close failed: %s", e)


__all__ = ["DeviceError", "connect_printer", "open_printer"]
