"""
Print job adapters: text receipts and image receipts.

Each *_job() constructor captures its payload and the printer config and
returns a zero-argument PrintJob for the JobQueue. The print_*_receipt()
functions do the actual formatting against an ESC/POS printer object, so
they can be exercised with a fake printer.

Receipt layout:

    ==========================================
                     TITLE
    ==========================================

    <body: text or dithered image>

    ==========================================
    Date: 3/14/2025 18:05:09
    From: <attribution>
    ==========================================
    <cut>
"""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from PIL import Image

from receipt_printer.core.config import DEFAULT_PRINTER_CONFIG, get_printer_config

from .device import open_printer
from .job_queue import PrintJob

logger = logging.getLogger(__name__)

TEXT_TITLE = "RECEIPT"
IMAGE_TITLE = "IMAGE PRINT"


def format_timestamp(now: datetime) -> str:
    """US-style date with a 24-hour clock, e.g. "3/14/2025 18:05:09"."""
    return f"{now.month}/{now.day}/{now.year} {now:%H:%M:%S}"


def _cfg(config: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return config if config is not None else DEFAULT_PRINTER_CONFIG


def draw_rule(p, config: Optional[Mapping[str, Any]] = None) -> None:
    cfg = _cfg(config)
    char = str(cfg.get("line_character") or "=")[:1]
    width = int(cfg.get("line_width", 42))
    p.text(char * width + "\n")


def add_header(p, title: str, config: Optional[Mapping[str, Any]] = None) -> None:
    p.set(align="center")
    draw_rule(p, config)
    p.set(align="center", font="b", bold=True)
    p.text(f"{title}\n")
    p.set(align="center", font="a", bold=False)
    draw_rule(p, config)
    p.text("\n")


def add_footer(
    p,
    meta: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> None:
    draw_rule(p, config)
    p.text(f"Date: {format_timestamp(now or datetime.now())}\n")
    if meta:
        p.text(f"From: {meta}\n")
    draw_rule(p, config)
    p.cut()


def print_text_receipt(
    p,
    text: str,
    meta: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> None:
    add_header(p, TEXT_TITLE, config)
    p.set(align="left", font="a", bold=False)
    p.text(text if text.endswith("\n") else text + "\n")
    p.text("\n")
    add_footer(p, meta, config, now)


def print_image_receipt(
    p,
    image: Image.Image,
    meta: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> None:
    add_header(p, IMAGE_TITLE, config)
    p.image(image)
    p.text("\n")
    add_footer(p, meta, config, now)


def text_job(text: str, meta: Optional[str] = None, config: Optional[Mapping[str, Any]] = None) -> PrintJob:
    """
    Build a job that prints `text` as a receipt. The config is resolved now,
    at submission time, so later config edits do not affect queued jobs.
    """
    cfg = dict(config) if config is not None else get_printer_config()

    def _print_text() -> None:
        with open_printer(cfg) as p:
            print_text_receipt(p, text, meta, cfg)
        logger.info("Text receipt printed")

    return _print_text


def image_job(raster_png: bytes, meta: Optional[str] = None, config: Optional[Mapping[str, Any]] = None) -> PrintJob:
    """
    Build a job that prints an already rasterized image (the PNG produced by
    RasterImage.encode()) as a receipt.
    """
    cfg = dict(config) if config is not None else get_printer_config()

    def _print_image() -> None:
        # Pillow errors on a bad buffer propagate as-is, before any connection
        with Image.open(io.BytesIO(raster_png)) as src:
            image = src.convert("1")
        with open_printer(cfg) as p:
            print_image_receipt(p, image, meta, cfg)
        logger.info("Image receipt printed (%dx%d)", image.width, image.height)

    return _print_image


__all__ = [
    "IMAGE_TITLE",
    "TEXT_TITLE",
    "add_footer",
    "add_header",
    "draw_rule",
    "format_timestamp",
    "image_job",
    "print_image_receipt",
    "print_text_receipt",
    "text_job",
]
