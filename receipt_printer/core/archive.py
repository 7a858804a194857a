"""
Per-session archive of everything submitted for printing.

Each process gets its own directory under the archive root, named after the
UTC start time:

    <root>/<session>/events.log
    <root>/<session>/images/<timestamp><ext>

Archiving is best effort: failures are logged and never stop a print.
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _file_stamp(now: Optional[datetime] = None) -> str:
    """ISO timestamp safe for use in file names (":" and "." replaced by "-")."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z").replace(":", "-").replace(".", "-")


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionArchive:
    def __init__(self, root: str, session: Optional[str] = None) -> None:
        self.session = session or _file_stamp()
        self.session_dir = Path(root) / self.session
        self.images_dir = self.session_dir / "images"
        self.log_file = self.session_dir / "events.log"
        self._lock = threading.Lock()
        self.images_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Session archive: %s", self.session_dir)

    def log_event(self, kind: str, detail: str) -> None:
        line = f"[{_iso_now()}] {kind}: {detail}\n"
        try:
            with self._lock, self.log_file.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.warning("Could not append to %s: %s", self.log_file, e)

    def save_image(self, data: bytes, filename: Optional[str] = None) -> Optional[str]:
        """
        Store an uploaded image and return its archived file name, or None if
        the write failed. The extension is taken from the original file name.
        """
        ext = os.path.splitext(filename or "")[1] or ".jpg"
        with self._lock:
            stored = f"{_file_stamp()}{ext}"
            # Uploads within the same millisecond get a numeric suffix
            n = 1
            while (self.images_dir / stored).exists():
                stored = f"{_file_stamp()}-{n}{ext}"
                n += 1
            try:
                (self.images_dir / stored).write_bytes(data)
            except OSError as e:
                logger.warning("Could not archive image %s: %s", filename, e)
                return None
        self.log_event("IMAGE", stored)
        return stored


__all__ = ["SessionArchive"]
