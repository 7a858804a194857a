"""
Per-application service state shared by the blueprints.

The app factory creates one ServiceState and stores it in
app.extensions["receipt_printer"]; request handlers reach it through
get_state().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, jsonify

from receipt_printer.core.archive import SessionArchive
from receipt_printer.printing.job_queue import JobQueue

EXT_KEY = "receipt_printer"


@dataclass
class ServiceState:
    queue: JobQueue
    printer_config: Dict[str, Any] = field(default_factory=dict)
    archive: Optional[SessionArchive] = None
    accepting: bool = True
    port: int = 3000

    def log_event(self, kind: str, detail: str) -> None:
        if self.archive is not None:
            self.archive.log_event(kind, detail)


def get_state() -> ServiceState:
    return current_app.extensions[EXT_KEY]


def json_error(msg: str, code: int = 400):
    return jsonify({"success": False, "message": msg}), code


def require_acceptance(view):
    """Reject submissions with 403 while receipt printing is disabled by an admin."""

    @wraps(view)
    def _wrapped(*args, **kwargs):
        if not get_state().accepting:
            return json_error("Receipt printing is currently disabled", 403)
        return view(*args, **kwargs)

    return _wrapped


__all__ = ["EXT_KEY", "ServiceState", "get_state", "json_error", "require_acceptance"]
