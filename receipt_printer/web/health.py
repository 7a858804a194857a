from __future__ import annotations

"""
Health endpoint for Receipt Printer.

`/health` (alias `/healthz`) reports the configured printer, whether
submissions are accepted, and the print queue snapshot. The printer itself
is not probed: opening the device here would compete with the print queue
for the only connection.
"""

from flask import Blueprint

from . import schemas
from .state import get_state

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
@health_bp.get("/healthz")
def health():
    state = get_state()
    return schemas.HealthResponse(
        printer=str(state.printer_config.get("printer_name", "")),
        port=state.port,
        accepting=state.accepting,
        queue=state.queue.status(),
    ).model_dump()
