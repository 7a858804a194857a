from __future__ import annotations

"""
Admin endpoints for Receipt Printer.

- GET  /admin        : Admin page
- GET  /admin/status : Acceptance flag and queue snapshot
- POST /admin/toggle : Enable/disable receipt acceptance ({"enabled": bool})

The toggle is CSRF protected; the admin page reads the csrf_token cookie and
sends it back in the X-CSRFToken header.
"""

from flask import Blueprint, current_app, render_template, request
from pydantic import ValidationError

from . import schemas
from .state import get_state, json_error

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/admin")
def admin_page():
    return render_template("admin.html", enabled=get_state().accepting)


@admin_bp.get("/admin/status")
def admin_status():
    state = get_state()
    return schemas.AdminStatus(enabled=state.accepting, queue=state.queue.status()).model_dump()


@admin_bp.post("/admin/toggle")
def admin_toggle():
    state = get_state()
    try:
        req = schemas.AdminToggleRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError:
        return json_error("enabled field must be a boolean", 400)

    state.accepting = req.enabled
    current_app.logger.info("ADMIN receipt acceptance %s", "ENABLED" if req.enabled else "DISABLED")
    state.log_event("ADMIN", "enabled" if req.enabled else "disabled")
    return schemas.AdminToggleResponse(enabled=state.accepting).model_dump()
