"""
Receipt Printer package

This module provides the application factory:
- Configures logging via receipt_printer.core.logging
- Creates a Flask app with template/static folders pointing at the repository-level dirs
- Initializes CSRF protection and sets a CSRF cookie on safe requests (used by the admin page)
- Creates the single print JobQueue and the session archive and attaches them to the app
- Registers the web, admin and health blueprints
"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from flask import Flask, g, request
from flask_wtf import CSRFProtect
from flask_wtf.csrf import generate_csrf
from jinja2 import StrictUndefined

__version__ = "1.0.0"

csrf = CSRFProtect()

logger = logging.getLogger(__name__)


def _default_secret_key() -> str:
    return os.environ.get("RECEIPTPRINTER_SECRET_KEY", "receiptprinter_dev_secret_key")


def _set_request_id() -> None:
    """
    Assign a request ID for logging if not set by a filter elsewhere.
    """
    g.request_id = getattr(g, "request_id", uuid.uuid4().hex)


def _set_csrf_cookie(response):
    """
    Ensure a CSRF cookie is present for client-side requests that use AJAX.
    """
    try:
        token = generate_csrf()
        response.set_cookie("csrf_token", token, secure=False, httponly=False, samesite="Lax")
    except Exception as e:
        # Don't block responses if CSRF cookie can't be set
        logger.debug("CSRF cookie not set: %s", e)
    return response


def create_app(
    config_overrides: Optional[dict] = None,
    job_queue=None,
    archive=None,
    printer_config: Optional[Mapping[str, Any]] = None,
) -> Flask:
    """
    Application factory.

    Parameters:
    - config_overrides: values to inject into app.config after defaults.
      ARCHIVE_ENABLED (bool) and ARCHIVE_PATH (str) control the session archive.
    - job_queue: JobQueue to submit to; a fresh one is created when omitted
    - archive: SessionArchive to record submissions in; created from
      ARCHIVE_PATH / RECEIPTPRINTER_ARCHIVE_PATH when omitted and enabled
    - printer_config: printer settings layered over the defaults; the saved
      JSON config is used when omitted

    Returns:
    - Flask app instance
    """
    from receipt_printer.core.archive import SessionArchive
    from receipt_printer.core.config import (
        DEFAULT_PRINTER_CONFIG,
        env_bool,
        env_int,
        get_archive_path,
        get_printer_config,
    )
    from receipt_printer.core.logging import configure_logging
    from receipt_printer.printing.job_queue import JobQueue
    from receipt_printer.web import admin_bp, health_bp, web_bp
    from receipt_printer.web.routes import MAX_UPLOAD_SIZE
    from receipt_printer.web.state import EXT_KEY, ServiceState

    # Point templates/static at repo-level folders
    pkg_dir = Path(__file__).resolve().parent
    repo_root = pkg_dir.parent
    templates_dir = repo_root / "templates"
    static_dir = repo_root / "static"

    app = Flask(
        "receipt_printer",
        template_folder=str(templates_dir) if templates_dir.exists() else None,
        static_folder=str(static_dir) if static_dir.exists() else None,
    )
    # Fail fast on missing variables in templates
    app.jinja_env.undefined = StrictUndefined

    app.secret_key = _default_secret_key()
    # Leave headroom for multipart framing around the largest allowed image
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE + 64 * 1024
    app.config["ARCHIVE_ENABLED"] = env_bool("RECEIPTPRINTER_ARCHIVE", True)
    app.config["ARCHIVE_PATH"] = get_archive_path()
    if config_overrides:
        app.config.update(config_overrides)

    csrf.init_app(app)

    configure_logging()

    app.url_map.strict_slashes = False

    @app.before_request
    def _before_request():
        _set_request_id()

    @app.after_request
    def _after_request(response):
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return _set_csrf_cookie(response)
        return response

    if printer_config is None:
        cfg = get_printer_config()
    else:
        cfg = {**DEFAULT_PRINTER_CONFIG, **printer_config}

    if archive is None and app.config["ARCHIVE_ENABLED"]:
        try:
            archive = SessionArchive(app.config["ARCHIVE_PATH"])
        except OSError as e:
            app.logger.warning("Session archive disabled: %s", e)

    app.extensions[EXT_KEY] = ServiceState(
        queue=job_queue if job_queue is not None else JobQueue(),
        printer_config=cfg,
        archive=archive,
        port=env_int("RECEIPTPRINTER_PORT", 3000),
    )

    for bp in (web_bp, admin_bp, health_bp):
        app.register_blueprint(bp)

    app.logger.info(
        "Receipt Printer app created (printer: %s via %s)",
        cfg.get("printer_name"),
        cfg.get("printer_type"),
    )
    return app


__all__ = ["create_app", "csrf"]
