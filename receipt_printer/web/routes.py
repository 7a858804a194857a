from __future__ import annotations

"""
Submission routes for Receipt Printer.

This blueprint provides:
- GET  /            : Submission page (text + image forms)
- POST /print       : Queue a text receipt (JSON or form body with "text")
- POST /print-image : Queue an image receipt (multipart upload field "image")

Both POST endpoints answer as soon as the job is queued; printing happens
in the background. Image uploads are rasterized before queueing, so an
undecodable image is rejected here and never reaches the printer.
"""

from typing import Any, Dict

from flask import Blueprint, current_app, render_template, request
from pydantic import ValidationError
from werkzeug.exceptions import RequestEntityTooLarge

from receipt_printer import csrf
from receipt_printer.core.config import env_int
from receipt_printer.printing.jobs import image_job, text_job
from receipt_printer.printing.raster import PRINTER_WIDTH_PX, DecodeError, rasterize

from . import schemas
from .state import get_state, json_error, require_acceptance

web_bp = Blueprint("web", __name__)

MAX_UPLOAD_SIZE = env_int("RECEIPTPRINTER_MAX_UPLOAD_SIZE", 5 * 1024 * 1024)
MAX_TEXT_LEN = env_int("RECEIPTPRINTER_MAX_TEXT_LEN", 2000)


def _first_error(e: ValidationError) -> str:
    try:
        msg = e.errors()[0].get("msg") or str(e)
    except Exception:
        msg = str(e)
    return msg.removeprefix("Value error, ")


def _request_data() -> Dict[str, Any]:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


@web_bp.get("/")
def index():
    return render_template("index.html", max_upload_mb=MAX_UPLOAD_SIZE // (1024 * 1024))


@csrf.exempt
@web_bp.post("/print")
@require_acceptance
def print_text():
    """
    Validate a text submission and queue a text receipt. Responds immediately.
    """
    state = get_state()
    try:
        req = schemas.TextPrintRequest.model_validate(
            _request_data(),
            context={"limits": {"MAX_TEXT_LEN": MAX_TEXT_LEN}},
        )
    except ValidationError as e:
        return json_error(_first_error(e), 400)

    attribution = req.from_ or request.host or ""
    current_app.logger.info("RECV text from %s (queue: %d)", attribution, len(state.queue))
    state.log_event("TEXT", req.text)

    state.queue.enqueue(text_job(req.text, attribution, state.printer_config))
    return schemas.PrintAccepted(message="Receipt added to print queue").model_dump()


@csrf.exempt
@web_bp.post("/print-image")
@require_acceptance
def print_image():
    """
    Accept an uploaded image, archive it, rasterize it and queue an image receipt.
    """
    state = get_state()
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return json_error("No image file uploaded", 400)
    if not (upload.mimetype or "").startswith("image/"):
        return json_error("Only image files are allowed", 400)

    data = upload.read()
    if len(data) > MAX_UPLOAD_SIZE:
        return json_error(f"Image too large (max {MAX_UPLOAD_SIZE} bytes)", 413)

    attribution = request.host or ""
    current_app.logger.info('RECV image "%s" (%d bytes) from %s', upload.filename, len(data), attribution)
    if state.archive is not None:
        state.archive.save_image(data, upload.filename)

    width = int(state.printer_config.get("raster_width", PRINTER_WIDTH_PX))
    try:
        raster = rasterize(data, target_width=width)
    except DecodeError as e:
        current_app.logger.warning("Image rejected: %s", e)
        return json_error(str(e), 400)

    state.queue.enqueue(image_job(raster.encode(), attribution, state.printer_config))
    return schemas.PrintAccepted(message="Image added to print queue").model_dump()


@web_bp.app_errorhandler(RequestEntityTooLarge)
def _too_large(e: RequestEntityTooLarge):
    return json_error(f"Upload too large (max {MAX_UPLOAD_SIZE} bytes)", 413)
