"""HTTP route handlers for the report form.

Routes:
- GET  /              → Form page with live paper preview (HTML)
- GET  /preview       → Paper fragment (HTML)
- POST /api/field     → Update one field, returns the new preview (JSON)
- POST /api/generate  → AI narrative from keywords (JSON)
- POST /api/save      → Save the draft now (JSON)
- POST /api/reset     → Reset the form; requires ``confirm: true`` (JSON)
- GET  /api/status    → Last save time and busy flags (JSON)
- GET  /print         → Print document, opens the print dialog (HTML)
- GET  /export.pdf    → PDF download
"""

import logging
import re
import uuid
from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from firereport.report.controller import ReportController
from firereport.report.errors import (
    AidBusyError,
    ExportError,
    GenerationError,
    InvalidFieldValueError,
    UnknownFieldError,
)
from firereport.report.models import CREW_SLOTS, MEDIA_FLAGS, Party, SatisfactionRating

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = Environment(loader=FileSystemLoader(_TEMPLATES_DIR), autoescape=True)

_ERROR_MESSAGES = {
    "generate": "Failed to generate report content. Please try again.",
    "export": "Failed to export the PDF. Please try again or use Print.",
    "save": "Failed to save the draft. Please try again.",
}

# Characters kept in the plain ASCII filename= parameter
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _user_error(category: str, exc: Exception) -> str:
    """Build a user-friendly error message with a reference ID for debugging.

    Logs the full exception; returns only a short message + error ID.
    """
    error_id = uuid.uuid4().hex[:8]
    logger.error("Report error [%s] %s: %s: %s", error_id, category, type(exc).__name__, exc)
    friendly = _ERROR_MESSAGES.get(category, "Something went wrong.")
    return f"{friendly} (ref: {error_id})"


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and an RFC 5987 UTF-8 name."""
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _controller(request: Request) -> ReportController:
    return request.app.state.controller


async def _json_body(request: Request) -> dict | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _status(controller: ReportController) -> dict:
    status = controller.status()
    saved = controller.last_saved_at
    status["saved_label"] = (
        f"Saved at {saved.strftime('%H:%M:%S')}" if saved else "Auto-saved to local draft"
    )
    return status


async def form_page(request: Request) -> Response:
    """Serve the report form with its live preview."""
    controller = _controller(request)
    media_groups = [
        {
            "label": "By Department" if party == Party.DEPARTMENT else "By Security Team",
            "flags": [flag for flag in MEDIA_FLAGS if flag.party == party],
        }
        for party in Party
    ]
    template = _jinja_env.get_template("form.html")
    html = template.render(
        record=controller.record.model_dump(mode="json"),
        media_groups=media_groups,
        crew_slots=CREW_SLOTS,
        ratings=[r.value for r in SatisfactionRating],
        preview_html=controller.preview_html(),
        status=_status(controller),
        format_label=controller.config.format_label,
    )
    return Response(html, media_type="text/html")


async def preview(request: Request) -> Response:
    """Serve the paper fragment for the current record."""
    return Response(_controller(request).preview_html(), media_type="text/html")


async def update_field(request: Request) -> Response:
    """Apply one field edit and return the re-rendered preview."""
    controller = _controller(request)
    body = await _json_body(request)
    if body is None or not isinstance(body.get("name"), str) or "value" not in body:
        return JSONResponse({"error": "Expected JSON with name and value"}, status_code=400)

    try:
        controller.update_field(body["name"], body["value"])
    except (UnknownFieldError, InvalidFieldValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    return JSONResponse({"preview": controller.preview_html(), "status": _status(controller)})


async def generate(request: Request) -> Response:
    """Generate description and cause from keywords."""
    controller = _controller(request)
    body = await _json_body(request)
    keywords = body.get("keywords") if body else None
    if not isinstance(keywords, str) or not keywords.strip():
        return JSONResponse({"error": "Keywords are required"}, status_code=400)

    try:
        result = await controller.generate_narrative(keywords)
    except AidBusyError:
        return JSONResponse(
            {"error": "A narrative is already being generated. Please wait."}, status_code=409
        )
    except GenerationError as exc:
        return JSONResponse({"error": _user_error("generate", exc)}, status_code=502)

    return JSONResponse(
        {
            "description": result.description,
            "cause": result.cause,
            "preview": controller.preview_html(),
        }
    )


async def save_draft(request: Request) -> Response:
    """Save the draft immediately."""
    controller = _controller(request)
    try:
        controller.save_draft()
    except OSError as exc:
        return JSONResponse({"error": _user_error("save", exc)}, status_code=500)
    return JSONResponse(_status(controller))


async def reset(request: Request) -> Response:
    """Reset the form and delete the draft, once the user has confirmed."""
    controller = _controller(request)
    body = await _json_body(request)
    if not body or body.get("confirm") is not True:
        return JSONResponse({"error": "Reset must be confirmed"}, status_code=400)

    controller.reset(confirmed=True)
    return JSONResponse(
        {
            "record": controller.record.model_dump(mode="json"),
            "preview": controller.preview_html(),
            "status": _status(controller),
        }
    )


async def status(request: Request) -> Response:
    return JSONResponse(_status(_controller(request)))


async def print_report(request: Request) -> Response:
    """Serve the print document; the browser opens its print dialog on load."""
    html = _controller(request).document_html(auto_print=True)
    return Response(html, media_type="text/html")


async def export_pdf(request: Request) -> Response:
    """Serve the paper as a PDF download."""
    try:
        document = _controller(request).export_pdf()
    except ExportError as exc:
        return JSONResponse({"error": _user_error("export", exc)}, status_code=500)

    return Response(
        document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": _content_disposition(document.filename)},
    )
