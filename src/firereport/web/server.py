"""Fire incident report web app.

Serves the report form, live paper preview, print page and PDF export for a
single local user.

Run locally::

    uv run firereport-server

Or with uvicorn::

    uv run uvicorn firereport.web.server:app --host 127.0.0.1 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.routing import Route

from firereport.report.controller import ReportController
from firereport.web import routes

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Logging: module-level so it runs on import (uvicorn reimports for the app)
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
# Silence client and PDF library noise
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("anthropic").setLevel(logging.WARNING)
logging.getLogger("weasyprint").setLevel(logging.WARNING)
logging.getLogger("fontTools").setLevel(logging.WARNING)

load_dotenv()


def create_app(controller: ReportController | None = None) -> Starlette:
    """Build the Starlette app around one report controller.

    The controller (and the draft it loads) is created at startup unless
    one is passed in.
    """

    @asynccontextmanager
    async def lifespan(app: Starlette):
        if getattr(app.state, "controller", None) is None:
            app.state.controller = ReportController.from_config()
        logger.info("Report form ready")
        yield
        # Flush any edit still waiting for its quiet period
        ctl: ReportController = app.state.controller
        if ctl.autosaver.pending:
            ctl.autosaver.cancel()
            try:
                ctl.save_draft()
            except OSError as exc:
                logger.error("Failed to save draft on shutdown: %s", exc)

    app = Starlette(
        routes=[
            Route("/", routes.form_page),
            Route("/preview", routes.preview),
            Route("/api/field", routes.update_field, methods=["POST"]),
            Route("/api/generate", routes.generate, methods=["POST"]),
            Route("/api/save", routes.save_draft, methods=["POST"]),
            Route("/api/reset", routes.reset, methods=["POST"]),
            Route("/api/status", routes.status),
            Route("/print", routes.print_report),
            Route("/export.pdf", routes.export_pdf),
        ],
        lifespan=lifespan,
    )
    app.state.controller = controller
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the report server with uvicorn."""
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "127.0.0.1")

    logger.info("Starting fire report server on %s:%d", host, port)
    uvicorn.run(
        "firereport.web.server:app",
        host=host,
        port=port,
        log_level="info",
    )
