"""Tests for the app factory and its lifespan."""

import pytest

from firereport.report.controller import ReportController
from firereport.report.drafts import DraftStore
from firereport.report.models import IncidentRecord
from firereport.web.server import create_app


@pytest.fixture
def controller(report_config):
    return ReportController.from_config(report_config, drafts=DraftStore())


class TestCreateApp:
    def test_routes(self, controller):
        app = create_app(controller)
        paths = {route.path for route in app.routes}
        assert paths == {
            "/",
            "/preview",
            "/api/field",
            "/api/generate",
            "/api/save",
            "/api/reset",
            "/api/status",
            "/print",
            "/export.pdf",
        }

    def test_uses_given_controller(self, controller):
        assert create_app(controller).state.controller is controller

    async def test_lifespan_flushes_pending_autosave(self, controller):
        app = create_app(controller)

        async with app.router.lifespan_context(app):
            controller.update_field("cause", "Spark")
            assert controller.autosaver.pending is True

        assert controller.autosaver.pending is False
        assert controller.drafts.load() == IncidentRecord(cause="Spark")

    async def test_lifespan_logs_failed_flush(self, controller, caplog):
        def fail(record):
            raise OSError("disk full")

        controller.drafts.save = fail
        app = create_app(controller)

        async with app.router.lifespan_context(app):
            controller.update_field("cause", "Spark")

        assert controller.autosaver.pending is False
        assert "Failed to save draft on shutdown" in caplog.text

    async def test_lifespan_builds_controller(self, monkeypatch, report_config):
        monkeypatch.setattr("firereport.report.controller.get_report_config", lambda: report_config)
        app = create_app()

        async with app.router.lifespan_context(app):
            assert isinstance(app.state.controller, ReportController)
