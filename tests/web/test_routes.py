"""Tests for the report route handlers."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from firereport.report.aid import NarrativeResult
from firereport.report.controller import ReportController
from firereport.report.drafts import DraftStore
from firereport.report.errors import ExportError, GenerationError
from firereport.report.export import PdfExporter
from firereport.report.models import IncidentRecord
from firereport.web import routes


class _FakeRequest:
    """Minimal Starlette Request stand-in carrying the app's controller."""

    def __init__(self, controller: ReportController, body=None, raw_error: bool = False):
        self.app = SimpleNamespace(state=SimpleNamespace(controller=controller))
        self._body = body
        self._raw_error = raw_error

    async def json(self):
        if self._raw_error:
            raise json.JSONDecodeError("Expecting value", "", 0)
        return self._body


@pytest.fixture
def controller(report_config):
    aid = MagicMock()
    aid.generate = AsyncMock(
        return_value=NarrativeResult(description="Generated description.", cause="Generated cause.")
    )
    ctl = ReportController.from_config(
        report_config,
        drafts=DraftStore(),
        aid=aid,
        exporter=PdfExporter(converter=lambda html, options: b"%PDF-1.7"),
    )
    yield ctl
    ctl.autosaver.cancel()


def _body(resp) -> dict:
    return json.loads(resp.body)


class TestPages:
    async def test_form_page(self, controller):
        controller.update_field("vehicle_no", "JH05-1234")
        resp = await routes.form_page(_FakeRequest(controller))
        html = resp.body.decode()
        assert resp.status_code == 200
        assert resp.media_type == "text/html"
        assert 'name="vehicle_no"' in html
        assert 'value="JH05-1234"' in html
        assert 'name="sec_co2"' in html
        assert "Official Report Format - SEC/03 v2.1" in html
        assert controller.preview_html() in html

    async def test_preview(self, controller):
        resp = await routes.preview(_FakeRequest(controller))
        assert resp.body.decode() == controller.preview_html()

    async def test_print_document_opens_dialog(self, controller):
        resp = await routes.print_report(_FakeRequest(controller))
        html = resp.body.decode()
        assert "window.print()" in html
        assert controller.preview_html() in html


class TestUpdateField:
    async def test_updates_and_returns_preview(self, controller):
        resp = await routes.update_field(
            _FakeRequest(controller, {"name": "cause", "value": "Welding spatter"})
        )
        body = _body(resp)
        assert resp.status_code == 200
        assert controller.record.cause == "Welding spatter"
        assert "Welding spatter" in body["preview"]
        assert body["status"]["pending_save"] is True

    async def test_checkbox(self, controller):
        await routes.update_field(_FakeRequest(controller, {"name": "dept_foam", "value": True}))
        assert controller.record.dept_foam is True

    async def test_unknown_field(self, controller):
        resp = await routes.update_field(_FakeRequest(controller, {"name": "colour", "value": "x"}))
        assert resp.status_code == 400
        assert "colour" in _body(resp)["error"]

    async def test_invalid_value(self, controller):
        resp = await routes.update_field(
            _FakeRequest(controller, {"name": "satisfaction_index", "value": "Superb"})
        )
        assert resp.status_code == 400
        assert controller.record.satisfaction_index is None

    @pytest.mark.parametrize("body", [None, [], {"name": "cause"}, {"value": "x"}])
    async def test_malformed_body(self, controller, body):
        resp = await routes.update_field(_FakeRequest(controller, body))
        assert resp.status_code == 400

    async def test_unparseable_json(self, controller):
        resp = await routes.update_field(_FakeRequest(controller, raw_error=True))
        assert resp.status_code == 400


class TestGenerate:
    async def test_fills_narrative(self, controller):
        resp = await routes.generate(_FakeRequest(controller, {"keywords": "cable fire"}))
        body = _body(resp)
        assert resp.status_code == 200
        assert body["description"] == "Generated description."
        assert body["cause"] == "Generated cause."
        assert "Generated cause." in body["preview"]

    async def test_empty_keywords(self, controller):
        resp = await routes.generate(_FakeRequest(controller, {"keywords": "   "}))
        assert resp.status_code == 400
        controller.aid.generate.assert_not_called()

    async def test_busy(self, controller):
        controller._generating = True
        resp = await routes.generate(_FakeRequest(controller, {"keywords": "fire"}))
        assert resp.status_code == 409

    async def test_failure_has_friendly_message_with_ref(self, controller, caplog):
        controller.aid.generate = AsyncMock(side_effect=GenerationError())
        before = controller.record

        resp = await routes.generate(_FakeRequest(controller, {"keywords": "fire"}))

        assert resp.status_code == 502
        error = _body(resp)["error"]
        assert error.startswith("Failed to generate report content. Please try again.")
        assert "(ref: " in error
        assert controller.record == before
        assert "Report error" in caplog.text


class TestDrafts:
    async def test_save(self, controller):
        controller.update_field("crew1", "A. Singh")
        resp = await routes.save_draft(_FakeRequest(controller))
        body = _body(resp)
        assert body["last_saved_at"] is not None
        assert body["saved_label"].startswith("Saved at ")
        assert controller.drafts.load().crew1 == "A. Singh"

    async def test_save_failure_has_friendly_message_with_ref(self, controller, caplog):
        def fail(record):
            raise OSError("disk full")

        controller.drafts.save = fail

        resp = await routes.save_draft(_FakeRequest(controller))

        assert resp.status_code == 500
        error = _body(resp)["error"]
        assert error.startswith("Failed to save the draft. Please try again.")
        assert "(ref: " in error
        assert "disk full" in caplog.text
        assert controller.last_saved_at is None

    async def test_status_before_any_save(self, controller):
        body = _body(await routes.status(_FakeRequest(controller)))
        assert body["last_saved_at"] is None
        assert body["saved_label"] == "Auto-saved to local draft"

    @pytest.mark.parametrize("body", [None, {}, {"confirm": False}, {"confirm": "yes"}])
    async def test_reset_requires_confirm(self, controller, body):
        controller.update_field("cause", "Spark")
        resp = await routes.reset(_FakeRequest(controller, body))
        assert resp.status_code == 400
        assert controller.record.cause == "Spark"

    async def test_reset(self, controller, sample_record):
        controller.drafts.save(sample_record)
        controller.update_field("cause", "Spark")

        resp = await routes.reset(_FakeRequest(controller, {"confirm": True}))

        body = _body(resp)
        assert resp.status_code == 200
        assert controller.record == IncidentRecord()
        assert body["record"]["cause"] == ""
        assert controller.drafts.load() is None
        assert body["status"]["pending_save"] is False


class TestExport:
    async def test_download(self, controller):
        controller.update_field("date_of_occurrence", "2024-03-07")
        resp = await routes.export_pdf(_FakeRequest(controller))
        assert resp.status_code == 200
        assert resp.media_type == "application/pdf"
        assert resp.body == b"%PDF-1.7"
        assert resp.headers["content-disposition"] == (
            'attachment; filename="Fire_Report_2024-03-07.pdf"; '
            "filename*=UTF-8''Fire_Report_2024-03-07.pdf"
        )

    async def test_non_ascii_occurrence_date_in_filename(self, controller):
        controller.update_field("date_of_occurrence", "2024-03-07 ठाणे")

        resp = await routes.export_pdf(_FakeRequest(controller))

        disposition = resp.headers["content-disposition"]
        assert resp.status_code == 200
        assert disposition.startswith('attachment; filename="Fire_Report_2024-03-07_____.pdf"')
        assert "filename*=UTF-8''Fire_Report_2024-03-07%20%E0%A4%A0" in disposition
        disposition.encode("latin-1")

    async def test_quote_in_occurrence_date_kept_out_of_header(self, controller):
        controller.update_field("date_of_occurrence", '7 "March"')

        resp = await routes.export_pdf(_FakeRequest(controller))

        disposition = resp.headers["content-disposition"]
        assert 'filename="Fire_Report_7__March_.pdf"' in disposition
        assert "%22March%22" in disposition

    async def test_failure(self, controller):
        def fail(html, options):
            raise OSError("cairo missing")

        controller.exporter = PdfExporter(converter=fail)
        resp = await routes.export_pdf(_FakeRequest(controller))
        assert resp.status_code == 500
        assert "(ref: " in _body(resp)["error"]

    async def test_export_error_type(self, controller):
        controller.exporter = MagicMock()
        controller.exporter.export_pdf.side_effect = ExportError("boom")
        resp = await routes.export_pdf(_FakeRequest(controller))
        assert resp.status_code == 500
