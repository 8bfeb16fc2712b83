"""Report controller: owns the form state and orchestrates its collaborators.

Everything the web shell does goes through one ``ReportController``:
field edits, narrative generation, draft save/reset, print and export.
Persistence, AI and PDF conversion are injected so the controller runs in
tests without a browser, network or native libraries.
"""

import logging
from datetime import datetime
from typing import Self

from firereport.core.config import ReportConfig, get_report_config
from firereport.report.aid import NarrativeAid, NarrativeResult
from firereport.report.drafts import DraftAutosaver, DraftStore, load_record
from firereport.report.errors import AidBusyError, ResetNotConfirmedError
from firereport.report.export import ExportedDocument, PdfExporter
from firereport.report.models import IncidentRecord, SatisfactionRating
from firereport.report.preview import render_document, render_paper
from firereport.report.state import FormStateStore

logger = logging.getLogger(__name__)


class ReportController:
    """Single-report controller for the local web app."""

    def __init__(
        self,
        store: FormStateStore,
        drafts: DraftStore,
        autosaver: DraftAutosaver,
        aid: NarrativeAid,
        exporter: PdfExporter,
        config: ReportConfig,
    ) -> None:
        self.store = store
        self.drafts = drafts
        self.autosaver = autosaver
        self.aid = aid
        self.exporter = exporter
        self.config = config
        self._generating = False
        self.store.subscribe(self._on_change)

    @classmethod
    def from_config(cls, config: ReportConfig | None = None, **overrides) -> Self:
        """Build a controller with default collaborators, loading the saved draft.

        Keyword overrides (``drafts``, ``aid``, ``exporter``) replace the
        default collaborator of the same name.
        """
        config = config or get_report_config()
        drafts = overrides.get("drafts") or DraftStore(config.draft_path)
        record = load_record(drafts)
        return cls(
            store=FormStateStore(record),
            drafts=drafts,
            autosaver=DraftAutosaver(drafts, delay=config.autosave_delay),
            aid=overrides.get("aid") or NarrativeAid(),
            exporter=overrides.get("exporter") or PdfExporter(),
            config=config,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def record(self) -> IncidentRecord:
        return self.store.get()

    @property
    def generating(self) -> bool:
        """Whether a narrative generation is in flight."""
        return self._generating

    def _on_change(self, record: IncidentRecord) -> None:
        self.autosaver.schedule(record)

    def update_field(self, field: str, value: object) -> IncidentRecord:
        return self.store.update(field, value)

    def set_satisfaction(self, rating: SatisfactionRating | str | None) -> IncidentRecord:
        return self.store.update("satisfaction_index", rating if rating is not None else "")

    # ------------------------------------------------------------------
    # AI aid
    # ------------------------------------------------------------------

    async def generate_narrative(self, keywords: str) -> NarrativeResult:
        """Fill description and cause from keywords.

        Only one generation may be in flight; the form stays editable
        meanwhile. On failure the record is left as it was.

        Raises:
            AidBusyError: If a generation is already running
            ValueError: If keywords is empty
            GenerationError: If the AI call fails
        """
        if self._generating:
            raise AidBusyError("A narrative is already being generated")
        if not keywords.strip():
            raise ValueError("Keywords are required")

        self._generating = True
        try:
            result = await self.aid.generate(keywords)
        finally:
            self._generating = False

        self.store.replace_narrative(result.description, result.cause)
        return result

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def save_draft(self) -> datetime:
        """Save immediately (the Save Draft button)."""
        return self.autosaver.save_now(self.record)

    @property
    def last_saved_at(self) -> datetime | None:
        return self.autosaver.last_saved_at

    def reset(self, confirmed: bool) -> IncidentRecord:
        """Reset every field and delete the stored draft.

        Raises:
            ResetNotConfirmedError: Unless the user confirmed the reset
        """
        if not confirmed:
            raise ResetNotConfirmedError("Reset requires confirmation")
        record = self.store.reset()
        self.autosaver.reset()
        self.drafts.clear()
        return record

    # ------------------------------------------------------------------
    # Rendering, print and export
    # ------------------------------------------------------------------

    def preview_html(self) -> str:
        return render_paper(self.record, self.config)

    def document_html(self, *, auto_print: bool = False) -> str:
        return render_document(self.record, self.config, auto_print=auto_print)

    def export_pdf(self) -> ExportedDocument:
        """Export the current paper as a PDF download.

        Raises:
            ExportError: If conversion fails
        """
        record = self.record
        return self.exporter.export_pdf(
            render_document(record, self.config), record.date_of_occurrence
        )

    def status(self) -> dict:
        return {
            "last_saved_at": self.last_saved_at.isoformat() if self.last_saved_at else None,
            "generating": self._generating,
            "pending_save": self.autosaver.pending,
        }
