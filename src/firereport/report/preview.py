"""Paper preview: the fixed-layout A4 report rendered from a record.

``build_paper`` is a pure function from record to view data; the Jinja2
templates only lay it out. The same ``paper.html`` fragment is used by the
live preview, the print page and the PDF export.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from firereport.core.config import ReportConfig, get_report_config
from firereport.report.formatting import description_lines, format_date, format_time
from firereport.report.models import (
    MEDIA_FLAGS,
    IncidentRecord,
    Media,
    Party,
    SatisfactionRating,
)

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = Environment(loader=FileSystemLoader(_TEMPLATES_DIR), autoescape=True)

PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297

# Prefix of the header reference shown when the record's reference is blank
FALLBACK_REFERENCE_PREFIX = "REF-"

_PARTY_LABELS = {
    Party.DEPARTMENT: "By Department",
    Party.SECURITY: "By Security",
}


@dataclass(frozen=True)
class Slot:
    """A label:value line on the paper. Blank values draw an empty underline."""

    label: str
    value: str


@dataclass(frozen=True)
class MediaBox:
    label: str
    checked: bool


@dataclass(frozen=True)
class MediaRow:
    label: str
    boxes: tuple[MediaBox, ...]


@dataclass(frozen=True)
class RatingColumn:
    label: str
    marked: bool


@dataclass(frozen=True)
class PaperView:
    """Everything the paper template shows, already formatted."""

    company_name: str
    department: str
    logo_url: str
    reference: str
    report_date: str
    timeline: tuple[Slot, ...]
    description_lines: tuple[str, str]
    cause: str
    property_loss: str
    property_saved: str
    media_rows: tuple[MediaRow, ...]
    rating_columns: tuple[RatingColumn, ...]
    party_name: str
    party_designation: str
    party_phone: str
    vehicle_no: str
    fire_fighting_in_charge: str
    crew: tuple[str, ...]


def _media_rows(record: IncidentRecord) -> tuple[MediaRow, ...]:
    rows = []
    for party in Party:
        flags = {flag.media: flag for flag in MEDIA_FLAGS if flag.party == party}
        boxes = tuple(
            MediaBox(label=media.value, checked=record.media_used(flags[media])) for media in Media
        )
        rows.append(MediaRow(label=_PARTY_LABELS[party], boxes=boxes))
    return tuple(rows)


def _rating_columns(rating: SatisfactionRating | None) -> tuple[RatingColumn, ...]:
    return tuple(
        RatingColumn(label=level.value, marked=rating is not None and level.ordinal == rating.ordinal)
        for level in SatisfactionRating
    )


def build_paper(record: IncidentRecord, config: ReportConfig | None = None) -> PaperView:
    """Build the formatted paper view for a record."""
    config = config or get_report_config()
    return PaperView(
        company_name=config.company_name,
        department=config.department,
        logo_url=config.logo_url,
        reference=record.doc_ref or f"{FALLBACK_REFERENCE_PREFIX}{config.doc_ref}",
        report_date=format_date(record.report_date),
        timeline=(
            Slot("Date of occurrence of fire", format_date(record.date_of_occurrence)),
            Slot("Time of information received", format_time(record.time_info_received)),
            Slot("Time of arrival at fire spot", format_time(record.time_arrival)),
            Slot("Time of action started", format_time(record.time_action_started)),
            Slot("Time of departure from fire spot", format_time(record.time_departure)),
        ),
        description_lines=description_lines(record.description),
        cause=record.cause,
        property_loss=record.property_loss,
        property_saved=record.property_saved,
        media_rows=_media_rows(record),
        rating_columns=_rating_columns(record.satisfaction_index),
        party_name=record.party_name,
        party_designation=record.party_designation,
        party_phone=record.party_phone,
        vehicle_no=record.vehicle_no,
        fire_fighting_in_charge=record.fire_fighting_in_charge,
        crew=tuple(record.crew()),
    )


def render_paper(record: IncidentRecord, config: ReportConfig | None = None) -> str:
    """Render the paper HTML fragment."""
    template = _jinja_env.get_template("paper.html")
    return template.render(
        paper=build_paper(record, config),
        page_width=PAGE_WIDTH_MM,
        page_height=PAGE_HEIGHT_MM,
    )


def render_document(
    record: IncidentRecord,
    config: ReportConfig | None = None,
    *,
    auto_print: bool = False,
) -> str:
    """Render the paper as a standalone A4 HTML document.

    Used by both print and PDF export; ``auto_print`` only adds the script
    that opens the browser's print dialog.
    """
    template = _jinja_env.get_template("document.html")
    return template.render(
        paper_html=render_paper(record, config),
        title=f"Fire Report {record.date_of_occurrence or 'draft'}",
        auto_print=auto_print,
    )
