"""PDF export of the rendered paper.

The conversion itself is an injected callable so the rest of the app does
not depend on WeasyPrint's native libraries being installed; the default
converter imports WeasyPrint on first use.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from firereport.report.errors import ExportError
from firereport.report.models import IncidentRecord

logger = logging.getLogger(__name__)

CSS_PX_PER_INCH = 96


@dataclass(frozen=True)
class ExportOptions:
    """Page geometry and raster settings for the exported document."""

    margins_mm: tuple[float, float, float, float] = (0, 0, 0, 0)  # top, right, bottom, left
    page_format: str = "A4"
    orientation: str = "portrait"
    unit: str = "mm"
    image_quality: float = 0.98
    scale: int = 2

    @property
    def page_css(self) -> str:
        """``@page`` rule matching the geometry."""
        margins = " ".join(f"{m}{self.unit}" for m in self.margins_mm)
        return f"@page {{ size: {self.page_format} {self.orientation}; margin: {margins}; }}"

    @property
    def jpeg_quality(self) -> int:
        return round(self.image_quality * 100)

    @property
    def dpi(self) -> int:
        return CSS_PX_PER_INCH * self.scale


Converter = Callable[[str, ExportOptions], bytes]


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    content: bytes
    media_type: str = "application/pdf"


def pdf_filename(seed: str) -> str:
    """Download name: ``Fire_Report_<seed or "draft">.pdf``."""
    return f"Fire_Report_{seed or 'draft'}.pdf"


def export_filename(record: IncidentRecord) -> str:
    """Download name for a record, seeded by its occurrence date."""
    return pdf_filename(record.date_of_occurrence)


def weasyprint_convert(html: str, options: ExportOptions) -> bytes:
    """Convert an HTML document to PDF bytes with WeasyPrint."""
    from weasyprint import CSS, HTML

    return HTML(string=html).write_pdf(
        stylesheets=[CSS(string=options.page_css)],
        jpeg_quality=options.jpeg_quality,
        dpi=options.dpi,
    )


class PdfExporter:
    """Turn the rendered paper document into a downloadable PDF."""

    def __init__(
        self,
        converter: Converter | None = None,
        options: ExportOptions | None = None,
    ) -> None:
        self.converter = converter or weasyprint_convert
        self.options = options or ExportOptions()

    def export_pdf(self, html: str, filename_seed: str) -> ExportedDocument:
        """Convert ``html`` and name the file from ``filename_seed``.

        Args:
            html: Standalone paper document (see ``render_document``)
            filename_seed: Occurrence date, or empty for a draft

        Raises:
            ExportError: If the converter fails
        """
        filename = pdf_filename(filename_seed)
        try:
            content = self.converter(html, self.options)
        except Exception as exc:
            logger.error("PDF export failed for %s: %s: %s", filename, type(exc).__name__, exc)
            raise ExportError(f"Could not export {filename}") from exc

        logger.info("Exported %s (%d bytes)", filename, len(content))
        return ExportedDocument(filename=filename, content=content)
