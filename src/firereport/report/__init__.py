"""Fire incident report: record model, state, drafts, AI aid, preview and export."""

from firereport.report.controller import ReportController
from firereport.report.models import IncidentRecord, SatisfactionRating

__all__ = [
    "IncidentRecord",
    "ReportController",
    "SatisfactionRating",
]
