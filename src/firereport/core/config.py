"""Configuration loading utilities."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DRAFT_FILENAME = "fireReportDraft.json"


@dataclass
class ReportConfig:
    """Report configuration loaded from config/report.json.

    Organization-specific header text lives here rather than in the
    templates, so a different site only edits the JSON file.
    """

    company_name: str = "Tata Steel Growth Shop"
    department: str = "Security Department"
    doc_ref: str = "TGS/SEC/03"
    format_label: str = "Official Report Format - SEC/03 v2.1"
    logo_url: str = ""
    autosave_delay: float = 1.0  # Quiet period in seconds
    draft_dir: str = ""  # Empty -> in-memory draft store

    @property
    def draft_path(self) -> Path | None:
        """Full path of the draft blob, or None for in-memory mode."""
        if not self.draft_dir:
            return None
        return Path(self.draft_dir).expanduser() / DRAFT_FILENAME


def get_project_root() -> Path:
    """Get the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Could not find project root (no pyproject.toml found)")


def load_report_config() -> ReportConfig:
    """Load report configuration from config file and environment.

    Environment variables:
        FIREREPORT_DRAFT_DIR: Directory holding the draft blob
        FIREREPORT_AUTOSAVE_DELAY: Quiet period before an autosave, in seconds

    Returns:
        ReportConfig with header text and draft settings
    """
    load_dotenv()

    config_data: dict = {}
    try:
        config_path = get_project_root() / "config" / "report.json"
    except RuntimeError:
        config_path = None

    if config_path and config_path.exists():
        with config_path.open() as f:
            config_data = json.load(f)
    else:
        logger.warning("No config/report.json found, using built-in report defaults")

    defaults = ReportConfig()
    config = ReportConfig(
        company_name=config_data.get("company_name", defaults.company_name),
        department=config_data.get("department", defaults.department),
        doc_ref=config_data.get("doc_ref", defaults.doc_ref),
        format_label=config_data.get("format_label", defaults.format_label),
        logo_url=config_data.get("logo_url", defaults.logo_url),
        autosave_delay=float(config_data.get("autosave_delay", defaults.autosave_delay)),
        draft_dir=config_data.get("draft_dir", defaults.draft_dir),
    )

    draft_dir = os.getenv("FIREREPORT_DRAFT_DIR")
    if draft_dir is not None:
        config.draft_dir = draft_dir

    delay = os.getenv("FIREREPORT_AUTOSAVE_DELAY")
    if delay:
        try:
            config.autosave_delay = float(delay)
        except ValueError:
            raise ValueError(
                f"FIREREPORT_AUTOSAVE_DELAY must be a number of seconds, got {delay!r}"
            ) from None

    return config


# Cached config instance
_report_config: ReportConfig | None = None


def get_report_config() -> ReportConfig:
    """Get cached report config.

    Loads config once and caches it for subsequent calls.
    """
    global _report_config
    if _report_config is None:
        _report_config = load_report_config()
    return _report_config
