"""Core utilities for the fire incident report app."""

from firereport.core.config import ReportConfig, get_report_config, load_report_config

__all__ = [
    "ReportConfig",
    "get_report_config",
    "load_report_config",
]
