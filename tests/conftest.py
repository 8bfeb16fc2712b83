"""Shared pytest fixtures."""

from unittest.mock import MagicMock

import pytest

from firereport.core.config import ReportConfig
from firereport.report.drafts import DraftStore
from firereport.report.models import IncidentRecord


@pytest.fixture(autouse=True)
def _clear_draft_memory():
    """Reset the in-memory draft entry between tests."""
    DraftStore._memory.clear()
    yield
    DraftStore._memory.clear()


@pytest.fixture
def report_config():
    """Report config with no logo and no draft directory."""
    return ReportConfig(logo_url="", draft_dir="", autosave_delay=0.05)


@pytest.fixture
def draft_path(tmp_path):
    """Path of a draft blob in a temporary directory."""
    return tmp_path / "drafts" / "fireReportDraft.json"


@pytest.fixture
def sample_record():
    """A filled-in report."""
    return IncidentRecord(
        doc_ref="TGS/SEC/03",
        report_date="2024-03-08",
        date_of_occurrence="2024-03-07",
        time_info_received="00:05",
        time_arrival="00:15",
        time_action_started="12:00",
        time_departure="13:30",
        description="Cable tray fire in the electrical room.\nContained within ten minutes.",
        cause="Short circuit in an overloaded cable.",
        property_loss="Cable tray section",
        property_saved="Switchgear panel",
        dept_water=True,
        sec_co2=True,
        satisfaction_index="Very Good",
        party_name="R. Kumar",
        party_designation="Shift Engineer",
        party_phone="9876543210",
        vehicle_no="JH05-1234",
        fire_fighting_in_charge="S. Das",
        crew1="A. Singh",
        crew2="B. Roy",
    )


@pytest.fixture
def mock_anthropic_client():
    """Mock AsyncAnthropic client; set ``messages.create`` per test."""
    client = MagicMock()
    return client
