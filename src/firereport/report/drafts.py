"""Draft persistence: a single JSON blob plus a debounced autosaver.

When no draft path is configured, falls back to an in-memory entry for
local development and testing.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import ClassVar

from pydantic import ValidationError

from firereport.report.models import IncidentRecord

logger = logging.getLogger(__name__)


class DraftStore:
    """Load, save and clear the draft blob.

    ``load`` never raises on bad data: a corrupt blob is logged and treated
    as if nothing were stored, so the caller falls back to defaults.
    """

    # Shared in-memory entry across instances (persists for process lifetime)
    _memory: ClassVar[dict[str, str]] = {}
    _MEMORY_KEY = "fireReportDraft"

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is None:
            logger.warning("No draft directory configured, using in-memory draft store (dev only)")

    @property
    def in_memory(self) -> bool:
        return self.path is None

    def _read(self) -> str | None:
        if self.path is None:
            return self._memory.get(self._MEMORY_KEY)
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def load(self) -> IncidentRecord | None:
        """Load the stored draft.

        Returns:
            The stored record merged over defaults, or None if nothing usable
            is stored
        """
        try:
            raw = self._read()
        except OSError as exc:
            logger.error("Failed to read draft %s: %s", self.path, exc)
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Failed to load draft: %s", exc)
            return None

        if not isinstance(data, dict):
            logger.error("Failed to load draft: expected a JSON object, got %s", type(data).__name__)
            return None

        try:
            record = IncidentRecord.from_blob(data)
        except ValidationError as exc:
            logger.error("Failed to load draft: %d invalid field(s)", exc.error_count())
            return None

        logger.debug("Loaded draft from %s", self.path or "memory")
        return record

    def save(self, record: IncidentRecord) -> None:
        """Write the draft blob, replacing any previous one."""
        raw = json.dumps(record.to_blob())
        if self.path is None:
            self._memory[self._MEMORY_KEY] = raw
            logger.debug("Saved draft (in-memory)")
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".draft-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(raw)
            Path(tmp_name).replace(self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved draft to %s", self.path)

    def clear(self) -> None:
        """Remove the draft blob. A missing blob is not an error."""
        if self.path is None:
            self._memory.pop(self._MEMORY_KEY, None)
        else:
            self.path.unlink(missing_ok=True)
        logger.info("Cleared draft %s", self.path or "(in-memory)")


def load_record(drafts: DraftStore) -> IncidentRecord:
    """Load the stored draft, or a default record when there is none."""
    return drafts.load() or IncidentRecord()


class DraftAutosaver:
    """Debounced draft saves on the running asyncio loop.

    Each ``schedule`` call cancels the pending save and starts a fresh quiet
    period, so a burst of edits produces one save of the last record.
    ``save_now`` writes immediately and leaves the pending save in place;
    it will write the same latest record when it fires.
    """

    def __init__(self, drafts: DraftStore, delay: float = 1.0) -> None:
        self.drafts = drafts
        self.delay = delay
        self.last_saved_at: datetime | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether a deferred save is scheduled."""
        return self._handle is not None

    def schedule(self, record: IncidentRecord) -> None:
        """Save ``record`` once no newer record arrives within the quiet period."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, record)

    def save_now(self, record: IncidentRecord) -> datetime:
        """Save immediately, without waiting for the quiet period."""
        self.drafts.save(record)
        self.last_saved_at = datetime.now()
        logger.info("Draft saved")
        return self.last_saved_at

    def cancel(self) -> None:
        """Drop the pending save, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self) -> None:
        """Drop the pending save and forget the last save time."""
        self.cancel()
        self.last_saved_at = None

    def _fire(self, record: IncidentRecord) -> None:
        self._handle = None
        try:
            self.drafts.save(record)
        except OSError as exc:
            logger.error("Autosave failed: %s", exc)
            return
        self.last_saved_at = datetime.now()
        logger.debug("Draft autosaved")
