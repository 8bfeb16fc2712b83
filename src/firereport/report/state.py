"""In-process state for the report being edited.

The store owns exactly one immutable ``IncidentRecord``. Every change swaps
in a complete new record, so readers never see a half-applied update.
"""

import logging
from collections.abc import Callable

from pydantic import ValidationError

from firereport.report.errors import InvalidFieldValueError, UnknownFieldError
from firereport.report.models import IncidentRecord, coerce_field_value, resolve_field_name

logger = logging.getLogger(__name__)

Listener = Callable[[IncidentRecord], None]


class FormStateStore:
    """Single source of truth for the report fields.

    Usage::

        store = FormStateStore()
        store.subscribe(autosaver.schedule)
        store.update("timeArrival", "14:05")
    """

    def __init__(self, record: IncidentRecord | None = None) -> None:
        self._record = record if record is not None else IncidentRecord()
        self._listeners: list[Listener] = []

    def get(self) -> IncidentRecord:
        """Return the current record."""
        return self._record

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with the new record after every change."""
        self._listeners.append(listener)

    def update(self, field: str, value: object) -> IncidentRecord:
        """Replace exactly one field, leaving every other field untouched.

        Args:
            field: Python field name (``time_arrival``) or blob key (``timeArrival``)
            value: New value; coerced to the field type, never business-validated

        Raises:
            UnknownFieldError: If the record has no such field
            InvalidFieldValueError: If the field type cannot hold the value
        """
        name = resolve_field_name(field)
        if name is None:
            raise UnknownFieldError(field)

        try:
            coerced = coerce_field_value(name, value)
        except ValidationError as exc:
            raise InvalidFieldValueError(name, value) from exc

        logger.debug("Field %s updated", name)
        return self._replace(self._record.model_copy(update={name: coerced}))

    def replace_narrative(self, description: str, cause: str) -> IncidentRecord:
        """Replace description and cause together (AI aid result)."""
        return self._replace(
            self._record.model_copy(update={"description": description, "cause": cause})
        )

    def reset(self) -> IncidentRecord:
        """Restore every field to its default."""
        logger.info("Report form reset to defaults")
        return self._replace(IncidentRecord())

    def _replace(self, record: IncidentRecord) -> IncidentRecord:
        self._record = record
        for listener in self._listeners:
            listener(record)
        return record
