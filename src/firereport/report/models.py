"""Pydantic model for the fire incident report record.

The draft blob uses the camelCase keys of the browser form draft
(``docRef``, ``dateOfOccurrence``, ``deptCo2``...), so field aliases are
generated from the snake_case names. ``report_date`` is stored as ``date``.
"""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_DOC_REF = "TGS/SEC/03"


class SatisfactionRating(StrEnum):
    """Customer satisfaction index, ordered worst to best."""

    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    VERY_GOOD = "Very Good"
    EXCELLENT = "Excellent"

    @property
    def ordinal(self) -> int:
        """Zero-based column position on the paper."""
        return list(SatisfactionRating).index(self)


class Party(StrEnum):
    """Responding party that used extinguishing media."""

    DEPARTMENT = "dept"
    SECURITY = "sec"


class Media(StrEnum):
    """Extinguishing media, in paper column order."""

    WATER = "Water"
    FOAM = "FOAM"
    DCP = "DCP"
    CO2 = "CO2"


@dataclass(frozen=True)
class MediaFlag:
    """One checkbox on the paper: a party/media pair and its record field."""

    party: Party
    media: Media
    field: str


# Explicit party/media -> field table; rows in paper order.
MEDIA_FLAGS: tuple[MediaFlag, ...] = (
    MediaFlag(Party.DEPARTMENT, Media.WATER, "dept_water"),
    MediaFlag(Party.DEPARTMENT, Media.FOAM, "dept_foam"),
    MediaFlag(Party.DEPARTMENT, Media.DCP, "dept_dcp"),
    MediaFlag(Party.DEPARTMENT, Media.CO2, "dept_co2"),
    MediaFlag(Party.SECURITY, Media.WATER, "sec_water"),
    MediaFlag(Party.SECURITY, Media.FOAM, "sec_foam"),
    MediaFlag(Party.SECURITY, Media.DCP, "sec_dcp"),
    MediaFlag(Party.SECURITY, Media.CO2, "sec_co2"),
)

CREW_SLOTS: tuple[str, ...] = ("crew1", "crew2", "crew3", "crew4")


def media_field(party: Party, media: Media) -> str:
    """Look up the record field for a party/media pair."""
    for flag in MEDIA_FLAGS:
        if flag.party == party and flag.media == media:
            return flag.field
    raise KeyError((party, media))


def _today() -> str:
    return date.today().isoformat()


class IncidentRecord(BaseModel):
    """All fields of one fire incident report.

    Every field has a default so the record is always fully populated.
    Dates (``YYYY-MM-DD``) and times (``HH:MM``) are kept as the raw text
    the form submitted; nothing checks their ordering or format.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Identity / control
    doc_ref: str = DEFAULT_DOC_REF
    report_date: str = Field(default_factory=_today, alias="date")

    # Timeline
    date_of_occurrence: str = ""
    time_info_received: str = ""
    time_arrival: str = ""
    time_action_started: str = ""
    time_departure: str = ""

    # Narrative
    description: str = ""  # May hold one line break (two paper lines)
    cause: str = ""

    # Loss accounting (free text)
    property_loss: str = ""
    property_saved: str = ""

    # Extinguishing media -- see MEDIA_FLAGS
    dept_water: bool = False
    dept_foam: bool = False
    dept_dcp: bool = False
    dept_co2: bool = False
    sec_water: bool = False
    sec_foam: bool = False
    sec_dcp: bool = False
    sec_co2: bool = False

    satisfaction_index: SatisfactionRating | None = None

    # Party contact
    party_name: str = ""
    party_designation: str = ""
    party_phone: str = ""

    # Office use
    vehicle_no: str = ""
    fire_fighting_in_charge: str = ""
    crew1: str = ""
    crew2: str = ""
    crew3: str = ""
    crew4: str = ""

    @field_validator("satisfaction_index", mode="before")
    @classmethod
    def _blank_rating_is_unset(cls, value: object) -> object:
        if value == "":
            return None
        return value

    def media_used(self, flag: MediaFlag) -> bool:
        """Whether the checkbox for ``flag`` is ticked."""
        return getattr(self, flag.field)

    def crew(self) -> list[str]:
        """Crew slot values in paper order."""
        return [getattr(self, slot) for slot in CREW_SLOTS]

    def to_blob(self) -> dict:
        """Serialize for the draft blob (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_blob(cls, data: dict) -> Self:
        """Deserialize a draft blob, filling missing fields with defaults."""
        return cls.model_validate(data)


def resolve_field_name(name: str) -> str | None:
    """Map a python field name or blob alias to the python field name."""
    fields = IncidentRecord.model_fields
    if name in fields:
        return name
    for field_name, info in fields.items():
        if info.alias == name:
            return field_name
    return None


_adapters: dict[str, TypeAdapter] = {}


def coerce_field_value(field: str, value: object) -> object:
    """Coerce a raw input value to the type of ``field``.

    Form posts arrive as text, so ``"on"``/``"true"`` become ``True`` for
    the media flags and ``""`` clears the satisfaction rating.

    Raises:
        pydantic.ValidationError: If the field's type cannot hold the value
    """
    if field == "satisfaction_index" and value == "":
        value = None
    adapter = _adapters.get(field)
    if adapter is None:
        adapter = TypeAdapter(IncidentRecord.model_fields[field].annotation)
        _adapters[field] = adapter
    return adapter.validate_python(value)
