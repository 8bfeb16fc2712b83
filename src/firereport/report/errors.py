"""Exceptions raised by the report components."""


class ReportError(Exception):
    """Base class for fire report errors."""


class UnknownFieldError(ReportError, KeyError):
    """Raised when an update names a field the record does not have."""

    def __init__(self, field: str):
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown report field: {self.field}"


class InvalidFieldValueError(ReportError, ValueError):
    """Raised when a value cannot be held by the field's type."""

    def __init__(self, field: str, value: object):
        super().__init__(f"Invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


class GenerationError(ReportError):
    """Raised when the AI narrative call fails or returns an unusable reply."""

    def __init__(self, message: str = "generation failed"):
        super().__init__(message)


class AidBusyError(ReportError):
    """Raised when a narrative generation is already in flight."""


class ResetNotConfirmedError(ReportError):
    """Raised when a reset is requested without explicit confirmation."""


class ExportError(ReportError):
    """Raised when the document converter fails."""
