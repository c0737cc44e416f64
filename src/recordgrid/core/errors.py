"""
RecordGrid exception hierarchy.

Structural errors (bad input shape, mixed record types, missing service)
propagate to the caller and abort the current operation. Per-cell
formatting problems are represented by FormattingFault, which is reported
through a diagnostic callback rather than raised out of a refresh.
"""

from typing import Any, Optional

from ..config.i18n import t


class RecordGridError(Exception):
    """Base class for all RecordGrid errors."""


class ValidationError(RecordGridError):
    """Record collection failed validation (e.g. mixed record types)."""

    def __init__(self, message: str, type_names: Optional[list] = None):
        super().__init__(message)
        self.type_names = type_names or []


class ServiceUnavailableError(RecordGridError):
    """A fetch was requested but no record service is configured."""


class LayoutParseFault(RecordGridError):
    """Layout description could not be read. Never escapes parse_layout()."""


class FormattingFault(RecordGridError):
    """
    Formatting a single cell failed.

    Attributes:
        column: Name of the column being formatted
        record: Record the value belongs to
        value: Raw value that failed to format
        error: Underlying exception
    """

    def __init__(self, column: str, record: Any, value: Any, error: Exception):
        super().__init__(f"{t('fault_cell_format', column=column, value=repr(value))} ({error})")
        self.column = column
        self.record = record
        self.value = value
        self.error = error
