"""
Value coercion and formatting.

Maps a raw record value to the type a column displays it as, and to the
value placed in the materialized table:

- friendly mode off: values keep a typed, sortable form (numbers stay
  numbers, amounts become Decimal, composites are unwrapped)
- friendly mode on: everything is rendered as human-readable text using
  metadata labels and format strings

Null values always map to None, never to a "null" string.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from ..config.i18n import t
from ..constants import DEFAULT_DATETIME_FORMAT
from .metadata import FieldMetadata
from .records import (
    AliasedValue, AmountValue, ChoiceValue, RecordReference,
    is_friendly_typed, is_primitive, unwrap,
)


class Alignment(Enum):
    """Horizontal cell alignment hint for the sink."""
    LEFT = "left"
    RIGHT = "right"


_RIGHT_ALIGNED_TYPES = (int, float, Decimal, AmountValue)


def display_type(value: Any, friendly: bool) -> type:
    """
    Type a column displays the value as.

    Args:
        value: Sample value (may be None)
        friendly: True when friendly names are shown

    Returns:
        A Python type; str when the value is rendered as text
    """
    if value is None or friendly:
        return str
    base = unwrap(value)
    if is_friendly_typed(value) or is_primitive(base):
        return type(base)
    return str


def alignment_for(value_type: Optional[type], friendly: bool) -> Alignment:
    """Numbers, amounts and (raw) choice codes are right-aligned."""
    if value_type is None or value_type is bool:
        return Alignment.LEFT
    if issubclass(value_type, _RIGHT_ALIGNED_TYPES):
        return Alignment.RIGHT
    if issubclass(value_type, ChoiceValue) and not friendly:
        return Alignment.RIGHT
    return Alignment.LEFT


def is_utc(value: datetime) -> bool:
    """True if the date-time is timezone-aware with a zero UTC offset."""
    return value.tzinfo is not None and value.utcoffset() == timedelta(0)


def to_local_time(value: Any) -> Any:
    """
    Convert a UTC date-time (possibly wrapped in an alias) to local time.

    Non-UTC and naive date-times and non-temporal values are returned as-is.
    """
    base = unwrap(value)
    if isinstance(base, datetime) and is_utc(base):
        return base.astimezone()
    return value


def format_datetime(value: datetime, fmt: Optional[str] = None) -> str:
    """
    Format a date-time with strftime directives.

    The "%3f" token renders milliseconds (three digits).
    """
    fmt = fmt or DEFAULT_DATETIME_FORMAT
    if "%3f" in fmt:
        fmt = fmt.replace("%3f", f"{value.microsecond // 1000:03d}")
    return value.strftime(fmt)


def format_amount(value: AmountValue) -> str:
    """Currency-formatted amount."""
    text = f"{value.amount:,.2f}"
    if value.currency:
        text = f"{text} {value.currency}"
    return text


def value_to_string(value: Any, meta: Optional[FieldMetadata] = None,
                    fmt: Optional[str] = None) -> str:
    """
    Metadata-aware stringification of a value.

    Args:
        value: Raw value
        meta: Field metadata (option labels for choices)
        fmt: Format string for date-times

    Returns:
        Display text ("" for None)
    """
    if value is None:
        return ""
    if isinstance(value, AliasedValue):
        return value_to_string(value.value, meta, fmt)
    if isinstance(value, RecordReference):
        return str(value)
    if isinstance(value, ChoiceValue):
        label = meta.option_label(value.value) if meta is not None else None
        return label or str(value)
    if isinstance(value, AmountValue):
        return format_amount(value)
    if isinstance(value, datetime):
        return format_datetime(value, fmt)
    if isinstance(value, bool):
        return t("value_yes") if value else t("value_no")
    if isinstance(value, UUID):
        return str(value)
    return str(value)


def format_value(value: Any, meta: Optional[FieldMetadata] = None,
                 fmt: Optional[str] = None, friendly: bool = False,
                 local_times: bool = False) -> Any:
    """
    Value placed in a materialized table cell.

    Args:
        value: Raw record value
        meta: Field metadata of the column
        fmt: Column format string
        friendly: Render as text using labels and formats
        local_times: Convert UTC date-times to local time first

    Returns:
        None for null values, text in friendly mode, the unwrapped base value
        otherwise
    """
    if value is None:
        return None
    if local_times:
        value = to_local_time(value)
    if friendly:
        return value_to_string(value, meta, fmt)
    return unwrap(value)
