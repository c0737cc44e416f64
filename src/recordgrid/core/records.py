"""
Record model - Heterogeneous key-value records and their composite values.

Records carry no fixed schema: every record may define a different subset
of fields. Values are either primitives or one of a closed set of composite
variants:

- RecordReference: pointer to another record (type, id, display name)
- ChoiceValue: option code with an optional label
- AmountValue: decimal amount with an optional currency marker
- AliasedValue: wrapper produced by aggregate/joined queries, tagged with
  the origin type and attribute of the inner value

unwrap() is the single place that knows how to reduce a composite value to
a primitive.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Optional, Tuple
from uuid import UUID

from ..config.i18n import t
from .errors import ValidationError


@dataclass(frozen=True)
class RecordReference:
    """Reference to another record."""
    type_name: str
    id: Optional[UUID] = None
    name: Optional[str] = None

    def __str__(self) -> str:
        return self.name or (str(self.id) if self.id else "")


@dataclass(frozen=True)
class ChoiceValue:
    """Option-set value: an integer code with an optional label."""
    value: int
    label: Optional[str] = None

    def __str__(self) -> str:
        return self.label or str(self.value)


@dataclass(frozen=True)
class AmountValue:
    """Monetary amount with an optional currency marker."""
    amount: Decimal
    currency: Optional[str] = None

    def __str__(self) -> str:
        return str(self.amount)


@dataclass(frozen=True)
class AliasedValue:
    """
    Value returned through an alias (aggregate or joined query).

    Attributes:
        type_name: Logical name of the entity the value originates from
        attribute_name: Attribute name on the origin entity
        value: The wrapped value (primitive or another composite)
    """
    type_name: str
    attribute_name: str
    value: Any

    def __str__(self) -> str:
        return str(self.value)


PRIMITIVE_TYPES = (str, int, float, Decimal, bool, datetime, UUID)

# Types whose raw value is meaningful on its own (sortable / alignable)
FRIENDLY_TYPES = (int, Decimal, float, str, AmountValue, datetime)


def is_friendly_typed(value: Any) -> bool:
    """Return True if the value keeps its own type when friendly names are off."""
    # bool is a subclass of int but is not a friendly type
    if isinstance(value, bool):
        return False
    return isinstance(value, FRIENDLY_TYPES)


def is_primitive(value: Any) -> bool:
    """Return True for plain (non-composite) values."""
    return isinstance(value, PRIMITIVE_TYPES)


def unwrap(value: Any) -> Any:
    """
    Reduce a value to its base primitive.

    - AliasedValue: unwrap the inner value
    - RecordReference: display name, or id when the name is empty
    - ChoiceValue: label, or code when the label is empty
    - AmountValue: the decimal amount
    - anything else is returned unchanged
    """
    if isinstance(value, AliasedValue):
        return unwrap(value.value)
    if isinstance(value, RecordReference):
        return value.name if value.name else value.id
    if isinstance(value, ChoiceValue):
        return value.label if value.label else value.value
    if isinstance(value, AmountValue):
        return value.amount
    return value


def inner_value_type(value: Any) -> Optional[type]:
    """Type of the innermost value, looking through aliases."""
    if isinstance(value, AliasedValue):
        return inner_value_type(value.value)
    return type(value) if value is not None else None


class Record(Mapping):
    """
    Immutable key-value record.

    A key present with a None value is kept but does not count as
    populated (see is_populated).
    """

    __slots__ = ("_type_name", "_id", "_attributes")

    def __init__(self, type_name: str = "", id: Optional[UUID] = None,
                 attributes: Optional[Mapping] = None):
        self._type_name = type_name or ""
        self._id = id
        self._attributes = MappingProxyType(dict(attributes or {}))

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def id(self) -> Optional[UUID]:
        return self._id

    @property
    def attributes(self) -> Mapping:
        return self._attributes

    def is_populated(self, key: str) -> bool:
        """Return True if the key is present with a non-None value."""
        return self._attributes.get(key) is not None

    def __getitem__(self, key: str) -> Any:
        return self._attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    # Records are entities: equality is identity
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"Record({self._type_name!r}, {self._id!r}, {dict(self._attributes)!r})"


class RecordCollection:
    """Named collection of records sharing one type."""

    def __init__(self, type_name: str, records: Iterable[Record] = ()):
        self.type_name = type_name or ""
        self.records: Tuple[Record, ...] = tuple(records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    def __repr__(self) -> str:
        return f"RecordCollection({self.type_name!r}, {len(self.records)} records)"


def record_type_names(records: Iterable[Record]) -> List[str]:
    """Distinct non-empty type names, in first-seen order."""
    names: List[str] = []
    for record in records:
        if record.type_name and record.type_name not in names:
            names.append(record.type_name)
    return names


def validate_single_type(records: Iterable[Record]) -> None:
    """Raise ValidationError if the records span more than one type."""
    names = record_type_names(records)
    if len(names) > 1:
        raise ValidationError(
            f"{t('error_mixed_types')} ({', '.join(names)})",
            type_names=names,
        )


def first_value(records: Iterable[Record], attribute: str) -> Any:
    """First non-None value of an attribute, or None."""
    for record in records:
        if record.is_populated(attribute):
            return record[attribute]
    return None


def distinct_keys(records: Iterable[Record]) -> List[str]:
    """Every field key across the records, in first-seen order."""
    seen = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)
