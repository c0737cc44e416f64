"""
Column Resolver - Determines the ordered set of columns to materialize.

Three sources are merged:
- designed columns declared up front by the caller (fixed schema)
- an explicit column order hint
- auto-discovery of every field key found in the records

Auto-discovered column sets always start with the row sequence (#no) and
identifier (#id) columns and end with the hidden full-record column
(#record), which is only used to recover the originating record for
interaction events.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from ..config.i18n import t
from ..constants import (
    ID_COLUMN, MILLISECOND_DATETIME_FORMAT, RECORD_COLUMN, SEQUENCE_COLUMN,
    SYNTHETIC_COLUMNS,
)
from .metadata import FieldMetadata, MetadataProvider, TypeMetadata
from .records import (
    AliasedValue, Record, first_value, distinct_keys, inner_value_type,
    record_type_names, unwrap, validate_single_type,
)
from .value_format import Alignment, alignment_for, display_type

logger = logging.getLogger(__name__)


@dataclass
class ColumnDefinition:
    """
    A column of the materialized table.

    Attributes:
        name: Record field key, or a synthetic column name
        value_type: Type values are displayed as (str when rendered as text)
        caption: Header text
        format: Optional format string (date-times)
        field_meta: Resolved field metadata, if any
        type_meta: Metadata of the aliased origin type, if any
        forced: Column shown even if no record populates it
        original_type: Type of the innermost sample value, kept when the
            display type was coerced to text
        alignment: Alignment hint for the sink
        visible: Initial visibility
    """
    name: str
    value_type: type = str
    caption: str = ""
    format: Optional[str] = None
    field_meta: Optional[FieldMetadata] = None
    type_meta: Optional[TypeMetadata] = None
    forced: bool = False
    original_type: Optional[type] = None
    alignment: Alignment = Alignment.LEFT
    visible: bool = True

    @property
    def is_synthetic(self) -> bool:
        return self.name in SYNTHETIC_COLUMNS


@dataclass
class DesignedColumn:
    """
    Column declared by the caller before any data is bound.

    Attributes:
        name: Column name in the sink
        caption: Header text (defaults to the name)
        data_property: Record field to display (defaults to the name)
        format: Optional format string
    """
    name: str
    caption: Optional[str] = None
    data_property: Optional[str] = None
    format: Optional[str] = None

    @property
    def attribute(self) -> str:
        return self.data_property or self.name


def sequence_column(visible: bool = True) -> ColumnDefinition:
    return ColumnDefinition(SEQUENCE_COLUMN, int, t("column_sequence"),
                            alignment=Alignment.RIGHT, visible=visible)


def id_column(visible: bool = True) -> ColumnDefinition:
    return ColumnDefinition(ID_COLUMN, UUID, t("column_id"), visible=visible)


def record_column() -> ColumnDefinition:
    return ColumnDefinition(RECORD_COLUMN, Record, RECORD_COLUMN, visible=False)


def _has_milliseconds(records: Sequence[Record], attribute: str) -> bool:
    for record in records:
        value = unwrap(record.get(attribute))
        if isinstance(value, datetime) and value.microsecond >= 1000:
            return True
    return False


class ColumnResolver:
    """
    Resolves column definitions for one refresh.

    Usage:
        resolver = ColumnResolver(records, "contact", metadata, friendly=True)
        columns = resolver.resolve(column_order=["fullname", "email"])
    """

    def __init__(self, records: Iterable[Record], type_name: Optional[str] = None,
                 metadata: Optional[MetadataProvider] = None,
                 friendly: bool = False, show_id_column: bool = True):
        """
        Initialize resolver.

        Args:
            records: Records to scan
            type_name: Shared record type (derived from records if None)
            metadata: Metadata lookup service (optional)
            friendly: Friendly names mode
            show_id_column: Whether the standard #id column is shown

        Raises:
            ValidationError: If the records span more than one type
        """
        self.records: List[Record] = list(records)
        validate_single_type(self.records)
        if type_name is None:
            names = record_type_names(self.records)
            type_name = names[0] if names else ""
        self.type_name = type_name
        self.metadata = metadata
        self.friendly = friendly
        self.show_id_column = show_id_column

    def resolve(self, designed_columns: Optional[Sequence[DesignedColumn]] = None,
                layout_active: bool = False, column_order: Sequence[str] = (),
                show_all_ordered: bool = False,
                show_unordered: bool = True) -> List[ColumnDefinition]:
        """
        Build the column definitions.

        Args:
            designed_columns: Caller-declared columns (used unless a layout is active)
            layout_active: A layout description overrides designed columns
            column_order: Attributes to show first, in this order
            show_all_ordered: Show ordered attributes even when no record has data
            show_unordered: Show attributes found in data but not in column_order

        Returns:
            Ordered list of ColumnDefinition
        """
        columns: List[ColumnDefinition] = []
        if designed_columns and not layout_active:
            self._populate_from_design(designed_columns, columns)
        else:
            columns.append(sequence_column())
            columns.append(id_column())
            column_order = list(column_order)
            attributes = list(column_order)
            if show_unordered or not column_order:
                attributes.extend(distinct_keys(self.records))
            for attribute in dict.fromkeys(attributes):
                force = attribute in column_order and (
                    show_all_ordered or any(r.is_populated(attribute) for r in self.records))
                self._add_column(columns, attribute, force)

        if not any(c.name == RECORD_COLUMN for c in columns):
            columns.append(record_column())

        logger.debug(f"Resolved {len(columns)} columns for '{self.type_name}' "
                     f"from {len(self.records)} records")
        return columns

    def _populate_from_design(self, designed_columns: Sequence[DesignedColumn],
                              columns: List[ColumnDefinition]):
        for designed in designed_columns:
            if designed.name == RECORD_COLUMN:
                continue
            column = self.create_column(designed.attribute, force=True)
            if designed.format:
                column.format = designed.format
            column.caption = designed.caption or designed.name
            label = self._localized_label(column.field_meta)
            if label:
                column.caption = label
            columns.append(column)

    def _add_column(self, columns: List[ColumnDefinition], attribute: str, force: bool):
        if any(c.name == attribute for c in columns):
            return
        column = self.create_column(attribute, force)
        if column is None:
            return

        meta = column.field_meta
        if meta is not None and meta.is_primary_id and (
                not force or (self.show_id_column and meta.logical_name == attribute)):
            # The standard #id column already shows the identifier. An aliased
            # identifier (different column name) is kept: aggregate queries
            # use it for values such as counts.
            return

        label = self._localized_label(meta)
        if label:
            column.caption = label
            if "." in attribute:
                if column.type_meta is not None and column.type_meta.display_name:
                    column.caption += f" ({column.type_meta.display_name})"
                else:
                    column.caption = f"{attribute.split('.')[0]} {column.caption}"
        else:
            column.caption = attribute
        columns.append(column)

    def _localized_label(self, meta: Optional[FieldMetadata]) -> Optional[str]:
        if self.friendly and meta is not None and meta.display_name:
            return meta.display_name
        return None

    def create_column(self, attribute: str, force: bool) -> Optional[ColumnDefinition]:
        """
        Create the definition for one attribute.

        Returns None when no record populates the attribute and it is not forced.
        """
        value = first_value(self.records, attribute)
        if value is None and not force:
            return None

        meta = None
        type_meta = None
        if self.metadata is not None:
            meta = self.metadata.get_field_meta(self.type_name, attribute, value)
            if isinstance(value, AliasedValue) and value.type_name:
                type_meta = self.metadata.get_type_meta(value.type_name)

        original_type = inner_value_type(value)
        fmt = None
        if meta is not None and meta.is_datetime and _has_milliseconds(self.records, attribute):
            fmt = MILLISECOND_DATETIME_FORMAT

        return ColumnDefinition(
            name=attribute,
            value_type=display_type(value, self.friendly),
            caption=attribute,
            format=fmt,
            field_meta=meta,
            type_meta=type_meta,
            forced=force,
            original_type=original_type,
            alignment=alignment_for(original_type or display_type(value, self.friendly),
                                    self.friendly),
        )


def resolve(records: Iterable[Record], type_name: Optional[str] = None,
            metadata: Optional[MetadataProvider] = None, *,
            designed_columns: Optional[Sequence[DesignedColumn]] = None,
            layout_active: bool = False, column_order: Sequence[str] = (),
            show_all_ordered: bool = False, show_unordered: bool = True,
            friendly: bool = False, show_id_column: bool = True) -> List[ColumnDefinition]:
    """
    Resolve the column definitions for a record set.

    Raises:
        ValidationError: If the records span more than one type
    """
    resolver = ColumnResolver(records, type_name, metadata,
                              friendly=friendly, show_id_column=show_id_column)
    return resolver.resolve(designed_columns=designed_columns,
                            layout_active=layout_active,
                            column_order=column_order,
                            show_all_ordered=show_all_ordered,
                            show_unordered=show_unordered)
