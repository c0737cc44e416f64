"""
Core module - The record-to-table pipeline, free of any widget toolkit.

Pipeline:
    records (+ metadata)
           ↓
    column_resolver.py → ColumnDefinition list
           ↓
    table_materializer.py → MaterializedTable (→ pandas DataFrame)
           ↓
    sink.py (GridSink) ← layout.py (order, widths, visibility)

record_grid.py (RecordGrid) drives one pass per refresh.
"""

from .errors import (
    RecordGridError,
    ValidationError,
    ServiceUnavailableError,
    LayoutParseFault,
    FormattingFault,
)

from .records import (
    Record,
    RecordCollection,
    RecordReference,
    ChoiceValue,
    AmountValue,
    AliasedValue,
    unwrap,
)

from .metadata import (
    FieldKind,
    FieldMetadata,
    TypeMetadata,
    MetadataProvider,
    StaticMetadataProvider,
    CachedMetadataProvider,
)

from .value_format import Alignment, display_type, format_value, value_to_string

from .column_resolver import ColumnDefinition, DesignedColumn, ColumnResolver, resolve

from .table_materializer import MaterializedTable, materialize

from .sink import GridSink, SinkColumn, MemoryGridSink

from .layout import LayoutCell, parse_layout, apply_layout, arrange_columns

from .record_grid import RecordGrid, RecordEventArgs, RecordService

__all__ = [
    # Errors
    "RecordGridError",
    "ValidationError",
    "ServiceUnavailableError",
    "LayoutParseFault",
    "FormattingFault",
    # Records
    "Record",
    "RecordCollection",
    "RecordReference",
    "ChoiceValue",
    "AmountValue",
    "AliasedValue",
    "unwrap",
    # Metadata
    "FieldKind",
    "FieldMetadata",
    "TypeMetadata",
    "MetadataProvider",
    "StaticMetadataProvider",
    "CachedMetadataProvider",
    # Formatting
    "Alignment",
    "display_type",
    "format_value",
    "value_to_string",
    # Pipeline
    "ColumnDefinition",
    "DesignedColumn",
    "ColumnResolver",
    "resolve",
    "MaterializedTable",
    "materialize",
    "GridSink",
    "SinkColumn",
    "MemoryGridSink",
    "LayoutCell",
    "parse_layout",
    "apply_layout",
    "arrange_columns",
    "RecordGrid",
    "RecordEventArgs",
    "RecordService",
]
