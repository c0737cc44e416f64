"""
Table Materializer - Turns records and resolved columns into a table.

One row per record that passes the row filter. Each row maps a column name
to its cell value; None is the null marker. The sequence column (#no) is
not stored: sinks number rows themselves.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..constants import ID_COLUMN, RECORD_COLUMN, SEQUENCE_COLUMN
from .column_resolver import ColumnDefinition
from .errors import FormattingFault
from .records import Record
from .value_format import format_value

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
FaultCallback = Callable[[FormattingFault], None]


@dataclass
class MaterializedTable:
    """
    Ordered columns and rows of one refresh.

    Attributes:
        columns: Column definitions, in resolved order
        rows: One dict per displayed record (column name -> value or None)
    """
    columns: List[ColumnDefinition] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> Optional[ColumnDefinition]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def record_at(self, row: int) -> Optional[Record]:
        """Originating record of a row, or None when out of range."""
        if 0 <= row < len(self.rows):
            return self.rows[row].get(RECORD_COLUMN)
        return None

    def value_at(self, row: int, column: str) -> Any:
        if column == SEQUENCE_COLUMN:
            return row + 1
        return self.rows[row].get(column)

    def copy(self) -> "MaterializedTable":
        """Shallow copy with its own column and row lists."""
        return MaterializedTable(list(self.columns), [dict(r) for r in self.rows])

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert to a pandas DataFrame.

        The sequence column is filled 1..n and the record column is dropped.
        All columns use object dtype so nulls stay None.
        """
        names = [n for n in self.column_names if n != RECORD_COLUMN]
        data = {}
        for name in names:
            if name == SEQUENCE_COLUMN:
                data[name] = list(range(1, len(self.rows) + 1))
            else:
                data[name] = [row.get(name) for row in self.rows]
        return pd.DataFrame(data, columns=names, dtype=object)


def _cell_value(record: Record, column: ColumnDefinition, friendly: bool,
                local_times: bool, on_fault: Optional[FaultCallback]) -> Any:
    if column.name == ID_COLUMN:
        return record.id
    if column.name == RECORD_COLUMN:
        return record

    raw = record.get(column.name)
    if raw is None:
        return None
    try:
        return format_value(raw, column.field_meta, column.format,
                            friendly=friendly, local_times=local_times)
    except Exception as e:
        fault = FormattingFault(column.name, record, raw, e)
        logger.warning(str(fault))
        if on_fault is not None:
            on_fault(fault)
        try:
            return str(raw)
        except Exception:
            return None


def _filter_string(value: Any) -> str:
    if value is None or isinstance(value, Record):
        return ""
    return str(value).lower()


def row_matches(row: Row, filter_text: Optional[str],
                filter_columns: Optional[Sequence[str]] = None) -> bool:
    """
    Row filter predicate.

    Args:
        row: Materialized row
        filter_text: Text to look for (case-insensitive); empty keeps every row
        filter_columns: Column names to search (all columns when empty)

    Returns:
        True if the row is kept
    """
    if not filter_text:
        return True
    needle = filter_text.lower()
    wanted = {c.lower() for c in filter_columns} if filter_columns else None
    for name, value in row.items():
        if wanted is not None and name.lower() not in wanted:
            continue
        if needle in _filter_string(value):
            return True
    return False


def materialize(records: Iterable[Record], columns: Sequence[ColumnDefinition], *,
                filter_text: Optional[str] = None,
                filter_columns: Optional[Sequence[str]] = None,
                friendly: bool = False, local_times: bool = False,
                on_fault: Optional[FaultCallback] = None) -> MaterializedTable:
    """
    Build the table for a record set.

    Args:
        records: Records to materialize
        columns: Resolved columns
        filter_text: Row filter text
        filter_columns: Columns the filter looks at
        friendly: Render values as friendly text
        local_times: Convert UTC date-times to local time
        on_fault: Called with a FormattingFault for each cell that failed

    Returns:
        MaterializedTable
    """
    columns = list(columns)
    rows: List[Row] = []
    total = 0
    for record in records:
        total += 1
        row: Row = {}
        for column in columns:
            if column.name == SEQUENCE_COLUMN:
                continue
            row[column.name] = _cell_value(record, column, friendly, local_times, on_fault)
        if row_matches(row, filter_text, filter_columns):
            rows.append(row)

    if filter_text:
        logger.debug(f"Filter '{filter_text}' kept {len(rows)} of {total} rows")
    return MaterializedTable(columns, rows)
