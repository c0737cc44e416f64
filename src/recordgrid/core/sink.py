"""
Grid sink - The display surface the pipeline binds to.

The controller never touches widgets directly. It talks to a GridSink,
which the Qt view implements (ui.widgets.record_grid_view) and which
MemoryGridSink implements headlessly for scripts and tests.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence

from ..constants import DEFAULT_COLUMN_WIDTH
from .column_resolver import ColumnDefinition
from .table_materializer import MaterializedTable


@dataclass
class SinkColumn:
    """Presentation state of one sink column."""
    name: str
    caption: str
    display_index: int
    width: int = DEFAULT_COLUMN_WIDTH
    visible: bool = True


class GridSink(Protocol):
    """Operations the controller and the layout reconciler need from a sink."""

    def set_columns(self, columns: Sequence[ColumnDefinition]) -> None: ...

    def set_rows(self, table: MaterializedTable) -> None: ...

    def get_columns(self) -> List[SinkColumn]: ...

    def add_column(self, name: str, caption: str) -> None: ...

    def move_column(self, name: str, display_index: int) -> None: ...

    def set_column_width(self, name: str, width: int) -> None: ...

    def set_column_visible(self, name: str, visible: bool) -> None: ...

    def set_passthrough(self, value: Any) -> None: ...

    def clear(self) -> None: ...


class MemoryGridSink:
    """
    In-memory GridSink.

    Keeps the bound table plus per-column presentation state. Display
    indexes behave like a header: moving a column shifts the others.
    """

    def __init__(self):
        self.table: Optional[MaterializedTable] = None
        self.passthrough: Any = None
        self._columns: List[SinkColumn] = []

    def set_columns(self, columns: Sequence[ColumnDefinition]) -> None:
        self._columns = [
            SinkColumn(c.name, c.caption, i, visible=c.visible)
            for i, c in enumerate(columns)
        ]
        self.passthrough = None

    def set_rows(self, table: MaterializedTable) -> None:
        self.table = table

    def get_columns(self) -> List[SinkColumn]:
        return sorted(self._columns, key=lambda c: c.display_index)

    def find_column(self, name: str) -> Optional[SinkColumn]:
        for column in self._columns:
            if column.name == name:
                return column
        return None

    def add_column(self, name: str, caption: str) -> None:
        if self.find_column(name) is None:
            self._columns.append(SinkColumn(name, caption, len(self._columns)))

    def move_column(self, name: str, display_index: int) -> None:
        column = self.find_column(name)
        if column is None:
            return
        ordered = self.get_columns()
        ordered.remove(column)
        display_index = max(0, min(display_index, len(ordered)))
        ordered.insert(display_index, column)
        for i, c in enumerate(ordered):
            c.display_index = i

    def set_column_width(self, name: str, width: int) -> None:
        column = self.find_column(name)
        if column is not None:
            column.width = width

    def set_column_visible(self, name: str, visible: bool) -> None:
        column = self.find_column(name)
        if column is not None:
            column.visible = visible

    def set_passthrough(self, value: Any) -> None:
        self.table = None
        self._columns = []
        self.passthrough = value

    def clear(self) -> None:
        self.table = None
        self.passthrough = None
        self._columns = []

    # Convenience accessors

    @property
    def visible_column_names(self) -> List[str]:
        return [c.name for c in self.get_columns() if c.visible]

    @property
    def row_count(self) -> int:
        return self.table.row_count if self.table is not None else 0
