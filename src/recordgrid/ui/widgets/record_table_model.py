"""
Record Table Models.

QAbstractTableModel wrappers for what a RecordGridView displays:
- RecordTableModel: a MaterializedTable produced by the refresh pipeline
- DataFrameTableModel: a pandas DataFrame bound in passthrough mode

Only visible cells are rendered, so large record sets scroll smoothly.
"""
from typing import Any, List, Optional

import pandas as pd
from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex
from PySide6.QtGui import QFont

from ...constants import RECORD_COLUMN, SEQUENCE_COLUMN, TOOLTIP_MIN_LENGTH
from ...core.column_resolver import ColumnDefinition
from ...core.table_materializer import MaterializedTable
from ...core.value_format import Alignment, value_to_string

# Custom role giving access to the originating Record of a row
RecordRole = Qt.ItemDataRole.UserRole + 1

_ALIGN_RIGHT = Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
_ALIGN_LEFT = Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter


class RecordTableModel(QAbstractTableModel):
    """
    Read-only model over a MaterializedTable.

    Features:
    - #no column numbered 1..n
    - Alignment taken from the resolved column
    - Full value in tooltip for long cells
    - Optional underlined font for a hovered reference cell
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._table: Optional[MaterializedTable] = None
        self._columns: List[ColumnDefinition] = []
        self._underlined: Optional[tuple] = None

    def set_columns(self, columns: List[ColumnDefinition]) -> None:
        """Set the column definitions (drops any bound rows)."""
        self.beginResetModel()
        self._columns = list(columns)
        self._table = None
        self._underlined = None
        self.endResetModel()

    def set_table(self, table: MaterializedTable) -> None:
        """
        Set the table to display.

        Args:
            table: MaterializedTable (the model keeps this instance)
        """
        self.beginResetModel()
        self._table = table
        self._columns = list(table.columns)
        self._underlined = None
        self.endResetModel()

    def add_column(self, column: ColumnDefinition) -> None:
        """Append a column that has no data (layout placeholder)."""
        position = len(self._columns)
        self.beginInsertColumns(QModelIndex(), position, position)
        self._columns.append(column)
        self.endInsertColumns()

    def clear(self) -> None:
        """Clear the model data."""
        self.beginResetModel()
        self._table = None
        self._columns = []
        self._underlined = None
        self.endResetModel()

    @property
    def table(self) -> Optional[MaterializedTable]:
        return self._table

    @property
    def columns(self) -> List[ColumnDefinition]:
        return list(self._columns)

    def column_index(self, name: str) -> int:
        """Model column of a name, or -1."""
        for i, column in enumerate(self._columns):
            if column.name == name:
                return i
        return -1

    def column_name(self, index: int) -> str:
        if 0 <= index < len(self._columns):
            return self._columns[index].name
        return ""

    def record_at(self, row: int):
        return self._table.record_at(row) if self._table is not None else None

    def raw_value(self, row: int, column: int) -> Any:
        """Unformatted record value behind a cell."""
        record = self.record_at(row)
        name = self.column_name(column)
        if record is None or not name:
            return None
        return record.get(name)

    def set_underlined(self, row: int, column: int) -> None:
        """Underline one cell (row < 0 clears)."""
        previous = self._underlined
        self._underlined = (row, column) if row >= 0 else None
        for cell in (previous, self._underlined):
            if cell is not None:
                index = self.index(*cell)
                self.dataChanged.emit(index, index, [Qt.ItemDataRole.FontRole])

    # -------------------------------------------------------------------------
    # QAbstractTableModel interface
    # -------------------------------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        """Return number of rows."""
        if parent.isValid() or self._table is None:
            return 0
        return self._table.row_count

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        """Return number of columns."""
        if parent.isValid():
            return 0
        return len(self._columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        """Return data for the given index and role."""
        if not index.isValid() or self._table is None:
            return None

        row = index.row()
        col = index.column()
        if row < 0 or row >= self._table.row_count:
            return None
        if col < 0 or col >= len(self._columns):
            return None
        column = self._columns[col]

        if role == Qt.ItemDataRole.DisplayRole:
            if column.name == RECORD_COLUMN:
                return None
            return self._format_value(self._table.value_at(row, column.name), column)

        elif role == Qt.ItemDataRole.EditRole:
            return self._table.value_at(row, column.name)

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if column.alignment == Alignment.RIGHT:
                return _ALIGN_RIGHT
            return _ALIGN_LEFT

        elif role == Qt.ItemDataRole.ToolTipRole:
            # Show full value in tooltip for truncated cells
            text = self._format_value(self._table.value_at(row, column.name), column)
            if len(text) > TOOLTIP_MIN_LENGTH:
                return text

        elif role == Qt.ItemDataRole.FontRole:
            if self._underlined == (row, col):
                font = QFont()
                font.setUnderline(True)
                return font

        elif role == RecordRole:
            return self._table.record_at(row)

        return None

    def headerData(self, section: int, orientation: Qt.Orientation,
                   role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        """Return header data."""
        if role != Qt.ItemDataRole.DisplayRole:
            return None

        if orientation == Qt.Orientation.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section].caption
        else:
            return str(section + 1)

        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        """Return item flags (read-only)."""
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    def _format_value(self, value: Any, column: ColumnDefinition) -> str:
        """Format a cell value for display."""
        if value is None:
            return ""
        if column.name == SEQUENCE_COLUMN or isinstance(value, str):
            return str(value)
        return value_to_string(value, column.field_meta, column.format)


class DataFrameTableModel(QAbstractTableModel):
    """Read-only model for a DataFrame bound in passthrough mode."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._dataframe: Optional[pd.DataFrame] = None

    def set_dataframe(self, df: pd.DataFrame) -> None:
        self.beginResetModel()
        self._dataframe = df
        self.endResetModel()

    def clear(self) -> None:
        self.beginResetModel()
        self._dataframe = None
        self.endResetModel()

    @property
    def dataframe(self) -> Optional[pd.DataFrame]:
        return self._dataframe

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid() or self._dataframe is None:
            return 0
        return len(self._dataframe)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid() or self._dataframe is None:
            return 0
        return len(self._dataframe.columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or self._dataframe is None:
            return None
        value = self._dataframe.iat[index.row(), index.column()]
        if role == Qt.ItemDataRole.DisplayRole:
            if value is None or (isinstance(value, float) and pd.isna(value)):
                return ""
            return str(value)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if pd.api.types.is_number(value) and not pd.api.types.is_bool(value):
                return _ALIGN_RIGHT
            return _ALIGN_LEFT
        return None

    def headerData(self, section: int, orientation: Qt.Orientation,
                   role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if role != Qt.ItemDataRole.DisplayRole or self._dataframe is None:
            return None
        if orientation == Qt.Orientation.Horizontal:
            if 0 <= section < len(self._dataframe.columns):
                return str(self._dataframe.columns[section])
            return None
        return str(section + 1)

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
