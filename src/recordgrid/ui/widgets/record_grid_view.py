"""
Record Grid View - QTableView that displays records through a RecordGrid.

The view is the GridSink of its own RecordGrid controller: the controller
resolves and materializes, the view shows the result and turns mouse and
keyboard interaction into record events.

Supports two modes:
- Record mode: data_source is a RecordCollection or a list of Record
- Passthrough mode: anything else (e.g. a DataFrame) is shown as-is
"""

import logging
from typing import Any, List, Optional, Sequence

import pandas as pd
from PySide6.QtCore import Qt, QModelIndex, Signal
from PySide6.QtWidgets import QAbstractItemView, QHeaderView, QTableView, QWidget

from ...constants import AUTOSIZE_ROW_LIMIT, DEFAULT_ROW_HEIGHT, MAX_COLUMN_WIDTH
from ...core.column_resolver import ColumnDefinition, DesignedColumn
from ...core.errors import ServiceUnavailableError
from ...core.metadata import MetadataProvider
from ...core.record_grid import RecordEventArgs, RecordGrid, RecordService
from ...core.records import AliasedValue, Record, RecordReference
from ...core.sink import SinkColumn
from ...core.table_materializer import MaterializedTable
from ...config.i18n import t
from ...utils.owner_thread import OwnerThreadInvoker
from ..workers.fetch_worker import RecordFetchWorker
from .record_table_model import DataFrameTableModel, RecordTableModel

logger = logging.getLogger(__name__)


class RecordGridView(QTableView):
    """
    Record grid widget.

    Signals:
        record_click(RecordEventArgs): Cell or empty area clicked
        record_double_click(RecordEventArgs): Cell double-clicked
        record_enter(RecordEventArgs): Current cell entered
        record_leave(RecordEventArgs): Current cell left
        record_mouse_enter(RecordEventArgs): Mouse moved onto a cell
        record_mouse_leave(RecordEventArgs): Mouse moved off a cell
        formatting_fault(FormattingFault): A cell could not be formatted
        loading_error(str): Background fetch failed
    """

    record_click = Signal(object)
    record_double_click = Signal(object)
    record_enter = Signal(object)
    record_leave = Signal(object)
    record_mouse_enter = Signal(object)
    record_mouse_leave = Signal(object)
    formatting_fault = Signal(object)
    loading_error = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None,
                 metadata: Optional[MetadataProvider] = None,
                 service: Optional[RecordService] = None,
                 designed_columns: Optional[Sequence[DesignedColumn]] = None):
        """
        Initialize record grid view.

        Args:
            parent: Parent widget (optional)
            metadata: Metadata lookup service (optional)
            service: Remote record source (optional)
            designed_columns: Fixed schema declared up front (optional)
        """
        super().__init__(parent)
        self._record_model = RecordTableModel(self)
        self._frame_model = DataFrameTableModel(self)
        self._hovered: Optional[QModelIndex] = None
        self._fetch_workers: List[RecordFetchWorker] = []
        self._fetch_generation = 0
        self._setup_ui()

        self.invoker = OwnerThreadInvoker(self)
        self.grid = RecordGrid(
            self, metadata=metadata, service=service, invoker=self.invoker,
            diagnostic=self.formatting_fault.emit, designed_columns=designed_columns,
        )

    def _setup_ui(self):
        """Setup view behavior."""
        self.setModel(self._record_model)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setAlternatingRowColors(True)
        self.setMouseTracking(True)
        self.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        self.horizontalHeader().setSectionsMovable(True)
        self.verticalHeader().setVisible(False)
        self.verticalHeader().setDefaultSectionSize(DEFAULT_ROW_HEIGHT)

        self.clicked.connect(self._on_clicked)
        self.doubleClicked.connect(self._on_double_clicked)
        self.entered.connect(self._on_entered)
        self.selectionModel().currentChanged.connect(self._on_current_changed)

    # -------------------------------------------------------------------------
    # Controller shortcuts
    # -------------------------------------------------------------------------

    @property
    def data_source(self) -> Any:
        return self.grid.data_source

    @data_source.setter
    def data_source(self, value: Any):
        self.grid.data_source = value

    def set_data_source_from_query(self, query: str, layout_xml: Optional[str] = None):
        """Fetch synchronously and bind (see RecordGrid.set_data_source_from_query)."""
        self.grid.set_data_source_from_query(query, layout_xml)

    def load_query_async(self, query: str, layout_xml: Optional[str] = None):
        """
        Fetch in a background thread and bind the result on this thread.

        Each call supersedes the previous ones: results of older fetches
        still running are dropped when they arrive.

        Raises:
            ServiceUnavailableError: If no service is set
        """
        if self.grid.service is None:
            raise ServiceUnavailableError(t("error_no_service"))
        if not query:
            return
        self._prune_fetch_workers()
        self._fetch_generation += 1
        logger.info(t("status_loading"))
        worker = RecordFetchWorker(self.grid.service, query, layout_xml, self._fetch_generation)
        worker.records_loaded.connect(self._on_records_loaded)
        worker.loading_error.connect(self._on_loading_error)
        worker.finished.connect(self._prune_fetch_workers)
        self._fetch_workers.append(worker)
        worker.start()

    def _on_records_loaded(self, result: Any, layout_xml: Optional[str], generation: int):
        if generation != self._fetch_generation:
            logger.debug(f"Dropping superseded fetch result #{generation}")
            return
        self.grid.apply_fetch_result(result, layout_xml)
        logger.info(t("status_rows", count=self._record_model.rowCount()))

    def _on_loading_error(self, message: str, generation: int):
        if generation == self._fetch_generation:
            self.loading_error.emit(message)

    def _prune_fetch_workers(self):
        self._fetch_workers = [w for w in self._fetch_workers if not w.isFinished()]

    def selected_row_records(self) -> Optional[List[Record]]:
        """Records of the selected rows, in row order."""
        rows = [index.row() for index in self.selectionModel().selectedRows()]
        return self.grid.selected_records(rows)

    def selected_cell_records(self) -> Optional[List[Record]]:
        """Records of every row with a selected cell."""
        rows = [index.row() for index in self.selectionModel().selectedIndexes()]
        return self.grid.selected_records(rows)

    # -------------------------------------------------------------------------
    # GridSink interface
    # -------------------------------------------------------------------------

    def set_columns(self, columns: Sequence[ColumnDefinition]) -> None:
        self._use_model(self._record_model)
        self._record_model.set_columns(list(columns))
        header = self.horizontalHeader()
        for logical, column in enumerate(columns):
            visual = header.visualIndex(logical)
            if visual != logical:
                header.moveSection(visual, logical)
            self.setColumnHidden(logical, not column.visible)

    def set_rows(self, table: MaterializedTable) -> None:
        self._record_model.set_table(table)
        for logical, column in enumerate(table.columns):
            self.setColumnHidden(logical, not column.visible)
        if table.row_count <= AUTOSIZE_ROW_LIMIT:
            self.resizeColumnsToContents()
            for logical in range(len(table.columns)):
                if self.columnWidth(logical) > MAX_COLUMN_WIDTH:
                    self.setColumnWidth(logical, MAX_COLUMN_WIDTH)

    def get_columns(self) -> List[SinkColumn]:
        header = self.horizontalHeader()
        result = []
        for logical, column in enumerate(self._record_model.columns):
            result.append(SinkColumn(
                name=column.name,
                caption=column.caption,
                display_index=header.visualIndex(logical),
                width=self.columnWidth(logical),
                visible=not self.isColumnHidden(logical),
            ))
        return sorted(result, key=lambda c: c.display_index)

    def add_column(self, name: str, caption: str) -> None:
        if self._record_model.column_index(name) < 0:
            self._record_model.add_column(ColumnDefinition(name, str, caption))

    def move_column(self, name: str, display_index: int) -> None:
        logical = self._record_model.column_index(name)
        if logical < 0:
            return
        header = self.horizontalHeader()
        display_index = max(0, min(display_index, header.count() - 1))
        visual = header.visualIndex(logical)
        if visual != display_index:
            header.moveSection(visual, display_index)

    def set_column_width(self, name: str, width: int) -> None:
        logical = self._record_model.column_index(name)
        if logical >= 0 and width > 0:
            self.setColumnWidth(logical, width)

    def set_column_visible(self, name: str, visible: bool) -> None:
        logical = self._record_model.column_index(name)
        if logical >= 0:
            self.setColumnHidden(logical, not visible)

    def set_passthrough(self, value: Any) -> None:
        frame = value if isinstance(value, pd.DataFrame) else pd.DataFrame(value)
        self._record_model.clear()
        self._frame_model.set_dataframe(frame)
        self._use_model(self._frame_model)

    def clear(self) -> None:
        self._record_model.clear()
        self._frame_model.clear()
        self._use_model(self._record_model)

    def _use_model(self, model):
        if self.model() is not model:
            self.setModel(model)
            self.selectionModel().currentChanged.connect(self._on_current_changed)
            self._hovered = None

    # -------------------------------------------------------------------------
    # Interaction events
    # -------------------------------------------------------------------------

    def event_args(self, index: Optional[QModelIndex]) -> RecordEventArgs:
        """Event payload for a model index (invalid index: outside any cell)."""
        if index is None or not index.isValid() or self.model() is not self._record_model:
            return RecordEventArgs()
        return self.grid.event_args_for(index.row(),
                                        self._record_model.column_name(index.column()))

    def mousePressEvent(self, event):
        super().mousePressEvent(event)
        if not self.indexAt(event.position().toPoint()).isValid():
            self.record_click.emit(RecordEventArgs())

    def leaveEvent(self, event):
        self._set_hovered(None)
        super().leaveEvent(event)

    def _on_clicked(self, index: QModelIndex):
        self.record_click.emit(self.event_args(index))

    def _on_double_clicked(self, index: QModelIndex):
        if index.isValid():
            self.record_double_click.emit(self.event_args(index))

    def _on_current_changed(self, current: QModelIndex, previous: QModelIndex):
        if previous.isValid():
            self.record_leave.emit(self.event_args(previous))
        if current.isValid():
            self.record_enter.emit(self.event_args(current))

    def _on_entered(self, index: QModelIndex):
        self._set_hovered(index)

    def _set_hovered(self, index: Optional[QModelIndex]):
        if index is not None and not index.isValid():
            index = None
        previous = self._hovered
        if previous is not None and index is not None and previous == index:
            return
        if previous is not None:
            self._highlight_reference(previous, False)
            self.record_mouse_leave.emit(self.event_args(previous))
        self._hovered = index
        if index is not None:
            self._highlight_reference(index, True)
            self.record_mouse_enter.emit(self.event_args(index))

    def _highlight_reference(self, index: QModelIndex, on: bool):
        if not self.grid.entity_reference_clickable or self.model() is not self._record_model:
            return
        value = self._record_model.raw_value(index.row(), index.column())
        while isinstance(value, AliasedValue):
            value = value.value
        if not isinstance(value, RecordReference):
            return
        if on:
            self._record_model.set_underlined(index.row(), index.column())
            self.viewport().setCursor(Qt.CursorShape.PointingHandCursor)
        else:
            self._record_model.set_underlined(-1, -1)
            self.viewport().unsetCursor()
