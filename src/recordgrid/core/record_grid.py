"""
RecordGrid - Controller that runs the refresh pipeline against a sink.

A refresh is one synchronous pass:
    resolve columns -> materialize rows -> bind -> arrange -> apply layout

The controller owns the configuration surface. Every setter refreshes when
auto-refresh is on and the value actually changed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, Union

import pandas as pd

from ..config.i18n import t
from ..constants import ID_COLUMN, RECORD_COLUMN, SEQUENCE_COLUMN
from .column_resolver import ColumnDefinition, DesignedColumn, resolve
from .errors import FormattingFault, ServiceUnavailableError
from .layout import LayoutCell, apply_layout, arrange_columns, parse_layout
from .metadata import MetadataProvider
from .records import Record, RecordCollection, record_type_names, validate_single_type
from .sink import GridSink
from .table_materializer import MaterializedTable, materialize

logger = logging.getLogger(__name__)

Invoker = Callable[[Callable[[], None]], None]
DiagnosticCallback = Callable[[FormattingFault], None]


class RecordService(Protocol):
    """Remote record source."""

    def retrieve_multiple(self, query: str) -> RecordCollection: ...


@dataclass(frozen=True)
class RecordEventArgs:
    """
    Payload of interaction events.

    Attributes:
        record: Record of the row, or None outside any row
        attribute: Column name, or "" outside any cell
    """
    record: Optional[Record] = None
    attribute: str = ""


def direct_invoker(func: Callable[[], None]):
    """Run on the calling thread."""
    func()


def split_names(value: Union[str, Sequence[str], None], newlines: bool = True) -> List[str]:
    """Split a comma (and optionally newline) separated string into names."""
    if value is None:
        return []
    if isinstance(value, str):
        separators = ",\n\r" if newlines else ","
        for sep in separators[1:]:
            value = value.replace(sep, separators[0])
        parts = value.split(separators[0])
    else:
        parts = list(value)
    return [p.strip() for p in parts if p and p.strip()]


class RecordGrid:
    """
    Headless record grid controller.

    Usage:
        grid = RecordGrid(MemoryGridSink(), metadata=provider)
        grid.show_friendly_names = True
        grid.data_source = RecordCollection("contact", records)
    """

    def __init__(self, sink: GridSink, metadata: Optional[MetadataProvider] = None,
                 service: Optional[RecordService] = None,
                 invoker: Optional[Invoker] = None,
                 diagnostic: Optional[DiagnosticCallback] = None,
                 designed_columns: Optional[Sequence[DesignedColumn]] = None):
        """
        Initialize controller.

        Args:
            sink: Display surface
            metadata: Metadata lookup service (optional)
            service: Remote record source for set_data_source_from_query
            invoker: Runs a callable on the owning thread (direct by default)
            diagnostic: Receives every per-cell FormattingFault
            designed_columns: Fixed schema declared before binding data
        """
        self.sink = sink
        self.metadata = metadata
        self.invoker: Invoker = invoker or direct_invoker
        self.diagnostic = diagnostic
        self.designed_columns: List[DesignedColumn] = list(designed_columns or [])
        self._service = service

        self._records: Optional[List[Record]] = None
        self._type_name = ""
        self._passthrough: Any = None
        self.table: Optional[MaterializedTable] = None

        self._auto_refresh = True
        self._show_friendly_names = False
        self._show_local_times = False
        self._show_id_column = True
        self._show_index_column = True
        self._column_order: List[str] = []
        self._show_all_ordered_columns = False
        self._show_unordered_columns = True
        self._filter_text: Optional[str] = None
        self._filter_columns: List[str] = []
        self._layout_xml: Optional[str] = None
        self._layout: Optional[List[LayoutCell]] = None
        self.entity_reference_clickable = False

        self._refreshing = False
        self._refresh_pending = False

    # ------------------------------------------------------------------
    # Configuration surface
    # ------------------------------------------------------------------

    def _changed(self, attr: str, value: Any):
        if getattr(self, attr) != value:
            setattr(self, attr, value)
            if self._auto_refresh:
                self.refresh()

    @property
    def auto_refresh(self) -> bool:
        return self._auto_refresh

    @auto_refresh.setter
    def auto_refresh(self, value: bool):
        self._auto_refresh = value
        if value:
            self.refresh()

    @property
    def show_friendly_names(self) -> bool:
        return self._show_friendly_names

    @show_friendly_names.setter
    def show_friendly_names(self, value: bool):
        self._changed("_show_friendly_names", value)

    @property
    def show_local_times(self) -> bool:
        return self._show_local_times

    @show_local_times.setter
    def show_local_times(self, value: bool):
        self._changed("_show_local_times", value)

    @property
    def show_id_column(self) -> bool:
        return self._show_id_column

    @show_id_column.setter
    def show_id_column(self, value: bool):
        self._changed("_show_id_column", value)

    @property
    def show_index_column(self) -> bool:
        return self._show_index_column

    @show_index_column.setter
    def show_index_column(self, value: bool):
        self._changed("_show_index_column", value)

    @property
    def column_order(self) -> List[str]:
        return list(self._column_order)

    @column_order.setter
    def column_order(self, value: Union[str, Sequence[str], None]):
        order = split_names(value)
        if not order:
            self._show_all_ordered_columns = False
            self._show_unordered_columns = True
        self._changed("_column_order", order)

    @property
    def show_all_ordered_columns(self) -> bool:
        return self._show_all_ordered_columns

    @show_all_ordered_columns.setter
    def show_all_ordered_columns(self, value: bool):
        self._changed("_show_all_ordered_columns", bool(value) and bool(self._column_order))

    @property
    def show_unordered_columns(self) -> bool:
        return self._show_unordered_columns

    @show_unordered_columns.setter
    def show_unordered_columns(self, value: bool):
        self._changed("_show_unordered_columns", bool(value) or not self._column_order)

    @property
    def filter_text(self) -> Optional[str]:
        return self._filter_text

    @filter_text.setter
    def filter_text(self, value: Optional[str]):
        self._changed("_filter_text", value)

    @property
    def filter_columns(self) -> List[str]:
        return list(self._filter_columns)

    @filter_columns.setter
    def filter_columns(self, value: Union[str, Sequence[str], None]):
        self._changed("_filter_columns", [c.lower() for c in split_names(value, newlines=False)])

    @property
    def layout_xml(self) -> Optional[str]:
        return self._layout_xml

    @layout_xml.setter
    def layout_xml(self, value: Optional[str]):
        if value == self._layout_xml:
            return
        self._layout_xml = value
        self._layout = parse_layout(value)
        if self._auto_refresh:
            self.refresh()

    @property
    def layout(self) -> Optional[List[LayoutCell]]:
        """Parsed layout, or None when no valid layout is set."""
        return self._layout

    @property
    def service(self) -> Optional[RecordService]:
        return self._service

    @service.setter
    def service(self, value: Optional[RecordService]):
        self._service = value
        if self._auto_refresh:
            self.refresh()

    def configure(self, settings):
        """
        Apply a GridSettings object with a single refresh.

        Args:
            settings: recordgrid.config.grid_settings.GridSettings
        """
        auto_refresh = self._auto_refresh
        self._auto_refresh = False
        try:
            self.show_friendly_names = settings.show_friendly_names
            self.show_local_times = settings.show_local_times
            self.show_id_column = settings.show_id_column
            self.show_index_column = settings.show_index_column
            self.column_order = settings.column_order
            self.show_all_ordered_columns = settings.show_all_ordered_columns
            self.show_unordered_columns = settings.show_unordered_columns
            self.filter_text = settings.filter_text
            self.filter_columns = settings.filter_columns
            self.entity_reference_clickable = settings.entity_reference_clickable
            self.layout_xml = settings.layout_xml
        finally:
            self._auto_refresh = auto_refresh and settings.auto_refresh
        if self._auto_refresh:
            self.refresh()

    # ------------------------------------------------------------------
    # Data source
    # ------------------------------------------------------------------

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def records(self) -> Optional[List[Record]]:
        """Bound records, or None in passthrough mode or when cleared."""
        return list(self._records) if self._records is not None else None

    @property
    def is_passthrough(self) -> bool:
        return self._passthrough is not None

    @property
    def data_source(self) -> Any:
        if self._records is not None:
            return RecordCollection(self._type_name, self._records)
        return self._passthrough

    @data_source.setter
    def data_source(self, value: Any):
        """
        Bind a record source.

        Accepts a RecordCollection or an iterable of Record. Anything else
        (e.g. a DataFrame) is handed to the sink unchanged, except one-shot
        iterators, which are handed over as the list read from them. None clears.

        Raises:
            ValidationError: If the records span more than one type. The
                previously bound table stays in place.
        """
        if value is None:
            self._records = None
            self._type_name = ""
            self._passthrough = None
            self.table = None
            self.sink.clear()
            logger.debug("Data source cleared")
            return

        records, passthrough = self._as_records(value)
        if records is None:
            self._records = None
            self._type_name = ""
            self._passthrough = passthrough
            self.table = None
            self.sink.set_passthrough(passthrough)
            logger.debug(f"Passthrough data source: {type(value).__name__}")
            return

        validate_single_type(records)
        if isinstance(value, RecordCollection) and value.type_name:
            type_name = value.type_name
        else:
            names = record_type_names(records)
            type_name = names[0] if names else ""

        self._records = records
        self._type_name = type_name
        self._passthrough = None
        logger.info(f"Bound {len(records)} '{type_name}' records")
        if self._auto_refresh:
            self.refresh()

    @staticmethod
    def _as_records(value: Any) -> Tuple[Optional[List[Record]], Any]:
        """
        Split a data source into records or a passthrough value.

        Returns:
            (records, None) for record sources, (None, value) otherwise.
            One-shot iterables come back as the list that was read from them.
        """
        if isinstance(value, RecordCollection):
            return list(value.records), None
        if isinstance(value, (str, bytes, dict, pd.DataFrame, Record)):
            return None, value
        try:
            items = list(value)
        except TypeError:
            return None, value
        if all(isinstance(item, Record) for item in items):
            return items, None
        if isinstance(value, Iterator):
            return None, items
        return None, value

    def set_data_source_from_query(self, query: str, layout_xml: Optional[str] = None):
        """
        Fetch records with the service and bind them.

        The result and layout are applied through the owner-thread invoker.

        Raises:
            ServiceUnavailableError: If no service is set
        """
        if self._service is None:
            raise ServiceUnavailableError(t("error_no_service"))
        if not query:
            return
        result = self._service.retrieve_multiple(query)
        self.invoker(lambda: self.apply_fetch_result(result, layout_xml))

    def apply_fetch_result(self, result: Any, layout_xml: Optional[str] = None):
        """Bind a fetched result together with its layout (owner thread only)."""
        self.layout_xml = layout_xml
        self.data_source = result

    def to_dataframe(self) -> Optional[pd.DataFrame]:
        """Current table as a DataFrame (passthrough frames are returned as-is)."""
        if self.table is not None:
            return self.table.to_dataframe()
        if isinstance(self._passthrough, pd.DataFrame):
            return self._passthrough
        return None

    # ------------------------------------------------------------------
    # Refresh pipeline
    # ------------------------------------------------------------------

    @property
    def designed_columns_used(self) -> bool:
        return bool(self.designed_columns) and self._layout is None

    def refresh(self):
        """
        Recompute and bind the table.

        A refresh requested while one is running is deferred and runs once
        more after the current pass, with the latest configuration.
        """
        if self._refreshing:
            self._refresh_pending = True
            return
        self._refreshing = True
        try:
            while True:
                self._refresh_pending = False
                self._refresh_once()
                if not self._refresh_pending:
                    break
        finally:
            self._refreshing = False

    def _refresh_once(self):
        if self._records is None:
            return
        columns = resolve(
            self._records, self._type_name, self.metadata,
            designed_columns=self.designed_columns,
            layout_active=self._layout is not None,
            column_order=self._column_order,
            show_all_ordered=self.show_all_ordered_columns,
            show_unordered=self.show_unordered_columns,
            friendly=self._show_friendly_names,
            show_id_column=self._show_id_column,
        )
        table = materialize(
            self._records, columns,
            filter_text=self._filter_text,
            filter_columns=self._filter_columns,
            friendly=self._show_friendly_names,
            local_times=self._show_local_times,
            on_fault=self._report_fault,
        )
        self._bind(table)
        if self._column_order and not self.designed_columns_used:
            arrange_columns(self._column_order, self.sink)
        if self._layout is not None:
            apply_layout(self._layout, self.sink)
        logger.debug(f"Refreshed '{self._type_name}': {table.row_count} rows, "
                     f"{len(table.columns)} columns")

    def _bind(self, table: MaterializedTable):
        self.table = table
        self.sink.set_columns(list(table.columns))
        self.sink.set_rows(table.copy())
        self.sink.set_column_visible(SEQUENCE_COLUMN, self._show_index_column)
        self.sink.set_column_visible(ID_COLUMN, self._show_id_column)
        self.sink.set_column_visible(RECORD_COLUMN, False)

    def _report_fault(self, fault: FormattingFault):
        if self.diagnostic is not None:
            self.diagnostic(fault)

    # ------------------------------------------------------------------
    # Interaction support
    # ------------------------------------------------------------------

    def record_at(self, row: int) -> Optional[Record]:
        if self.table is None:
            return None
        return self.table.record_at(row)

    def event_args_for(self, row: int, column: Optional[str]) -> RecordEventArgs:
        """Event payload for a cell position; negative row means no row."""
        record = self.record_at(row) if row >= 0 else None
        return RecordEventArgs(record, column or "")

    def selected_records(self, rows: Iterable[int]) -> Optional[List[Record]]:
        """
        Records of the given rows, in row order and without duplicates.

        Returns None when no records are bound.
        """
        if self._records is None or self.table is None:
            return None
        result: List[Record] = []
        for row in sorted(set(rows)):
            record = self.table.record_at(row)
            if record is not None and record not in result:
                result.append(record)
        return result

    def column(self, name: str) -> Optional[ColumnDefinition]:
        return self.table.column(name) if self.table is not None else None
