"""
Tests for the RecordGrid controller.
"""
import uuid
from unittest.mock import Mock

import pandas as pd
import pytest

from recordgrid.config.grid_settings import GridSettings
from recordgrid.constants import ID_COLUMN, RECORD_COLUMN, SEQUENCE_COLUMN
from recordgrid.core.column_resolver import DesignedColumn
from recordgrid.core.errors import FormattingFault, ServiceUnavailableError, ValidationError
from recordgrid.core.record_grid import RecordEventArgs, RecordGrid, split_names
from recordgrid.core.records import Record, RecordCollection

from conftest import make_contact


@pytest.fixture
def grid(sink, metadata):
    return RecordGrid(sink, metadata=metadata)


class TestDataSource:
    """Test binding data sources."""

    def test_bind_collection(self, grid, sink, collection):
        grid.data_source = collection
        assert grid.type_name == "contact"
        assert sink.row_count == 3
        assert [c.name for c in sink.get_columns()] == [
            SEQUENCE_COLUMN, ID_COLUMN, "fullname", "email", RECORD_COLUMN,
        ]
        assert RECORD_COLUMN not in sink.visible_column_names

    def test_bind_list(self, grid, sink, contacts):
        grid.data_source = contacts
        assert grid.type_name == "contact"
        assert isinstance(grid.data_source, RecordCollection)
        assert len(grid.data_source) == 3

    def test_mixed_types_keep_previous_table(self, grid, sink, collection):
        """A rejected data source leaves the bound table untouched."""
        grid.data_source = collection
        table = sink.table
        with pytest.raises(ValidationError):
            grid.data_source = [make_contact(a=1), Record("account", uuid.uuid4(), {"a": 2})]
        assert sink.table is table
        assert grid.type_name == "contact"
        assert len(grid.records) == 3

    def test_mixed_types_bind_nothing(self, grid, sink):
        with pytest.raises(ValidationError):
            grid.data_source = [make_contact(a=1), Record("account", None, {"a": 2})]
        assert sink.table is None
        assert grid.records is None

    def test_passthrough(self, grid, sink, collection):
        """Unrecognized shapes bypass the pipeline."""
        grid.data_source = collection
        frame = pd.DataFrame({"x": [1, 2]})
        grid.data_source = frame
        assert grid.is_passthrough
        assert sink.passthrough is frame
        assert sink.table is None
        assert grid.records is None
        assert grid.to_dataframe() is frame

    def test_passthrough_generator_keeps_items(self, grid, sink):
        grid.data_source = (row for row in [{"a": 1}, {"a": 2}])
        assert grid.is_passthrough
        assert sink.passthrough == [{"a": 1}, {"a": 2}]
        assert grid.data_source == [{"a": 1}, {"a": 2}]

    def test_passthrough_list_is_kept(self, grid, sink):
        rows = [{"a": 1}]
        grid.data_source = rows
        assert sink.passthrough is rows

    def test_generator_of_records(self, grid, sink, contacts):
        grid.data_source = (record for record in contacts)
        assert grid.records == list(contacts)
        assert sink.row_count == len(contacts)

    def test_none_clears(self, grid, sink, collection):
        grid.data_source = collection
        grid.data_source = None
        assert sink.table is None
        assert sink.get_columns() == []
        assert grid.data_source is None

    def test_sink_gets_its_own_copy(self, grid, sink, collection):
        grid.data_source = collection
        assert sink.table is not grid.table
        assert sink.table.rows == grid.table.rows

    def test_auto_refresh_off_defers(self, grid, sink, collection):
        grid.auto_refresh = False
        grid.data_source = collection
        assert sink.table is None
        grid.auto_refresh = True
        assert sink.row_count == 3


class TestConfiguration:
    """Test the configuration surface."""

    def test_setters_refresh_on_change(self, grid, collection):
        grid.data_source = collection
        grid.refresh = Mock(wraps=grid.refresh)
        grid.show_friendly_names = True
        grid.show_friendly_names = True
        assert grid.refresh.call_count == 1

    def test_friendly_names(self, grid, sink, collection):
        grid.data_source = collection
        grid.show_friendly_names = True
        captions = {c.name: c.caption for c in sink.get_columns()}
        assert captions["fullname"] == "Full Name"

    def test_id_and_index_visibility(self, grid, sink, collection):
        grid.data_source = collection
        grid.show_id_column = False
        grid.show_index_column = False
        assert sink.visible_column_names == ["fullname", "email"]

    def test_column_order_string(self, grid, sink, collection):
        grid.data_source = collection
        grid.column_order = "email,\nfullname"
        assert grid.column_order == ["email", "fullname"]
        assert sink.visible_column_names[2:4] == ["email", "fullname"]

    def test_ordered_flags_cleared_while_order_empty(self, grid):
        grid.show_all_ordered_columns = True
        grid.show_unordered_columns = False
        assert grid.show_all_ordered_columns is False
        assert grid.show_unordered_columns is True
        grid.column_order = ["email"]
        assert grid.show_all_ordered_columns is False
        assert grid.show_unordered_columns is True

    def test_clearing_order_resets_flags(self, grid):
        grid.column_order = ["email"]
        grid.show_all_ordered_columns = True
        grid.show_unordered_columns = False
        assert grid.show_all_ordered_columns is True
        assert grid.show_unordered_columns is False
        grid.column_order = ""
        assert grid.show_all_ordered_columns is False
        assert grid.show_unordered_columns is True
        grid.column_order = ["email"]
        assert grid.show_all_ordered_columns is False
        assert grid.show_unordered_columns is True

    def test_show_all_ordered_columns(self, grid, sink, collection):
        grid.data_source = collection
        grid.column_order = ["phone", "email"]
        assert "phone" not in [c.name for c in sink.get_columns()]
        grid.show_all_ordered_columns = True
        assert "phone" in sink.visible_column_names

    def test_filter(self, grid, sink, collection):
        """The acme filter on email yields one row."""
        grid.data_source = collection
        grid.filter_columns = "Email"
        grid.filter_text = "acme"
        assert grid.filter_columns == ["email"]
        assert sink.row_count == 1
        assert grid.record_at(0) is collection[0]

    def test_layout(self, grid, sink, collection):
        grid.data_source = collection
        grid.layout_xml = '<grid><row><cell name="email" width="120"/></row></grid>'
        assert sink.visible_column_names == ["email"]
        assert sink.find_column("email").width == 120

    def test_invalid_layout_ignored(self, grid, sink, collection):
        grid.data_source = collection
        grid.layout_xml = "<grid><row>"
        assert grid.layout is None
        assert "fullname" in sink.visible_column_names

    def test_configure_refreshes_once(self, grid, collection):
        grid.data_source = collection
        grid.refresh = Mock(wraps=grid.refresh)
        grid.configure(GridSettings(show_friendly_names=True, column_order="email",
                                    filter_text="acme"))
        assert grid.refresh.call_count == 1
        assert grid.show_friendly_names
        assert grid.table.row_count == 1


class TestDesignedColumns:
    """Test caller-declared columns."""

    def test_designed_columns(self, sink, metadata, collection):
        grid = RecordGrid(sink, metadata=metadata,
                          designed_columns=[DesignedColumn("email", caption="Mail")])
        grid.data_source = collection
        assert [c.name for c in sink.get_columns()] == ["email", RECORD_COLUMN]
        assert sink.find_column("email").caption == "Mail"

    def test_layout_replaces_designed_columns(self, sink, collection):
        grid = RecordGrid(sink, designed_columns=[DesignedColumn("email")])
        grid.layout_xml = '<grid><row><cell name="fullname" width="100"/></row></grid>'
        grid.data_source = collection
        assert sink.visible_column_names == ["fullname"]
        assert SEQUENCE_COLUMN in [c.name for c in sink.get_columns()]


class TestRefresh:
    """Test refresh scheduling."""

    def test_reentrant_refresh_is_deferred(self, metadata, collection):
        """A refresh triggered from the sink runs once more, with the latest settings."""
        sink = Mock()
        sink.get_columns.return_value = []
        grid = RecordGrid(sink, metadata=metadata)
        calls = []

        def set_rows(table):
            calls.append(table.row_count)
            if len(calls) == 1:
                grid.filter_text = "acme"
                assert len(calls) == 1

        sink.set_rows.side_effect = set_rows
        grid.data_source = collection
        assert calls == [3, 1]

    def test_formatting_fault_reaches_diagnostic(self, sink, collection, monkeypatch):
        diagnostic = Mock()
        grid = RecordGrid(sink, diagnostic=diagnostic)

        def broken(*args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr("recordgrid.core.table_materializer.format_value", broken)
        grid.data_source = collection
        assert diagnostic.call_count == 5
        assert isinstance(diagnostic.call_args.args[0], FormattingFault)
        assert sink.table.rows[0]["fullname"] == "Ann Smith"


class TestQuery:
    """Test fetching through a record service."""

    def test_no_service(self, grid):
        with pytest.raises(ServiceUnavailableError):
            grid.set_data_source_from_query("<fetch/>")

    def test_empty_query_is_noop(self, sink, collection):
        service = Mock()
        grid = RecordGrid(sink, service=service)
        grid.set_data_source_from_query("")
        service.retrieve_multiple.assert_not_called()

    def test_query_binds_through_invoker(self, sink, collection):
        service = Mock()
        service.retrieve_multiple.return_value = collection
        invoker = Mock(side_effect=lambda func: func())
        grid = RecordGrid(sink, service=service, invoker=invoker)
        layout = '<grid><row><cell name="email" width="90"/></row></grid>'
        grid.set_data_source_from_query("<fetch/>", layout)
        service.retrieve_multiple.assert_called_once_with("<fetch/>")
        invoker.assert_called_once()
        assert grid.layout_xml == layout
        assert sink.row_count == 3
        assert sink.visible_column_names == ["email"]


class TestInteraction:
    """Test event payloads and selection."""

    def test_event_args(self, grid, collection):
        grid.data_source = collection
        assert grid.event_args_for(1, "email") == RecordEventArgs(collection[1], "email")
        assert grid.event_args_for(-1, "email") == RecordEventArgs(None, "email")
        assert grid.event_args_for(0, None).attribute == ""

    def test_selected_records(self, grid, collection):
        grid.data_source = collection
        assert grid.selected_records([2, 0, 2]) == [collection[0], collection[2]]

    def test_selected_records_without_data(self, grid):
        assert grid.selected_records([0]) is None


class TestSplitNames:
    """Test name list parsing."""

    def test_split(self):
        assert split_names("a, b\nc") == ["a", "b", "c"]
        assert split_names("a\nb", newlines=False) == ["a\nb"]
        assert split_names(["a", " ", "b"]) == ["a", "b"]
        assert split_names(None) == []
