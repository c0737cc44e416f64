"""
UI module - PySide6 widgets for the record grid.
"""

from .widgets import RecordGridView, RecordTableModel, DataFrameTableModel
from .workers import RecordFetchWorker

__all__ = [
    "RecordGridView",
    "RecordTableModel",
    "DataFrameTableModel",
    "RecordFetchWorker",
]
