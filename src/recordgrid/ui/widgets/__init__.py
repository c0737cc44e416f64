"""
Widgets - Record grid view and its table models.
"""

from .record_table_model import RecordTableModel, DataFrameTableModel, RecordRole
from .record_grid_view import RecordGridView

__all__ = [
    "RecordTableModel",
    "DataFrameTableModel",
    "RecordRole",
    "RecordGridView",
]
