"""
RecordGrid - Tabular display of heterogeneous key-value records
PySide6 Edition
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("record-grid")
except PackageNotFoundError:
    # Package not installed
    __version__ = "0.1.0"

from .core import (
    RecordGrid,
    RecordEventArgs,
    Record,
    RecordCollection,
    MemoryGridSink,
)

__all__ = [
    "RecordGrid",
    "RecordEventArgs",
    "Record",
    "RecordCollection",
    "MemoryGridSink",
    "__version__",
]
