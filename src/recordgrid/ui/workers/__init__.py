"""
UI Workers - Background workers for async operations.
"""

from .fetch_worker import RecordFetchWorker

__all__ = [
    "RecordFetchWorker",
]
