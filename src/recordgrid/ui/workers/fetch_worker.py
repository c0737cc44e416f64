"""
Fetch Worker - Background retrieval of records from a RecordService.

The worker only fetches. Binding the result to a grid happens on the
owner thread, in the slot connected to records_loaded.
"""

import logging

from PySide6.QtCore import QThread, Signal

logger = logging.getLogger(__name__)


class RecordFetchWorker(QThread):
    """
    Worker running RecordService.retrieve_multiple(query).

    Signals:
        records_loaded: Emitted with (result, layout_xml, generation) on success
        loading_error: Emitted with (error message, generation) on failure
    """

    records_loaded = Signal(object, object, int)  # RecordCollection, layout xml or None, generation
    loading_error = Signal(str, int)

    def __init__(self, service, query: str, layout_xml: str = None, generation: int = 0):
        super().__init__()
        self.service = service
        self.query = query
        self.layout_xml = layout_xml
        self.generation = generation

    def run(self):
        try:
            result = self.service.retrieve_multiple(self.query)
            logger.info(f"Fetched {len(result)} records")
            self.records_loaded.emit(result, self.layout_xml, self.generation)

        except Exception as e:
            logger.error(f"Error fetching records: {e}")
            self.loading_error.emit(str(e), self.generation)
