"""
Owner-thread invocation.

Widgets may only be touched from the thread that owns them. An
OwnerThreadInvoker lives on that thread and runs callables there, blocking
the caller until the callable has returned.
"""

import logging
from typing import Callable

from PySide6.QtCore import QObject, QThread, Qt, Signal, Slot

logger = logging.getLogger(__name__)


class OwnerThreadInvoker(QObject):
    """
    Run callables on the thread this object belongs to.

    Usage:
        invoker = OwnerThreadInvoker()   # created on the GUI thread
        grid = RecordGrid(sink, invoker=invoker)
    """

    _invoke = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._invoke.connect(self._run, Qt.ConnectionType.BlockingQueuedConnection)

    def invoke_required(self) -> bool:
        """True when called from a thread other than the owner."""
        return QThread.currentThread() != self.thread()

    def __call__(self, func: Callable[[], None]):
        if self.invoke_required():
            logger.debug("Marshaling call to owner thread")
            self._invoke.emit(func)
        else:
            func()

    @Slot(object)
    def _run(self, func: Callable[[], None]):
        func()
