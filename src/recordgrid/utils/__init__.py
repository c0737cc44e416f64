"""
Utilities - Threading helpers.
"""

from .owner_thread import OwnerThreadInvoker

__all__ = ["OwnerThreadInvoker"]
