"""
Services package for the poker night seating service.

Read models, statistics reconciliation and shared infrastructure used by
the operations layer and the HTTP API.
"""

from .base import BaseService
from .write_lock import WriteLock

__all__ = ['BaseService', 'WriteLock']
