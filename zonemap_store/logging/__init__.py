"""
Structured Logging for the Zone Store
=====================================

Bounded Context: Observability

JSON-structured logs for zone mutations and storage health.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: Logger with bound context
    JSONFormatter: Renders records as JSON documents

Example:
    >>> from zonemap_store.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="repository").bind(key="parking-zones")
    >>> logger.error(
    ...     event=LogEvent.STORE_WRITE_ERROR,
    ...     message="Failed to persist zones",
    ...     metadata={'count': 3}
    ... )
"""

from .events import LogEvent
from .structured import JSONFormatter, StructuredLogger

__all__ = [
    'JSONFormatter',
    'LogEvent',
    'StructuredLogger',
]
