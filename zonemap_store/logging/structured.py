"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

Structured logger that emits one JSON object per record.

Design:
- Records carry event, component and metadata as LogRecord extras;
  JSONFormatter renders them, so any handler can choose the output
- Bound context (e.g. the storage key) is merged into every record's
  metadata
- Exception tracebacks are rendered into the JSON document
- Type-safe events (LogEvent enum)

Example:
    >>> logger = StructuredLogger(component="repository").bind(key="parking-zones")
    >>> logger.info(
    ...     event=LogEvent.ZONE_CREATED,
    ...     message="Zone created",
    ...     metadata={'zone_id': 'a1b2', 'name': 'Lot A'}
    ... )

Output:
    {
        "timestamp": "2025-10-24T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "repository",
        "event": "zone.created",
        "message": "Zone created",
        "metadata": {"key": "parking-zones", "zone_id": "a1b2", "name": "Lot A"}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger.

    Attributes:
        component: Component name (e.g., "repository")
        context: Metadata added to every record
        logger: Underlying Python logger instance

    Thread Safety:
        Thread-safe via Python's logging module. bind() returns a new
        logger, the bound context is never mutated.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            component: Component identifier (e.g., "repository")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: zonemap_store.<component>)
            context: Metadata merged into every record
        """
        self.component = component
        self.context = dict(context or {})
        self.logger_name = logger_name or f"zonemap_store.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context: Any) -> "StructuredLogger":
        """
        Logger for the same component with extra bound context.

        Example:
            >>> logger.bind(key="parking-zones").warning(...)
        """
        return StructuredLogger(
            component=self.component,
            level=self.logger.level,
            logger_name=self.logger_name,
            context={**self.context, **context},
        )

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={
                'component': self.component,
                'event': event.value,
                'metadata': {**self.context, **(metadata or {})},
            },
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log(logging.DEBUG, event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log WARNING level message.

        Example:
            >>> logger.warning(
            ...     event=LogEvent.STORE_LOAD_ERROR,
            ...     message="Stored zones unreadable, starting empty",
            ...     exc_info=e,
            ... )
        """
        self._log(logging.WARNING, event, message, metadata, exc_info)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
            exc_info: Exception whose traceback goes into the record
        """
        self._log(logging.ERROR, event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """
    Renders a LogRecord as one JSON document.

    Records that did not come from StructuredLogger fall back to the
    logger name as component and carry no event.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'component': getattr(record, 'component', record.name),
            'event': getattr(record, 'event', None),
            'message': record.getMessage(),
        }

        metadata = getattr(record, 'metadata', None)
        if metadata:
            entry['metadata'] = metadata

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)
