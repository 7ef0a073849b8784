"""Request logging and metric hooks for storage backends.

Each storage request is logged as one JSON line carrying the HTTP method,
the request path and the response status, plus the storage zone and a
request id taken from the surrounding RequestContext. Metrics go to
callbacks registered by the application; nothing is collected here.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Callable

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
storage_zone_var: ContextVar[str | None] = ContextVar("storage_zone", default=None)

REQUEST_FIELDS = ("method", "path", "status_code")

_internal_logger = logging.getLogger(__name__)


class RequestLogFormatter(logging.Formatter):
    """Formats storage log records as JSON.

    method, path and status_code are always present (null when the record
    is not about a request) so log queries can rely on them.
    """

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "context", None) or {}

        data: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "logger": record.name,
            "request_id": request_id_var.get(),
            "storage_zone": storage_zone_var.get(),
        }
        for name in REQUEST_FIELDS:
            data[name] = context.get(name)

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            data["duration_ms"] = round(duration_ms, 3)

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            data["error"] = {"type": type(error).__name__, "message": str(error)}

        return json.dumps(data, default=str)


class StorageLogger:
    """Logs storage requests with their request fields attached.

    Example:
        logger = get_logger(__name__)
        logger.debug("Storage request completed", context={"method": "GET"})
        logger.warning("Storage request failed", context=..., error=exception)
    """

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def _extra(self, context: dict[str, Any] | None, duration_ms: float | None) -> dict[str, Any]:
        extra: dict[str, Any] = {"context": context or {}}
        if duration_ms is not None:
            extra["duration_ms"] = duration_ms
        return extra

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at DEBUG level."""
        self.logger.debug(message, extra=self._extra(context, duration_ms))

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        """Log at WARNING level, attaching error if given."""
        exc_info = (type(error), error, error.__traceback__) if error else None
        self.logger.warning(message, exc_info=exc_info, extra=self._extra(context, None))


class RequestContext:
    """Sets the request id and storage zone for everything logged inside.

    Example:
        async with RequestContext(storage_zone="my-zone"):
            response = await client.request(...)
    """

    def __init__(
        self,
        request_id: str | None = None,
        storage_zone: str | None = None,
    ) -> None:
        self.request_id = request_id or str(uuid.uuid4())
        self.storage_zone = storage_zone
        self._tokens: list[tuple[ContextVar, Any]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens.append((request_id_var, request_id_var.set(self.request_id)))
        if self.storage_zone:
            self._tokens.append((storage_zone_var, storage_zone_var.set(self.storage_zone)))
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    async def __aenter__(self) -> "RequestContext":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


class Timer:
    """Measures the wall time of a block in milliseconds."""

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()


# Function(name, value, labels)
MetricCallback = Callable[[str, float, dict[str, Any]], None]

_metric_callbacks: list[MetricCallback] = []


def register_metric_callback(callback: MetricCallback) -> None:
    """Register a callback to receive storage request metrics.

    Metrics emitted:
        bunny_storage.request.duration: timer, labels method/status_code
        bunny_storage.request.failed: counter, labels method/status_code

    Both carry a storage_zone label.
    """
    _metric_callbacks.append(callback)


def unregister_metric_callback(callback: MetricCallback) -> None:
    """Remove a previously registered metric callback."""
    if callback in _metric_callbacks:
        _metric_callbacks.remove(callback)


def _emit(name: str, value: float, labels: dict[str, Any] | None) -> None:
    labels = dict(labels or {})
    storage_zone = storage_zone_var.get()
    if storage_zone:
        labels.setdefault("storage_zone", storage_zone)

    for callback in _metric_callbacks:
        try:
            callback(name, value, labels)
        except Exception:
            # Metric sinks must not break storage calls
            _internal_logger.debug("Metric callback failed", exc_info=True)


def emit_counter(name: str, labels: dict[str, Any] | None = None) -> None:
    """Emit a counter metric (increment by 1)."""
    _emit(name, 1.0, labels)


def emit_timer(name: str, duration_ms: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a timer metric."""
    _emit(name, duration_ms, labels)


def configure_logging(level: int | str = logging.INFO, format: str = "json") -> None:
    """Send the package's logs to stdout.

    Args:
        level: Minimum level, as a logging constant or its name
        format: "json" for one JSON object per line, "text" for plain lines
    """
    package_logger = logging.getLogger("bunny_file_storage")
    package_logger.setLevel(level.upper() if isinstance(level, str) else level)
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format == "json":
        handler.setFormatter(RequestLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
    package_logger.addHandler(handler)


def get_logger(name: str) -> StorageLogger:
    """Get a storage logger for a module (typically __name__)."""
    return StorageLogger(name)
