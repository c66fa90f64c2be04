"""Logging helpers with optional OpenTelemetry support."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import TelemetryConfig

CONSOLE_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_LOGGERS: dict[str, logging.Logger] = {}
_OTLP_HANDLER: logging.Handler | None = None


class _OtelContextFilter(logging.Filter):
    """Ensures trace/span placeholders exist even when no context is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = "battlegrid") -> logging.Logger:
    logger = _LOGGERS.get(name)
    if logger is None:
        logger = logging.getLogger(name)
        _LOGGERS[name] = logger
    return logger


def configure_console_logging(level: int = logging.INFO) -> logging.Handler:
    """Send `battlegrid` records to stderr in the trace-aware console format."""
    package_logger = logging.getLogger("battlegrid")
    for existing in package_logger.handlers:
        if getattr(existing, "_battlegrid_console", False):
            existing.setLevel(level)
            package_logger.setLevel(level)
            return existing

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.addFilter(_OtelContextFilter())
    handler.setLevel(level)
    handler._battlegrid_console = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def init_logging(config: TelemetryConfig) -> logging.Logger:
    global _OTLP_HANDLER
    logger = get_logger(config.service_name)
    if _OTLP_HANDLER is not None:
        return logger
    try:
        from opentelemetry._logs import set_logger_provider
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
        from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
        from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
        from opentelemetry.sdk.resources import Resource
    except ImportError:  # pragma: no cover
        return logger

    provider = LoggerProvider(resource=Resource.create(config.resource_dict()))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    handler = LoggingHandler(level=logging.INFO, logger_provider=provider)
    handler.addFilter(_OtelContextFilter())
    logging.getLogger().addHandler(handler)
    _OTLP_HANDLER = handler
    return logger
