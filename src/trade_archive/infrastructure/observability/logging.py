"""
Structured logging infrastructure for trade-archive.
Provides consistent, machine-readable logs across all layers.

Log Structure:
    {
        "app": "trade-archive",        # Application identifier
        "layer": "storage",            # Architectural layer
        "component": "archive",        # Specific component/service
        "module": "...",               # Python module (optional)
        "partition": "standard",       # Domain context
        "event": "batch_persisted",    # What happened
        ...
    }

Architectural Layers:
    - infrastructure: Cross-cutting (partition stores, config, clock)
    - ingestion: Trade history API client
    - processing: Normalization and dedup
    - storage: Archive merge and persistence
    - analytics: Income aggregation
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict

# Define valid architectural layers
Layer = Literal["infrastructure", "ingestion", "processing", "storage", "analytics"]


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add application-wide context to every log entry.

    This keeps the base 'app' identifier on every line so the archive's logs
    can be filtered out of a shared stream.
    """
    event_dict["app"] = "trade-archive"
    return event_dict


def add_severity_level(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add severity level for cloud logging compatibility.
    Maps Python log levels to standard severity levels.
    """
    level = event_dict.get("level")
    if level:
        severity_map = {
            "debug": "DEBUG",
            "info": "INFO",
            "warning": "WARNING",
            "error": "ERROR",
            "critical": "CRITICAL",
        }
        event_dict["severity"] = severity_map.get(level, "INFO")
    return event_dict


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON. If False, use human-readable format (dev mode).
        include_timestamp: Whether to include ISO timestamps in logs

    Usage:
        >>> from trade_archive.infrastructure.observability import setup_logging
        >>> setup_logging(level="DEBUG", json_logs=False)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.root.setLevel(log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance with architectural context.

    Args:
        name: Logger name (typically __name__ of the calling module)
        layer: Architectural layer (storage, processing, analytics, ...)
        component: Specific component/service within the layer
        **initial_context: Additional context key-value pairs to bind to logger

    Usage:
        >>> log = get_logger(__name__, layer="storage", component="archive")
        >>> log.info("batch_persisted", partition="standard", merged=120)
    """
    logger = structlog.get_logger(name)

    context: dict[str, Any] = {}
    if layer:
        context["layer"] = layer
    if component:
        context["component"] = component
    if name:
        context["module"] = name
    context.update(initial_context)

    if context:
        logger = logger.bind(**context)

    return logger


# ============================================================================
# Layer-Specific Logger Factories
# ============================================================================


def get_infrastructure_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for infrastructure layer (partition stores, config, clock).

    Usage:
        >>> log = get_infrastructure_logger("partition-store", backend="local")
        >>> log.warning("partition_unreadable", key="trade_archive/v1/standard.json")
    """
    return get_logger(
        "infrastructure",
        layer="infrastructure",
        component=component,
        **context,
    )


def get_ingestion_logger(
    component: str,
    partition: str | None = None,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for ingestion layer (trade history API).

    Args:
        component: Component name (e.g., "history-client")
        partition: League / partition name - optional
        **context: Additional context
    """
    ctx: dict[str, Any] = {}
    if partition:
        ctx["partition"] = partition
    ctx.update(context)

    return get_logger(
        "ingestion",
        layer="ingestion",
        component=component,
        **ctx,
    )


def get_processing_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for processing layer (normalization, dedup).

    Usage:
        >>> log = get_processing_logger("normalizer")
        >>> log.debug("entry_dropped", index=3, reason="missing item_id")
    """
    return get_logger(
        "processing",
        layer="processing",
        component=component,
        **context,
    )


def get_storage_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for storage layer (archive merge and writes).
    """
    return get_logger(
        "storage",
        layer="storage",
        component=component,
        **context,
    )


def get_analytics_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for analytics layer (income aggregation).
    """
    return get_logger(
        "analytics",
        layer="analytics",
        component=component,
        **context,
    )
