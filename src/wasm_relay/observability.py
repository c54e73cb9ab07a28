"""Structured logging and OpenTelemetry spans for wasm-relay.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for relay operations
- Payload excerpt helper for diagnostic log fields
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "wasm.relay"

# Longest payload excerpt written to a log event
EXCERPT_LENGTH = 200


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("relay_started", port=3000)
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for wasm-relay.

    Returns:
        OpenTelemetry Tracer instance.
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging for wasm-relay.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    import logging

    processors: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


def excerpt(text: str | bytes) -> str:
    """Truncate a payload for inclusion in a log event.

    Args:
        text: Payload text or raw bytes.

    Returns:
        At most EXCERPT_LENGTH characters, with an ellipsis when truncated.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if len(text) <= EXCERPT_LENGTH:
        return text
    return f"{text[:EXCERPT_LENGTH]}..."


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "relay.submit").
        kind: Span kind (INTERNAL, CLIENT, SERVER, PRODUCER, CONSUMER).
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end.

    Yields:
        OpenTelemetry Span instance.
    """
    tracer = get_tracer()
    logger = get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **attrs)
            raise


@contextmanager
def relay_operation(
    operation: str,
    *,
    url: str | None = None,
    code_size: int | None = None,
) -> Iterator[Span]:
    """Create a span for relay operations with standard attributes.

    Args:
        operation: Operation name (e.g., "submit", "assemble").
        url: Compiler backend URL.
        code_size: Size of the submitted source in bytes.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with relay_operation("submit", url="http://compiler:8080/run"):
        ...     await client.post(...)
    """
    attrs: dict[str, Any] = {"relay.operation": operation}
    if url:
        attrs["relay.url"] = url
    if code_size is not None:
        attrs["relay.code_size"] = code_size

    kind = SpanKind.CLIENT if url else SpanKind.INTERNAL
    with span(f"relay.{operation}", kind=kind, attributes=attrs) as s:
        yield s
