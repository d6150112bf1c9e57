"""
Centralized logging configuration for the Atlas decision pipeline.

This module provides standardized logging configuration using structlog
for all components. Signal filters and risk state changes are logged as
structured audit events so they can be shipped alongside the persisted
records.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a configured structlog logger instance."""
    return structlog.get_logger(name)


def get_signal_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for signal filter decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger carrying the signal subsystem audit context
    """
    return get_logger(name).bind(
        subsystem="signals",
        audit_trail=True
    )


def get_risk_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for risk monitoring and circuit-breaker events.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger carrying the risk subsystem audit context
    """
    return get_logger(name).bind(
        subsystem="risk",
        audit_trail=True
    )


def log_filter_decision(
    logger: FilteringBoundLogger,
    filter_name: str,
    passed: bool,
    symbol: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a signal filter evaluation with standardized format.

    Args:
        logger: Structlog logger instance
        filter_name: Name of the filter tag being evaluated
        passed: Whether the filter condition held
        symbol: Symbol the signal is generated for
        reason: Human readable condition that was checked
        context: Additional context data
    """
    bound_logger = logger.bind(
        filter_name=filter_name,
        filter_result="PASS" if passed else "FAIL",
        symbol=symbol,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("Signal filter evaluated")


def log_risk_state(
    logger: FilteringBoundLogger,
    user_id: str,
    state: str,
    circuit_breaker_triggered: bool,
    alert_count: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of a risk monitoring tick.

    HALTED is logged at critical level every tick it is observed; there is no
    suppression of repeated halts.
    """
    bound_logger = logger.bind(
        user_id=user_id,
        risk_state=state,
        circuit_breaker_triggered=circuit_breaker_triggered,
        alert_count=alert_count,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if state == "halted":
        bound_logger.critical("Trading halted by circuit breaker")
    elif state == "warning":
        bound_logger.warning("Risk limits under pressure")
    else:
        bound_logger.info("Risk limits normal")
