"""
Centralized logging configuration for the tradeflow pipeline.

All components log through structlog with this configuration so that step
transitions, gate decisions and trade outcomes share one structured format.
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
    # Level names map onto stdlib constants
    log_level = getattr(logging, level.upper())

    # Records are routed through stdlib logging
    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # rendering is done by structlog
    )

    # Shared processor chain
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Optional enrichment
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    # Renderer must be last
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    # Loggers are cached after first use, configure before logging
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_gating_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for opportunity gating decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the gating subsystem context
    """
    return structlog.get_logger(name, subsystem="gating", audit_trail=True)


def get_pipeline_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for pipeline step transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the pipeline subsystem context
    """
    return structlog.get_logger(name, subsystem="pipeline", audit_trail=True)


def log_gate_decision(
    logger: FilteringBoundLogger,
    gate_name: str,
    passed: bool,
    pair: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a gating decision with standardized format.

    Args:
        logger: Structlog logger instance
        gate_name: Name of the gate being evaluated
        passed: Whether the gate passed or failed
        pair: Trading pair of the opportunity being evaluated
        reason: Detailed reason for the decision
        context: Additional context data
    """
    bound_logger = logger.bind(
        gate_name=gate_name,
        gate_result="PASS" if passed else "FAIL",
        pair=pair,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.info("Gate passed")
    else:
        bound_logger.warning("Gate failed")


def log_step_transition(
    logger: FilteringBoundLogger,
    pipeline_id: str,
    step_id: str,
    transition: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a pipeline step transition with standardized format.

    Args:
        logger: Structlog logger instance
        pipeline_id: ID of the running pipeline
        step_id: ID of the step changing state
        transition: One of "started", "completed", "failed", "cancelled"
        context: Additional context data
    """
    bound_logger = logger.bind(
        pipeline_id=pipeline_id,
        step_id=step_id,
        transition=transition,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if transition in ("failed", "cancelled"):
        bound_logger.warning("Step transition")
    else:
        bound_logger.info("Step transition")
