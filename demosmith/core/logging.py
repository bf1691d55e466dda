"""Logging configuration for demosmith."""

import logging
import sys
from pathlib import Path
from typing import Optional
import structlog


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_logs: bool = False
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        json_logs: Whether to output JSON formatted logs

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    line_format = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    if not json_logs:
        console_handler.setFormatter(line_format)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(line_format)
        root_logger.addHandler(file_handler)

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)

    logger = logging.getLogger("demosmith")
    logger.setLevel(numeric_level)

    return logger


def get_logger(name: str = "demosmith") -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    Args:
        name: Logger name (usually module name)

    Returns:
        Bound logger instance
    """
    return structlog.get_logger(name)


def log_step(
    step_number: int,
    action: str,
    result: Optional[str] = None,
    error: Optional[str] = None,
    duration_ms: Optional[int] = None,
):
    """
    Log a recorded step with consistent formatting.

    Args:
        step_number: Sequence id of the step
        action: Action kind
        result: Optional description of what happened
        error: Optional error message
        duration_ms: Measured action duration
    """
    logger = get_logger("demosmith.steps")

    if error:
        logger.error(
            f"Step {step_number}: {action}",
            step=step_number,
            action=action,
            error=error,
            duration_ms=duration_ms,
        )
    else:
        logger.info(
            f"Step {step_number}: {action}",
            step=step_number,
            action=action,
            result=result,
            duration_ms=duration_ms,
        )


def log_browser_event(event_type: str, **details):
    """
    Log browser and viewport events with consistent formatting.

    Args:
        event_type: Type of browser event
        **details: Additional event details
    """
    logger = get_logger("demosmith.browser")
    logger.debug(f"Browser event: {event_type}", event_type=event_type, **details)
