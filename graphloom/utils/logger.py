"""Centralized logging configuration using loguru."""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from .config import LoggingConfig, get_config


def setup_logger(log_config: LoggingConfig | None = None) -> None:
    """Configure logger based on configuration settings.

    Sets up file and console logging with appropriate formatting and rotation.
    Falls back to the loaded process config, then to defaults.
    """
    if log_config is None:
        try:
            log_config = get_config().logging
        except RuntimeError:
            # If config not loaded yet, use defaults
            log_config = LoggingConfig()

    log_level = log_config.level
    log_file = log_config.file
    log_format = log_config.format

    # Remove default logger
    logger.remove()

    # Console logging with colors
    if log_format == "json":
        console_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        console_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
        )

    logger.add(
        sys.stderr,
        format=console_format,
        level=log_level,
        colorize=True,
    )

    # File logging with rotation
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if log_format == "json":
        logger.add(
            log_file,
            format="{message}",
            level=log_level,
            rotation=f"{log_config.max_size_mb} MB",
            retention=log_config.backup_count,
            compression="zip",
            serialize=True,  # JSON format
        )
    else:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level=log_level,
            rotation=f"{log_config.max_size_mb} MB",
            retention=log_config.backup_count,
            compression="zip",
        )

    logger.info("Logger configured successfully", level=log_level, format=log_format)


def log_error(error: Exception, context: str = "") -> None:
    """Log an error with context.

    Args:
        error: The exception that occurred
        context: Additional context about where the error occurred
    """
    logger.opt(exception=error).error(
        "Error occurred: {}",
        str(error),
        error_type=type(error).__name__,
        context=context,
    )


def log_metric(metric_name: str, value: float, **tags: Any) -> None:
    """Log a metric value.

    Args:
        metric_name: Name of the metric
        value: Metric value
        **tags: Additional tags for the metric
    """
    logger.bind(metric=metric_name, value=value, **tags).info("Metric: {}", metric_name)
