"""
Service Logger Setup

Configures standard-library logging once per service process.

Usage:
    from core.logger import setup_service_logger
    logger = setup_service_logger("shipment_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig

_configured = False


def setup_service_logger(
    service_name: str,
    level: str = "INFO",
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure root logging for a service and return the service logger.

    Args:
        service_name: Logger name for the service
        level: Log level name (DEBUG, INFO, ...)
        log_format: Format string (defaults to LoggingConfig.log_format)
        log_file: Optional file to log to in addition to stdout

    Returns:
        Logger named after the service
    """
    global _configured

    logging_config = LoggingConfig.from_env()
    fmt = log_format or logging_config.log_format
    target_file = log_file if log_file is not None else logging_config.log_file

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not _configured:
        formatter = logging.Formatter(fmt)

        if logging_config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if target_file:
            file_handler = logging.FileHandler(target_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        _configured = True

    return logging.getLogger(service_name)


__all__ = ["setup_service_logger"]
