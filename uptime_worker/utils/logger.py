"""Structured logging utility with JSON and text format support."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(level)s %(name)s %(message)s'


def _build_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for the requested format ("json" or "text")."""
    if log_format == "json":
        return JsonFormatter(JSON_FORMAT, timestamp=True)
    return logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    console: bool = True
) -> None:
    """
    Configure structured logging for the worker process.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ("json" or "text")
        log_file: Path to log file (None for no file logging)
        console: Whether to log to console
        
    Example:
        ```python
        setup_logging(level="INFO", log_format="json", log_file="logs/worker.log")
        logger = get_logger(__name__)
        logger.info("Worker started", extra={"version": "1.0.0"})
        ```
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = _build_formatter(log_format)
    
    handlers = []
    
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    
    # Application logs and per-check probe logs live in different places;
    # this only configures the former.
    logging.basicConfig(
        level=numeric_level,
        handlers=handlers,
        force=True
    )
    
    # aiohttp and apscheduler are chatty at INFO
    logging.getLogger("apscheduler").setLevel(max(numeric_level, logging.WARNING))
    logging.getLogger("aiohttp.access").setLevel(max(numeric_level, logging.WARNING))
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.
    
    Args:
        name: Logger name (usually __name__ of the module)
        
    Returns:
        logging.Logger: Configured logger instance
        
    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Probe completed", extra={"check_id": check.id, "state": "up"})
        ```
    """
    return logging.getLogger(name)
