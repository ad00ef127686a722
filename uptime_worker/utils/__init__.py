"""Utility modules for Uptime Worker."""

from uptime_worker.utils.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
