"""Uptime Worker - periodic HTTP health checks with SMS alerts on state changes."""

__version__ = "1.0.0"
