"""Core check pipeline and background workers for Uptime Worker."""
