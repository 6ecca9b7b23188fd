"""Public observability primitives: structured logging setup."""

from shapeclone.observability.logging import setup_logging, shutdown_logging

__all__ = ["setup_logging", "shutdown_logging"]
