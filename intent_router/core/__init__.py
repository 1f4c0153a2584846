"""
Core utilities and configuration for the intent router.

This package provides logging configuration and logfire monitoring helpers
shared by the agent core and the HTTP server.
"""

from intent_router.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
