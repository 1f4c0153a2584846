"""
Exception handlers for the intent router server.

This package contains the mapping of domain errors to HTTP responses and a
global fallback handler, plus a setup function to register them with the
FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
