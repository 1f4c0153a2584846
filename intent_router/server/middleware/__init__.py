"""Request tracing middleware for the intent router server."""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
