"""
Intent Router Server Package.

This package contains the web server for the intent router.
It includes the API definition, configuration and the service layer wiring.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Settings, constants and database connections.
    exception_handlers: Mapping of domain errors to HTTP responses.
    middleware: Request tracing.
    services: Orchestrator dependency wrapping the router core.
"""
