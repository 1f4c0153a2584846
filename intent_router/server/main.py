"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intent_router.core.logging_config import get_logger, setup_logging
from intent_router.core.monitoring import initialize_logfire

from .api.v1 import (
    capabilities,
    entities,
    events,
    health,
    operations,
    plans,
    prompts,
    tool_providers,
)
from .core import constant
from .core.config import settings
from .core.database import init_db
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.orchestrator import get_orchestrator

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    On startup the database schema is created (development convenience) and
    the capability registry is bootstrapped from the system capability set
    and the persisted custom capabilities.
    """
    logger.info("Starting up Intent Router Server...")
    await init_db()
    logger.info("Database initialized successfully")
    await get_orchestrator().startup()
    logger.info("Capability registry bootstrapped")

    yield

    logger.info("Shutting down Intent Router Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Intent Router Server API

    Turns natural-language prompts into capability-checked plans and executes
    them step by step, recording an append-only event log with data lineage.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, prefix=constant.API_V1_STR, tags=["health"])
app.include_router(prompts.router, prefix=f"{constant.API_V1_STR}/prompts", tags=["prompts"])
app.include_router(plans.router, prefix=f"{constant.API_V1_STR}/plans", tags=["plans"])
app.include_router(entities.router, prefix=f"{constant.API_V1_STR}/entities", tags=["entities"])
app.include_router(events.router, prefix=f"{constant.API_V1_STR}/events", tags=["events"])
app.include_router(capabilities.router, prefix=f"{constant.API_V1_STR}/capabilities", tags=["capabilities"])
app.include_router(tool_providers.router, prefix=f"{constant.API_V1_STR}/tool-providers", tags=["tool-providers"])
app.include_router(operations.router, prefix=f"{constant.API_V1_STR}/operations", tags=["operations"])
