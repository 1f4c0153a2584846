"""
Logfire integration for the intent router.

``initialize_logfire`` configures Pydantic Logfire and instruments the
libraries the router talks through (pydantic-ai planner calls, SQLAlchemy,
HTTPX and the FastAPI app). The ``log_*`` helpers record router events:
prompt submissions, policy violations, plan executions, API requests and
errors.

Monitoring is best-effort: a helper that cannot reach Logfire logs the failure
at debug level and returns normally.
"""

import logging
import os
from typing import Any, Dict, Optional, Sequence, Tuple

from fastapi import FastAPI

from intent_router.agent_core.schemas.domain import PlanExecutionResult, PolicyViolation

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


LOGFIRE_ENABLED = _env_flag("LOGFIRE_ENABLED", "false")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_PROJECT_NAME = os.getenv("LOGFIRE_PROJECT_NAME", "intent-router")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "intent-router-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

# (logfire instrument function, env flag, label)
INSTRUMENTATIONS: Tuple[Tuple[str, str, str], ...] = (
    ("instrument_pydantic_ai", "LOGFIRE_TRACE_PYDANTIC_AI", "planner model calls"),
    ("instrument_sqlalchemy", "LOGFIRE_TRACE_SQLALCHEMY", "SQLAlchemy"),
    ("instrument_httpx", "LOGFIRE_TRACE_HTTPX", "HTTPX"),
    ("instrument_fastapi", "LOGFIRE_TRACE_FASTAPI", "FastAPI"),
)


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Configure Logfire and enable the instrumentations switched on by env flags.

    Nothing happens unless ``LOGFIRE_ENABLED`` is true and ``LOGFIRE_TOKEN`` is
    set. A failing instrumentation is skipped with a warning. FastAPI is only
    instrumented when ``app`` is given.

    Returns:
        True when Logfire was configured.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire disabled (LOGFIRE_ENABLED is not set)")
        return False
    if not LOGFIRE_TOKEN:
        logger.warning("LOGFIRE_ENABLED is set without LOGFIRE_TOKEN; Logfire stays off")
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Logfire configuration failed: {e}", exc_info=True)
        return False

    for func_name, flag, label in INSTRUMENTATIONS:
        if not _env_flag(flag, "true"):
            continue
        kwargs: Dict[str, Any] = {}
        if func_name == "instrument_fastapi":
            if app is None:
                continue
            kwargs["app"] = app
        try:
            getattr(logfire, func_name)(**kwargs)
            logger.info(f"Logfire tracing {label}")
        except Exception as e:
            logger.warning(f"Logfire could not instrument {label}: {e}")

    logger.info(f"Logfire ready for {LOGFIRE_PROJECT_NAME} ({LOGFIRE_ENVIRONMENT}, service {LOGFIRE_SERVICE_NAME})")
    return True


def log_prompt_submitted(prompt_id: str, status: str, step_count: int, confidence: Optional[float]) -> None:
    """
    Log the outcome of a prompt submission.

    Args:
        prompt_id: The stored prompt id
        status: The submission status (approved, policy_violation, planning_failed)
        step_count: Number of planned steps
        confidence: Planner confidence, when a plan was produced
    """
    try:
        import logfire

        logfire.info(
            "Prompt submitted",
            prompt_id=prompt_id,
            status=status,
            step_count=step_count,
            confidence=confidence,
        )
    except Exception:
        logger.debug(f"Could not log prompt submission to Logfire: prompt_id={prompt_id}")


def log_plan_execution(result: PlanExecutionResult, duration_ms: float) -> None:
    try:
        import logfire

        logfire.info(
            "Plan execution finished",
            plan_id=result.plan_id,
            status=result.status.value,
            executed_steps=result.executed_steps,
            failed_steps=result.failed_steps,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log plan execution to Logfire: plan_id={result.plan_id}")


def log_policy_violations(prompt_id: str, violations: Sequence[PolicyViolation]) -> None:
    """Record each violation of a rejected plan."""
    if not violations:
        return
    try:
        import logfire

        for v in violations:
            logfire.warn(
                "Policy violation",
                prompt_id=prompt_id,
                step_index=v.step_index,
                violation_type=v.violation_type.value,
                required=list(v.required),
                available=list(v.available),
            )
    except Exception:
        logger.debug(f"Could not log policy violations to Logfire: prompt_id={prompt_id}")


def log_error(error_type: str, error_message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Report an error that reached the API boundary, with request context attributes."""
    try:
        import logfire

        logfire.error("{error_type}: {error_message}", error_type=error_type, error_message=error_message, **(context or {}))
    except Exception:
        logger.debug(f"Logfire unavailable for error report: {error_type}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    try:
        import logfire

        logfire.info(
            "{method} {path} -> {status_code}",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Logfire unavailable for request log: {method} {path}")
