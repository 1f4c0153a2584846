"""
Logging setup for the intent router.

``setup_logging`` installs one console handler on the root logger (and a
DEBUG file handler when file logging is on) and applies ``MODULE_LOG_LEVELS``.
Calling it again replaces the handlers instead of stacking new ones.

Defaults come from the server settings; when those cannot be loaded the
``INTENT_ROUTER_LOG_LEVEL``, ``LOG_FORMAT``, ``LOG_FILE_DIR`` and
``ENABLE_FILE_LOGGING`` environment variables are read directly.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional


def _get_logging_config() -> Dict[str, Any]:
    # Deferred so intent_router.core imports without loading server settings.
    try:
        from intent_router.server.core.config import settings

        return {
            "log_level": settings.log_level.upper(),
            "log_format": settings.log_format,
            "log_file_dir": settings.log_file_dir,
            "enable_file_logging": settings.enable_file_logging,
        }
    except Exception:
        return {
            "log_level": os.getenv("INTENT_ROUTER_LOG_LEVEL", "INFO").upper(),
            "log_format": os.getenv("LOG_FORMAT", "detailed"),
            "log_file_dir": os.getenv("LOG_FILE_DIR", "logs"),
            "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes"),
        }


SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

FORMATS = {"simple": SIMPLE_FORMAT, "detailed": DETAILED_FORMAT, "json": JSON_FORMAT}

LOG_FILE_NAME = "intent_router.log"

MODULE_LOG_LEVELS = {
    "intent_router.agent_core": "DEBUG",
    "intent_router.agent_core.capabilities": "INFO",
    "intent_router.agent_core.planning": "DEBUG",
    "intent_router.agent_core.policy": "DEBUG",
    "intent_router.agent_core.providers": "DEBUG",
    "intent_router.agent_core.repos": "INFO",
    "intent_router.agent_core.runtime": "DEBUG",
    "intent_router.agent_core.service": "DEBUG",
    "intent_router.server": "INFO",
    "intent_router.server.api": "DEBUG",
    "intent_router.server.services": "DEBUG",
    "intent_router.server.core": "INFO",
    # noisy dependencies
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "mcp": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _handler(handler: logging.Handler, level: str | int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
) -> None:
    """
    Configure root logging.

    Args:
        log_level: Console level; defaults to the configured level.
        log_format: ``simple``, ``detailed`` or ``json``. Unknown names fall
            back to ``detailed``.
        enable_file: Write DEBUG logs to ``LOG_FILE_NAME`` under the configured
            log directory.
    """
    config = _get_logging_config()
    level = (log_level or config["log_level"]).upper()
    fmt_name = log_format or config["log_format"]
    to_file = config["enable_file_logging"] if enable_file is None else enable_file
    formatter = logging.Formatter(FORMATS.get(fmt_name, DETAILED_FORMAT), datefmt="%Y-%m-%d %H:%M:%S")

    handlers = [_handler(logging.StreamHandler(), level, formatter)]
    if to_file:
        log_dir = Path(config["log_file_dir"])
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(logging.FileHandler(log_dir / LOG_FILE_NAME), logging.DEBUG, formatter))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)

    for name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(module_level)

    root.info(f"Logging configured: level={level}, format={fmt_name}, file_logging={to_file}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
