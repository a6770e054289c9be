from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

PACKAGE = "session_scheduler"


def add_component(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag events with the module that emitted them, e.g. `controller` or `scheduler`."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith(f"{PACKAGE}."):
        event_dict["component"] = logger_name.rsplit(".", 1)[-1]
    return event_dict


def setup_logging(log_level: str = "INFO", debug: bool = False) -> None:
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_component,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Token endpoint calls are logged by the authenticator itself
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
