"""Opt-in structlog setup for applications embedding auth-negotiation.

Library modules only call structlog.get_logger(__name__); importing the
package configures nothing. A host application without logging of its
own can call configure_logging(), or set CONFIGURE_LOGGING=true and let
HttpClient call it on construction.

Output is attached to the ``auth_negotiation`` logger, not the root
logger, so handlers installed by the host are left alone. JSON in
production, console output otherwise.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from auth_negotiation.config import Settings, settings as default_settings

PACKAGE_LOGGER = "auth_negotiation"

# Event keys whose values never reach a sink
SENSITIVE_KEYS = frozenset({"password", "token", "authorization", "proxy_authorization"})

_configured = False


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag events with the library name and version."""
    event_dict.setdefault("app", default_settings.APP_NAME)
    event_dict.setdefault("app_version", default_settings.APP_VERSION)
    return event_dict


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "***"
    return event_dict


def configure_logging(settings: Optional[Settings] = None, force: bool = False) -> bool:
    """Configure structlog and a stderr handler for the package loggers.

    Args:
        settings: Source of LOG_LEVEL and ENVIRONMENT
        force: Reconfigure even if logging was already set up

    Returns:
        True if logging was configured by this call
    """
    global _configured
    if _configured and not force:
        return False

    settings = settings or default_settings
    log_level_int = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    is_production = settings.ENVIRONMENT.lower() == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        redact_secrets,
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    handler.set_name(PACKAGE_LOGGER)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if existing.get_name() == PACKAGE_LOGGER:
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level_int)
    package_logger.propagate = False

    _configured = True
    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        renderer="json" if is_production else "console",
    )
    return True
