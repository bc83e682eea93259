"""
Structured logging using structlog with:
- JSON/console switchable format
- Request context (request_id, path, method, user_id, tenant_id) via contextvars
- Email redaction in staging/prod
- Security audit events
"""

from __future__ import annotations

import datetime
import logging
import logging.config
import re
import sys
from typing import Any, Dict, Iterable, Optional

import structlog

from adminportal.shared.config import Settings

# ---------------------------------------------------------------------
# PII redaction
# ---------------------------------------------------------------------


class PIIRedactionProcessor:
    """
    Structlog processor that masks the local part of email addresses
    anywhere inside event_dict (recursively).
    """
    P_EMAIL = re.compile(r"\b([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")

    def __call__(self, logger, method_name, event_dict):
        return self._redact(event_dict)

    def _redact(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._redact(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._redact(v) for v in value]
        if isinstance(value, str):
            return self.P_EMAIL.sub(lambda m: f"***@{m.group(2)}", value)
        return value


def _passthrough(logger, method_name, event_dict):
    return event_dict


def add_timestamp(logger, method_name, event_dict):
    event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")
    return event_dict


# ---------------------------------------------------------------------
# Public helpers to use from API code
# ---------------------------------------------------------------------


def bind_request_context(
    *,
    request_id: Optional[str] = None,
    path: Optional[str] = None,
    method: Optional[str] = None,
    user_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    role: Optional[str] = None,
    client_ip: Optional[str] = None,
) -> None:
    """Bind standard request context fields (call in middleware/route dependencies)."""
    payload = {
        k: v
        for k, v in dict(
            request_id=request_id,
            path=path,
            method=method,
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            client_ip=client_ip,
        ).items()
        if v is not None
    }
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_request_context() -> None:
    """Clear all bound contextvars (call at end of request)."""
    structlog.contextvars.clear_contextvars()


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------

def _resolve_log_format(settings: Settings) -> str:
    if settings.log_format in ("json", "console"):
        return settings.log_format
    return "console" if settings.is_local else "json"


def configure_logging(settings: Settings) -> None:
    """Idempotent structured logging configuration."""
    log_format = _resolve_log_format(settings)
    is_prod_like = settings.is_prod or settings.is_staging
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
                "console": {
                    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": log_format,
                    "stream": sys.stdout,
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
                "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
                "sqlalchemy.engine": {
                    "level": "WARNING" if is_prod_like or not settings.debug else "INFO",
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }
    )

    processors: Iterable[Any] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        PIIRedactionProcessor() if is_prod_like else _passthrough,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=list(processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


security_logger = structlog.get_logger("security")


def log_security_event(
    event_type: str,
    *,
    user_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> None:
    """Log security-relevant events (login, denials, deletions)."""
    security_logger.info(
        "security_event",
        event_type=event_type,
        user_id=user_id,
        tenant_id=tenant_id,
        details=details or {},
        **kwargs,
    )
