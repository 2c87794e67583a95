"""Structured logging configuration.

JSON logs with automatic context binding. Uses structlog with stdlib integration.
Request-scoped context (like request_id) is automatically included in all logs
via structlog.contextvars.

Routes log through ``ApiLogger``, a thin namespaced wrapper exposing the
leveled methods plus three domain helpers (request received, response sent,
database query). Every method is fire-and-forget: a failure while emitting
never reaches the request being served.
"""

import logging
import logging.config
import sys
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger

REDACTED = "[REDACTED]"
SECRET_KEYS = frozenset(
    {"password", "confirmPassword", "confirm_password", "access_token", "refresh_token", "token"}
)
MAX_QUERY_DESCRIPTION = 100


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO 8601 UTC timestamp with timezone offset."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def redact_secrets(value: Any) -> Any:
    """Return ``value`` with secret-looking keys masked at any depth."""
    if isinstance(value, Mapping):
        return {
            key: REDACTED if key in SECRET_KEYS else redact_secrets(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact_secrets(item) for item in value]
    return value


def _redact(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask passwords and tokens wherever they appear in the event."""
    return redact_secrets(event_dict)


class LoggingSettings(BaseSettings):
    """Logging settings from environment variables."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", alias="LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def configure_logging(settings: LoggingSettings) -> None:
    """Configure structlog with JSON (or console) output to stdout.

    Call once at application startup. After this, all loggers created via
    get_logger() render with automatic context binding.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _redact,
    ]

    renderer: Any = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer(default=str)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.processors.EventRenamer("message"),
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": processors,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": settings.log_level,
                    "propagate": True,
                },
            },
        }
    )


# Configure once at module import
_settings = LoggingSettings()
configure_logging(_settings)


class ApiLogger:
    """Namespaced logger used by route handlers.

    The namespace (e.g. ``"api:tracks:[id]"``) is cosmetic: it becomes the
    ``logger`` field of every record and carries no routing logic. Instances
    are cheap and stateless apart from the namespace, so routes create a fresh
    one per request.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        self._logger: BoundLogger = structlog.get_logger(namespace)

    def _emit(self, level: str, message: str, metadata: dict[str, Any]) -> None:
        try:
            getattr(self._logger, level)(message, **metadata)
        except Exception:
            # Logging must never break the request; report like logging.Handler.handleError.
            traceback.print_exc(file=sys.stderr)

    def debug(self, message: str, **metadata: Any) -> None:
        self._emit("debug", message, metadata)

    def info(self, message: str, **metadata: Any) -> None:
        self._emit("info", message, metadata)

    def warn(self, message: str, **metadata: Any) -> None:
        self._emit("warning", message, metadata)

    def error(self, message: str, **metadata: Any) -> None:
        self._emit("error", message, metadata)

    def api_request(self, method: str, path: str, **extra: Any) -> None:
        self.info(f"{method} {path}", type="api_request", method=method, path=path, **extra)

    def api_response(self, method: str, path: str, status: int, duration_ms: float) -> None:
        metadata = {
            "type": "api_response",
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
        }
        message = f"{method} {path} - {status}"
        if status >= 500:
            self.error(message, **metadata)
        elif status >= 400:
            self.warn(message, **metadata)
        else:
            self.info(message, **metadata)

    def db_query(self, description: str, duration_ms: float, **extra: Any) -> None:
        if len(description) > MAX_QUERY_DESCRIPTION:
            description = description[:MAX_QUERY_DESCRIPTION] + "..."
        self.debug(
            "Database query executed",
            type="db_query",
            description=description,
            duration_ms=round(duration_ms, 2),
            **extra,
        )


def get_logger(name: str) -> ApiLogger:
    """Get a structured, namespaced logger.

    Args:
        name: Namespace, e.g. ``"api:playlists"`` or ``__name__``

    Example:
        logger = get_logger("api:tracks:[id]")
        logger.api_request("GET", "/api/tracks/123")
        # Output: {"message": "GET /api/tracks/123", "type": "api_request", ...}
    """
    return ApiLogger(name)
