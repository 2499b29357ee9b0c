# questclient/utils/logging.py
"""
Logging Configuration

Configures structured JSON logging with structlog.

Version: 1.0.0
"""
import logging
import structlog
import sys
import threading

from questclient.utils.constants import LOG_FIELD_MAX_LENGTH

# Explicit public API
__all__ = [
    "setup_logging",
    "get_logger",
    "is_logging_configured",
    "clear_logging_context",
]

# Module-level state to track configuration (thread-safe)
_logging_configured = False
_logging_lock = threading.Lock()

# Sensitive field names to redact from logs
_SENSITIVE_KEYS = {
    "password",
    "token",
    "access_token",
    "personal_access_token",
    "secret",
    "pat",
    "credential",
    "credentials",
    "auth",
    "authorization",
}


def _sanitize_sensitive_data(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    """
    Sanitize sensitive fields before logging.

    Replaces values of sensitive keys with '***REDACTED***'.
    """
    for key in list(event_dict.keys()):
        if key.lower() in _SENSITIVE_KEYS or "secret" in key.lower():
            event_dict[key] = "***REDACTED***"
    return event_dict


def _sanitize_log_values(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    """
    Sanitize and truncate log field values.

    - Removes null bytes and control characters
    - Truncates excessively long values
    """
    for key, value in list(event_dict.items()):
        if key == "event" or not isinstance(value, str):
            continue
        value = "".join(
            char for char in value if char.isprintable() or char in "\n\t"
        )
        if len(value) > LOG_FIELD_MAX_LENGTH:
            value = value[:LOG_FIELD_MAX_LENGTH] + "...[truncated]"
        event_dict[key] = value
    return event_dict


def is_logging_configured() -> bool:
    """Check if setup_logging() has been called successfully."""
    return _logging_configured


def clear_logging_context() -> None:
    """
    Clear all bound context variables.

    Call before binding per-command context so values from a previous
    invocation in the same process do not leak into new log lines.
    """
    structlog.contextvars.clear_contextvars()


def setup_logging(log_level: str = "INFO", force: bool = False) -> None:
    """
    Configure structured logging.

    Key features:
    - JSON output on stderr
    - Context binding (work_item_id, command, etc.)
    - Idempotent - safe to call multiple times
    - Sensitive data sanitization (tokens, authorization headers)
    - Log value truncation to prevent bloat

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        force: If True, reconfigure even if already configured

    Raises:
        ValueError: If log_level is not a valid logging level
    """
    global _logging_configured

    with _logging_lock:
        if _logging_configured and not force:
            return

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        log_level_upper = log_level.upper()

        if log_level_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {log_level}. "
                f"Must be one of: {', '.join(sorted(valid_levels))}"
            )

        # Order matters: redaction must run before rendering
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _sanitize_log_values,
            _sanitize_sensitive_data,
            structlog.processors.JSONRenderer(),
        ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(
                getattr(logging, log_level_upper)
            ),
            logger_factory=structlog.PrintLoggerFactory(sys.stderr),
            cache_logger_on_first_use=True,
        )

        # aiohttp and other libraries log through the standard library
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level_upper))

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(getattr(logging, log_level_upper))
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

        _logging_configured = True

    logger = structlog.get_logger(__name__)
    logger.info("logging_configured", log_level=log_level_upper, structured=True)


def get_logger(name: str) -> structlog.BoundLoggerBase:
    """
    Get a configured structlog logger.

    Modules should use this instead of importing structlog directly.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog BoundLogger instance

    Example:
        from questclient.utils.logging import get_logger
        logger = get_logger(__name__)
        logger.info("work_item_fetched", work_item_id=42)
    """
    return structlog.get_logger(name)
