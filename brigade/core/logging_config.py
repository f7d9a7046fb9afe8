"""
Logging configuration and context-aware log helpers.
"""
import logging
import logging.handlers
from enum import Enum
from pathlib import Path


class LogCategory(str, Enum):
    """Logger names used across the service."""
    APP = "app"
    REQUEST = "app.request"
    USER_ACTIONS = "app.user_actions"
    ERRORS = "app.errors"
    DB = "app.db"
    STORE = "app.store"


DEFAULT_LOG_LEVEL = logging.INFO
MASK = '***MASKED***'

# Substrings of context keys whose values never reach the logs
SENSITIVE_FIELDS = {
    'password',
    'token',
    'authorization',
    'secret',
    'service_key',
    'servicekey',
    'apikey',
    'api_key',
    'database_url',
    'redis_url',
}


def _sanitize_data(data):
    """
    Mask sensitive values in log context.

    Dict keys matching SENSITIVE_FIELDS are masked, containers are walked
    recursively and credentials embedded in connection URLs are hidden.
    """
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                sanitized[key] = MASK
            else:
                sanitized[key] = _sanitize_data(value)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [_sanitize_data(item) for item in data]

    if isinstance(data, str) and '://' in data and '@' in data:
        scheme, rest = data.split('://', 1)
        credentials, host = rest.rsplit('@', 1)
        if ':' in credentials:
            user = credentials.split(':', 1)[0]
            return f"{scheme}://{user}:***@{host}"
        return data

    return data


def _resolve_log_level(level_value, default=DEFAULT_LOG_LEVEL):
    """Resolve a string/integer log level; returns (level, used_default)."""
    if isinstance(level_value, str):
        candidate = level_value.strip()
        if not candidate:
            return default, True
        level_value = int(candidate) if candidate.isdigit() else candidate.upper()
    try:
        return logging._checkLevel(level_value), False
    except (ValueError, TypeError):
        return default, True


def _get_settings():
    """Lazy import to avoid circular dependency with config module."""
    from brigade.core.config import settings
    return settings


def setup_logging():
    """Configure root, console and optional rotating file handlers."""
    settings = _get_settings()

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    resolved_level, used_default_level = _resolve_log_level(settings.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(resolved_level)
    root_logger.addHandler(console_handler)

    log_file = None
    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "brigade.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(resolved_level)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(resolved_level)
    logging.getLogger(LogCategory.APP.value).setLevel(resolved_level)
    logging.getLogger(LogCategory.DB.value).setLevel(logging.INFO)

    # Third-party noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    if used_default_level:
        logger.warning(
            "Invalid log level '%s' in configuration, falling back to INFO",
            settings.log_level
        )
    logger.info("Logging configured - Level: %s", logging.getLevelName(resolved_level))
    if log_file:
        logger.info(f"File logging: {log_file}")


def _log_with_context(logger: logging.Logger, level: int, message: str, request_id: str = None, exc_info: bool = False, **kwargs):
    """Prefix the request id and append sanitized key=value context."""
    log_message = f"[{request_id}] {message}" if request_id else message
    if kwargs:
        context = _sanitize_data(kwargs)
        log_message = f"{log_message} ({', '.join(f'{k}={v}' for k, v in context.items())})"
    logger.log(level, log_message, exc_info=exc_info)


def log_user_action(user_id: str, action: str, request_id: str = None, **kwargs):
    """Log user actions with request ID."""
    logger = logging.getLogger(LogCategory.USER_ACTIONS.value)
    _log_with_context(logger, logging.INFO, f"User {user_id} {action}", request_id, **kwargs)


def log_info(message: str, request_id: str = None, **kwargs):
    logger = logging.getLogger(LogCategory.APP.value)
    _log_with_context(logger, logging.INFO, message, request_id, **kwargs)


def log_debug(message: str, request_id: str = None, **kwargs):
    logger = logging.getLogger(LogCategory.APP.value)
    _log_with_context(logger, logging.DEBUG, message, request_id, **kwargs)


def log_warning(message: str, request_id: str = None, **kwargs):
    logger = logging.getLogger(LogCategory.APP.value)
    _log_with_context(logger, logging.WARNING, message, request_id, **kwargs)


def log_error(error: Exception | str, request_id: str = None, user_id: str = None, **kwargs):
    """Log errors with request ID.

    Tracebacks are attached only when ``error`` is an actual exception.
    """
    logger = logging.getLogger(LogCategory.ERRORS.value)
    user_info = f" (user: {user_id})" if user_id else ""
    message = f"Error: {error}{user_info}"
    _log_with_context(
        logger, logging.ERROR, message, request_id,
        exc_info=isinstance(error, Exception), **kwargs
    )
