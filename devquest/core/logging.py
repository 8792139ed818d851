"""Structured logging setup using structlog with sync context."""

import logging
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

# User and sync identifiers for the sync currently being processed
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
sync_id_var: ContextVar[str] = ContextVar("sync_id", default="")


def add_sync_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add user and sync IDs to log event if set."""
    user_id = user_id_var.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)
    sync_id = sync_id_var.get()
    if sync_id:
        event_dict["sync_id"] = sync_id
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the engine.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_sync_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def set_sync_context(user_id: str | int, sync_id: str = "") -> None:
    """Set user and sync IDs for the current context.

    Args:
        user_id: User whose stats are being processed
        sync_id: Optional identifier of the sync run
    """
    user_id_var.set(str(user_id))
    sync_id_var.set(sync_id)


def clear_sync_context() -> None:
    """Reset user and sync IDs for the current context."""
    user_id_var.set("")
    sync_id_var.set("")


def get_sync_id() -> str:
    """Get sync ID from the current context.

    Returns:
        Current sync ID or empty string if not set
    """
    return sync_id_var.get()
