"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- folder_name
- file_count
- duration_ms

Usage:
    from app.utils.logging import configure_logging, log_upload_completed

    configure_logging('memories-api', 'INFO')
    log_upload_completed(logger, folder_name='DugunAnilari_2024-06-01', file_count=3, duration_ms=812.4)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        # Create JSON formatter
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Create console handler (for docker logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        # Configure root logger
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    folder_name: Optional[str] = None,
    file_count: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        folder_name: Optional destination folder name
        file_count: Optional number of files involved
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if folder_name:
        extra["folder_name"] = folder_name
    if file_count is not None:
        extra["file_count"] = file_count
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Folder event functions

def log_folder_resolved(
    logger: logging.Logger,
    folder_name: str,
    folder_id: str,
    created: bool,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log resolution of the daily upload folder.

    Args:
        logger: Logger instance
        folder_name: Folder name (required)
        folder_id: Provider folder ID (required)
        created: True if the folder was created by this request
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="folder_resolved",
        folder_name=folder_name,
        duration_ms=duration_ms,
        folder_id=folder_id,
        folder_created=created,
        **kwargs
    )

    action = "created" if created else "reused"
    logger.info(f"Folder {action}: {folder_name} ({folder_id})", extra=extra)


# Upload event functions

def log_upload_completed(
    logger: logging.Logger,
    folder_name: str,
    file_count: int,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a successfully relayed upload."""
    extra = _build_log_extra(
        event="upload_completed",
        folder_name=folder_name,
        file_count=file_count,
        duration_ms=duration_ms,
        **kwargs
    )

    logger.info(f"Upload completed: {file_count} files in {folder_name}", extra=extra)


def log_upload_failed(
    logger: logging.Logger,
    error: str,
    kind: str,
    folder_name: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log upload failure event.

    Args:
        logger: Logger instance
        error: Error message (required)
        kind: Error kind returned to the client (required)
        folder_name: Optional folder name
        duration_ms: Optional duration in milliseconds
        include_traceback: Whether to include stack trace (default: True for errors)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_failed",
        folder_name=folder_name,
        duration_ms=duration_ms,
        kind=kind,
        error=str(error),
        **kwargs
    )

    message = f"Upload failed ({kind}): {error}"

    # Include stack trace for errors (production-safe)
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


# Notification event functions

def log_notification_sent(
    logger: logging.Logger,
    folder_name: str,
    recipient: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a delivered upload notification."""
    extra = _build_log_extra(
        event="notification_sent",
        folder_name=folder_name,
        duration_ms=duration_ms,
        recipient=recipient,
        **kwargs
    )

    logger.info(f"Notification sent to {recipient}", extra=extra)


def log_notification_failed(
    logger: logging.Logger,
    folder_name: str,
    error: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log notification failure event.

    Notification failures never fail the upload, so they are logged as
    warnings without stack trace.
    """
    extra = _build_log_extra(
        event="notification_failed",
        folder_name=folder_name,
        duration_ms=duration_ms,
        error=str(error),
        **kwargs
    )

    logger.warning(f"Notification failed for {folder_name}: {error}", extra=extra)


# Entry point used by the app lifespan
def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
