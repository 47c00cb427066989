"""
Domain exceptions raised by the upload flow.

Each error carries a stable ``kind`` that is safe to return to clients;
the message may contain provider details and is only logged unless the
deployment opts into exposing it.
"""


class UploadError(Exception):
    """Base class for upload relay errors."""

    kind = "upload_error"


class UploadValidationError(UploadError):
    """The multipart payload breaks a count, size or content-type limit."""

    kind = "validation_error"

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class StorageError(UploadError):
    """Folder lookup, folder creation or a file write failed."""

    kind = "storage_error"


class StorageTimeoutError(StorageError):
    """A storage call did not finish within the configured timeout."""

    kind = "storage_timeout"


class NotificationError(UploadError):
    """Sending the upload notification failed."""

    kind = "notification_error"
