"""
Business logic services.
"""
from app.services.notification_service import EmailNotifier, Notifier
from app.services.upload_intake import UploadBatch, UploadedFilePart, UploadIntake, UploadLimits
from app.services.upload_service import UploadService

__all__ = [
    "EmailNotifier",
    "Notifier",
    "UploadBatch",
    "UploadedFilePart",
    "UploadIntake",
    "UploadLimits",
    "UploadService",
]
