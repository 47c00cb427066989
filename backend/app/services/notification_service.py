"""
Email notification service for new uploads.
Sends an HTML summary to the site owner over SMTP (Gmail by default).
"""
import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime
from email.message import EmailMessage
from typing import Optional, Sequence

from app.errors import NotificationError
from app.schemas.upload import StoredFileRecord

logger = logging.getLogger(__name__)

UPLOAD_SUBJECT = "💒 Yeni Düğün Anıları Yüklendi!"


def count_by_type(files: Sequence[StoredFileRecord]) -> tuple[int, int]:
    """
    Count stored files per media type.

    Returns:
        Tuple of (photo_count, audio_count)
    """
    photo_count = sum(1 for f in files if f.type == "photo")
    audio_count = sum(1 for f in files if f.type == "audio")
    return photo_count, audio_count


def format_turkish_datetime(moment: datetime) -> str:
    """Format a datetime the way the tr-TR locale prints it."""
    return moment.strftime("%d.%m.%Y %H:%M:%S")


def build_upload_email(
    folder_name: str,
    files: Sequence[StoredFileRecord],
    sent_at: datetime
) -> tuple[str, str]:
    """
    Build the upload notification email.

    Args:
        folder_name: Drive folder the files were written to
        files: Records of the stored files
        sent_at: Timestamp shown in the body

    Returns:
        Tuple of (subject, html_body)
    """
    photo_count, audio_count = count_by_type(files)
    html = f"""
        <h2>Düğün Anıları Sitenize Yeni Dosyalar Yüklendi!</h2>
        <p><strong>Klasör:</strong> {folder_name}</p>
        <p><strong>Fotoğraf Sayısı:</strong> {photo_count}</p>
        <p><strong>Ses Kaydı Sayısı:</strong> {audio_count}</p>
        <p><strong>Tarih:</strong> {format_turkish_datetime(sent_at)}</p>
        <br>
        <p>Google Drive'ınızda kontrol edebilirsiniz.</p>
        <p>💝 Düğün anıları siteniz</p>
    """
    return UPLOAD_SUBJECT, html


class Notifier(ABC):
    """Interface for sending a formatted message to a fixed recipient."""

    @property
    @abstractmethod
    def recipient(self) -> Optional[str]:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether sender credentials are available."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, html_body: str) -> None:
        """
        Send a message. Blocking.

        Raises:
            NotificationError: If the message could not be delivered
        """
        pass


class EmailNotifier(Notifier):
    """SMTP-over-SSL notifier using process-wide sender credentials."""

    def __init__(
        self,
        sender: Optional[str],
        password: Optional[str],
        recipient: Optional[str] = None,
        host: str = "smtp.gmail.com",
        port: int = 465,
        timeout: Optional[float] = None
    ):
        self.sender = sender
        self._password = password
        self._recipient = recipient or sender
        self.host = host
        self.port = port
        self.timeout = timeout

        if not self.is_configured():
            logger.warning(
                "Email notifications not configured. "
                "Set EMAIL_USER and EMAIL_PASS."
            )

    @classmethod
    def from_settings(cls, settings) -> "EmailNotifier":
        return cls(
            sender=settings.email_user,
            password=settings.email_pass,
            recipient=settings.notification_recipient,
            host=settings.smtp_host,
            port=settings.smtp_port,
            timeout=settings.notification_timeout_seconds,
        )

    @property
    def recipient(self) -> Optional[str]:
        return self._recipient

    def is_configured(self) -> bool:
        return bool(self.sender and self._password and self._recipient)

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        if not self.is_configured():
            raise NotificationError("Email notifier not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("Yeni dosyalar yüklendi.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self.sender, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email to {recipient}: {e}") from e
