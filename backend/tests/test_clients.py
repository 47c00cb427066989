"""
Tests for the Google Drive and email clients.
External libraries are mocked; no network access.
"""
import json
import smtplib
from datetime import datetime
from unittest.mock import patch, MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from app.errors import NotificationError, StorageError
from app.schemas.upload import StoredFileRecord
from app.services.notification_service import (
    EmailNotifier,
    build_upload_email,
    count_by_type,
    format_turkish_datetime,
)
from app.storage.base import Folder
from app.storage.drive_client import (
    GoogleDriveClient,
    UnconfiguredStorageClient,
    load_service_account_credentials,
)


@pytest.fixture
def drive():
    """GoogleDriveClient with the discovery service and transport mocked."""
    with patch("app.storage.drive_client.build") as mock_build, \
            patch("google_auth_httplib2.AuthorizedHttp"):
        service = MagicMock()
        mock_build.return_value = service
        client = GoogleDriveClient(credentials=MagicMock(), timeout=5)
        yield client, service


def http_error(status: int, message: str) -> HttpError:
    content = json.dumps({"error": {"message": message}}).encode()
    return HttpError(resp=httplib2.Response({"status": status}), content=content)


class TestGoogleDriveClient:
    """Tests for GoogleDriveClient."""

    def test_find_folder_returns_first_match(self, drive):
        """Test folder lookup maps the first file."""
        client, service = drive
        service.files.return_value.list.return_value.execute.return_value = {
            "files": [{"id": "f1", "name": "DugunAnilari_2024-06-01"}]
        }

        folder = client.find_folder("DugunAnilari_2024-06-01")

        assert folder == Folder(id="f1", name="DugunAnilari_2024-06-01")
        query = service.files.return_value.list.call_args.kwargs["q"]
        assert "name='DugunAnilari_2024-06-01'" in query
        assert "mimeType='application/vnd.google-apps.folder'" in query
        assert "trashed=false" in query

    def test_find_folder_none(self, drive):
        """Test lookup miss returns None."""
        client, service = drive
        service.files.return_value.list.return_value.execute.return_value = {"files": []}
        assert client.find_folder("missing") is None

    def test_find_folder_escapes_quotes(self, drive):
        """Test names with quotes cannot break the query."""
        client, service = drive
        service.files.return_value.list.return_value.execute.return_value = {"files": []}

        client.find_folder("O'Brien")

        query = service.files.return_value.list.call_args.kwargs["q"]
        assert "name='O\\'Brien'" in query

    def test_create_folder(self, drive):
        """Test folder creation body."""
        client, service = drive
        service.files.return_value.create.return_value.execute.return_value = {"id": "f2", "name": "X"}

        folder = client.create_folder("X")

        assert folder.id == "f2"
        body = service.files.return_value.create.call_args.kwargs["body"]
        assert body == {"name": "X", "mimeType": "application/vnd.google-apps.folder"}

    def test_write_file(self, drive):
        """Test file upload returns id and web view link."""
        client, service = drive
        service.files.return_value.create.return_value.execute.return_value = {
            "id": "b1", "name": "Foto_1_1.jpg", "webViewLink": "https://drive.google.com/file/d/b1/view"
        }

        blob = client.write_file("Foto_1_1.jpg", "f1", "image/jpeg", b"data")

        assert blob.id == "b1"
        assert blob.link == "https://drive.google.com/file/d/b1/view"
        kwargs = service.files.return_value.create.call_args.kwargs
        assert kwargs["body"] == {"name": "Foto_1_1.jpg", "parents": ["f1"]}
        assert kwargs["fields"] == "id,name,webViewLink"
        assert kwargs["media_body"].mimetype() == "image/jpeg"

    def test_http_error_becomes_storage_error(self, drive):
        """Test Drive API errors are wrapped."""
        client, service = drive
        service.files.return_value.create.return_value.execute.side_effect = http_error(403, "Quota exceeded")

        with pytest.raises(StorageError, match="file upload failed"):
            client.write_file("a.jpg", "f1", "image/jpeg", b"data")

    def test_transport_error_becomes_storage_error(self, drive):
        """Test socket failures are wrapped."""
        client, service = drive
        service.files.return_value.list.return_value.execute.side_effect = TimeoutError("timed out")

        with pytest.raises(StorageError, match="folder lookup failed"):
            client.find_folder("x")

    def test_folder_link(self, drive):
        """Test shareable folder URL."""
        client, _ = drive
        assert client.folder_link("f1") == "https://drive.google.com/drive/folders/f1"


class TestCredentialLoading:
    """Tests for service account credential loading."""

    def test_invalid_source_raises(self):
        """Test a missing path that is not JSON."""
        with pytest.raises(ValueError, match="valid file path or JSON"):
            load_service_account_credentials("/nope/credentials.json", ["scope"])

    def test_json_string(self):
        """Test inline JSON is parsed into credentials."""
        info = {"type": "service_account", "client_email": "a@b.iam.gserviceaccount.com"}
        with patch("app.storage.drive_client.service_account.Credentials.from_service_account_info") as mock_info:
            load_service_account_credentials(json.dumps(info), ["scope"])
        mock_info.assert_called_once_with(info, scopes=["scope"])

    def test_unconfigured_client_fails_storage_calls(self):
        """Test placeholder client raises StorageError."""
        client = UnconfiguredStorageClient("key file missing")
        with pytest.raises(StorageError, match="not configured"):
            client.find_folder("x")


class TestUploadEmail:
    """Tests for the notification email content."""

    def test_count_by_type(self):
        """Test photo/audio counting."""
        files = [
            StoredFileRecord(type="photo", name="a", id="1"),
            StoredFileRecord(type="photo", name="b", id="2"),
            StoredFileRecord(type="audio", name="c", id="3"),
        ]
        assert count_by_type(files) == (2, 1)

    def test_turkish_datetime_format(self):
        """Test tr-TR style timestamp."""
        assert format_turkish_datetime(datetime(2024, 6, 1, 9, 5, 3)) == "01.06.2024 09:05:03"

    def test_build_upload_email(self):
        """Test subject and body fields."""
        subject, html = build_upload_email("DugunAnilari_2024-06-01", [], datetime(2024, 6, 1, 12, 0, 0))
        assert subject == "💒 Yeni Düğün Anıları Yüklendi!"
        assert "<strong>Klasör:</strong> DugunAnilari_2024-06-01" in html
        assert "<strong>Tarih:</strong> 01.06.2024 12:00:00" in html


class TestEmailNotifier:
    """Tests for EmailNotifier."""

    def test_recipient_defaults_to_sender(self):
        """Test owner receives their own notifications by default."""
        notifier = EmailNotifier(sender="owner@gmail.com", password="secret")
        assert notifier.recipient == "owner@gmail.com"
        assert notifier.is_configured() is True

    def test_unconfigured(self):
        """Test missing password leaves notifier unconfigured."""
        notifier = EmailNotifier(sender="owner@gmail.com", password=None)
        assert notifier.is_configured() is False
        with pytest.raises(NotificationError):
            notifier.send("owner@gmail.com", "s", "<p>x</p>")

    def test_send_uses_smtp_ssl(self):
        """Test login and message delivery."""
        notifier = EmailNotifier(sender="owner@gmail.com", password="secret", timeout=3)
        with patch("app.services.notification_service.smtplib.SMTP_SSL") as mock_smtp:
            smtp = mock_smtp.return_value.__enter__.return_value
            notifier.send("owner@gmail.com", "Konu", "<p>Merhaba</p>")

        mock_smtp.assert_called_once_with("smtp.gmail.com", 465, timeout=3)
        smtp.login.assert_called_once_with("owner@gmail.com", "secret")
        message = smtp.send_message.call_args.args[0]
        assert message["Subject"] == "Konu"
        assert message["To"] == "owner@gmail.com"

    def test_smtp_error_becomes_notification_error(self):
        """Test SMTP failures are wrapped."""
        notifier = EmailNotifier(sender="owner@gmail.com", password="wrong")
        with patch("app.services.notification_service.smtplib.SMTP_SSL") as mock_smtp:
            smtp = mock_smtp.return_value.__enter__.return_value
            smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            with pytest.raises(NotificationError):
                notifier.send("owner@gmail.com", "s", "<p>x</p>")
