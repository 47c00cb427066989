"""
Google Drive storage client.

Uses google-api-python-client (Drive v3) with a service account restricted
to the drive.file scope, so the app only ever sees files it created.

Credentials are loaded once at startup from GOOGLE_APPLICATION_CREDENTIALS,
which may be a path to the key file or the key JSON itself.
"""
import io
import json
import logging
import os
from typing import List, Optional

import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from app.errors import StorageError
from app.storage.base import Folder, StorageClient, StoredBlob

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
FOLDER_URL = "https://drive.google.com/drive/folders/{folder_id}"


def load_service_account_credentials(source: str, scopes: List[str]) -> service_account.Credentials:
    """
    Load service account credentials from a file path or a JSON string.

    Raises:
        ValueError: If source is neither an existing file nor valid JSON
    """
    if os.path.exists(source):
        logger.info(f"Loaded Google credentials from file: {source}")
        return service_account.Credentials.from_service_account_file(source, scopes=scopes)

    try:
        info = json.loads(source)
    except json.JSONDecodeError:
        raise ValueError(
            "GOOGLE_APPLICATION_CREDENTIALS must be a valid file path or JSON string. "
            f"File not found: {source}"
        )
    logger.info("Loaded Google credentials from JSON string")
    return service_account.Credentials.from_service_account_info(info, scopes=scopes)


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveClient(StorageClient):
    """
    Drive v3 implementation of StorageClient.

    The discovery-built service is shared, but every request executes on a
    fresh authorised httplib2 transport since those are not thread-safe.
    """

    def __init__(self, credentials, timeout: Optional[float] = None):
        self._credentials = credentials
        self._timeout = timeout
        self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        logger.info("Google Drive client initialized")

    @classmethod
    def from_settings(cls, settings) -> "GoogleDriveClient":
        credentials = load_service_account_credentials(
            settings.google_application_credentials,
            settings.drive_scopes,
        )
        return cls(credentials, timeout=settings.storage_timeout_seconds)

    def _http(self) -> google_auth_httplib2.AuthorizedHttp:
        return google_auth_httplib2.AuthorizedHttp(
            self._credentials,
            http=httplib2.Http(timeout=self._timeout),
        )

    def _execute(self, request, operation: str) -> dict:
        try:
            return request.execute(http=self._http())
        except HttpError as e:
            logger.error(f"Drive {operation} failed: {e}")
            raise StorageError(f"Google Drive {operation} failed: {e.reason}") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Drive {operation} transport error: {e}")
            raise StorageError(f"Google Drive {operation} failed: {e}") from e

    def find_folder(self, name: str) -> Optional[Folder]:
        query = (
            f"name='{_escape_query_value(name)}' "
            f"and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        )
        request = self._service.files().list(q=query, fields="files(id,name)", pageSize=1)
        files = self._execute(request, "folder lookup").get("files", [])
        if not files:
            return None
        return Folder(id=files[0]["id"], name=files[0]["name"])

    def create_folder(self, name: str) -> Folder:
        request = self._service.files().create(
            body={"name": name, "mimeType": FOLDER_MIME_TYPE},
            fields="id,name",
        )
        data = self._execute(request, "folder creation")
        return Folder(id=data["id"], name=data["name"])

    def write_file(self, name: str, parent_id: str, mime_type: str, data: bytes) -> StoredBlob:
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)
        request = self._service.files().create(
            body={"name": name, "parents": [parent_id]},
            media_body=media,
            fields="id,name,webViewLink",
        )
        result = self._execute(request, "file upload")
        return StoredBlob(
            id=result["id"],
            name=result.get("name", name),
            link=result.get("webViewLink"),
        )

    def folder_link(self, folder_id: str) -> str:
        return FOLDER_URL.format(folder_id=folder_id)


class UnconfiguredStorageClient(StorageClient):
    """
    Placeholder used when Drive credentials could not be loaded at startup.

    Every call fails with StorageError so uploads are rejected with a
    clear message instead of crashing the app.
    """

    def __init__(self, reason: str):
        self.reason = reason

    def _fail(self):
        raise StorageError(f"Google Drive not configured: {self.reason}")

    def find_folder(self, name: str) -> Optional[Folder]:
        self._fail()

    def create_folder(self, name: str) -> Folder:
        self._fail()

    def write_file(self, name: str, parent_id: str, mime_type: str, data: bytes) -> StoredBlob:
        self._fail()

    def folder_link(self, folder_id: str) -> str:
        return FOLDER_URL.format(folder_id=folder_id)
