"""
Upload orchestration service.

Relays one validated upload batch into the day's Drive folder:
1. Compute the folder name from the current date
2. Find the folder, or create it on the first upload of the day
3. Write photos (in submission order), then the audio clip, one at a time
4. Send the email summary (best-effort)
5. Return the aggregate UploadResult

Any storage failure aborts the request: remaining files are skipped,
no notification is sent and files already written are left in place.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from app.errors import StorageError, StorageTimeoutError
from app.schemas.upload import StoredFileRecord, UploadResult
from app.services.notification_service import Notifier, build_upload_email
from app.services.upload_intake import UploadBatch, UploadedFilePart
from app.storage.base import Folder, StorageClient
from app.utils.logging import (
    log_folder_resolved,
    log_notification_failed,
    log_notification_sent,
)
from app.utils.metrics import (
    files_stored_total,
    notifications_total,
    storage_request_duration_seconds,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def photo_file_name(index: int, moment: datetime) -> str:
    """Name for the index-th photo (1-based) of a batch."""
    return f"Foto_{index}_{epoch_millis(moment)}.jpg"


def audio_file_name(moment: datetime) -> str:
    return f"Ses_{epoch_millis(moment)}.wav"


class UploadService:
    """
    Orchestrates storage writes and notification for an upload batch.

    Storage and notifier are injected at construction; the service holds
    no per-request state besides the folder resolution locks.
    """

    def __init__(
        self,
        storage: StorageClient,
        notifier: Optional[Notifier] = None,
        folder_prefix: str = "DugunAnilari",
        folder_timezone: str = "UTC",
        storage_timeout: Optional[float] = 30.0,
        notification_timeout: Optional[float] = 15.0,
        clock: Callable[[], datetime] = utc_now
    ):
        self.storage = storage
        self.notifier = notifier
        self.folder_prefix = folder_prefix
        self.tz = ZoneInfo(folder_timezone)
        self.storage_timeout = storage_timeout
        self.notification_timeout = notification_timeout
        self._clock = clock
        self._folder_locks: Dict[str, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls, settings, storage: StorageClient, notifier: Optional[Notifier]) -> "UploadService":
        return cls(
            storage=storage,
            notifier=notifier,
            folder_prefix=settings.folder_prefix,
            folder_timezone=settings.folder_timezone,
            storage_timeout=settings.storage_timeout_seconds,
            notification_timeout=settings.notification_timeout_seconds,
        )

    def folder_name_for(self, moment: datetime) -> str:
        """Folder name for the calendar day of moment: '<prefix>_YYYY-MM-DD'."""
        return f"{self.folder_prefix}_{moment.astimezone(self.tz).date().isoformat()}"

    def current_folder_name(self) -> str:
        return self.folder_name_for(self._clock())

    async def _call_storage(self, operation: str, func, *args):
        """Run a blocking storage call off the event loop with a timeout."""
        start_time = time.time()
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), self.storage_timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeoutError(
                f"Storage {operation} timed out after {self.storage_timeout}s"
            ) from e
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(str(e)) from e
        finally:
            storage_request_duration_seconds.labels(operation=operation).observe(time.time() - start_time)

    def _folder_lock(self, name: str) -> asyncio.Lock:
        lock = self._folder_locks.get(name)
        if lock is None:
            # Only today's folder needs a lock
            self._folder_locks.clear()
            lock = self._folder_locks[name] = asyncio.Lock()
        return lock

    async def resolve_folder(self, name: str) -> Folder:
        """
        Find the folder by name or create it.

        Lookup-then-create is serialised per name within this process only.
        Two processes can still both miss the lookup and create duplicates.
        """
        async with self._folder_lock(name):
            start_time = time.time()
            folder = await self._call_storage("find_folder", self.storage.find_folder, name)
            created = folder is None
            if created:
                folder = await self._call_storage("create_folder", self.storage.create_folder, name)

        log_folder_resolved(
            logger,
            folder_name=name,
            folder_id=folder.id,
            created=created,
            duration_ms=(time.time() - start_time) * 1000
        )
        return folder

    async def _store(self, folder: Folder, part: UploadedFilePart, name: str) -> StoredFileRecord:
        blob = await self._call_storage(
            "write_file",
            self.storage.write_file,
            name,
            folder.id,
            part.content_type,
            part.data,
        )
        files_stored_total.labels(type=part.role).inc()
        logger.debug(f"Stored {part.role} {name} ({part.size} bytes) as {blob.id}")
        return StoredFileRecord(type=part.role, name=name, id=blob.id, link=blob.link)

    async def notify(self, folder_name: str, files: List[StoredFileRecord]) -> bool:
        """
        Send the upload summary. Best-effort: never raises.

        Returns:
            True if the notification was sent, False otherwise
        """
        if self.notifier is None or not self.notifier.is_configured():
            logger.warning(f"Notifier not configured, skipping notification for {folder_name}")
            notifications_total.labels(status="skipped").inc()
            return False

        subject, html_body = build_upload_email(
            folder_name, files, self._clock().astimezone(self.tz)
        )
        recipient = self.notifier.recipient
        start_time = time.time()
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.notifier.send, recipient, subject, html_body),
                self.notification_timeout
            )
        except Exception as e:
            notifications_total.labels(status="failed").inc()
            log_notification_failed(
                logger,
                folder_name=folder_name,
                error=str(e) or type(e).__name__,
                duration_ms=(time.time() - start_time) * 1000
            )
            return False

        notifications_total.labels(status="sent").inc()
        log_notification_sent(
            logger,
            folder_name=folder_name,
            recipient=recipient,
            duration_ms=(time.time() - start_time) * 1000
        )
        return True

    async def upload(self, batch: UploadBatch, folder_name: Optional[str] = None) -> UploadResult:
        """
        Relay a validated batch to storage and notify.

        Args:
            batch: Validated file parts
            folder_name: Destination folder; defaults to today's folder

        Raises:
            StorageError: If folder resolution or any file write fails
        """
        folder_name = folder_name or self.current_folder_name()
        folder = await self.resolve_folder(folder_name)

        files: List[StoredFileRecord] = []
        for index, photo in enumerate(batch.photos, start=1):
            name = photo_file_name(index, self._clock())
            files.append(await self._store(folder, photo, name))

        if batch.audio is not None:
            files.append(await self._store(folder, batch.audio, audio_file_name(self._clock())))

        await self.notify(folder_name, files)

        return UploadResult(
            success=True,
            message=f"{len(files)} dosya başarıyla yüklendi!",
            files=files,
            folder_link=self.storage.folder_link(folder.id),
        )
