"""
Upload intake: turns a multipart form into validated file parts.

Nothing here touches remote storage. Every limit is checked before the
orchestrator is called, so a rejected request never causes a remote write.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from starlette.datastructures import FormData, UploadFile

from app.errors import UploadValidationError

logger = logging.getLogger(__name__)

PHOTO_FIELDS = ("photos", "photos[]")
AUDIO_FIELDS = ("audio",)


@dataclass(frozen=True)
class UploadedFilePart:
    """One uploaded file held in memory for the duration of a request."""
    role: str  # "photo" or "audio"
    data: bytes
    content_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadBatch:
    """Validated parts of one request, photos in submission order."""
    photos: Tuple[UploadedFilePart, ...] = ()
    audio: Optional[UploadedFilePart] = None

    @property
    def file_count(self) -> int:
        return len(self.photos) + (1 if self.audio else 0)


@dataclass(frozen=True)
class UploadLimits:
    max_file_size_bytes: int = 10 * 1024 * 1024
    max_files: int = 10
    max_audio_files: int = 1

    @classmethod
    def from_settings(cls, settings) -> "UploadLimits":
        return cls(
            max_file_size_bytes=settings.max_file_size_bytes,
            max_files=settings.max_files,
            max_audio_files=settings.max_audio_files,
        )


def _collect(form: FormData, fields: Tuple[str, ...]) -> List[UploadFile]:
    uploads = []
    for field in fields:
        for value in form.getlist(field):
            if not isinstance(value, UploadFile):
                raise UploadValidationError(f"Field '{field}' must contain files")
            uploads.append(value)
    return uploads


class UploadIntake:
    """Validates and reads the photos/audio fields of a multipart form."""

    def __init__(self, limits: Optional[UploadLimits] = None):
        self.limits = limits or UploadLimits()

    def check_counts(self, photo_count: int, audio_count: int) -> None:
        """
        Enforce per-field and total file counts.

        Raises:
            UploadValidationError: If any count limit is exceeded
        """
        if audio_count > self.limits.max_audio_files:
            raise UploadValidationError(
                f"Too many audio files: {audio_count} (max {self.limits.max_audio_files})"
            )
        total = photo_count + audio_count
        if total > self.limits.max_files:
            raise UploadValidationError(
                f"Too many files: {total} (max {self.limits.max_files})"
            )

    async def _read_part(self, upload: UploadFile, role: str) -> UploadedFilePart:
        content_type = (upload.content_type or "").lower()
        expected = "image/" if role == "photo" else "audio/"
        if not content_type.startswith(expected):
            raise UploadValidationError(
                f"Invalid content type for {role}: '{upload.content_type}'"
            )

        # Read one byte past the limit to detect oversized files
        data = await upload.read(self.limits.max_file_size_bytes + 1)
        if len(data) > self.limits.max_file_size_bytes:
            raise UploadValidationError(
                f"File '{upload.filename}' exceeds {self.limits.max_file_size_bytes} bytes",
                status_code=413
            )

        return UploadedFilePart(
            role=role,
            data=data,
            content_type=upload.content_type,
            filename=upload.filename,
        )

    async def parse(self, form: FormData) -> UploadBatch:
        """
        Validate a parsed multipart form and read its file parts.

        Args:
            form: Multipart form with 'photos' and 'audio' fields

        Returns:
            UploadBatch with photos in submission order and optional audio

        Raises:
            UploadValidationError: On any count, size or content-type violation
        """
        photo_uploads = _collect(form, PHOTO_FIELDS)
        audio_uploads = _collect(form, AUDIO_FIELDS)
        self.check_counts(len(photo_uploads), len(audio_uploads))

        photos = tuple([await self._read_part(upload, "photo") for upload in photo_uploads])
        audio = None
        if audio_uploads:
            audio = await self._read_part(audio_uploads[0], "audio")

        batch = UploadBatch(photos=photos, audio=audio)
        logger.debug(f"Accepted upload batch: {len(photos)} photos, audio={audio is not None}")
        return batch
