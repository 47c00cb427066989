"""
Upload endpoint.

Accepts multipart uploads from the guest site:
- photos: up to 10 image files
- audio: at most 1 audio clip
Files are relayed to the day's Google Drive folder and the owner is
notified by email.

Validation happens before any remote call; a rejected request never
touches Drive.
"""
import logging
import time
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import StorageError, UploadError, UploadValidationError
from app.schemas.upload import UploadErrorResponse, UploadResult
from app.services.upload_intake import UploadIntake, UploadLimits
from app.services.upload_service import UploadService
from app.utils.logging import log_upload_completed, log_upload_failed
from app.utils.metrics import uploads_total

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FAILED_MESSAGE = "Dosyalar yüklenirken bir hata oluştu."
UPLOAD_REJECTED_MESSAGE = "Yükleme isteği geçersiz."


def get_upload_service(request: Request) -> UploadService:
    """Upload service built at startup (see app.main lifespan)."""
    return request.app.state.upload_service


def get_upload_intake() -> UploadIntake:
    return UploadIntake(UploadLimits.from_settings(settings))


def _error_response(error: UploadError, message: str, status_code: int, expose_detail: bool) -> JSONResponse:
    body = UploadErrorResponse(
        message=message,
        error=str(error) if expose_detail else error.kind,
        kind=error.kind,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "",
    response_model=UploadResult,
    responses={
        400: {"model": UploadErrorResponse},
        413: {"model": UploadErrorResponse},
        500: {"model": UploadErrorResponse},
    },
)
async def upload_files(
    request: Request,
    service: UploadService = Depends(get_upload_service),
    intake: UploadIntake = Depends(get_upload_intake)
):
    """
    Relay uploaded photos and audio to Google Drive.

    Returns 400/413 if the payload breaks a limit, 500 if Drive fails.
    Notification failures never affect the response.
    """
    start_time = time.time()
    async with request.form() as form:
        try:
            batch = await intake.parse(form)
        except UploadValidationError as e:
            uploads_total.labels(status="rejected").inc()
            logger.warning(
                f"Upload rejected: {e}",
                extra={"event": "upload_rejected", "kind": e.kind, "error": str(e)}
            )
            # Client-caused, always safe to echo
            return _error_response(e, UPLOAD_REJECTED_MESSAGE, e.status_code, expose_detail=True)

        folder_name = service.current_folder_name()
        try:
            result = await service.upload(batch, folder_name=folder_name)
        except StorageError as e:
            uploads_total.labels(status="failed").inc()
            log_upload_failed(
                logger,
                error=str(e),
                kind=e.kind,
                folder_name=folder_name,
                file_count=batch.file_count,
                duration_ms=(time.time() - start_time) * 1000
            )
            return _error_response(
                e,
                UPLOAD_FAILED_MESSAGE,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                expose_detail=settings.expose_error_details
            )

    uploads_total.labels(status="success").inc()
    log_upload_completed(
        logger,
        folder_name=folder_name,
        file_count=len(result.files),
        duration_ms=(time.time() - start_time) * 1000
    )
    return result
