"""
Pydantic schemas for API request/response validation.
"""
from app.schemas.upload import (
    StoredFileRecord,
    UploadResult,
    UploadErrorResponse,
    RootResponse,
    HealthResponse,
)

__all__ = [
    "StoredFileRecord",
    "UploadResult",
    "UploadErrorResponse",
    "RootResponse",
    "HealthResponse",
]
