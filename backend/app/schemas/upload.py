"""
Pydantic schemas for the upload endpoints.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class StoredFileRecord(BaseModel):
    """Schema for one file written to remote storage."""
    type: Literal["photo", "audio"]
    name: str
    id: str
    link: Optional[str] = None

    class Config:
        frozen = True


class UploadResult(BaseModel):
    """Schema for a successful upload response."""
    success: bool = True
    message: str
    files: List[StoredFileRecord] = Field(default_factory=list)
    folder_link: str = Field(..., alias="folderLink")

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "2 dosya başarıyla yüklendi!",
                "files": [
                    {"type": "photo", "name": "Foto_1_1717236000000.jpg", "id": "1AbC", "link": "https://drive.google.com/file/d/1AbC/view"},
                    {"type": "audio", "name": "Ses_1717236000500.wav", "id": "1XyZ", "link": "https://drive.google.com/file/d/1XyZ/view"}
                ],
                "folderLink": "https://drive.google.com/drive/folders/1Fold"
            }
        }


class UploadErrorResponse(BaseModel):
    """Schema for a failed upload response."""
    success: bool = False
    message: str
    error: str
    kind: str


class RootResponse(BaseModel):
    """Schema for the API descriptor."""
    message: str
    version: str
    endpoints: Dict[str, str]


class HealthResponse(BaseModel):
    """Schema for the health check."""
    status: str
    timestamp: datetime
