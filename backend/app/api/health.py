"""
Health check endpoint.
Liveness only; Drive and SMTP are not checked.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from app.schemas.upload import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))
