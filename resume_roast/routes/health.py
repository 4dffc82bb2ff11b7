"""Health check endpoint."""

import time

from fastapi import APIRouter

from resume_roast.config import load_settings
from resume_roast.core.constants import SERVICE_NAME, SERVICE_VERSION

router = APIRouter(tags=["System"])

_start_time = time.monotonic()


@router.get("/api/health")
async def health():
    settings = load_settings()
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "llm_provider": settings.llm_provider,
        "uptime_seconds": round(time.monotonic() - _start_time),
    }
