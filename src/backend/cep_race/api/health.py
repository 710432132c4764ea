"""Health check endpoint."""
from fastapi import APIRouter

from cep_race.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": settings.app_name}


@router.get("/api/health/config")
async def config_check():
    """Diagnostic endpoint: shows the race configuration in effect."""
    return {
        "response_timeout_seconds": settings.response_timeout_seconds,
        "provider_request_timeout_seconds": settings.provider_request_timeout_seconds,
        "fail_fast": settings.fail_fast,
        "apicep_url_template": settings.apicep_url_template,
        "viacep_url_template": settings.viacep_url_template,
    }
