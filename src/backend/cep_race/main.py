"""
CEP Race — FastAPI backend.
"""
import logging

from fastapi import FastAPI

from cep_race import __version__
from cep_race.api import health, lookup
from cep_race.config import settings

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CEP Race",
    description="Looks up a Brazilian postal code on several providers and returns the fastest answer",
    version=__version__,
)

# Routes
app.include_router(health.router, tags=["health"])
app.include_router(lookup.router, prefix="/api/cep", tags=["cep"])


@app.on_event("startup")
async def startup():
    logger.info("=== CEP Race Backend Starting ===")
    logger.info(f"  response_timeout_seconds        : {settings.response_timeout_seconds}")
    logger.info(f"  provider_request_timeout_seconds: {settings.provider_request_timeout_seconds}")
    logger.info(f"  apicep_url_template             : {settings.apicep_url_template}")
    logger.info(f"  viacep_url_template             : {settings.viacep_url_template}")
    logger.info(f"  fail_fast                       : {settings.fail_fast}")
    if settings.apicep_delay_seconds or settings.viacep_delay_seconds:
        logger.warning(
            f"Simulated provider delays are active "
            f"(apicep={settings.apicep_delay_seconds}s, viacep={settings.viacep_delay_seconds}s)"
        )


@app.on_event("shutdown")
async def shutdown():
    await lookup.close_coordinator()
