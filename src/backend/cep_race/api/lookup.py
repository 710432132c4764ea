"""
REST API for CEP lookups.

One race per request. The coordinator (and its HTTP client) is shared
across requests; tasks abandoned by one race keep running on the
server's event loop until their own request timeout.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from cep_race.errors import ValidationError
from cep_race.models.schemas import EXHAUSTED_MESSAGE, TIMEOUT_MESSAGE, RaceOutcome, RaceStatus
from cep_race.race.coordinator import RaceCoordinator
from cep_race.validation import validate_cep

logger = logging.getLogger(__name__)
router = APIRouter()

_coordinator: Optional[RaceCoordinator] = None


def get_coordinator() -> RaceCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = RaceCoordinator()
    return _coordinator


async def close_coordinator() -> None:
    global _coordinator
    if _coordinator is not None:
        await _coordinator.aclose()
        _coordinator = None


@router.get("/{cep}", response_model=RaceOutcome, response_model_by_alias=False)
async def lookup_cep(cep: str, coordinator: RaceCoordinator = Depends(get_coordinator)):
    """Race the providers for ``cep`` and return the first answer."""
    try:
        cep = validate_cep(cep)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    outcome = await coordinator.race(cep)
    if outcome.status == RaceStatus.TIMEOUT:
        raise HTTPException(status_code=504, detail=TIMEOUT_MESSAGE)
    if outcome.status == RaceStatus.EXHAUSTED:
        raise HTTPException(status_code=502, detail=EXHAUSTED_MESSAGE)
    return outcome
