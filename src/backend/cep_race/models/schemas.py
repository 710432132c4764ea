"""
Domain models for CEP lookups.

Every provider has its own payload schema; a ProviderResult tags one of
them with the provider it came from. A race produces exactly one
RaceOutcome.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


# ──────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────

class ProviderName(str, Enum):
    APICEP = "apicep"
    VIACEP = "viacep"


class RaceStatus(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXHAUSTED = "exhausted"  # only with fail_fast enabled


# User-facing lines for races without a winner
TIMEOUT_MESSAGE = "[error] provider cep response timed out"
EXHAUSTED_MESSAGE = "[error] all cep providers failed"


# ──────────────────────────────────────────────
# Provider payloads
# ──────────────────────────────────────────────

class ApiCEPAddress(BaseModel):
    """Response body of cdn.apicep.com."""
    code: str = Field(..., description="Postal code as echoed by the provider")
    state: str = ""
    city: str = ""
    district: str = ""
    address: str = ""
    status: int = 0
    ok: bool = False
    status_text: str = Field("", alias="statusText")

    model_config = {"frozen": True, "populate_by_name": True}


class ViaCEPAddress(BaseModel):
    """
    Response body of viacep.com.br.

    ``cep`` is required, so the provider's ``{"erro": true}`` answer for an
    unknown code fails validation (DecodeError) instead of decoding to an
    empty address.
    """
    cep: str = Field(..., description="Postal code as echoed by the provider")
    address: str = Field("", alias="logradouro")
    complement: str = Field("", alias="complemento")
    neighborhood: str = Field("", alias="bairro")
    city: str = Field("", alias="localidade")
    state: str = Field("", alias="uf")
    ibge: str = ""
    gia: str = ""
    ddd: str = ""
    siafi: str = ""

    model_config = {"frozen": True, "populate_by_name": True}


ProviderPayload = Union[ApiCEPAddress, ViaCEPAddress]


# ──────────────────────────────────────────────
# Race models
# ──────────────────────────────────────────────

class ProviderResult(BaseModel):
    """A successfully parsed answer from one provider."""
    provider: ProviderName
    payload: ProviderPayload
    latency_ms: int = 0

    model_config = {"frozen": True}


class RaceOutcome(BaseModel):
    """The single result of a race: the winning answer, or why there was none."""
    status: RaceStatus
    cep: str
    result: Optional[ProviderResult] = None
    elapsed_ms: int = 0
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> bool:
        return self.status == RaceStatus.SUCCESS

    @classmethod
    def success(cls, cep: str, result: ProviderResult, elapsed_ms: int = 0) -> "RaceOutcome":
        return cls(status=RaceStatus.SUCCESS, cep=cep, result=result, elapsed_ms=elapsed_ms)

    @classmethod
    def timeout(cls, cep: str, elapsed_ms: int = 0) -> "RaceOutcome":
        return cls(status=RaceStatus.TIMEOUT, cep=cep, elapsed_ms=elapsed_ms)

    @classmethod
    def exhausted(cls, cep: str, elapsed_ms: int = 0) -> "RaceOutcome":
        return cls(status=RaceStatus.EXHAUSTED, cep=cep, elapsed_ms=elapsed_ms)
