"""
CEP Provider Client — one GET request against one postal-code provider.

Each provider is described by a ProviderSpec (URL template + payload
schema). ProviderClient issues a single request, translates httpx and
parsing failures into the ProviderError taxonomy and returns a typed
ProviderResult. No retries, no caching.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from cep_race.config import Settings
from cep_race.errors import ClientError, DecodeError, TransportError
from cep_race.models.schemas import (
    ApiCEPAddress,
    ProviderName,
    ProviderResult,
    ViaCEPAddress,
)

logger = logging.getLogger(__name__)

CLIENT_ERROR_STATUS_MIN = 400
CLIENT_ERROR_STATUS_MAX = 599


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of a provider: where to ask and how to read the answer."""
    name: ProviderName
    url_template: str
    payload_model: Type[BaseModel]
    delay_seconds: float = 0.0
    request_timeout_seconds: Optional[float] = None  # whole request, headers to last body byte


class ProviderClient:
    """
    Looks up a CEP against a single provider.

    Usage:
        client = ProviderClient(spec, http_client)
        result = await client.fetch("01310-100")
    """

    def __init__(self, spec: ProviderSpec, http_client: httpx.AsyncClient):
        self.spec = spec
        self._http_client = http_client

    @property
    def name(self) -> ProviderName:
        return self.spec.name

    def build_url(self, cep: str) -> str:
        return self.spec.url_template.format(cep=cep)

    async def fetch(self, cep: str) -> ProviderResult:
        """
        Fetch and decode the provider's answer for an already validated ``cep``.

        Raises:
            TransportError: connection failure or request timeout
            ClientError: status in [400, 599]
            DecodeError: any other status with a body that does not fit the schema
        """
        if self.spec.delay_seconds:
            await asyncio.sleep(self.spec.delay_seconds)

        url = self.build_url(cep)
        t0 = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._http_client.get(url), timeout=self.spec.request_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                self.name.value,
                f"no complete response from {url} within {self.spec.request_timeout_seconds}s",
            ) from e
        except httpx.TransportError as e:
            raise TransportError(self.name.value, f"request to {url} failed: {e!r}") from e
        elapsed_ms = int((time.monotonic() - t0) * 1000)

        if is_client_error_status(response.status_code):
            raise ClientError(self.name.value, response.status_code, response.text)

        payload = self.decode(response.content)
        logger.debug(f"{self.name.value} answered {response.status_code} in {elapsed_ms}ms")
        return ProviderResult(provider=self.name, payload=payload, latency_ms=elapsed_ms)

    def decode(self, body: bytes) -> BaseModel:
        """Parse a raw response body into this provider's payload schema."""
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(self.name.value, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError(self.name.value, f"expected a JSON object, got {type(data).__name__}")
        try:
            return self.spec.payload_model.model_validate(data)
        except SchemaValidationError as e:
            raise DecodeError(
                self.name.value,
                f"payload does not match {self.spec.payload_model.__name__}: {e.error_count()} error(s)",
            ) from e


def is_client_error_status(status_code: int) -> bool:
    return CLIENT_ERROR_STATUS_MIN <= status_code <= CLIENT_ERROR_STATUS_MAX


# ──────────────────────────────────────────────
# Provider registry
# ──────────────────────────────────────────────

PAYLOAD_MODELS: Dict[ProviderName, Type[BaseModel]] = {
    ProviderName.APICEP: ApiCEPAddress,
    ProviderName.VIACEP: ViaCEPAddress,
}


def provider_specs(cfg: Settings) -> List[ProviderSpec]:
    """Build the provider table from settings, in declaration order."""
    return [
        ProviderSpec(
            name=ProviderName.APICEP,
            url_template=cfg.apicep_url_template,
            payload_model=PAYLOAD_MODELS[ProviderName.APICEP],
            delay_seconds=cfg.apicep_delay_seconds,
            request_timeout_seconds=cfg.provider_request_timeout_seconds,
        ),
        ProviderSpec(
            name=ProviderName.VIACEP,
            url_template=cfg.viacep_url_template,
            payload_model=PAYLOAD_MODELS[ProviderName.VIACEP],
            delay_seconds=cfg.viacep_delay_seconds,
            request_timeout_seconds=cfg.provider_request_timeout_seconds,
        ),
    ]


def create_http_client(
    cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """Shared AsyncClient. Follows redirects (ViaCEP is configured over plain http)."""
    return httpx.AsyncClient(
        timeout=cfg.provider_request_timeout_seconds,
        follow_redirects=True,
        transport=transport,
        headers={"Accept": "application/json"},
    )


def build_provider_clients(cfg: Settings, http_client: httpx.AsyncClient) -> List[ProviderClient]:
    return [ProviderClient(spec, http_client) for spec in provider_specs(cfg)]
