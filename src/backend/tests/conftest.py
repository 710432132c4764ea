"""
Shared fixtures: settings pointing at fake provider hosts and an httpx
MockTransport that can make each provider slow, failing or broken.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

import httpx
import pytest

from cep_race.config import Settings

CEP = "01310-100"

APICEP_BODY = {
    "code": "01310-100",
    "state": "SP",
    "city": "São Paulo",
    "district": "Bela Vista",
    "address": "Avenida Paulista - até 610 - lado par",
    "status": 200,
    "ok": True,
    "statusText": "ok",
}

VIACEP_BODY = {
    "cep": "01310-100",
    "logradouro": "Avenida Paulista",
    "complemento": "até 610 - lado par",
    "bairro": "Bela Vista",
    "localidade": "São Paulo",
    "uf": "SP",
    "ibge": "3550308",
    "gia": "1004",
    "ddd": "11",
    "siafi": "7107",
}


@dataclass
class FakeRoute:
    """How one fake provider behaves."""
    status: int = 200
    body: Any = None
    delay: float = 0.0
    error: Optional[Type[Exception]] = None
    calls: int = 0
    completed: int = 0
    urls: list = field(default_factory=list)


def _with_default_body(route: Optional[FakeRoute], body: dict) -> FakeRoute:
    """A route without an explicit body answers with the provider's valid payload."""
    route = route or FakeRoute()
    if route.body is None:
        route.body = body
    return route


class FakeProviders:
    """Routes requests to a FakeRoute by matching the provider name in the host."""

    def __init__(self, apicep: Optional[FakeRoute] = None, viacep: Optional[FakeRoute] = None):
        self.routes: Dict[str, FakeRoute] = {
            "apicep": _with_default_body(apicep, APICEP_BODY),
            "viacep": _with_default_body(viacep, VIACEP_BODY),
        }

    @property
    def apicep(self) -> FakeRoute:
        return self.routes["apicep"]

    @property
    def viacep(self) -> FakeRoute:
        return self.routes["viacep"]

    @property
    def total_calls(self) -> int:
        return sum(r.calls for r in self.routes.values())

    async def handler(self, request: httpx.Request) -> httpx.Response:
        route = next(r for name, r in self.routes.items() if name in request.url.host)
        route.calls += 1
        route.urls.append(str(request.url))
        if route.delay:
            await asyncio.sleep(route.delay)
        if route.error is not None:
            raise route.error("simulated failure", request=request)
        route.completed += 1
        if isinstance(route.body, (dict, list)):
            return httpx.Response(route.status, json=route.body)
        return httpx.Response(route.status, content=route.body or b"")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_settings(**overrides) -> Settings:
    values = {
        "apicep_url_template": "http://apicep.test/file/apicep/{cep}.json",
        "viacep_url_template": "http://viacep.test/ws/{cep}/json",
        "response_timeout_seconds": 1.0,
        "provider_request_timeout_seconds": 5.0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_providers() -> FakeProviders:
    return FakeProviders()
