"""
Race Coordinator — asks every provider at once and keeps the first answer.

  1. One asyncio task per provider; a task that succeeds does a
     non-blocking put of its ProviderResult onto a shared queue.
  2. The coordinator performs a single get() on that queue, bounded by
     the race timeout.
  3. The first result wins. Slower tasks are abandoned, not cancelled:
     they finish in the background and their late puts land in a queue
     nobody reads any more.

Failing tasks log their error and post nothing, so when every provider
fails the race still waits out the timeout. ``fail_fast=True`` changes
that: failures are posted too and the race ends with EXHAUSTED once all
providers have failed.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Set, Union

import httpx

from cep_race.config import Settings, settings as default_settings
from cep_race.errors import ProviderError
from cep_race.models.schemas import ProviderResult, RaceOutcome
from cep_race.services.cep_client import (
    ProviderClient,
    build_provider_clients,
    create_http_client,
)

logger = logging.getLogger(__name__)

# What a provider task puts on the completion queue.
_Completion = Union[ProviderResult, ProviderError]


class RaceCoordinator:
    """
    Runs provider races.

    Usage:
        coordinator = RaceCoordinator()
        outcome = await coordinator.race("01310-100")
        ...
        await coordinator.aclose()   # on shutdown only
    """

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        providers: Optional[List[ProviderClient]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        fail_fast: Optional[bool] = None,
    ):
        self.settings = cfg or default_settings
        self.timeout = self.settings.response_timeout_seconds if timeout is None else timeout
        self.fail_fast = self.settings.fail_fast if fail_fast is None else fail_fast
        self._http_client = http_client
        self._providers = providers
        # Abandoned tasks are referenced here until they finish.
        self._background: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls, cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "RaceCoordinator":
        http_client = create_http_client(cfg, transport)
        return cls(cfg, providers=build_provider_clients(cfg, http_client), http_client=http_client)

    @property
    def providers(self) -> List[ProviderClient]:
        if self._providers is None:
            if self._http_client is None:
                self._http_client = create_http_client(self.settings)
            self._providers = build_provider_clients(self.settings, self._http_client)
        return self._providers

    @property
    def pending_tasks(self) -> int:
        """Provider tasks from earlier races that are still running."""
        return len(self._background)

    async def race(self, cep: str) -> RaceOutcome:
        """
        Race all providers for an already validated ``cep``.

        Returns SUCCESS with the first provider result, TIMEOUT when the
        deadline passes first, or EXHAUSTED (fail_fast only) when every
        provider failed before the deadline. Never raises ProviderError.
        """
        providers = self.providers
        # Unbounded, so losing tasks never block on put.
        completions: asyncio.Queue = asyncio.Queue()
        t0 = time.monotonic()

        for provider in providers:
            task = asyncio.create_task(
                self._run_provider(provider, cep, completions),
                name=f"cep-race:{provider.name.value}:{cep}",
            )
            self._background.add(task)
            task.add_done_callback(self._background.discard)

        logger.info(f"Racing {len(providers)} providers for {cep} (timeout {self.timeout}s)")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        failures = 0
        while True:
            remaining = max(deadline - loop.time(), 0.0)
            try:
                completion = await asyncio.wait_for(completions.get(), timeout=remaining)
            except asyncio.TimeoutError:
                elapsed_ms = _elapsed_ms(t0)
                logger.warning(f"No provider answered for {cep} within {self.timeout}s")
                return RaceOutcome.timeout(cep, elapsed_ms=elapsed_ms)

            if isinstance(completion, ProviderResult):
                elapsed_ms = _elapsed_ms(t0)
                logger.info(
                    f"Provider {completion.provider.value} won the race for {cep} in {elapsed_ms}ms"
                )
                return RaceOutcome.success(cep, completion, elapsed_ms=elapsed_ms)

            # Only reachable with fail_fast: failures are posted as ProviderError.
            failures += 1
            if failures >= len(providers):
                elapsed_ms = _elapsed_ms(t0)
                logger.warning(f"All {failures} providers failed for {cep}")
                return RaceOutcome.exhausted(cep, elapsed_ms=elapsed_ms)

    async def _run_provider(
        self, provider: ProviderClient, cep: str, completions: asyncio.Queue
    ) -> None:
        """Call one provider and post its result. Errors stay inside this task."""
        completion: _Completion
        try:
            completion = await provider.fetch(cep)
        except ProviderError as e:
            logger.warning(f"[error] could not get results from {provider.name.value}: {e}")
            if not self.fail_fast:
                return
            completion = e
        except Exception as e:
            logger.exception(f"Unexpected failure in provider {provider.name.value}")
            if not self.fail_fast:
                return
            completion = ProviderError(provider.name.value, f"unexpected failure: {e!r}")
        completions.put_nowait(completion)

    async def aclose(self) -> None:
        """
        Shut down: cancel abandoned provider tasks and close the HTTP client.

        Not part of a race. Call it when the process or app is stopping.
        """
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._http_client is not None:
            await self._http_client.aclose()

    async def __aenter__(self) -> "RaceCoordinator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _elapsed_ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)
