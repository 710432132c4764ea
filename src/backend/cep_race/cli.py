"""
Command line entry point.

Usage:
    cep-race 01310-100
    python -m cep_race 01310-100 --timeout 2 --viacep-delay 5

Prints exactly one line on stdout: the winning provider's result, the
timeout message, or the validation error. Logs go to stderr.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from cep_race.config import Settings, settings
from cep_race.errors import ValidationError
from cep_race.models.schemas import (
    EXHAUSTED_MESSAGE,
    TIMEOUT_MESSAGE,
    RaceOutcome,
    RaceStatus,
)
from cep_race.race.coordinator import RaceCoordinator
from cep_race.validation import validate_cep

RESULT_TEMPLATE = "response received by provider {provider}. Result: {payload}"


def format_outcome(outcome: RaceOutcome) -> str:
    if outcome.status == RaceStatus.SUCCESS and outcome.result is not None:
        return RESULT_TEMPLATE.format(
            provider=outcome.result.provider.value,
            payload=outcome.result.payload.model_dump_json(),
        )
    if outcome.status == RaceStatus.EXHAUSTED:
        return EXHAUSTED_MESSAGE
    return TIMEOUT_MESSAGE


async def run_race(
    cep: str, cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> RaceOutcome:
    """Race the providers once, then shut the coordinator down."""
    async with RaceCoordinator.from_settings(cfg, transport) as coordinator:
        return await coordinator.race(cep)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cep-race",
        description="Look up a CEP on several providers and print the fastest answer",
    )
    parser.add_argument("cep", nargs="?", default=None, help="Postal code, format 12345-678")
    parser.add_argument("--timeout", type=float, default=None, help="Overall race timeout in seconds")
    parser.add_argument("--apicep-delay", type=float, default=None, help="Delay before calling ApiCEP (seconds)")
    parser.add_argument("--viacep-delay", type=float, default=None, help="Delay before calling ViaCEP (seconds)")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop waiting as soon as every provider has failed",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    overrides = {
        "response_timeout_seconds": args.timeout,
        "apicep_delay_seconds": args.apicep_delay,
        "viacep_delay_seconds": args.viacep_delay,
    }
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if args.fail_fast:
        data["fail_fast"] = True
    return Settings(**data)


def main(
    argv: Optional[Sequence[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else settings.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        cep = validate_cep(args.cep)
    except ValidationError as e:
        print(str(e))
        return 1

    try:
        cfg = settings_from_args(args, settings)
    except PydanticValidationError as e:
        print(f"[error] invalid option: {e.errors()[0]['msg']}")
        return 1

    outcome = asyncio.run(run_race(cep, cfg, transport))
    print(format_outcome(outcome))
    return 0 if outcome.succeeded else 1
