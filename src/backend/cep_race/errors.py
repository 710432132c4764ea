"""
Error taxonomy for CEP lookups.

Input problems raise ``ValidationError`` before any network activity.
Everything that can go wrong while talking to one provider is a
``ProviderError`` subclass; those stay local to the provider's task and
never reach the caller of a race.
"""
from __future__ import annotations


class CEPRaceError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(CEPRaceError, ValueError):
    """The postal code given by the caller is malformed or missing."""


class ProviderError(CEPRaceError):
    """A single provider call failed."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class TransportError(ProviderError):
    """Connection failure or per-request timeout."""


class ClientError(ProviderError):
    """Provider answered with a status in [400, 599]."""

    def __init__(self, provider: str, status: int, body: str):
        super().__init__(provider, f"client error - status: {status} - body - '{body}'")
        self.status = status
        self.body = body


class DecodeError(ProviderError):
    """Provider answered successfully but the payload does not match its schema."""
