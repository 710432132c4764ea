"""
cep-race — query several postal-code (CEP) providers at once and keep
whichever answers first, bounded by an overall timeout.
"""
from cep_race.models.schemas import ProviderName, ProviderResult, RaceOutcome, RaceStatus
from cep_race.race.coordinator import RaceCoordinator

__all__ = [
    "ProviderName",
    "ProviderResult",
    "RaceCoordinator",
    "RaceOutcome",
    "RaceStatus",
]

__version__ = "0.1.0"
