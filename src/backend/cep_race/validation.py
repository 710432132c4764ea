"""Postal code (CEP) input validation."""
from __future__ import annotations

import re
from typing import Optional

from cep_race.errors import ValidationError

CEP_PATTERN = re.compile(r"^[0-9]{5}-[0-9]{3}$")


def validate_cep(raw: Optional[str]) -> str:
    """Return ``raw`` unchanged if it is a ``NNNNN-NNN`` code, else raise ValidationError."""
    if raw is None or raw == "":
        raise ValidationError("[error] cep argument not informed")
    if not CEP_PATTERN.fullmatch(raw):
        raise ValidationError(f"[error] cep {raw} should be in format '12345-678'")
    return raw
