"""Integer ranges accepted for encryption."""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import List, Sequence

from fhe_core.errors import DomainError

# Timestamps travel as little-endian 24-bit limbs, one per lane, so every
# lane stays far below half of any batching-friendly plaintext modulus.
TIMESTAMP_LIMB_BITS = 24
TIMESTAMP_LIMBS = 2


@dataclass(frozen=True)
class ValueDomain:
    name: str
    low: int
    high: int

    def validate(self, value: object) -> int:
        """Return ``value`` as ``int`` or raise :class:`DomainError`."""
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise DomainError(f"{self.name} must be an integer, got {type(value).__name__}")
        value = int(value)
        if not self.low <= value <= self.high:
            raise DomainError(f"{self.name} must be within [{self.low}, {self.high}], got {value}")
        return value

    def __contains__(self, value: object) -> bool:
        try:
            self.validate(value)
        except DomainError:
            return False
        return True


RESPONSE_DOMAIN = ValueDomain("response", 1, 5)
COUNT_DOMAIN = ValueDomain("question count", 0, 255)
TIMESTAMP_DOMAIN = ValueDomain("timestamp", 0, (1 << (TIMESTAMP_LIMB_BITS * TIMESTAMP_LIMBS)) - 1)


def timestamp_limbs(value: object) -> List[int]:
    """Split a Unix timestamp into ``TIMESTAMP_LIMBS`` lanes, least significant first."""
    value = TIMESTAMP_DOMAIN.validate(value)
    mask = (1 << TIMESTAMP_LIMB_BITS) - 1
    return [(value >> (TIMESTAMP_LIMB_BITS * index)) & mask for index in range(TIMESTAMP_LIMBS)]


def timestamp_from_limbs(limbs: Sequence[int]) -> int:
    if len(limbs) != TIMESTAMP_LIMBS:
        raise DomainError(f"timestamp needs {TIMESTAMP_LIMBS} limbs, got {len(limbs)}")
    value = 0
    for index, limb in enumerate(limbs):
        if not 0 <= limb < 1 << TIMESTAMP_LIMB_BITS:
            raise DomainError(f"timestamp limb {index} out of range: {limb}")
        value |= int(limb) << (TIMESTAMP_LIMB_BITS * index)
    return value


__all__ = [
    "ValueDomain",
    "RESPONSE_DOMAIN",
    "COUNT_DOMAIN",
    "TIMESTAMP_DOMAIN",
    "TIMESTAMP_LIMB_BITS",
    "TIMESTAMP_LIMBS",
    "timestamp_limbs",
    "timestamp_from_limbs",
]
