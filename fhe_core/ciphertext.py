"""Ciphertext capability that any encryption scheme must provide.

The scoring pipeline only ever needs an additively homomorphic scheme:

- ``add`` / ``sub`` of two ciphertexts under the same public key,
- ``scalar_mul`` by a public integer (optionally one integer per lane),
- lossless ``serialize`` / ``HomomorphicScheme.deserialize``.

A ciphertext carries one integer replicated over ``lanes`` slots. Lane-wise
scalars let the server apply a different public factor to each slot, which
is what the threshold classifier uses.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, Union

from fhe_core.errors import KeyMismatchError, ShapeError
from fhe_core.protocol import KeyPair

Scalar = Union[int, Sequence[int]]


class Ciphertext(ABC):
    """Opaque encrypted integer supporting homomorphic add/sub/scalar multiply."""

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Fingerprint of the public key the value was encrypted under."""

    @property
    @abstractmethod
    def lanes(self) -> int:
        """Number of slots carried by this ciphertext."""

    @abstractmethod
    def add(self, other: "Ciphertext") -> "Ciphertext":
        ...

    @abstractmethod
    def sub(self, other: "Ciphertext") -> "Ciphertext":
        ...

    @abstractmethod
    def scalar_mul(self, scalar: Scalar) -> "Ciphertext":
        ...

    @abstractmethod
    def serialize(self) -> bytes:
        ...

    def check_compatible(self, other: "Ciphertext") -> None:
        if self.key_id != other.key_id:
            raise KeyMismatchError(
                f"Ciphertexts were encrypted under different keys ({self.key_id} != {other.key_id})"
            )
        if self.lanes != other.lanes:
            raise ShapeError(f"Lane count mismatch: {self.lanes} != {other.lanes}")

    def lane_factors(self, scalar: Scalar) -> list[int]:
        """Expand a scalar (or per-lane scalars) to one integer per lane."""
        if isinstance(scalar, bool):
            raise TypeError("Boolean is not a valid scalar")
        if isinstance(scalar, int):
            return [scalar] * self.lanes
        factors = [int(value) for value in scalar]
        if len(factors) != self.lanes:
            raise ShapeError(f"Expected {self.lanes} lane factors, got {len(factors)}")
        return factors

    def __add__(self, other: "Ciphertext") -> "Ciphertext":
        return self.add(other)

    def __sub__(self, other: "Ciphertext") -> "Ciphertext":
        return self.sub(other)

    def __mul__(self, scalar: Scalar) -> "Ciphertext":
        return self.scalar_mul(scalar)

    __rmul__ = __mul__


class HomomorphicScheme(ABC):
    """Key generation, encryption, deserialization and decryption for a scheme."""

    name: str = "abstract"

    @property
    @abstractmethod
    def plaintext_modulus(self) -> int:
        """Sums and products wrap modulo this value."""

    @abstractmethod
    def generate_keypair(self) -> KeyPair:
        ...

    @abstractmethod
    def key_id(self, public_key: bytes) -> str:
        ...

    @abstractmethod
    def encrypt(self, value: int, public_key: bytes, lanes: int = 1) -> Ciphertext:
        """Encrypt ``value`` into every one of ``lanes`` slots."""

    @abstractmethod
    def encrypt_lanes(self, values: Sequence[int], public_key: bytes) -> Ciphertext:
        """Encrypt one value per slot."""

    @abstractmethod
    def deserialize(self, data: bytes, public_key: bytes) -> Ciphertext:
        ...

    @abstractmethod
    def decrypt(self, ciphertext: Ciphertext, private_key: bytes, signed: bool = True) -> list[int]:
        """Return the plaintext of every lane.

        Signed values lie in ``(-t/2, t/2]``; with ``signed=False`` they lie in ``[0, t)``.
        """

    def decrypt_value(self, ciphertext: Ciphertext, private_key: bytes, signed: bool = True) -> int:
        return self.decrypt(ciphertext, private_key, signed=signed)[0]

    def normalize(self, value: int, signed: bool = True) -> int:
        """Reduce ``value`` modulo the plaintext modulus, centered when ``signed``."""
        modulus = self.plaintext_modulus
        value %= modulus
        if signed and value > modulus // 2:
            value -= modulus
        return value


__all__ = ["Ciphertext", "HomomorphicScheme", "Scalar"]
