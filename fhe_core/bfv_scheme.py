"""TenSEAL BFV implementation of the ciphertext capability."""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Sequence, Tuple

import tenseal as ts

from fhe_core.ciphertext import Ciphertext, HomomorphicScheme, Scalar
from fhe_core.errors import CryptoInitError, KeyMismatchError, ShapeError, TransportError
from fhe_core.protocol import KeyPair
from fhe_core.tenseal_context import (
    DEFAULT_PLAIN_MODULUS,
    DEFAULT_POLY_MODULUS_DEGREE,
    KEY_FINGERPRINT_BYTES,
    compute_key_id,
    create_context,
    load_public_context,
    load_secret_context,
    serialize_public,
    serialize_secret,
)

LOGGER = logging.getLogger(__name__)

CIPHERTEXT_MAGIC = b"BFV1"
_HEADER_LEN = len(CIPHERTEXT_MAGIC) + KEY_FINGERPRINT_BYTES


class BFVCiphertext(Ciphertext):
    """A BFV vector tagged with the fingerprint of the key it was encrypted under."""

    def __init__(self, vector: ts.BFVVector, key_id: str, context: ts.Context) -> None:
        self._vector = vector
        self._key_id = key_id
        self._context = context

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def lanes(self) -> int:
        return self._vector.size()

    def _peer(self, other: Ciphertext) -> "BFVCiphertext":
        if not isinstance(other, BFVCiphertext):
            raise TypeError(f"Cannot combine BFVCiphertext with {type(other).__name__}")
        self.check_compatible(other)
        return other

    def _wrap(self, vector: ts.BFVVector) -> "BFVCiphertext":
        return BFVCiphertext(vector, self._key_id, self._context)

    def _zeros(self) -> "BFVCiphertext":
        return self._wrap(ts.bfv_vector(self._context, [0] * self.lanes))

    def _combine(self, other: Ciphertext, operation) -> "BFVCiphertext":
        peer = self._peer(other)
        try:
            return self._wrap(operation(self._vector, peer._vector))
        except (RuntimeError, ValueError) as exc:
            # SEAL refuses to produce a transparent (identically zero) ciphertext.
            if "transparent" not in str(exc):
                raise
            return self._zeros()

    def add(self, other: Ciphertext) -> "BFVCiphertext":
        return self._combine(other, lambda a, b: a + b)

    def sub(self, other: Ciphertext) -> "BFVCiphertext":
        if other is self:
            return self._zeros()
        return self._combine(other, lambda a, b: a - b)

    def scalar_mul(self, scalar: Scalar) -> "BFVCiphertext":
        factors = self.lane_factors(scalar)
        if not any(factors):
            return self._zeros()
        return self._wrap(self._vector * factors)

    def payload(self) -> bytes:
        return self._vector.serialize()

    def serialize(self) -> bytes:
        return CIPHERTEXT_MAGIC + bytes.fromhex(self._key_id) + self.payload()

    def __repr__(self) -> str:
        return f"BFVCiphertext(key_id={self._key_id!r}, lanes={self.lanes})"


class BFVScheme(HomomorphicScheme):
    """Additively homomorphic integer encryption on top of TenSEAL's BFV vectors.

    Parsed public keys are memoized per fingerprint so every ciphertext under the
    same key shares one TenSEAL context. The cache is bounded and only ever holds
    public material.
    """

    name = "tenseal-bfv"

    def __init__(
        self,
        poly_modulus_degree: int = DEFAULT_POLY_MODULUS_DEGREE,
        plain_modulus: int = DEFAULT_PLAIN_MODULUS,
        key_cache_size: int = 64,
    ) -> None:
        if poly_modulus_degree <= 0 or poly_modulus_degree & (poly_modulus_degree - 1):
            raise CryptoInitError(f"poly_modulus_degree must be a power of two, got {poly_modulus_degree}")
        if plain_modulus <= 2 or (plain_modulus - 1) % (2 * poly_modulus_degree):
            raise CryptoInitError(
                f"plain_modulus {plain_modulus} does not support batching for n={poly_modulus_degree}"
            )
        self.poly_modulus_degree = poly_modulus_degree
        self._plain_modulus = plain_modulus
        self._key_cache_size = key_cache_size
        self._keys: "OrderedDict[str, ts.Context]" = OrderedDict()
        self._keys_lock = threading.Lock()

    @property
    def plaintext_modulus(self) -> int:
        return self._plain_modulus

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------
    def generate_keypair(self) -> KeyPair:
        try:
            context = create_context(self.poly_modulus_degree, self._plain_modulus)
            public_key = serialize_public(context)
        except Exception as exc:  # noqa: BLE001
            raise CryptoInitError(f"Failed to generate BFV key pair: {exc}") from exc
        key_id = compute_key_id(public_key)
        LOGGER.info("🔑 Generated BFV key pair key_id=%s", key_id)
        return KeyPair(public_key=public_key, private_key=serialize_secret(context, key_id))

    def key_id(self, public_key: bytes) -> str:
        return compute_key_id(public_key)

    def _open(self, public_key: bytes) -> Tuple[str, ts.Context]:
        key_id = compute_key_id(public_key)
        with self._keys_lock:
            context = self._keys.get(key_id)
            if context is None:
                context = load_public_context(public_key)
                self._keys[key_id] = context
                while len(self._keys) > self._key_cache_size:
                    self._keys.popitem(last=False)
            else:
                self._keys.move_to_end(key_id)
        return key_id, context

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------
    def encrypt(self, value: int, public_key: bytes, lanes: int = 1) -> BFVCiphertext:
        if lanes < 1:
            raise ShapeError(f"lanes must be positive, got {lanes}")
        return self.encrypt_lanes([value] * lanes, public_key)

    def encrypt_lanes(self, values: Sequence[int], public_key: bytes) -> BFVCiphertext:
        # The batch encoder takes centered int64 values.
        values = [self.normalize(int(value)) for value in values]
        if not values:
            raise ShapeError("Cannot encrypt an empty lane vector")
        key_id, context = self._open(public_key)
        return BFVCiphertext(ts.bfv_vector(context, values), key_id, context)

    def deserialize(self, data: bytes, public_key: bytes) -> BFVCiphertext:
        if len(data) <= _HEADER_LEN or not data.startswith(CIPHERTEXT_MAGIC):
            raise TransportError("Ciphertext has an unknown format")
        fingerprint = data[len(CIPHERTEXT_MAGIC):_HEADER_LEN].hex()
        key_id, context = self._open(public_key)
        if fingerprint != key_id:
            raise KeyMismatchError(f"Ciphertext key {fingerprint} does not match public key {key_id}")
        try:
            vector = ts.bfv_vector_from(context, data[_HEADER_LEN:])
        except Exception as exc:  # noqa: BLE001
            raise TransportError("Ciphertext payload could not be decoded") from exc
        return BFVCiphertext(vector, key_id, context)

    def decrypt(self, ciphertext: Ciphertext, private_key: bytes, signed: bool = True) -> list[int]:
        if not isinstance(ciphertext, BFVCiphertext):
            raise TypeError(f"Cannot decrypt {type(ciphertext).__name__} with {self.name}")
        key_id, context = load_secret_context(private_key)
        if ciphertext.key_id != key_id:
            raise KeyMismatchError(f"Ciphertext key {ciphertext.key_id} does not match private key {key_id}")
        vector = ts.bfv_vector_from(context, ciphertext.payload())
        return [self.normalize(int(value), signed) for value in vector.decrypt()]


__all__ = ["BFVCiphertext", "BFVScheme", "CIPHERTEXT_MAGIC"]
