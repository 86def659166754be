"""Utilities for building, serializing and loading TenSEAL BFV contexts."""
from __future__ import annotations

from hashlib import sha256
from typing import Tuple

import tenseal as ts

from fhe_core.errors import CryptoInitError, TransportError

# 128-bit security with the default BFV coefficient modulus for n=8192.
DEFAULT_POLY_MODULUS_DEGREE = 8192
# 15 * 2**27 + 1: prime and congruent to 1 mod 2n, so batching (SIMD lanes) works.
DEFAULT_PLAIN_MODULUS = 2013265921

SECRET_KEY_MAGIC = b"BSK1"
KEY_FINGERPRINT_BYTES = 8


def create_context(
    poly_modulus_degree: int = DEFAULT_POLY_MODULUS_DEGREE,
    plain_modulus: int = DEFAULT_PLAIN_MODULUS,
) -> ts.Context:
    """Instantiate a BFV context holding a fresh public/secret key pair."""
    return ts.context(
        ts.SCHEME_TYPE.BFV,
        poly_modulus_degree=poly_modulus_degree,
        plain_modulus=plain_modulus,
    )


def compute_key_id(public_key: bytes) -> str:
    return sha256(public_key).hexdigest()[: KEY_FINGERPRINT_BYTES * 2]


def serialize_public(context: ts.Context) -> bytes:
    """Serialize the context without the secret key (safe to send to the server)."""
    return context.serialize(
        save_public_key=True,
        save_secret_key=False,
        save_galois_keys=False,
        save_relin_keys=False,
    )


def serialize_secret(context: ts.Context, key_id: str) -> bytes:
    """Serialize the full context, prefixed with the fingerprint of its public half."""
    data = context.serialize(
        save_public_key=True,
        save_secret_key=True,
        save_galois_keys=False,
        save_relin_keys=False,
    )
    return SECRET_KEY_MAGIC + bytes.fromhex(key_id) + data


def load_public_context(public_key: bytes) -> ts.Context:
    if not public_key:
        raise TransportError("Public key is empty")
    try:
        context = ts.context_from(public_key)
    except Exception as exc:  # noqa: BLE001
        raise TransportError("Public key is not a valid BFV context") from exc
    if context.is_private():
        raise TransportError("Public key must not contain a secret key")
    return context


def load_secret_context(private_key: bytes) -> Tuple[str, ts.Context]:
    """Return ``(key_id, context)`` for a private key produced by :func:`serialize_secret`."""
    header = len(SECRET_KEY_MAGIC) + KEY_FINGERPRINT_BYTES
    if len(private_key) <= header or not private_key.startswith(SECRET_KEY_MAGIC):
        raise CryptoInitError("Private key has an unknown format")
    key_id = private_key[len(SECRET_KEY_MAGIC):header].hex()
    try:
        context = ts.context_from(private_key[header:])
    except Exception as exc:  # noqa: BLE001
        raise CryptoInitError("Private key could not be loaded") from exc
    if not context.is_private():
        raise CryptoInitError("Private key does not contain a secret key")
    return key_id, context


__all__ = [
    "create_context",
    "compute_key_id",
    "serialize_public",
    "serialize_secret",
    "load_public_context",
    "load_secret_context",
    "DEFAULT_POLY_MODULUS_DEGREE",
    "DEFAULT_PLAIN_MODULUS",
    "KEY_FINGERPRINT_BYTES",
]
