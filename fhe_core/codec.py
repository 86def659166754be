"""Byte <-> text transport encoding for ciphertexts and keys (standard base64)."""
from __future__ import annotations

import base64
import binascii

from fhe_core.errors import TransportError


def encode_bytes(data: bytes) -> str:
    """Encode raw bytes as standard base64 text."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_text(text: str | None) -> bytes:
    """Decode standard base64 text; ``None`` and ``""`` both decode to ``b""``."""
    if text is None:
        return b""
    if not isinstance(text, str):
        raise TransportError(f"Expected base64 text, got {type(text).__name__}")
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise TransportError("Invalid base64 payload") from exc


__all__ = ["encode_bytes", "decode_text"]
