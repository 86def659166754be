"""Error taxonomy shared by the client, the scoring engine and the HTTP layer."""
from __future__ import annotations


class AssessmentError(Exception):
    """Base class for every failure raised by the encrypted-scoring pipeline."""


class DomainError(AssessmentError, ValueError):
    """A plaintext value is outside its allowed range or is not an integer."""


class ShapeError(AssessmentError, ValueError):
    """Wrong number or shape of ciphertexts for the model."""


class KeyMismatchError(AssessmentError):
    """Ciphertexts or keys that belong to different key pairs were combined."""


class CryptoInitError(AssessmentError):
    """The encryption scheme or the scoring engine could not be set up."""


class TransportError(AssessmentError):
    """Network or byte/text encoding failure."""


class ProcessingError(AssessmentError):
    """Unexpected failure while evaluating an encrypted assessment."""


class SessionStateError(AssessmentError):
    """A client session operation was attempted in the wrong state."""


#: Errors the caller can fix by changing the request (HTTP 400 equivalents).
CLIENT_ERRORS = (DomainError, ShapeError, KeyMismatchError, TransportError)

__all__ = [
    "AssessmentError",
    "DomainError",
    "ShapeError",
    "KeyMismatchError",
    "CryptoInitError",
    "TransportError",
    "ProcessingError",
    "SessionStateError",
    "CLIENT_ERRORS",
]
