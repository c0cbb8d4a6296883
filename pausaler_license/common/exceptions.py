"""
Custom exceptions for the license system.

Anything raised from here means the input is not a recognizable license
artifact. Normal lifecycle outcomes (expired, wrong PIB, ...) are returned
as a verdict instead.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base class for fatal license errors."""


class MalformedEncodingError(LicenseError):
    """Exception for invalid base64url input."""


class InvalidPayloadError(LicenseError):
    """Exception for payloads that cannot be parsed or are structurally invalid."""


class SignatureInvalidError(LicenseError):
    """Exception for signatures that do not verify."""


class UnsupportedKeyFormatError(LicenseError):
    """Exception for public keys that are not a 32-byte Ed25519 SPKI key."""


class MissingIdentifierError(LicenseError):
    """Exception for an empty plaintext identifier."""


class ActivationCodeError(LicenseError):
    """Base class for activation codes rejected by the issuer."""


class MalformedActivationCodeError(ActivationCodeError):
    """Exception for activation codes with bad base64url or JSON."""


class MissingFieldError(ActivationCodeError):
    """Exception for activation codes with a missing or empty field."""

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"activation code missing {field}")
        self.field = field


class AppIdMismatchError(ActivationCodeError):
    """Exception for activation codes issued by a different product."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"activation code app_id mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual
