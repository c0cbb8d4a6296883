"""Digest and transport encoding helpers.
"""

from __future__ import annotations

import base64
import binascii
import re

from cryptography.hazmat.primitives import hashes

from pausaler_license.common.exceptions import MalformedEncodingError

_B64URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


class CryptoUtils:
    """Utility class for hashing and base64url operations."""

    @staticmethod
    def sha256_hex(data: str) -> str:
        """Lowercase hex SHA-256 of the UTF-8 encoded string."""
        digest = hashes.Hash(hashes.SHA256())
        digest.update(data.encode("utf-8"))
        return digest.finalize().hex()

    @staticmethod
    def hash_identifier(identifier: str) -> str:
        """Hash a plaintext tax identifier (PIB) after trimming whitespace."""
        return CryptoUtils.sha256_hex(identifier.strip())

    @staticmethod
    def b64url_encode(data: bytes) -> str:
        """Encode bytes as unpadded base64url."""
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")

    @staticmethod
    def b64url_decode(text: str) -> bytes:
        """Decode unpadded base64url.

        Padding characters and anything outside the url-safe alphabet are
        rejected instead of being silently skipped.
        """
        if not _B64URL_ALPHABET.fullmatch(text):
            msg = "base64url decode failed: invalid character"
            raise MalformedEncodingError(msg)
        if len(text) % 4 == 1:
            msg = "base64url decode failed: invalid length"
            raise MalformedEncodingError(msg)
        padded = text + "=" * (-len(text) % 4)
        try:
            data = base64.b64decode(padded, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError) as err:
            msg = f"base64url decode failed: {err}"
            raise MalformedEncodingError(msg) from err
        # Trailing bits must be zero so each byte string has one encoding.
        if CryptoUtils.b64url_encode(data) != text:
            msg = "base64url decode failed: non-canonical trailing bits"
            raise MalformedEncodingError(msg)
        return data


def hash_identifier(identifier: str) -> str:
    return CryptoUtils.hash_identifier(identifier)


def encode(data: bytes) -> str:
    return CryptoUtils.b64url_encode(data)


def decode(text: str) -> bytes:
    return CryptoUtils.b64url_decode(text)
