"""
Minimal SPKI PEM codec for a single Ed25519 public key.

Only the 44-byte DER form ``SEQUENCE { AlgorithmIdentifier(1.3.101.112),
BIT STRING(32 bytes) }`` is understood; this is not a certificate parser.
"""

from __future__ import annotations

import base64
import binascii
from importlib import resources
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from pausaler_license.common.exceptions import UnsupportedKeyFormatError

ED25519_SPKI_PREFIX = bytes(
    [0x30, 0x2A, 0x30, 0x05, 0x06, 0x03, 0x2B, 0x65, 0x70, 0x03, 0x21, 0x00]
)
ED25519_KEY_LEN = 32
SPKI_DER_LEN = len(ED25519_SPKI_PREFIX) + ED25519_KEY_LEN
PEM_LINE_WIDTH = 64
PEM_BEGIN = "-----BEGIN PUBLIC KEY-----"
PEM_END = "-----END PUBLIC KEY-----"


def encode_public_key_pem(raw_key: bytes) -> str:
    """Wrap 32 raw Ed25519 public key bytes into an SPKI PEM string."""
    if len(raw_key) != ED25519_KEY_LEN:
        msg = f"Ed25519 public key must be {ED25519_KEY_LEN} bytes, got {len(raw_key)}"
        raise UnsupportedKeyFormatError(msg)
    b64 = base64.b64encode(ED25519_SPKI_PREFIX + raw_key).decode("ascii")
    lines = [PEM_BEGIN]
    lines.extend(
        b64[i : i + PEM_LINE_WIDTH] for i in range(0, len(b64), PEM_LINE_WIDTH)
    )
    lines.append(PEM_END)
    return "\n".join(lines) + "\n"


def decode_public_key_pem(pem: str) -> bytes:
    """Return the 32 raw key bytes from an Ed25519 SPKI PEM string."""
    body = "".join(
        line.strip()
        for line in pem.splitlines()
        if line.strip() and not line.strip().startswith("-----")
    )
    try:
        der = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as err:
        msg = f"invalid public key pem base64: {err}"
        raise UnsupportedKeyFormatError(msg) from err

    if len(der) != SPKI_DER_LEN or der[: len(ED25519_SPKI_PREFIX)] != ED25519_SPKI_PREFIX:
        msg = "unsupported public key format"
        raise UnsupportedKeyFormatError(msg)
    return der[len(ED25519_SPKI_PREFIX) :]


def load_verifying_key(pem: str) -> Ed25519PublicKey:
    """Parse an SPKI PEM string into a verifying key."""
    raw = decode_public_key_pem(pem)
    try:
        return Ed25519PublicKey.from_public_bytes(raw)
    except ValueError as err:
        msg = f"invalid public key bytes: {err}"
        raise UnsupportedKeyFormatError(msg) from err


def read_embedded_public_key_pem(path: Path | None = None) -> str:
    """Read the issuer public key shipped with the package (or from ``path``)."""
    if path is not None:
        return path.read_text(encoding="ascii")
    return (
        resources.files("pausaler_license.client")
        .joinpath("public_key.pem")
        .read_text(encoding="ascii")
    )


def load_embedded_public_key(path: Path | None = None) -> Ed25519PublicKey:
    """Load the embedded verifying key.

    Call once at application start and pass the result to the validator.
    """
    return load_verifying_key(read_embedded_public_key_pem(path))
