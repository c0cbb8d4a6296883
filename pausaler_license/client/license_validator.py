"""
License verification embedded in the product.

Only the issuer's public key is needed here. Lifecycle outcomes come back as
a ``VerificationVerdict``; corrupted or tampered input raises a
``LicenseError`` subclass instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from pydantic import ValidationError

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from pausaler_license.common.crypto import CryptoUtils
from pausaler_license.common.exceptions import (
    InvalidPayloadError,
    SignatureInvalidError,
)
from pausaler_license.common.key_codec import load_verifying_key
from pausaler_license.common.logging_utils import short_hash
from pausaler_license.common.models import (
    LICENSE_SEPARATOR,
    LicensePayload,
    LicenseType,
    VerdictReason,
    VerificationVerdict,
    ensure_utc,
    parse_rfc3339,
)

ED25519_SIGNATURE_LEN = 64


def _parse_time(value: str) -> datetime:
    try:
        return parse_rfc3339(value)
    except ValueError as err:
        msg = f"invalid datetime: {err}"
        raise InvalidPayloadError(msg) from err


class LicenseValidator:
    """Checks license strings against one embedded public key.

    Instances hold no mutable state and can be shared between threads.
    """

    def __init__(self, public_key: Ed25519PublicKey):
        self.public_key = public_key
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_pem(cls, public_key_pem: str) -> LicenseValidator:
        return cls(load_verifying_key(public_key_pem))

    def verify_signature(self, payload_bytes: bytes, signature: bytes) -> None:
        """Verify an Ed25519 signature over the exact payload bytes."""
        if len(signature) != ED25519_SIGNATURE_LEN:
            msg = "invalid signature length"
            raise SignatureInvalidError(msg)
        try:
            self.public_key.verify(signature, payload_bytes)
        except InvalidSignature as err:
            msg = "signature verification failed"
            raise SignatureInvalidError(msg) from err

    def verify(
        self,
        license_str: str,
        expected_pib_hash: str,
        now: datetime | None = None,
    ) -> VerificationVerdict:
        """Verify a license string for the expected identifier hash.

        Raises:
            MalformedEncodingError: a segment is not valid base64url
            InvalidPayloadError: the payload is not a license payload
            SignatureInvalidError: the signature does not verify
        """
        now = ensure_utc(now or datetime.now(timezone.utc))

        parts = license_str.split(LICENSE_SEPARATOR)
        if len(parts) != 2:  # noqa: PLR2004
            self.logger.debug("License has %d segments, expected 2", len(parts))
            return VerificationVerdict(
                is_valid=False, reason=VerdictReason.INVALID_FORMAT
            )

        payload_bytes = CryptoUtils.b64url_decode(parts[0])
        signature = CryptoUtils.b64url_decode(parts[1])

        try:
            payload = LicensePayload.model_validate_json(payload_bytes)
        except (ValidationError, ValueError) as err:
            msg = f"invalid payload json: {err}"
            raise InvalidPayloadError(msg) from err

        # Signature not checked yet: license_type and valid_until are hints only.
        if payload.pib_hash != expected_pib_hash:
            self.logger.info(
                "License is bound to pib_hash=%s, expected %s",
                short_hash(payload.pib_hash),
                short_hash(expected_pib_hash),
            )
            return VerificationVerdict(
                license_type=payload.license_type.value,
                valid_until=payload.valid_until,
                is_valid=False,
                reason=VerdictReason.PIB_MISMATCH,
            )

        self.verify_signature(payload_bytes, signature)
        self.logger.debug("License signature valid")

        valid_from = _parse_time(payload.valid_from)
        if now < valid_from:
            self.logger.info("License not valid before %s", payload.valid_from)
            return VerificationVerdict(
                license_type=payload.license_type.value,
                valid_until=payload.valid_until,
                is_valid=False,
                reason=VerdictReason.NOT_YET_VALID,
            )

        if payload.license_type is LicenseType.LIFETIME:
            self.logger.debug("Lifetime license valid")
            return VerificationVerdict(
                license_type=LicenseType.LIFETIME.value, is_valid=True
            )

        if payload.valid_until is None:
            msg = "missing valid_until"
            raise InvalidPayloadError(msg)
        valid_until = _parse_time(payload.valid_until)
        if now > valid_until:
            self.logger.info("License expired at %s", payload.valid_until)
            return VerificationVerdict(
                license_type=LicenseType.YEARLY.value,
                valid_until=payload.valid_until,
                is_valid=False,
                reason=VerdictReason.EXPIRED,
            )

        self.logger.debug("Yearly license valid until %s", payload.valid_until)
        return VerificationVerdict(
            license_type=LicenseType.YEARLY.value,
            valid_until=payload.valid_until,
            is_valid=True,
        )


def verify_license(
    license_str: str,
    pib: str,
    public_key_pem: str,
    now: datetime | None = None,
) -> VerificationVerdict:
    """Verify a license string against the plaintext PIB currently configured.

    The identifier hash is recomputed here on every call, never read from
    storage.
    """
    validator = LicenseValidator.from_pem(public_key_pem)
    return validator.verify(
        license_str.strip(), CryptoUtils.hash_identifier(pib), now
    )
