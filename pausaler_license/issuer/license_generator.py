"""
Offline license issuer.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from pausaler_license.client.activation import decode_activation_code
from pausaler_license.common import setup_logger
from pausaler_license.common.logging_utils import short_hash
from pausaler_license.common.config import Config
from pausaler_license.common.crypto import CryptoUtils
from pausaler_license.common.key_codec import encode_public_key_pem
from pausaler_license.common.models import (
    LICENSE_SEPARATOR,
    LicensePayload,
    LicenseType,
    ensure_utc,
    format_rfc3339,
)


class LicenseGenerator:
    """License generator for creating signed license strings."""

    def __init__(
        self,
        config: Config | None = None,
        signing_key: Ed25519PrivateKey | None = None,
        log_level: int | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        self.log_level = log_level if log_level is not None else self.config.LOG_LEVEL
        setup_logger(self.logger, self.log_level)
        self.signing_key = signing_key or self.config.get_signing_key()

    def public_key_pem(self) -> str:
        """SPKI PEM of the issuer's verifying key, for embedding in the product."""
        raw = self.signing_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return encode_public_key_pem(raw)

    def build_payload(
        self, license_type: LicenseType, pib_hash: str, now: datetime | None = None
    ) -> LicensePayload:
        """Build license claims starting at ``now`` truncated to whole seconds."""
        now = ensure_utc(now or datetime.now(timezone.utc))
        valid_from = now.replace(microsecond=0)

        valid_until = None
        if license_type is LicenseType.YEARLY:
            valid_until = format_rfc3339(
                valid_from + timedelta(days=self.config.YEARLY_VALIDITY_DAYS)
            )

        return LicensePayload(
            license_type=license_type,
            valid_from=format_rfc3339(valid_from),
            valid_until=valid_until,
            pib_hash=pib_hash,
        )

    def sign_payload(self, payload: LicensePayload) -> str:
        """Serialize the payload once, sign those bytes and build the license string."""
        payload_bytes = payload.to_json_bytes()
        signature = self.signing_key.sign(payload_bytes)
        return (
            CryptoUtils.b64url_encode(payload_bytes)
            + LICENSE_SEPARATOR
            + CryptoUtils.b64url_encode(signature)
        )

    def generate_license(
        self,
        activation_code: str,
        license_type: LicenseType,
        now: datetime | None = None,
    ) -> str:
        """Validate an activation code and issue a signed license for it.

        Raises:
            ActivationCodeError: if the activation code is rejected
        """
        activation = decode_activation_code(
            activation_code, expected_app_id=self.config.APP_ID
        )
        payload = self.build_payload(license_type, activation.pib_hash, now)
        license_str = self.sign_payload(payload)
        self.logger.info(
            "Issued %s license for pib_hash=%s valid_from=%s valid_until=%s",
            payload.license_type.value,
            short_hash(payload.pib_hash),
            payload.valid_from,
            payload.valid_until or "-",
        )
        return license_str
