"""
Configuration settings for the license subsystem.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

# Development signing seed; production builds override it through the
# PAUSALER_ISSUER_SEED_HEX environment variable.
DEV_PRIVATE_KEY_SEED_HEX = (
    "c590af4308cc0f6a1a4faccf7c05ff00b3d7d4d38a9ad52b1af10f0c6b3a3f10"
)


class Config:
    """Central configuration class for all license settings."""

    def __init__(self) -> None:
        # Product identity
        self.APP_ID: str = os.getenv("PAUSALER_APP_ID", "com.dstankovski.pausaler-app")

        # Issuer key material
        self.ISSUER_SEED_HEX: str = os.getenv(
            "PAUSALER_ISSUER_SEED_HEX", DEV_PRIVATE_KEY_SEED_HEX
        )

        # Verifier key; None means the PEM shipped inside the package
        public_key_path = os.getenv("PAUSALER_PUBLIC_KEY_PATH")
        self.PUBLIC_KEY_PATH: Path | None = (
            Path(public_key_path) if public_key_path else None
        )

        # Fixed-length year, no calendar arithmetic
        self.YEARLY_VALIDITY_DAYS: int = 365

        # Logging
        self.LOG_LEVEL: int = logging.INFO

    def get_signing_key(self) -> Ed25519PrivateKey:
        """Build the issuer signing key from the configured seed."""
        try:
            seed = bytes.fromhex(self.ISSUER_SEED_HEX.strip())
        except ValueError as err:
            msg = "Issuer seed is not valid hex."
            raise ValueError(msg) from err
        if len(seed) != 32:  # noqa: PLR2004
            msg = f"Issuer seed must be 32 bytes, got {len(seed)}."
            raise ValueError(msg)
        return Ed25519PrivateKey.from_private_bytes(seed)
