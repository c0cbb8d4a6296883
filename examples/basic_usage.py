"""
Basic usage example of the activation and verification flow.

The product generates an activation code for its configured PIB, the vendor
issues a license for it offline, and the product verifies that license with
the embedded public key.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import pausaler_license
sys.path.insert(0, str(Path(__file__).parent.parent))

from pausaler_license import LicenseGenerator, LicenseType, verify_license
from pausaler_license.client.activation import activation_code_for_identifier
from pausaler_license.common.exceptions import LicenseError
from pausaler_license.common.key_codec import read_embedded_public_key_pem


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    pib = "109876543"
    try:
        # Product side: hand this code to the vendor
        activation_code = activation_code_for_identifier(pib)
        logger.info("Activation code: %s", activation_code)

        # Vendor side, offline
        license_str = LicenseGenerator().generate_license(
            activation_code, LicenseType.YEARLY
        )
        logger.info("License: %s", license_str)

        # Product side again: load the key once, verify on every check
        public_key_pem = read_embedded_public_key_pem()
        verdict = verify_license(license_str, pib, public_key_pem)
        logger.info(
            "Valid: %s, type: %s, until: %s, reason: %s",
            verdict.is_valid,
            verdict.license_type,
            verdict.valid_until,
            verdict.reason,
        )
    except LicenseError:
        logger.exception("License error")
        sys.exit(1)


if __name__ == "__main__":
    main()
