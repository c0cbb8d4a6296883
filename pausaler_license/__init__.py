# Pausaler offline licensing

from pausaler_license.client.activation import (
    activation_code_for_identifier,
    generate_activation_code,
)
from pausaler_license.client.license_validator import LicenseValidator, verify_license
from pausaler_license.common.models import (
    LicensePayload,
    LicenseType,
    VerdictReason,
    VerificationVerdict,
)
from pausaler_license.issuer.license_generator import LicenseGenerator

__all__ = [
    "LicenseGenerator",
    "LicensePayload",
    "LicenseType",
    "LicenseValidator",
    "VerdictReason",
    "VerificationVerdict",
    "activation_code_for_identifier",
    "generate_activation_code",
    "verify_license",
]
