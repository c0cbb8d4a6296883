# Vendor-side license issuance
from pausaler_license.issuer.license_generator import LicenseGenerator

__all__ = ["LicenseGenerator"]
