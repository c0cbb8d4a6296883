"""
Pydantic models for the activation code, license payload and verdict.

Field order in each payload model is the wire order; payload bytes are
produced once by ``to_json_bytes`` and never re-serialized after signing.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LICENSE_SEPARATOR = "."
_RFC3339_PATTERN = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)


class LicenseType(str, Enum):
    YEARLY = "YEARLY"
    LIFETIME = "LIFETIME"

    @classmethod
    def from_cli(cls, name: str) -> LicenseType:
        """Map the lower-case CLI spelling to a license type."""
        try:
            return _CLI_NAMES[name.strip().lower()]
        except KeyError:
            msg = f"Unknown license type: {name!r}"
            raise ValueError(msg) from None


_CLI_NAMES: dict[str, LicenseType] = {
    "yearly": LicenseType.YEARLY,
    "lifetime": LicenseType.LIFETIME,
}


class VerdictReason(str, Enum):
    INVALID_FORMAT = "invalid_format"
    PIB_MISMATCH = "pib_mismatch"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"


class ActivationCodePayload(BaseModel):
    """Unsigned activation request; field types are checked without coercion."""

    model_config = ConfigDict(frozen=True, strict=True)

    pib_hash: str
    issued_at: int
    nonce: str
    app_id: str

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")


class LicensePayload(BaseModel):
    """Signed license claims."""

    model_config = ConfigDict(frozen=True)

    license_type: LicenseType
    valid_from: str
    valid_until: str | None = None
    pib_hash: str

    def to_json_bytes(self) -> bytes:
        """Compact JSON; ``valid_until`` is omitted, not null, when unset."""
        return self.model_dump_json(exclude_none=True).encode("utf-8")


class VerificationVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    license_type: str | None = None
    valid_until: str | None = None
    is_valid: bool
    reason: VerdictReason | None = None


def ensure_utc(moment: datetime) -> datetime:
    """Convert to UTC; naive datetimes are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_rfc3339(moment: datetime) -> str:
    """Format as second-precision UTC RFC3339, e.g. ``2025-01-01T00:00:00Z``."""
    return ensure_utc(moment).strftime(RFC3339_FORMAT)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware datetime.

    Seconds and an offset (``Z`` or ``+HH:MM``) are mandatory; fractional
    seconds beyond microseconds are truncated.

    Raises:
        ValueError: if the value is not an RFC3339 date-time
    """
    match = _RFC3339_PATTERN.fullmatch(value.strip())
    if match is None:
        msg = f"invalid datetime: {value!r} is not RFC3339"
        raise ValueError(msg)
    fraction = (match["fraction"] or "")[:6].ljust(6, "0")
    offset = match["offset"]
    if offset in ("Z", "z"):
        offset = "+00:00"
    return datetime.fromisoformat(
        f"{match['date']}T{match['time']}.{fraction}{offset}"
    )
