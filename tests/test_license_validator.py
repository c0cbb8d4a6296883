from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from pausaler_license.client.license_validator import LicenseValidator, verify_license
from pausaler_license.common.config import Config
from pausaler_license.common.crypto import CryptoUtils
from pausaler_license.common.exceptions import (
    InvalidPayloadError,
    LicenseError,
    MalformedEncodingError,
    SignatureInvalidError,
    UnsupportedKeyFormatError,
)
from pausaler_license.common.models import LicensePayload, LicenseType, VerdictReason
from pausaler_license.issuer.license_generator import LicenseGenerator

PIB = "109876543"
PIB_HASH = CryptoUtils.hash_identifier(PIB)
VALID_FROM = datetime(2025, 1, 1, tzinfo=timezone.utc)
VALID_UNTIL = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def generator() -> LicenseGenerator:
    return LicenseGenerator(
        Config(), signing_key=Ed25519PrivateKey.from_private_bytes(bytes([13] * 32))
    )


@pytest.fixture
def validator(generator: LicenseGenerator) -> LicenseValidator:
    return LicenseValidator.from_pem(generator.public_key_pem())


def _payload(
    license_type: LicenseType = LicenseType.YEARLY,
    pib_hash: str = PIB_HASH,
    valid_until: str | None = "2026-01-01T00:00:00Z",
) -> LicensePayload:
    return LicensePayload(
        license_type=license_type,
        valid_from="2025-01-01T00:00:00Z",
        valid_until=valid_until if license_type is LicenseType.YEARLY else None,
        pib_hash=pib_hash,
    )


def _flip_bit(data: bytes, bit: int) -> bytes:
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)


def test_yearly_license_valid_within_window(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload())
    verdict = validator.verify(license_str, PIB_HASH, VALID_FROM + timedelta(days=100))

    assert verdict.is_valid
    assert verdict.reason is None
    assert verdict.license_type == "YEARLY"
    assert verdict.valid_until == "2026-01-01T00:00:00Z"


def test_issued_license_roundtrip(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload = generator.build_payload(LicenseType.YEARLY, PIB_HASH, VALID_FROM)
    license_str = generator.sign_payload(payload)
    assert validator.verify(license_str, PIB_HASH, VALID_FROM).is_valid


def test_lifetime_never_expires(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload(LicenseType.LIFETIME))
    now = VALID_FROM.replace(year=VALID_FROM.year + 100)
    verdict = validator.verify(license_str, PIB_HASH, now)

    assert verdict.is_valid
    assert verdict.license_type == "LIFETIME"
    assert verdict.valid_until is None


def test_yearly_boundary(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload())

    assert validator.verify(license_str, PIB_HASH, VALID_UNTIL).is_valid

    verdict = validator.verify(
        license_str, PIB_HASH, VALID_UNTIL + timedelta(seconds=1)
    )
    assert not verdict.is_valid
    assert verdict.reason is VerdictReason.EXPIRED
    assert verdict.valid_until == "2026-01-01T00:00:00Z"


def test_not_yet_valid_boundary(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    for license_type in LicenseType:
        license_str = generator.sign_payload(_payload(license_type))

        assert validator.verify(license_str, PIB_HASH, VALID_FROM).is_valid
        verdict = validator.verify(
            license_str, PIB_HASH, VALID_FROM - timedelta(seconds=1)
        )
        assert not verdict.is_valid
        assert verdict.reason is VerdictReason.NOT_YET_VALID
        assert verdict.license_type == license_type.value


def test_pib_mismatch_with_valid_signature(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload())
    other_hash = CryptoUtils.hash_identifier("100000001")
    verdict = validator.verify(license_str, other_hash, VALID_FROM)

    assert not verdict.is_valid
    assert verdict.reason is VerdictReason.PIB_MISMATCH
    assert verdict.license_type == "YEARLY"
    assert verdict.valid_until == "2026-01-01T00:00:00Z"


def test_pib_mismatch_reported_before_signature_check(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload_b64, _ = generator.sign_payload(_payload()).split(".")
    forged = payload_b64 + "." + CryptoUtils.b64url_encode(bytes(64))
    verdict = validator.verify(forged, "bbb", VALID_FROM)

    assert not verdict.is_valid
    assert verdict.reason is VerdictReason.PIB_MISMATCH


def test_retargeted_pib_hash_is_not_accepted(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    other_hash = CryptoUtils.hash_identifier("100000001")
    payload_b64, sig_b64 = generator.sign_payload(_payload()).split(".")
    payload_bytes = CryptoUtils.b64url_decode(payload_b64).replace(
        PIB_HASH.encode(), other_hash.encode()
    )
    forged = CryptoUtils.b64url_encode(payload_bytes) + "." + sig_b64

    verdict = validator.verify(forged, PIB_HASH, VALID_FROM)
    assert not verdict.is_valid
    assert verdict.reason is VerdictReason.PIB_MISMATCH

    with pytest.raises(SignatureInvalidError):
        validator.verify(forged, other_hash, VALID_FROM)


def test_tampered_claims_fail_signature(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload_b64, sig_b64 = generator.sign_payload(_payload()).split(".")
    payload_bytes = CryptoUtils.b64url_decode(payload_b64).replace(
        b"2026-01-01", b"2099-01-01"
    )
    forged = CryptoUtils.b64url_encode(payload_bytes) + "." + sig_b64

    with pytest.raises(SignatureInvalidError):
        validator.verify(forged, PIB_HASH, VALID_FROM)


def test_every_signature_bit_flip_is_fatal(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload_b64, sig_b64 = generator.sign_payload(_payload()).split(".")
    signature = CryptoUtils.b64url_decode(sig_b64)

    for bit in range(len(signature) * 8):
        forged = payload_b64 + "." + CryptoUtils.b64url_encode(_flip_bit(signature, bit))
        with pytest.raises(SignatureInvalidError):
            validator.verify(forged, PIB_HASH, VALID_FROM)


def test_payload_bit_flip_is_never_accepted(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload_b64, sig_b64 = generator.sign_payload(_payload()).split(".")
    payload_bytes = CryptoUtils.b64url_decode(payload_b64)

    for bit in range(len(payload_bytes) * 8):
        forged = (
            CryptoUtils.b64url_encode(_flip_bit(payload_bytes, bit)) + "." + sig_b64
        )
        try:
            verdict = validator.verify(forged, PIB_HASH, VALID_FROM)
        except (InvalidPayloadError, SignatureInvalidError):
            continue
        # Only a flip inside pib_hash can get past parsing without a fatal error.
        assert not verdict.is_valid
        assert verdict.reason is VerdictReason.PIB_MISMATCH


@pytest.mark.parametrize("license_str", ["", "no-separator", "a.b.c", "a..b"])
def test_invalid_format_is_a_verdict(
    validator: LicenseValidator, license_str: str
) -> None:
    verdict = validator.verify(license_str, PIB_HASH, VALID_FROM)
    assert not verdict.is_valid
    assert verdict.reason is VerdictReason.INVALID_FORMAT
    assert verdict.license_type is None


@pytest.mark.parametrize("license_str", ["@@@.AAAA", "AAAA.$$$", "YWJj=.AAAA"])
def test_non_base64_segment_is_fatal(
    validator: LicenseValidator, license_str: str
) -> None:
    with pytest.raises(MalformedEncodingError):
        validator.verify(license_str, PIB_HASH, VALID_FROM)


def test_non_json_payload_is_fatal(validator: LicenseValidator) -> None:
    license_str = (
        CryptoUtils.b64url_encode(b"not json") + "." + CryptoUtils.b64url_encode(bytes(64))
    )
    with pytest.raises(InvalidPayloadError):
        validator.verify(license_str, PIB_HASH, VALID_FROM)


def test_short_signature_is_fatal(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload_b64, _ = generator.sign_payload(_payload()).split(".")
    forged = payload_b64 + "." + CryptoUtils.b64url_encode(bytes(10))
    with pytest.raises(SignatureInvalidError, match="length"):
        validator.verify(forged, PIB_HASH, VALID_FROM)


def test_yearly_without_valid_until_is_fatal(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload(valid_until=None))
    with pytest.raises(InvalidPayloadError, match="valid_until"):
        validator.verify(license_str, PIB_HASH, VALID_FROM)


def test_unparseable_valid_from_is_fatal(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    payload = LicensePayload(
        license_type=LicenseType.LIFETIME, valid_from="yesterday", pib_hash=PIB_HASH
    )
    with pytest.raises(InvalidPayloadError, match="datetime"):
        validator.verify(generator.sign_payload(payload), PIB_HASH, VALID_FROM)


def test_fatal_errors_share_a_base_class() -> None:
    for error in (
        MalformedEncodingError,
        InvalidPayloadError,
        SignatureInvalidError,
        UnsupportedKeyFormatError,
    ):
        assert issubclass(error, LicenseError)


def test_license_from_other_issuer_is_rejected(validator: LicenseValidator) -> None:
    other = LicenseGenerator(
        Config(), signing_key=Ed25519PrivateKey.from_private_bytes(bytes([9] * 32))
    )
    with pytest.raises(SignatureInvalidError):
        validator.verify(other.sign_payload(_payload()), PIB_HASH, VALID_FROM)


def test_naive_now_is_treated_as_utc(
    generator: LicenseGenerator, validator: LicenseValidator
) -> None:
    license_str = generator.sign_payload(_payload())
    verdict = validator.verify(license_str, PIB_HASH, datetime(2026, 1, 1, 0, 0, 1))
    assert verdict.reason is VerdictReason.EXPIRED


def test_verify_license_entry_point(generator: LicenseGenerator) -> None:
    license_str = generator.sign_payload(_payload())
    pem = generator.public_key_pem()

    verdict = verify_license(f" {license_str}\n", f" {PIB} ", pem, VALID_FROM)
    assert verdict.is_valid

    mismatch = verify_license(license_str, "100000001", pem, VALID_FROM)
    assert mismatch.reason is VerdictReason.PIB_MISMATCH


def test_verify_license_rejects_bad_key(generator: LicenseGenerator) -> None:
    license_str = generator.sign_payload(_payload())
    with pytest.raises(UnsupportedKeyFormatError):
        verify_license(license_str, PIB, "not a pem", VALID_FROM)


def test_verify_license_with_embedded_key(monkeypatch) -> None:
    monkeypatch.delenv("PAUSALER_ISSUER_SEED_HEX", raising=False)
    monkeypatch.delenv("PAUSALER_APP_ID", raising=False)
    from pausaler_license.common.key_codec import read_embedded_public_key_pem

    license_str = LicenseGenerator().sign_payload(_payload(LicenseType.LIFETIME))
    verdict = verify_license(
        license_str, PIB, read_embedded_public_key_pem(), VALID_FROM
    )
    assert verdict.is_valid


@pytest.mark.parametrize("valid_from", ["2025-01-01T00:00Z", "2025-01-01T00:00:00+0000"])
def test_non_rfc3339_valid_from_is_fatal(
    generator: LicenseGenerator, validator: LicenseValidator, valid_from: str
) -> None:
    payload = LicensePayload(
        license_type=LicenseType.LIFETIME, valid_from=valid_from, pib_hash=PIB_HASH
    )
    with pytest.raises(InvalidPayloadError, match="RFC3339"):
        validator.verify(generator.sign_payload(payload), PIB_HASH, VALID_FROM)
