"""Activation code codec.

An activation code is an unsigned, base64url-encoded JSON document that the
user's installation hands to the issuer out of band. It is not a trust
boundary; only the signed license is.
"""

from __future__ import annotations

import json
import logging
import os
import time

from pydantic import ValidationError

from pausaler_license.common.config import Config
from pausaler_license.common.crypto import CryptoUtils
from pausaler_license.common.exceptions import (
    AppIdMismatchError,
    MalformedActivationCodeError,
    MalformedEncodingError,
    MissingFieldError,
    MissingIdentifierError,
)
from pausaler_license.common.logging_utils import short_hash
from pausaler_license.common.models import ActivationCodePayload

logger = logging.getLogger(__name__)

NONCE_BYTES = 16


def generate_activation_code(pib_hash: str, app_id: str, issued_at: int) -> str:
    """Build a fresh activation code for an already hashed identifier."""
    payload = ActivationCodePayload(
        pib_hash=pib_hash,
        issued_at=issued_at,
        nonce=CryptoUtils.b64url_encode(os.urandom(NONCE_BYTES)),
        app_id=app_id,
    )
    return CryptoUtils.b64url_encode(payload.to_json_bytes())


def activation_code_for_identifier(
    pib: str, config: Config | None = None, now: int | None = None
) -> str:
    """Hash the plaintext PIB and build an activation code for this product."""
    config = config or Config()
    pib = pib.strip()
    if not pib:
        msg = "PIB is missing"
        raise MissingIdentifierError(msg)
    issued_at = now if now is not None else int(time.time())
    pib_hash = CryptoUtils.hash_identifier(pib)
    logger.debug(
        "Generating activation code pib_hash=%s issued_at=%s",
        short_hash(pib_hash),
        issued_at,
    )
    return generate_activation_code(pib_hash, config.APP_ID, issued_at)


def decode_activation_code(
    code: str, expected_app_id: str | None = None
) -> ActivationCodePayload:
    """Decode and validate an activation code.

    Args:
        code: The activation code as pasted by the user
        expected_app_id: When given, the embedded app_id must equal it

    Raises:
        MalformedActivationCodeError: bad base64url or JSON
        MissingFieldError: a required field is absent or empty
        AppIdMismatchError: the code was produced by another product
    """
    try:
        raw = CryptoUtils.b64url_decode(code.strip())
    except MalformedEncodingError as err:
        msg = f"invalid activation code base64url: {err}"
        raise MalformedActivationCodeError(msg) from err

    try:
        document = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        msg = f"invalid activation code json: {err}"
        raise MalformedActivationCodeError(msg) from err
    if not isinstance(document, dict):
        msg = "invalid activation code json: expected an object"
        raise MalformedActivationCodeError(msg)

    for field in ActivationCodePayload.model_fields:
        if field not in document:
            raise MissingFieldError(field)

    try:
        payload = ActivationCodePayload.model_validate(document)
    except ValidationError as err:
        msg = f"invalid activation code json: {err}"
        raise MalformedActivationCodeError(msg) from err

    if not payload.pib_hash:
        raise MissingFieldError("pib_hash")
    if payload.issued_at <= 0:
        raise MissingFieldError(
            "issued_at", "activation code has invalid issued_at"
        )
    if not payload.nonce:
        raise MissingFieldError("nonce")
    if not payload.app_id:
        raise MissingFieldError("app_id")

    if expected_app_id is not None and payload.app_id != expected_app_id:
        raise AppIdMismatchError(expected_app_id, payload.app_id)

    return payload
