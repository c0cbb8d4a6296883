"""
Logging helpers for the license subsystem.

Plaintext PIBs never reach a log record; identifier hashes are logged only
as a short prefix, enough to correlate an activation code with the license
issued for it.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HASH_PREFIX_LEN = 8


def setup_logger(logger: logging.Logger, log_level: int) -> None:
    """Attach a single stderr handler to ``logger`` at ``log_level``."""
    logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def short_hash(pib_hash: str) -> str:
    """Shorten an identifier hash for log output, e.g. ``ba7816bf...``."""
    if not pib_hash:
        return "<empty>"
    if len(pib_hash) <= HASH_PREFIX_LEN:
        return pib_hash
    return pib_hash[:HASH_PREFIX_LEN] + "..."
