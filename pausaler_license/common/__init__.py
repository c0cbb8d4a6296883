# Common utilities
from pausaler_license.common.crypto import CryptoUtils as CryptoUtils
from pausaler_license.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
