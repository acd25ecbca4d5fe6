"""Identifier hashing for logs.

Session identifiers are client-generated and may be correlated with a
person, so they are never written to logs in the clear. Message text is
never logged at all; a content fingerprint is used instead.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


_PII_SALT: Optional[str] = None

MIN_SALT_LENGTH = 32


def configure_pii_salt(salt: str) -> None:
    """Configure the salt used by hash_pii().

    Must be called during application startup before any hashing.

    Args:
        salt: Secret salt value, at least 32 characters

    Raises:
        ValueError: If salt is empty or too short
    """
    global _PII_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_pii(value: str) -> str:
    """Hash an identifier for safe logging.

    SHA-256 over salt + value, so the same session always maps to the
    same 64-char hex digest and logs stay correlatable.

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    salted = f"{_PII_SALT}{value}"
    return hashlib.sha256(salted.encode()).hexdigest()


def hash_text_for_audit(text: str) -> str:
    """Unsalted SHA-256 fingerprint of message text."""
    return hashlib.sha256(text.encode()).hexdigest()
