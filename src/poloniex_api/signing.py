"""HMAC-SHA512 request signing."""

from __future__ import annotations

import hashlib
import hmac

from .exceptions import ConfigurationError


def _secret_bytes(secret: str | bytes) -> bytes:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    elif not isinstance(secret, bytes | bytearray):
        raise ConfigurationError(
            "API secret must be str or bytes",
            details={"type": type(secret).__name__},
        )

    if not secret:
        raise ConfigurationError("API secret cannot be empty")
    return bytes(secret)


def sign(secret: str | bytes, message: bytes | str) -> str:
    """Return the lowercase hex HMAC-SHA512 digest of ``message`` keyed by ``secret``.

    Args:
        secret: API secret shared with the exchange
        message: Exact request body bytes

    Returns:
        128-character hex string

    Raises:
        ConfigurationError: If the secret is empty or of the wrong type
    """
    key = _secret_bytes(secret)
    if isinstance(message, str):
        message = message.encode("utf-8")

    return hmac.new(key, message, hashlib.sha512).hexdigest()


def verify(secret: str | bytes, message: bytes | str, signature: str) -> bool:
    """Check a signature in constant time."""
    return hmac.compare_digest(sign(secret, message), signature.lower())
