"""HMAC-SHA256 signature verification for GitHub webhooks.

GitHub signs each delivery with the shared webhook secret and sends the
result in the X-Hub-Signature-256 header as "sha256=<hex digest>".
"""

import binascii
import hashlib
import hmac
from typing import Optional, Union

SIGNATURE_PREFIX = "sha256"


def _digest(payload: Union[bytes, str], secret: str) -> bytes:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()


def compute_signature(payload: Union[bytes, str], secret: str) -> str:
    """Return the X-Hub-Signature-256 header value for a payload.

    Args:
        payload: Raw request body.
        secret: Shared webhook secret.

    Returns:
        The signature in "sha256=<hex>" form.
    """
    return f"{SIGNATURE_PREFIX}={_digest(payload, secret).hex()}"


def verify_signature(
    payload: Union[bytes, str],
    signature: Optional[str],
    secret: str,
) -> bool:
    """Verify a GitHub webhook signature.

    The digest comparison is constant-time. Malformed headers (missing,
    wrong algorithm prefix, non-hex digest) are rejected without raising.

    Args:
        payload: Raw request body exactly as received.
        signature: Value of the X-Hub-Signature-256 header, if any.
        secret: Shared webhook secret.

    Returns:
        True if the signature matches the payload, False otherwise.
    """
    if not signature:
        return False

    parts = signature.split("=")
    if len(parts) != 2 or parts[0] != SIGNATURE_PREFIX:
        return False

    try:
        received = binascii.unhexlify(parts[1])
    except (binascii.Error, ValueError):
        return False

    return hmac.compare_digest(received, _digest(payload, secret))
