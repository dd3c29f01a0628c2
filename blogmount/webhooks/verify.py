import base64
import binascii
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"


def _digest(secret: str, body: bytes) -> bytes:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()


def compute_signature(secret: str, body: bytes) -> str:
    return base64.b64encode(_digest(secret, body)).decode("ascii")


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """
    Check a base64 HMAC-SHA256 webhook signature in constant time.

    A missing secret or signature never verifies.
    """
    if not secret or not signature:
        return False
    try:
        received = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        return False
    return hmac.compare_digest(_digest(secret, body), received)
