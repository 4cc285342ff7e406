"""
Webhook signature verification.

Gitea signs every webhook delivery with HMAC‑SHA256 over the raw request
body, using the secret configured on the webhook, and sends the hex
digest in the ``X-Gitea-Signature`` header.  When ``GITEA_WEBHOOK_SECRET``
is set, deliveries without a valid signature are rejected.
"""

import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, Request, status

from .config import settings


SIGNATURE_HEADER = "X-Gitea-Signature"


def _sign(message: bytes, secret: str) -> str:
    """Compute the hex HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Return ``True`` if ``signature`` is the HMAC of ``body`` under ``secret``."""
    if not signature:
        return False
    expected = _sign(body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())


async def verified_body(request: Request) -> bytes:
    """FastAPI dependency returning the raw request body.

    Raises a 401 error when a webhook secret is configured and the
    request signature does not match.
    """
    body = await request.body()
    secret = settings.gitea_webhook_secret
    if secret and not verify_signature(body, request.headers.get(SIGNATURE_HEADER), secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature",
        )
    return body
