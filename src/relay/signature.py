import logging

from src.errors import AuthError
from src.utils.crypto import verify_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ("X-Signature", "X-Hub-Signature-256", "Signature")


class WebhookSignatureValidator:
    """Checks the HMAC-SHA256 signature the gateway puts on webhook bodies."""

    def __init__(self, secret: str | None):
        self.secret = secret

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def validate(self, body: bytes, headers) -> None:
        """Raise AuthError unless the body carries a valid signature.

        A validator without a secret accepts everything.
        """
        if not self.enabled:
            logger.warning("WEBHOOK_SECRET not configured, skipping signature validation")
            return

        signature = None
        for name in SIGNATURE_HEADERS:
            signature = headers.get(name)
            if signature:
                break

        if not signature:
            logger.error("Webhook signature header missing")
            raise AuthError("missing signature")

        if not verify_signature(body, self.secret, signature):
            logger.error("Webhook signature mismatch")
            raise AuthError("invalid signature")
