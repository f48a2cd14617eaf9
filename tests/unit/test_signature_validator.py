import pytest

from src.errors import AuthError
from src.relay.signature import WebhookSignatureValidator
from src.utils.crypto import generate_signature


BODY = b'{"id":"t1","status":"paid"}'


class TestWebhookSignatureValidator:
    """Tests for inbound signature validation."""

    @pytest.mark.unit
    def test_disabled_without_secret(self):
        validator = WebhookSignatureValidator(None)
        assert validator.enabled is False
        validator.validate(BODY, {})  # no exception

    @pytest.mark.unit
    @pytest.mark.parametrize("header", ["X-Signature", "X-Hub-Signature-256", "Signature"])
    def test_accepts_each_supported_header(self, webhook_secret, header):
        validator = WebhookSignatureValidator(webhook_secret)
        validator.validate(BODY, {header: generate_signature(BODY, webhook_secret)})

    @pytest.mark.unit
    def test_missing_header_raises(self, webhook_secret):
        validator = WebhookSignatureValidator(webhook_secret)
        with pytest.raises(AuthError) as exc:
            validator.validate(BODY, {})
        assert exc.value.status_code == 401
        assert exc.value.message == "missing signature"

    @pytest.mark.unit
    def test_wrong_secret_raises(self, webhook_secret):
        validator = WebhookSignatureValidator(webhook_secret)
        with pytest.raises(AuthError):
            validator.validate(BODY, {"X-Signature": generate_signature(BODY, "other-secret")})
