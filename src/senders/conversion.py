import logging
import time

from src.models.conversion import CanonicalCustomer, CanonicalTransaction
from src.models.dispatch import DispatchTarget, SendResult
from src.senders.logger import DispatchLogger
from src.senders.transport import response_body, timed_request
from src.utils.crypto import hash_pii
from src.utils.normalize import to_datetime

logger = logging.getLogger(__name__)

PLACEHOLDER_CONTENT_ID = "frete-cartao"


def _quantity(item: dict) -> int:
    try:
        return int(item.get("quantity") or 1)
    except (TypeError, ValueError):
        return 1


class ConversionSender:
    """Sends purchase conversions to the ads conversions API."""

    def __init__(
        self,
        pixel_id: str | None,
        access_token: str | None,
        base_url: str = "https://graph.facebook.com",
        api_version: str = "v18.0",
        event_source_url: str = "https://your-domain.com",
        test_event_code: str | None = None,
        deterministic_event_ids: bool = False,
        dispatch_logger: DispatchLogger | None = None,
        timeout_seconds: float = 10,
    ):
        self.pixel_id = pixel_id
        self.access_token = access_token
        self.base_url = f"{base_url.rstrip('/')}/{api_version}"
        self.event_source_url = event_source_url
        self.test_event_code = test_event_code
        self.deterministic_event_ids = deterministic_event_ids
        self.dispatch_logger = dispatch_logger
        self.timeout_seconds = timeout_seconds

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/{self.pixel_id}/events"

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}",
        }

    def prepare_user_data(self, customer: CanonicalCustomer) -> dict:
        """Hash the identifying fields; each present field becomes a one-element list."""
        user_data = {}

        email_hash = hash_pii(customer.email)
        if email_hash:
            user_data["em"] = [email_hash]

        # phone is already country-code-prefixed digits, which is what the API hashes
        phone_hash = hash_pii(customer.phone)
        if phone_hash:
            user_data["ph"] = [phone_hash]

        name_parts = (customer.name or "").split()
        if name_parts:
            user_data["fn"] = [hash_pii(name_parts[0])]
        if len(name_parts) > 1:
            user_data["ln"] = [hash_pii(name_parts[-1])]

        user_data["country"] = ["br"]
        return user_data

    def prepare_custom_data(self, transaction: CanonicalTransaction) -> dict:
        custom_data = {
            "currency": transaction.currency or "BRL",
            "value": transaction.value,
        }

        if transaction.items:
            custom_data["content_ids"] = [
                str(item.get("id") or item.get("title") or PLACEHOLDER_CONTENT_ID)
                for item in transaction.items
            ]
            custom_data["content_type"] = "product"
            custom_data["num_items"] = sum(_quantity(item) for item in transaction.items)

        return custom_data

    def build_event_id(self, transaction_id: str) -> str:
        if self.deterministic_event_ids:
            return f"purchase_{transaction_id}"
        return f"purchase_{transaction_id}_{int(time.time() * 1000)}"

    def _event_time(self, transaction: CanonicalTransaction) -> int:
        try:
            return int(to_datetime(transaction.timestamp).timestamp())
        except ValueError:
            return int(time.time())

    def build_payload(
        self,
        customer: CanonicalCustomer,
        transaction: CanonicalTransaction,
        event_source: str = "website",
    ) -> dict:
        payload = {
            "data": [
                {
                    "event_name": "Purchase",
                    "event_time": self._event_time(transaction),
                    "action_source": event_source,
                    "user_data": self.prepare_user_data(customer),
                    "custom_data": self.prepare_custom_data(transaction),
                    "event_source_url": self.event_source_url,
                    "event_id": self.build_event_id(transaction.transaction_id),
                }
            ]
        }
        if self.test_event_code:
            payload["test_event_code"] = self.test_event_code
        return payload

    def send_conversion_event(
        self,
        customer: CanonicalCustomer,
        transaction: CanonicalTransaction,
        event_source: str = "website",
    ) -> SendResult:
        """Send one Purchase event. Never raises; failures come back as a result."""
        if not self.pixel_id or not self.access_token:
            logger.error("Conversion sender is not configured (pixel id or access token missing)")
            return SendResult(success=False, error="pixel id or access token not configured")

        payload = self.build_payload(customer, transaction, event_source)
        event_id = payload["data"][0]["event_id"]
        logger.info(
            "Sending conversion %s for transaction %s to pixel %s",
            event_id, transaction.transaction_id, self.pixel_id,
        )

        response, attempt = timed_request(
            "POST",
            self.events_url,
            target=DispatchTarget.CONVERSION,
            transaction_id=transaction.transaction_id,
            dispatch_logger=self.dispatch_logger,
            timeout=self.timeout_seconds,
            json=payload,
            headers=self._headers(),
        )

        if attempt.error is not None:
            logger.error(
                "Conversion %s for transaction %s failed: %s",
                event_id, transaction.transaction_id, attempt.error,
            )
            return SendResult(success=False, event_id=event_id, error=attempt.error)

        body = response_body(response)
        if not 200 <= attempt.status_code < 300:
            logger.error(
                "Conversion %s for transaction %s rejected with HTTP %s",
                event_id, transaction.transaction_id, attempt.status_code,
            )
            return SendResult(
                success=False,
                event_id=event_id,
                error=f"HTTP {attempt.status_code}",
                details=body,
            )

        logger.info("Conversion %s accepted", event_id)
        return SendResult(
            success=True,
            event_id=event_id,
            response=body if isinstance(body, dict) else None,
        )

    def test_connection(self) -> SendResult:
        """Fetch the pixel's name and id to check the credentials."""
        if not self.pixel_id or not self.access_token:
            return SendResult(success=False, error="pixel id or access token not configured")

        response, attempt = timed_request(
            "GET",
            f"{self.base_url}/{self.pixel_id}",
            target=DispatchTarget.CONVERSION,
            transaction_id="",
            dispatch_logger=self.dispatch_logger,
            timeout=self.timeout_seconds,
            params={"fields": "name,id"},
            headers={"Authorization": f"Bearer {self.access_token}"},
        )
        body = response_body(response)
        if attempt.error is not None:
            return SendResult(success=False, error=attempt.error)
        if not 200 <= attempt.status_code < 300:
            return SendResult(success=False, error=f"HTTP {attempt.status_code}", details=body)
        return SendResult(success=True, response=body if isinstance(body, dict) else None)
