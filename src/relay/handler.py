import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone

from src.errors import NotFoundError, UpstreamError, ValidationError
from src.models.status import StatusRecord
from src.relay.mapper import map_to_conversion, map_to_order, transaction_id_of
from src.relay.signature import WebhookSignatureValidator
from src.senders.conversion import ConversionSender
from src.senders.gateway import GatewayClient
from src.senders.orders import OrderTrackingSender
from src.store.status_store import StatusStore
from src.utils.normalize import is_approved

logger = logging.getLogger(__name__)


class WebhookRelay:
    """Turns gateway payment-status webhooks into downstream conversion and order events.

    The conversion send drives the response. The order send runs on a
    background worker and can neither fail nor delay the response beyond
    its own timeout.
    """

    def __init__(
        self,
        conversion_sender: ConversionSender,
        order_sender: OrderTrackingSender,
        store: StatusStore,
        gateway: GatewayClient | None = None,
        validator: WebhookSignatureValidator | None = None,
        platform: str = "NivoPay",
        test_mode: bool = False,
        service_name: str = "Meta Webhook Backend",
        max_workers: int = 4,
    ):
        self.conversion_sender = conversion_sender
        self.order_sender = order_sender
        self.store = store
        self.gateway = gateway
        self.validator = validator or WebhookSignatureValidator(None)
        self.platform = platform
        self.test_mode = test_mode
        self.service_name = service_name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="order-dispatch")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def health(self) -> dict:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service_name,
        }

    def handle_payment_status(self, body: bytes, headers) -> dict:
        """Process one payment-status webhook.

        Raises AuthError, ValidationError or UpstreamError; returns the
        success body otherwise.
        """
        self.validator.validate(body, headers)

        try:
            event = json.loads(body or b"")
        except (json.JSONDecodeError, ValueError):
            raise ValidationError("invalid JSON")
        if not isinstance(event, dict):
            raise ValidationError("webhook body must be a JSON object")

        transaction_id = transaction_id_of(event)
        if not transaction_id:
            logger.error("Webhook without transaction id")
            raise ValidationError("missing transaction id")

        approved = is_approved(event.get("status"))
        logger.info(
            "Webhook for transaction %s with status %r (approved=%s)",
            transaction_id, event.get("status"), approved,
        )

        self.store.set(
            transaction_id,
            StatusRecord(
                status="COMPLETED" if approved else (event.get("status") or "PENDING"),
                amount=event.get("amount"),
                customer=event.get("customer"),
                items=event.get("items") or [],
                updated_at=datetime.now(timezone.utc),
                custom_id=event.get("customId"),
            ),
        )

        if not approved:
            logger.info("Transaction %s not approved, nothing dispatched", transaction_id)
            return {"message": "Webhook received - payment not approved"}

        record = map_to_conversion(event)
        order = map_to_order(event, platform=self.platform, is_test=self.test_mode)

        self._dispatch_order(order)
        result = self.conversion_sender.send_conversion_event(
            customer=record.customer,
            transaction=record.transaction,
            event_source="website",
        )

        if not result.success:
            logger.error("Conversion for transaction %s failed: %s", transaction_id, result.error)
            raise UpstreamError("failed to process conversion", status_code=500)

        logger.info("Transaction %s relayed as conversion %s", transaction_id, result.event_id)
        return {
            "message": "Webhook processed successfully",
            "metaEventId": result.event_id,
        }

    def _dispatch_order(self, order) -> None:
        future = self._executor.submit(self._send_order, order)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _send_order(self, order) -> None:
        try:
            self.order_sender.send_order(order)
        except Exception:
            logger.exception("Order dispatch for %s crashed", order.order_id)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def flush(self, timeout: float | None = None) -> None:
        """Wait for in-flight order dispatches."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def get_status(self, transaction_id: str | None, live: bool = False) -> dict:
        """Look up a payment: the local cache first unless live data is requested."""
        if not transaction_id:
            raise ValidationError("transaction parameter is required")

        if not live:
            record = self.store.get(transaction_id)
            if record is not None:
                return {"source": "cache", **record.to_dict()}

        if self.gateway is None:
            raise NotFoundError("payment not found or gateway error")

        payment = self.gateway.get_payment(transaction_id)
        return {"source": "gateway", **payment}

    def debug(self, payload) -> dict:
        logger.info("Debug webhook payload received")
        return {"message": "Payload received", "payload": payload}

    def close(self) -> None:
        self._executor.shutdown(wait=True)
