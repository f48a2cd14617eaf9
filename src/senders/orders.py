import logging

from src.models.dispatch import DispatchTarget
from src.models.order import OrderRecord
from src.senders.logger import DispatchLogger
from src.senders.transport import timed_request
from src.utils.normalize import to_e164

logger = logging.getLogger(__name__)


class OrderTrackingSender:
    """Fire-and-forget client for the order-tracking API.

    Failures are logged and swallowed; nothing is retried.
    """

    def __init__(
        self,
        url: str,
        api_token: str | None,
        dispatch_logger: DispatchLogger | None = None,
        timeout_seconds: float = 10,
    ):
        self.url = url
        self.api_token = api_token
        self.dispatch_logger = dispatch_logger
        self.timeout_seconds = timeout_seconds

    def send_order(self, order: OrderRecord) -> None:
        if not self.api_token:
            logger.warning("Order-tracking token not configured, skipping order %s", order.order_id)
            return

        payload = order.to_payload()
        # records carry bare digits; this API gets the "+" form
        payload["customer"]["phone"] = to_e164(order.customer.phone) or ""

        try:
            _, attempt = timed_request(
                "POST",
                self.url,
                target=DispatchTarget.ORDER,
                transaction_id=order.order_id,
                dispatch_logger=self.dispatch_logger,
                timeout=self.timeout_seconds,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "x-api-token": self.api_token,
                },
            )
        except Exception:
            logger.exception("Unexpected error sending order %s", order.order_id)
            return

        if attempt.error is not None:
            logger.error("Order %s not delivered: %s", order.order_id, attempt.error)
        elif attempt.status_code >= 400:
            logger.error("Order %s rejected with HTTP %s", order.order_id, attempt.status_code)
        else:
            logger.info("Order %s sent with status %s", order.order_id, order.status.value)
