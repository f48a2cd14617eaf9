import logging

from src.errors import NotFoundError
from src.models.dispatch import DispatchTarget
from src.senders.logger import DispatchLogger
from src.senders.transport import response_body, timed_request

logger = logging.getLogger(__name__)

LOOKUP_FIELDS = ("status", "amount", "customer", "items", "updatedAt", "method", "id", "customId")


class GatewayClient:
    """Proxy for the payment gateway's own transaction query API."""

    def __init__(
        self,
        base_url: str,
        secret_key: str | None,
        dispatch_logger: DispatchLogger | None = None,
        timeout_seconds: float = 10,
    ):
        self.base_url = base_url.rstrip("/")
        self.secret_key = secret_key
        self.dispatch_logger = dispatch_logger
        self.timeout_seconds = timeout_seconds

    def get_payment(self, transaction_id: str) -> dict:
        """Return the gateway's view of a payment, trimmed to the lookup fields.

        Raises NotFoundError on any failure: the caller cannot tell a missing
        payment from an unreachable gateway.
        """
        headers = {}
        if self.secret_key:
            headers["Authorization"] = self.secret_key

        response, attempt = timed_request(
            "GET",
            f"{self.base_url}/transaction.getPayment",
            target=DispatchTarget.GATEWAY,
            transaction_id=transaction_id,
            dispatch_logger=self.dispatch_logger,
            timeout=self.timeout_seconds,
            params={"id": transaction_id},
            headers=headers,
        )

        if attempt.error is not None or not 200 <= attempt.status_code < 300:
            logger.error(
                "Gateway lookup for %s failed: status=%s error=%s",
                transaction_id, attempt.status_code, attempt.error,
            )
            raise NotFoundError("payment not found or gateway error")

        payment = response_body(response)
        if not isinstance(payment, dict) or not payment:
            logger.error("Gateway lookup for %s returned no usable body", transaction_id)
            raise NotFoundError("payment not found or gateway error")

        return {field: payment.get(field) for field in LOOKUP_FIELDS}
