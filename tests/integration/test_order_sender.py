"""Integration tests for the fire-and-forget order-tracking client."""

import pytest

from src.models.dispatch import DispatchTarget
from src.relay.mapper import map_to_order
from src.senders.orders import OrderTrackingSender
from tests.constants import ORDER_TOKEN, ORDERS_PATH


pytestmark = pytest.mark.integration


@pytest.fixture
def order(event_factory):
    return map_to_order(event_factory.create_event("paid", id="t1", amount=1000))


@pytest.fixture
def sender(settings, dispatch_logger):
    return OrderTrackingSender(
        url=settings.utmify_url,
        api_token=settings.utmify_token,
        dispatch_logger=dispatch_logger,
        timeout_seconds=settings.outbound_timeout_seconds,
    )


class TestOrderTrackingSender:
    """Order records reach the tracking API; failures never escape."""

    def test_order_posted_with_token(self, sender, order, stub_server):
        assert sender.send_order(order) is None

        received = stub_server.get_requests(ORDERS_PATH)
        assert len(received) == 1
        assert received[0]["headers"]["x-api-token"] == ORDER_TOKEN
        payload = received[0]["payload"]
        assert payload["orderId"] == "t1"
        assert payload["status"] == "paid"
        assert payload["customer"]["email"] == "maria.silva@example.com"
        assert payload["customer"]["phone"] == "+5511999998888"

    def test_server_error_is_swallowed(self, sender, order, stub_server, dispatch_logger):
        stub_server.set_response(ORDERS_PATH, 500, {"error": "boom"})

        sender.send_order(order)

        failed = dispatch_logger.get_failed_attempts()
        assert len(failed) == 1
        assert failed[0].target == DispatchTarget.ORDER
        assert len(stub_server.get_requests(ORDERS_PATH)) == 1

    def test_timeout_is_swallowed(self, settings, order, stub_server, dispatch_logger):
        sender = OrderTrackingSender(
            url=settings.utmify_url,
            api_token=ORDER_TOKEN,
            dispatch_logger=dispatch_logger,
            timeout_seconds=0.5,
        )
        stub_server.set_response_delay(2)

        sender.send_order(order)

        logged = dispatch_logger.get_attempts(target=DispatchTarget.ORDER)
        assert logged[0].error == "timeout"
        assert logged[0].status_code is None

    def test_missing_token_skips_send(self, settings, order, stub_server):
        sender = OrderTrackingSender(url=settings.utmify_url, api_token=None)

        sender.send_order(order)

        assert stub_server.get_requests(ORDERS_PATH) == []
