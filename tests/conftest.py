import pytest

from src.config import Settings
from src.downstream_stub.server import DownstreamStubServer
from src.main import build_relay
from src.relay.server import RelayServer
from src.senders.logger import DispatchLogger
from src.store.status_store import InMemoryStatusStore
from src.utils.factories import GatewayEventFactory
from tests.constants import (
    ACCESS_TOKEN,
    CONVERSION_PATH,
    GATEWAY_KEY,
    ORDER_TOKEN,
    ORDERS_PATH,
    PIXEL_ID,
    WEBHOOK_SECRET,
)


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def stub_server():
    """Stand-in for the conversions, order-tracking and gateway APIs."""
    server = DownstreamStubServer()
    server.set_response(CONVERSION_PATH, 200, {"events_received": 1, "fbtrace_id": "trace"})
    server.set_response(ORDERS_PATH, 200, {"OK": True})
    server.start()
    yield server
    server.stop()


@pytest.fixture
def dispatch_logger():
    return DispatchLogger()


@pytest.fixture
def settings(stub_server):
    return Settings(
        pixel_id=PIXEL_ID,
        meta_access_token=ACCESS_TOKEN,
        meta_base_url=stub_server.url,
        utmify_url=f"{stub_server.url}{ORDERS_PATH}",
        utmify_token=ORDER_TOKEN,
        gateway_base_url=f"{stub_server.url}/api/v1",
        gateway_secret_key=GATEWAY_KEY,
        outbound_timeout_seconds=2,
    )


@pytest.fixture
def store():
    return InMemoryStatusStore()


@pytest.fixture
def relay(settings, store, dispatch_logger):
    relay = build_relay(settings, store=store, dispatch_logger=dispatch_logger)
    yield relay
    relay.close()


@pytest.fixture
def relay_server(relay):
    server = RelayServer(relay)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def secured_relay_server(settings, store, dispatch_logger, webhook_secret):
    """Relay server with inbound signature verification enabled."""
    settings.webhook_secret = webhook_secret
    relay = build_relay(settings, store=store, dispatch_logger=dispatch_logger)
    server = RelayServer(relay)
    server.start()
    yield server
    server.stop()
    relay.close()


@pytest.fixture
def event_factory():
    return GatewayEventFactory
