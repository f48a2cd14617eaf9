# Locust load test for the payment-status relay.
#
# How to run:
#   locust -f tests/load/locustfile.py --headless -u 50 -r 10 --run-time 30s --host http://127.0.0.1:8080
#
# The test starts a RelayServer on port 8080 wired to a local DownstreamStubServer
# via on_test_start/on_test_stop events, so no external API is ever called.

import json
import logging
import threading

from locust import HttpUser, between, events, task

from src.config import Settings
from src.downstream_stub.server import DownstreamStubServer
from src.main import build_relay
from src.relay.server import RelayServer
from src.utils.crypto import generate_signature
from src.utils.factories import GatewayEventFactory

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared state: tracking sent vs relayed for loss assertions
# ---------------------------------------------------------------------------
WEBHOOK_SECRET = "load-test-secret"
PIXEL_ID = "load-pixel"

_stats_lock = threading.Lock()
_sent_approved: int = 0
_success_count: int = 0
_failure_count: int = 0

_stub: DownstreamStubServer | None = None
_relay_server: RelayServer | None = None

# Statuses to rotate through; only the first two are relayed downstream
STATUSES = ["paid", "approved", "pending", "waiting_payment", "refused"]


def _record(approved: bool, ok: bool) -> None:
    global _sent_approved, _success_count, _failure_count
    with _stats_lock:
        if approved:
            _sent_approved += 1
        if ok:
            _success_count += 1
        else:
            _failure_count += 1


# ---------------------------------------------------------------------------
# Locust lifecycle events
# ---------------------------------------------------------------------------
@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Start the downstream stub and a RelayServer on port 8080."""
    global _stub, _relay_server, _sent_approved, _success_count, _failure_count

    with _stats_lock:
        _sent_approved = 0
        _success_count = 0
        _failure_count = 0

    _stub = DownstreamStubServer()
    _stub.start()

    settings = Settings(
        pixel_id=PIXEL_ID,
        meta_access_token="load-token",
        meta_base_url=_stub.url,
        utmify_url=f"{_stub.url}/api-credentials/orders",
        utmify_token="load-token",
        gateway_base_url=f"{_stub.url}/api/v1",
        webhook_secret=WEBHOOK_SECRET,
        deterministic_event_ids=True,
    )
    _relay_server = RelayServer(build_relay(settings), host="127.0.0.1", port=8080)
    _relay_server.start()
    logger.info("RelayServer started on port 8080, stub on %s", _stub.url)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Stop both servers and report relay stats."""
    global _stub, _relay_server

    conversions = 0
    orders = 0

    if _relay_server is not None:
        _relay_server.relay.flush(timeout=30)
        _relay_server.stop()
        _relay_server.relay.close()
        _relay_server = None

    if _stub is not None:
        conversions = len(_stub.get_requests(f"/v18.0/{PIXEL_ID}/events"))
        orders = len(_stub.get_requests("/api-credentials/orders"))
        _stub.stop()
        _stub = None

    with _stats_lock:
        approved = _sent_approved
        total_ok = _success_count
        total_fail = _failure_count

    logger.info(
        "Load test summary: http_ok=%d, http_fail=%d, approved_sent=%d, conversions=%d, orders=%d",
        total_ok,
        total_fail,
        approved,
        conversions,
        orders,
    )

    total = total_ok + total_fail
    if total > 0:
        success_rate = total_ok / total * 100
        logger.info("Success rate: %.2f%% (target: >99%%)", success_rate)
        if success_rate < 99.0:
            environment.process_exit_code = 1
            logger.error("ASSERTION FAILED: Success rate %.2f%% is below 99%% threshold", success_rate)

    if conversions < approved or orders < approved:
        environment.process_exit_code = 1
        logger.error(
            "ASSERTION FAILED: %d approved webhooks, %d conversions, %d orders relayed",
            approved,
            conversions,
            orders,
        )


# ---------------------------------------------------------------------------
# Locust user
# ---------------------------------------------------------------------------
class GatewayUser(HttpUser):
    """Simulates the payment gateway posting signed status webhooks."""

    wait_time = between(0.01, 0.05)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._status_index = 0

    def _next_status(self) -> str:
        status = STATUSES[self._status_index % len(STATUSES)]
        self._status_index += 1
        return status

    @task
    def post_payment_status(self) -> None:
        status = self._next_status()
        body = json.dumps(GatewayEventFactory.create_event(status)).encode()

        headers = {
            "Content-Type": "application/json",
            "X-Signature": generate_signature(body, WEBHOOK_SECRET),
        }

        with self.client.post(
            "/webhook/payment-status",
            data=body,
            headers=headers,
            catch_response=True,
            name=f"/webhook/payment-status [{status}]",
        ) as response:
            ok = response.status_code == 200
            _record(status in ("paid", "approved"), ok)
            if ok:
                response.success()
            else:
                response.failure(f"HTTP {response.status_code}: {response.text[:200]}")
