import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

from src.errors import RelayError
from src.relay.handler import WebhookRelay

logger = logging.getLogger(__name__)


class _RelayRequestHandler(BaseHTTPRequestHandler):
    """Routes the relay's HTTP surface onto a WebhookRelay."""

    def _relay(self) -> WebhookRelay:
        return self.server.relay  # type: ignore[attr-defined]

    def _send_json(self, code: int, body: dict) -> None:
        data = json.dumps(body, default=str).encode("utf-8")
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _read_body(self) -> bytes:
        content_length = int(self.headers.get("Content-Length", 0) or 0)
        return self.rfile.read(content_length) if content_length > 0 else b""

    def _dispatch(self, action) -> None:
        try:
            self._send_json(200, action())
        except RelayError as e:
            self._send_json(e.status_code, e.to_dict())
        except Exception:
            logger.exception("Unhandled error on %s %s", self.command, self.path)
            self._send_json(500, {"error": "internal server error"})

    def do_GET(self):
        url = urlsplit(self.path)
        if url.path == "/health":
            self._dispatch(self._relay().health)
        elif url.path == "/payment/status":
            query = parse_qs(url.query)
            transaction_id = query.get("transaction", [""])[0]
            live = query.get("live", ["false"])[0].lower() in ("1", "true", "yes")
            self._dispatch(lambda: self._relay().get_status(transaction_id, live=live))
        else:
            self._send_json(404, {"error": "not found"})

    def do_POST(self):
        url = urlsplit(self.path)
        try:
            body = self._read_body()
        except ValueError:
            # body length unknown, so the connection cannot be reused
            self.close_connection = True
            self._send_json(400, {"error": "invalid Content-Length"})
            return
        if url.path == "/webhook/payment-status":
            self._dispatch(lambda: self._relay().handle_payment_status(body, self.headers))
        elif url.path == "/webhook/debug":
            try:
                payload = json.loads(body or b"null")
            except (json.JSONDecodeError, ValueError):
                self._send_json(400, {"error": "invalid JSON"})
                return
            self._dispatch(lambda: self._relay().debug(payload))
        else:
            self._send_json(404, {"error": "not found"})

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class RelayServer:
    """Threaded HTTP front end for a WebhookRelay."""

    def __init__(self, relay: WebhookRelay, host: str = "127.0.0.1", port: int = 0):
        self.relay = relay
        self._host = host
        self._port = port
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def _bind(self) -> ThreadingHTTPServer:
        server = ThreadingHTTPServer((self._host, self._port), _RelayRequestHandler)
        server.relay = self.relay  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = server.server_address[1]
        return server

    def start(self) -> None:
        self._server = self._bind()
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("Relay listening on %s:%s", self._host, self._port)

    def serve_forever(self) -> None:
        self._server = self._bind()
        logger.info("Relay listening on %s:%s", self._host, self._port)
        try:
            self._server.serve_forever()
        finally:
            self._server.server_close()
            self._server = None

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"

    @property
    def port(self) -> int:
        return self._port
