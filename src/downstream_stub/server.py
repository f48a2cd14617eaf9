import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self
from urllib.parse import parse_qs, urlsplit


class _StubHandler(BaseHTTPRequestHandler):
    """Records every request and answers with the configured response."""

    def _handle(self):
        content_length = int(self.headers.get("Content-Length", 0) or 0)
        body = self.rfile.read(content_length) if content_length > 0 else b""
        url = urlsplit(self.path)

        config = self.server.config  # type: ignore[attr-defined]

        try:
            payload = json.loads(body) if body else None
        except (json.JSONDecodeError, ValueError):
            payload = None

        with config["lock"]:
            config["received"].append({
                "method": self.command,
                "path": url.path,
                "query": {k: v[0] for k, v in parse_qs(url.query).items()},
                "headers": dict(self.headers),
                "payload": payload,
            })
            code, response = config["responses"].get(url.path, config["default"])
            delay = config["delay"]

        # Simulate slow response
        if delay > 0:
            time.sleep(delay)

        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        if response is not None:
            self.wfile.write(json.dumps(response).encode())

    def do_GET(self):
        self._handle()

    def do_POST(self):
        self._handle()

    def log_message(self, format, *args):
        """Suppress default request logging."""
        pass


class DownstreamStubServer:
    """Local stand-in for the conversions, order-tracking and gateway APIs."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self._host = host
        self._port = port
        self._config = {
            "default": (200, {"status": "ok"}),
            "responses": {},
            "delay": 0,
            "received": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response(self, path: str, code: int, body: dict | list | None = None) -> Self:
        with self._config["lock"]:
            self._config["responses"][path] = (code, body)
        return self

    def set_default_response(self, code: int, body: dict | list | None = None) -> Self:
        with self._config["lock"]:
            self._config["default"] = (code, body)
        return self

    def set_response_delay(self, seconds: float) -> Self:
        with self._config["lock"]:
            self._config["delay"] = seconds
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _StubHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

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

    def get_requests(self, path: str | None = None) -> list[dict]:
        with self._config["lock"]:
            return [r for r in self._config["received"] if path is None or r["path"] == path]

    def clear(self) -> None:
        with self._config["lock"]:
            self._config["received"].clear()
