"""Pytest configuration - loads .env for live tests and provides a stub Mailpit server."""

import json
import threading
import urllib.parse
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
import structlog
from dotenv import load_dotenv

from mailpit_client.sdk import MailpitClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


# =============================================================================
# Stub Server
# =============================================================================


@dataclass
class RecordedRequest:
    """A request as received by the stub server."""

    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class CannedResponse:
    status: int = 200
    body: bytes = b"ok"
    content_type: str = "text/plain; charset=utf-8"


@dataclass
class StubServer:
    """
    In-process HTTP server standing in for Mailpit.

    Records every request and answers each with the canned response set
    via ``reply()`` (``200 ok`` by default).
    """

    requests: list[RecordedRequest] = field(default_factory=list)
    response: CannedResponse = field(default_factory=CannedResponse)

    def reply(self, body: Any = "ok", status: int = 200, content_type: str | None = None) -> None:
        if isinstance(body, (dict, list)):
            raw = json.dumps(body).encode("utf-8")
            content_type = content_type or "application/json"
        elif isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = bytes(body)
        self.response = CannedResponse(status, raw, content_type or "text/plain; charset=utf-8")

    @property
    def last(self) -> RecordedRequest:
        assert self.requests, "no request reached the stub server"
        return self.requests[-1]

    def start(self) -> None:
        stub = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self) -> None:
                parts = urllib.parse.urlsplit(self.path)
                length = int(self.headers.get("Content-Length") or 0)
                stub.requests.append(
                    RecordedRequest(
                        method=self.command,
                        path=parts.path,
                        query=urllib.parse.parse_qs(parts.query, keep_blank_values=True),
                        headers={k.lower(): v for k, v in self.headers.items()},
                        body=self.rfile.read(length) if length else b"",
                    )
                )
                canned = stub.response
                self.send_response(canned.status)
                self.send_header("Content-Type", canned.content_type)
                self.send_header("Content-Length", str(len(canned.body)))
                self.end_headers()
                self.wfile.write(canned.body)

            do_GET = do_POST = do_PUT = do_DELETE = _handle

            def log_message(self, format: str, *args: Any) -> None:
                pass

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def stub():
    """A running stub server, stopped after the test."""
    server = StubServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def no_mailpit_env(monkeypatch):
    """Hide any MAILPIT_* settings loaded from .env."""
    for name in ("MAILPIT_URL", "MAILPIT_USERNAME", "MAILPIT_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client(stub, no_mailpit_env):
    """An unauthenticated client pointed at the stub server."""
    return MailpitClient(stub.url)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a test (e.g. a CLI run) installed."""
    yield
    structlog.reset_defaults()
