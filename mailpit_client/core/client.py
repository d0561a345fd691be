"""
Core HTTP client for the Mailpit API.

Handles the base URL, Basic authentication, request/response and error
classification. Every call is a single exchange: nothing is retried.
"""

import base64
import http.client
import json
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from email.message import Message
from typing import Any

import structlog
from pydantic import SecretStr

from mailpit_client.core.errors import (
    APIError,
    ConfigurationError,
    DecodeError,
    ErrorBody,
    InvalidUrlError,
    TransportError,
)

logger = structlog.get_logger()

# Configuration
DEFAULT_BASE_URL = "http://localhost:8025"
DEFAULT_TIMEOUT = 60
USER_AGENT = "mailpit-client/0.1.0"

# Allowed in a host besides letters and digits (IPv6 colons, zone ids)
HOST_PUNCTUATION = frozenset(".-_~%:")


@dataclass
class Response:
    """A completed HTTP exchange."""

    status: int
    body: bytes = b""
    headers: Message = field(default_factory=Message)

    @property
    def text(self) -> str:
        """Body decoded with the response charset (UTF-8 if unset or unknown)."""
        charset = self.headers.get_content_charset() or "utf-8"
        try:
            return self.body.decode(charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON."""
        try:
            return json.loads(self.body or b"null")
        except ValueError as e:
            raise DecodeError(f"Invalid JSON response: {e}") from e


def check_response(response: Response) -> Response:
    """
    Classify a completed exchange by its status code family.

    2xx responses are returned unchanged. Anything else raises APIError,
    carrying the raw body text and, when the body is ``{"Error": "..."}``,
    the parsed message.
    """
    if 200 <= response.status < 300:
        return response

    text = response.text
    raise APIError(response.status, text, parse_error_body(text))


def parse_error_body(text: str) -> ErrorBody | None:
    """Parse ``{"Error": "..."}``; anything else gives None."""
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict) or not isinstance(data.get("Error"), str):
        return None
    return ErrorBody.from_dict(data)


def _valid_host(host: str) -> bool:
    return all(ch.isalnum() or ch in HOST_PUNCTUATION for ch in host)


def parse_base_url(base_url: str) -> str:
    """
    Validate an absolute http(s) URL and strip any trailing slash.

    The URL may carry a path prefix but no query string or fragment, since
    request paths and query parameters are appended to it.
    """
    try:
        parts = urllib.parse.urlsplit(base_url)
        # port is parsed lazily and raises ValueError when malformed
        valid = (
            parts.scheme in ("http", "https")
            and bool(parts.hostname)
            and _valid_host(parts.hostname)
            and (parts.port or 0) >= 0
            and "?" not in base_url
            and "#" not in base_url
        )
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidUrlError(f"Invalid URL: {base_url!r} ({e})") from e
    if not valid:
        raise InvalidUrlError(f"Invalid URL: {base_url!r}")
    return base_url.rstrip("/")


def basic_auth_header(username: str, password: str) -> SecretStr:
    """Build the ``Authorization`` header value for Basic authentication."""
    if ":" in username:
        raise ConfigurationError("Username must not contain ':'")
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return SecretStr(f"Basic {encoded}")


def encode_query_value(value: Any) -> str:
    """Booleans go on the wire as 1/0; everything else via str()."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class APIClient:
    """
    Low-level HTTP client for the Mailpit API.

    Handles:
    - Base URL validation and path building
    - Optional Basic authentication via a default header
    - HTTP methods (GET, POST, PUT, DELETE)
    - Error classification and response parsing
    """

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Each credential left as None is read from its environment variable,
        so an exported MAILPIT_USERNAME / MAILPIT_PASSWORD pair authenticates
        the client without any arguments.

        Args:
            base_url: Mailpit base URL (or MAILPIT_URL env var)
            username: Basic auth username (or MAILPIT_USERNAME env var)
            password: Basic auth password (or MAILPIT_PASSWORD env var)
            timeout: Request timeout in seconds

        Raises:
            InvalidUrlError: If the base URL is not an absolute http(s) URL
            ConfigurationError: If only one credential is set, or the
                credentials cannot form a header

        """
        self._base_url = parse_base_url(base_url or os.environ.get("MAILPIT_URL") or DEFAULT_BASE_URL)
        username = username if username is not None else os.environ.get("MAILPIT_USERNAME")
        password = password if password is not None else os.environ.get("MAILPIT_PASSWORD")
        self._timeout = timeout

        if (username is None) != (password is None):
            raise ConfigurationError("Both username and password are required for authentication")

        self._authorization: SecretStr | None = None
        if username is not None and password is not None:
            self._authorization = basic_auth_header(username, password)

        self._opener = urllib.request.build_opener()
        self._opener.addheaders = [("User-Agent", USER_AGENT)]

    def __repr__(self) -> str:
        return f"APIClient(base_url={self._base_url!r}, authenticated={self.authenticated})"

    @property
    def base_url(self) -> str:
        """The validated base URL, without a trailing slash."""
        return self._base_url

    @property
    def authenticated(self) -> bool:
        """Whether requests carry a Basic ``Authorization`` header."""
        return self._authorization is not None

    @property
    def timeout(self) -> int:
        return self._timeout

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path, dropping unset query parameters."""
        url = f"{self._base_url}/{path.lstrip('/')}"
        if params:
            filtered_params = {k: encode_query_value(v) for k, v in params.items() if v is not None}
            if filtered_params:
                url = f"{url}?{urllib.parse.urlencode(filtered_params)}"
        return url

    def _make_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: Any = None,
    ) -> Response:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path (e.g., /api/v1/messages)
            params: Query parameters; None values are omitted
            data: JSON-serializable request body

        Returns:
            The classified (2xx) response

        Raises:
            APIError: On a non-2xx status
            TransportError: When the exchange could not complete

        """
        url = self._build_url(path, params)
        headers = {"Accept": "application/json"}
        if self._authorization is not None:
            headers["Authorization"] = self._authorization.get_secret_value()

        body = None
        if data is not None:
            body = json.dumps(data, separators=(",", ":")).encode("utf-8")
            headers["Content-Type"] = "application/json"

        logger.debug(
            "mailpit_request",
            method=method,
            path=path,
            query=sorted(k for k, v in (params or {}).items() if v is not None),
        )

        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            result = self._exchange(req)

        except urllib.error.URLError as e:
            logger.warning("mailpit_transport_failure", method=method, path=path, reason=str(e.reason))
            raise TransportError(f"Connection error: {e.reason}") from e

        except TimeoutError as e:
            logger.warning("mailpit_transport_failure", method=method, path=path, reason="timeout")
            raise TransportError(f"Request timed out after {self._timeout} seconds") from e

        except OSError as e:
            logger.warning("mailpit_transport_failure", method=method, path=path, reason=str(e))
            raise TransportError(f"Connection error: {e}") from e

        except http.client.HTTPException as e:
            logger.warning("mailpit_transport_failure", method=method, path=path, reason=repr(e))
            raise TransportError(f"Malformed response: {e!r}") from e

        try:
            return check_response(result)
        except APIError as e:
            logger.warning("mailpit_http_failure", method=method, path=path, status=e.status)
            raise

    def _exchange(self, req: urllib.request.Request) -> Response:
        """Send the request and read the whole body, whatever the status."""
        try:
            with self._opener.open(req, timeout=self._timeout) as response:
                return Response(status=response.status, body=response.read(), headers=response.headers)
        except urllib.error.HTTPError as e:
            return Response(status=e.code, body=e.read(), headers=e.headers)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, params: dict[str, Any] | None = None) -> Response:
        """Make a GET request."""
        return self._make_request("GET", path, params)

    def post(self, path: str, data: Any = None, params: dict[str, Any] | None = None) -> Response:
        """Make a POST request."""
        return self._make_request("POST", path, params, data)

    def put(self, path: str, data: Any = None, params: dict[str, Any] | None = None) -> Response:
        """Make a PUT request."""
        return self._make_request("PUT", path, params, data)

    def delete(self, path: str, data: Any = None, params: dict[str, Any] | None = None) -> Response:
        """Make a DELETE request."""
        return self._make_request("DELETE", path, params, data)

    # =========================================================================
    # Response helpers
    # =========================================================================

    def get_text(self, path: str, params: dict[str, Any] | None = None) -> str:
        """GET and decode the body as text."""
        return self.get(path, params).text

    def get_bytes(self, path: str, params: dict[str, Any] | None = None) -> bytes:
        """GET and return the raw body."""
        return self.get(path, params).body

    @staticmethod
    def is_ok(response: Response) -> bool:
        """Mutating endpoints answer with the literal text ``ok`` on success."""
        return response.text == "ok"
