"""
Mailpit SDK - High-level client with typed operations.

This layer maps each Mailpit API endpoint to one typed method, grouped by
area. Built on top of the core APIClient.
"""

import builtins
import urllib.parse
from collections.abc import Callable, Sequence
from typing import Any, TypeVar
from zoneinfo import ZoneInfo

import structlog

from mailpit_client.core.client import DEFAULT_TIMEOUT, APIClient, Response
from mailpit_client.core.errors import DecodeError, ValidationError
from mailpit_client.core.types import (
    ApplicationInformation,
    ChaosTriggersConfiguration,
    ChaosTriggersResponse,
    HtmlCheckResponse,
    LinkCheckResponse,
    MessageHeaders,
    MessagesSummary,
    MessageSummary,
    SendMessage,
    SendMessageResponse,
    SpamAssassinResponse,
    TagList,
    WebUIConfiguration,
)

logger = structlog.get_logger()

T = TypeVar("T")

TimeZone = str | ZoneInfo


def _segment(value: str, name: str) -> str:
    """Percent-encode a single path segment, rejecting empty values."""
    if not value:
        raise ValidationError(f"{name} required")
    return urllib.parse.quote(value, safe="")


def _tz_name(tz: TimeZone | None) -> str | None:
    """IANA zone name for the ``tz`` query parameter."""
    if tz is None or isinstance(tz, str):
        return tz
    key = getattr(tz, "key", None)
    if not key:
        raise ValidationError(f"Timezone must be an IANA name or a ZoneInfo, got {tz!r}")
    return key


def _decode(response: Response, parser: Callable[[Any], T]) -> T:
    """Parse a JSON response, turning shape mismatches into DecodeError."""
    data = response.json()
    try:
        return parser(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("mailpit_decode_failure", error=repr(e))
        raise DecodeError(f"Unexpected response shape: {e!r}") from e


def _string_list(data: Any) -> builtins.list[str]:
    if not isinstance(data, builtins.list):
        raise TypeError(f"expected a JSON array, got {type(data).__name__}")
    return [str(item) for item in data]


def _headers(data: Any) -> MessageHeaders:
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return {str(k): _string_list(v) for k, v in data.items()}


class MailpitClient:
    """
    High-level Mailpit API client with typed methods.

    Example:
        client = MailpitClient("http://localhost:8025")

        summary = client.messages.search("subject:welcome", limit=10)
        message = client.message.get(summary.messages[0].id)
        client.tags.set([message.id], ["checked"])

    """

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Mailpit client.

        Omitted arguments are read from the environment. A client built with
        no arguments is therefore authenticated whenever MAILPIT_USERNAME and
        MAILPIT_PASSWORD are both exported.

        Args:
            base_url: Mailpit base URL (or MAILPIT_URL env var)
            username: Basic auth username (or MAILPIT_USERNAME env var)
            password: Basic auth password (or MAILPIT_PASSWORD env var)
            timeout: Request timeout in seconds

        Raises:
            InvalidUrlError: If the base URL is not an absolute http(s) URL
            ConfigurationError: If only one of username and password is set

        """
        self._client = APIClient(
            base_url=base_url,
            username=username,
            password=password,
            timeout=timeout,
        )

        # Sub-clients for different areas of the API
        self.application = ApplicationOperations(self._client)
        self.message = MessageOperations(self._client)
        self.messages = MessagesOperations(self._client)
        self.checks = CheckOperations(self._client)
        self.tags = TagOperations(self._client)
        self.chaos = ChaosOperations(self._client)
        self.view = ViewOperations(self._client)

    @classmethod
    def with_auth(
        cls,
        base_url: str,
        username: str,
        password: str,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> "MailpitClient":
        """Create a client that sends Basic authentication with every request."""
        return cls(base_url=base_url, username=username, password=password, timeout=timeout)

    def __repr__(self) -> str:
        return f"MailpitClient(base_url={self.base_url!r}, authenticated={self.authenticated})"

    @property
    def base_url(self) -> str:
        return self._client.base_url

    @property
    def authenticated(self) -> bool:
        return self._client.authenticated


# =============================================================================
# Application Operations
# =============================================================================


class ApplicationOperations:
    """Operations for server information."""

    def __init__(self, client: APIClient):
        self._client = client

    def info(self) -> ApplicationInformation:
        """
        Get basic runtime information, message totals and latest release version.

        Returns:
            ApplicationInformation

        """
        return _decode(self._client.get("/api/v1/info"), ApplicationInformation.from_dict)

    def webui(self) -> WebUIConfiguration:
        """
        Get the web UI configuration.

        Returns:
            WebUIConfiguration

        """
        return _decode(self._client.get("/api/v1/webui"), WebUIConfiguration.from_dict)


# =============================================================================
# Message Operations
# =============================================================================


class MessageOperations:
    """
    Operations on a single message.

    The message ID can be ``latest`` to address the most recent message.
    """

    def __init__(self, client: APIClient):
        self._client = client

    def get(self, message_id: str) -> MessageSummary:
        """
        Get a message. This marks the message as read.

        Args:
            message_id: Database ID or ``latest``

        Returns:
            MessageSummary with bodies and attachment metadata

        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}"
        return _decode(self._client.get(path), MessageSummary.from_dict)

    def headers(self, message_id: str) -> MessageHeaders:
        """
        Get the message headers.

        Returns:
            Mapping of header name to its values, keys sorted by the server

        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/headers"
        return _decode(self._client.get(path), _headers)

    def attachment(self, message_id: str, part_id: str) -> bytes:
        """Get the raw content of an attachment part."""
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/part/{_segment(part_id, 'Part ID')}"
        return self._client.get_bytes(path)

    def thumbnail(self, message_id: str, part_id: str) -> bytes:
        """
        Get a 180x120 JPEG thumbnail of an image attachment.

        Smaller images are padded; non-image parts give a blank image.
        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/part/{_segment(part_id, 'Part ID')}/thumb"
        return self._client.get_bytes(path)

    def source(self, message_id: str) -> str:
        """Get the full RFC 5322 source of the message."""
        return self._client.get_text(f"/api/v1/message/{_segment(message_id, 'Message ID')}/raw")

    def release(self, message_id: str, to: Sequence[str]) -> bool:
        """
        Release a message via the configured external SMTP server.

        Only available when message relaying is configured on the server.

        Args:
            message_id: Database ID or ``latest``
            to: Recipient addresses

        Returns:
            True if the server answered ``ok``

        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/release"
        return self._client.is_ok(self._client.post(path, {"To": builtins.list(to)}))

    def send(self, message: SendMessage) -> SendMessageResponse:
        """
        Send a message through the HTTP send API.

        Returns:
            SendMessageResponse with the database ID of the stored message

        """
        return _decode(self._client.post("/api/v1/send", message.to_dict()), SendMessageResponse.from_dict)


# =============================================================================
# Messages Operations
# =============================================================================


class MessagesOperations:
    """Operations on the mailbox: listing, searching, bulk updates."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        start: int | None = None,
        limit: int | None = None,
    ) -> MessagesSummary:
        """
        List messages, newest first.

        Args:
            start: Pagination offset
            limit: Page size

        Returns:
            MessagesSummary

        """
        response = self._client.get("/api/v1/messages", {"start": start, "limit": limit})
        return _decode(response, MessagesSummary.from_dict)

    def set_read_status(
        self,
        read: bool | None = None,
        ids: Sequence[str] | None = None,
        search: str | None = None,
        tz: TimeZone | None = None,
    ) -> bool:
        """
        Mark messages read or unread.

        Without ``ids`` or ``search`` every message in the mailbox is updated.

        Args:
            read: Read status to set (False when unset)
            ids: Database IDs to update
            search: Update the messages matching this search
            tz: Timezone used to interpret dates in ``search``

        Returns:
            True if the server answered ``ok``

        """
        data: dict[str, Any] = {}
        if ids is not None:
            data["IDs"] = builtins.list(ids)
        data["Read"] = bool(read)
        if search is not None:
            data["Search"] = search
        response = self._client.put("/api/v1/messages", data, params={"tz": _tz_name(tz)})
        return self._client.is_ok(response)

    def delete(self, ids: Sequence[str]) -> bool:
        """
        Delete messages by database ID. An empty list deletes every message.

        Returns:
            True if the server answered ``ok``

        """
        return self._client.is_ok(self._client.delete("/api/v1/messages", {"IDs": builtins.list(ids)}))

    def delete_all(self) -> bool:
        """Delete every message."""
        return self.delete([])

    def search(
        self,
        query: str,
        start: int | None = None,
        limit: int | None = None,
        tz: TimeZone | None = None,
    ) -> MessagesSummary:
        """
        Search messages, newest received first.

        Args:
            query: Search filter, e.g. ``from:alice is:unread``
            start: Pagination offset
            limit: Page size
            tz: Timezone used to interpret dates in the query

        Returns:
            MessagesSummary

        """
        if not query:
            raise ValidationError("Search query required")
        params = {"query": query, "start": start, "limit": limit, "tz": _tz_name(tz)}
        return _decode(self._client.get("/api/v1/search", params), MessagesSummary.from_dict)

    def delete_by_search(self, query: str, tz: TimeZone | None = None) -> bool:
        """
        Delete all messages matching a search.

        Returns:
            True if the server answered ``ok``

        """
        if not query:
            raise ValidationError("Search query required")
        response = self._client.delete("/api/v1/search", params={"query": query, "tz": _tz_name(tz)})
        return self._client.is_ok(response)


# =============================================================================
# Check Operations
# =============================================================================


class CheckOperations:
    """HTML compatibility, link and spam checks of a message."""

    def __init__(self, client: APIClient):
        self._client = client

    def html(self, message_id: str) -> HtmlCheckResponse:
        """Check HTML/CSS support of the message across email clients."""
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/html-check"
        return _decode(self._client.get(path), HtmlCheckResponse.from_dict)

    def links(self, message_id: str, follow: bool | None = None) -> LinkCheckResponse:
        """
        Test every link in the message.

        Args:
            message_id: Database ID or ``latest``
            follow: Follow redirects when testing

        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/link-check"
        return _decode(self._client.get(path, {"follow": follow}), LinkCheckResponse.from_dict)

    def spam(self, message_id: str) -> SpamAssassinResponse:
        """
        Get the SpamAssassin verdict of the message.

        If SpamAssassin is disabled the reason is in ``error``.
        """
        path = f"/api/v1/message/{_segment(message_id, 'Message ID')}/sa-check"
        return _decode(self._client.get(path), SpamAssassinResponse.from_dict)


# =============================================================================
# Tag Operations
# =============================================================================


class TagOperations:
    """Operations for managing message tags."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> TagList:
        """Get all current tags."""
        return _decode(self._client.get("/api/v1/tags"), _string_list)

    def set(self, ids: Sequence[str], tags: Sequence[str]) -> bool:
        """
        Overwrite the tags of messages. An empty ``tags`` removes all tags.

        Returns:
            True if the server answered ``ok``

        """
        data = {"IDs": builtins.list(ids), "Tags": builtins.list(tags)}
        return self._client.is_ok(self._client.put("/api/v1/tags", data))

    def rename(self, tag: str, name: str) -> bool:
        """
        Rename a tag.

        Returns:
            True if the server answered ``ok``

        """
        path = f"/api/v1/tags/{_segment(tag, 'Tag')}"
        return self._client.is_ok(self._client.put(path, {"Name": name}))

    def delete(self, tag: str) -> bool:
        """
        Delete a tag. Messages keep existing, they only lose the tag.

        Returns:
            True if the server answered ``ok``

        """
        return self._client.is_ok(self._client.delete(f"/api/v1/tags/{_segment(tag, 'Tag')}"))


# =============================================================================
# Chaos Operations
# =============================================================================


class ChaosOperations:
    """
    Chaos (SMTP fault injection) triggers.

    The server answers with an error unless Chaos is enabled at runtime.
    """

    def __init__(self, client: APIClient):
        self._client = client

    def get(self) -> ChaosTriggersResponse:
        """Get the current Chaos triggers."""
        return _decode(self._client.get("/api/v1/chaos"), ChaosTriggersResponse.from_dict)

    def set(self, config: ChaosTriggersConfiguration | None = None) -> ChaosTriggersResponse:
        """
        Set the Chaos triggers and return the updated values.

        Triggers missing from ``config`` are reset to 0% probability;
        no config at all resets every trigger.
        """
        data = config.to_dict() if config is not None else {}
        return _decode(self._client.put("/api/v1/chaos", data), ChaosTriggersResponse.from_dict)


# =============================================================================
# View Operations
# =============================================================================


class ViewOperations:
    """Rendered message parts, for UI integration testing."""

    def __init__(self, client: APIClient):
        self._client = client

    def html(self, message_id: str, embed: bool | None = None) -> str:
        """
        Render the HTML part of a message.

        The server answers 404 when the message has no HTML part.

        Args:
            message_id: Database ID or ``latest``
            embed: Embed inline images instead of linking them

        """
        return self._client.get_text(f"/view/{_segment(message_id, 'Message ID')}.html", {"embed": embed})

    def text(self, message_id: str) -> str:
        """Render the text part of a message."""
        return self._client.get_text(f"/view/{_segment(message_id, 'Message ID')}.txt")
