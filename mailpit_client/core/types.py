"""
Core types for the Mailpit API.

These dataclasses mirror the JSON payloads of the API. Field names are
snake_case in Python; ``from_dict`` / ``to_dict`` map them to the wire
names, which are mostly PascalCase with a few irregular exceptions
(``ID``, ``HTML``, ``SMTPServer``, lower-case pagination keys, ...).
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from mailpit_client.core.errors import AttachmentContentMissingError, AttachmentFilenameMissingError

A = TypeVar("A")

MessageHeaders = dict[str, list[str]]
TagList = list[str]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp (optionally with nanoseconds)."""
    if not value:
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat only keeps microseconds
    if "." in value:
        head, _, rest = value.partition(".")
        digits = len(rest) - len(rest.lstrip("0123456789"))
        fraction, offset = rest[:digits], rest[digits:]
        value = f"{head}.{fraction[:6].ljust(6, '0')}{offset}"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Application Types
# =============================================================================


@dataclass(frozen=True)
class RuntimeStats:
    """Runtime statistics."""

    memory: int = 0
    messages_deleted: int = 0
    smtp_accepted: int = 0
    smtp_accepted_size: int = 0
    smtp_ignored: int = 0
    smtp_rejected: int = 0
    uptime: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeStats":
        """Create from API response dict."""
        return cls(
            memory=data.get("Memory", 0),
            messages_deleted=data.get("MessagesDeleted", 0),
            smtp_accepted=data.get("SMTPAccepted", 0),
            smtp_accepted_size=data.get("SMTPAcceptedSize", 0),
            smtp_ignored=data.get("SMTPIgnored", 0),
            smtp_rejected=data.get("SMTPRejected", 0),
            uptime=data.get("Uptime", 0),
        )


@dataclass(frozen=True)
class ApplicationInformation:
    """Basic runtime information, message totals and latest release version."""

    version: str
    latest_version: str = ""
    database: str = ""
    database_size: int = 0
    messages: int = 0
    unread: int = 0
    tags: dict[str, int] = field(default_factory=dict)
    runtime_stats: RuntimeStats = field(default_factory=RuntimeStats)

    @property
    def update_available(self) -> bool:
        """Check if a newer release than the running one exists."""
        return bool(self.latest_version) and self.latest_version != self.version

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationInformation":
        """Create from API response dict."""
        return cls(
            version=data["Version"],
            latest_version=data.get("LatestVersion") or "",
            database=data.get("Database") or "",
            database_size=data.get("DatabaseSize", 0),
            messages=data.get("Messages", 0),
            unread=data.get("Unread", 0),
            tags=data.get("Tags") or {},
            runtime_stats=RuntimeStats.from_dict(data.get("RuntimeStats") or {}),
        )


@dataclass(frozen=True)
class MessageRelay:
    """Message relay (release) configuration."""

    enabled: bool = False
    smtp_server: str = ""
    allowed_recipients: str = ""
    blocked_recipients: str = ""
    override_from: str = ""
    preserve_message_ids: bool = False
    return_path: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageRelay":
        """Create from API response dict."""
        return cls(
            enabled=data.get("Enabled", False),
            smtp_server=data.get("SMTPServer") or "",
            allowed_recipients=data.get("AllowedRecipients") or "",
            blocked_recipients=data.get("BlockedRecipients") or "",
            override_from=data.get("OverrideFrom") or "",
            preserve_message_ids=data.get("PreserveMessageIDs", False),
            return_path=data.get("ReturnPath") or "",
        )


@dataclass(frozen=True)
class WebUIConfiguration:
    """Configuration settings for the web UI."""

    label: str = ""
    chaos_enabled: bool = False
    duplicates_ignored: bool = False
    hide_delete_all_button: bool = False
    spam_assassin: bool = False
    message_relay: MessageRelay = field(default_factory=MessageRelay)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebUIConfiguration":
        """Create from API response dict."""
        return cls(
            label=data.get("Label") or "",
            chaos_enabled=data.get("ChaosEnabled", False),
            duplicates_ignored=data.get("DuplicatesIgnored", False),
            hide_delete_all_button=data.get("HideDeleteAllButton", False),
            spam_assassin=data.get("SpamAssassin", False),
            message_relay=MessageRelay.from_dict(data.get("MessageRelay") or {}),
        )


# =============================================================================
# Message Types
# =============================================================================


@dataclass(frozen=True)
class Address:
    """
    A single mail address.

    Read from the API as ``{"Address", "Name"}`` but sent to the send
    endpoint as ``{"Email", "Name"}``.
    """

    address: str
    name: str | None = None

    def __str__(self) -> str:
        return f"{self.name} <{self.address}>" if self.name else self.address

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        """Create from API response dict."""
        return cls(address=data["Address"], name=data.get("Name"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _drop_none({"Email": self.address, "Name": self.name})


def _addresses(data: list[dict[str, Any]] | None) -> list[Address]:
    return [Address.from_dict(a) for a in data or []]


def _optional_addresses(data: list[dict[str, Any]] | None) -> list[Address] | None:
    if data is None:
        return None
    return _addresses(data)


@dataclass(frozen=True)
class AttachmentInfo:
    """Metadata of a message attachment (or inline part)."""

    part_id: str
    file_name: str = ""
    content_type: str = ""
    content_id: str = ""
    size: int = 0

    @property
    def is_inline(self) -> bool:
        return bool(self.content_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttachmentInfo":
        """Create from API response dict."""
        return cls(
            part_id=data["PartID"],
            file_name=data.get("FileName") or "",
            content_type=data.get("ContentType") or "",
            content_id=data.get("ContentID") or "",
            size=data.get("Size", 0),
        )


@dataclass(frozen=True)
class ListUnsubscribe:
    """Summary of the List-Unsubscribe and List-Unsubscribe-Post headers."""

    header: str = ""
    header_post: str = ""
    links: list[str] = field(default_factory=list)
    errors: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListUnsubscribe":
        """Create from API response dict."""
        return cls(
            header=data.get("Header") or "",
            header_post=data.get("HeaderPost") or "",
            links=data.get("Links") or [],
            errors=data.get("Errors") or "",
        )


@dataclass(frozen=True)
class MessageBase(Generic[A]):
    """
    Fields shared by message list entries and full messages.

    The attachment representation differs: list entries carry a count,
    full messages carry the attachment metadata.
    """

    id: str
    message_id: str
    from_: Address | None
    to: list[Address]
    subject: str
    attachments: A
    cc: list[Address] | None = None
    bcc: list[Address] | None = None
    reply_to: list[Address] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    size: int = 0
    username: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], attachments: A) -> "MessageBase[A]":
        """Create from API response dict with an already decoded attachment field."""
        sender = data.get("From")
        return cls(
            id=data["ID"],
            message_id=data.get("MessageID") or "",
            from_=Address.from_dict(sender) if sender else None,
            to=_addresses(data.get("To")),
            subject=data.get("Subject") or "",
            attachments=attachments,
            cc=_optional_addresses(data.get("Cc")),
            bcc=_optional_addresses(data.get("Bcc")),
            reply_to=_addresses(data.get("ReplyTo")),
            tags=data.get("Tags") or [],
            size=data.get("Size", 0),
            username=data.get("Username") or "",
        )


def _base_field(name: str) -> property:
    return property(lambda self: getattr(self.base, name), doc=f"``base.{name}``")


@dataclass(frozen=True)
class MessageInfo:
    """A message entry as returned by list and search."""

    base: MessageBase[int]
    created: datetime | None = None
    read: bool = False
    snippet: str = ""

    id = _base_field("id")
    message_id = _base_field("message_id")
    from_ = _base_field("from_")
    to = _base_field("to")
    cc = _base_field("cc")
    bcc = _base_field("bcc")
    reply_to = _base_field("reply_to")
    subject = _base_field("subject")
    tags = _base_field("tags")
    size = _base_field("size")
    username = _base_field("username")
    attachments = _base_field("attachments")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageInfo":
        """Create from API response dict."""
        return cls(
            base=MessageBase.from_dict(data, int(data.get("Attachments") or 0)),
            created=parse_timestamp(data.get("Created")),
            read=data.get("Read", False),
            snippet=data.get("Snippet") or "",
        )


@dataclass(frozen=True)
class MessageSummary:
    """A full message, excluding the attachment contents."""

    base: MessageBase[list[AttachmentInfo]]
    date: datetime | None = None
    html: str = ""
    text: str = ""
    inline: list[AttachmentInfo] = field(default_factory=list)
    return_path: str = ""
    list_unsubscribe: ListUnsubscribe = field(default_factory=ListUnsubscribe)

    id = _base_field("id")
    message_id = _base_field("message_id")
    from_ = _base_field("from_")
    to = _base_field("to")
    cc = _base_field("cc")
    bcc = _base_field("bcc")
    reply_to = _base_field("reply_to")
    subject = _base_field("subject")
    tags = _base_field("tags")
    size = _base_field("size")
    username = _base_field("username")
    attachments = _base_field("attachments")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageSummary":
        """Create from API response dict."""
        attachments = [AttachmentInfo.from_dict(a) for a in data.get("Attachments") or []]
        return cls(
            base=MessageBase.from_dict(data, attachments),
            date=parse_timestamp(data.get("Date")),
            html=data.get("HTML") or "",
            text=data.get("Text") or "",
            inline=[AttachmentInfo.from_dict(a) for a in data.get("Inline") or []],
            return_path=data.get("ReturnPath") or "",
            list_unsubscribe=ListUnsubscribe.from_dict(data.get("ListUnsubscribe") or {}),
        )


@dataclass(frozen=True)
class MessagesSummary:
    """A page of messages from list or search."""

    messages: list[MessageInfo]
    messages_count: int = 0
    messages_unread: int = 0
    start: int = 0
    tags: list[str] = field(default_factory=list)
    total: int = 0
    unread: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more results after this page."""
        return self.start + len(self.messages) < self.messages_count

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessagesSummary":
        """Create from API response dict."""
        return cls(
            messages=[MessageInfo.from_dict(m) for m in data.get("messages") or []],
            messages_count=data.get("messages_count", 0),
            messages_unread=data.get("messages_unread", 0),
            start=data.get("start", 0),
            tags=data.get("tags") or [],
            total=data.get("total", 0),
            unread=data.get("unread", 0),
        )


# =============================================================================
# Send Types
# =============================================================================


@dataclass(frozen=True)
class Attachment:
    """
    An attachment for the send endpoint.

    Build one with ``Attachment.builder()``; the content is stored
    base64-encoded.
    """

    filename: str
    content: str
    content_id: str | None = None
    content_type: str | None = None

    @staticmethod
    def builder() -> "AttachmentBuilder":
        return AttachmentBuilder()

    @property
    def is_inline(self) -> bool:
        """Attachments with a Content-ID are embedded inline."""
        return bool(self.content_id)

    def decoded_content(self) -> bytes:
        return base64.b64decode(self.content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _drop_none(
            {
                "Content": self.content,
                "ContentID": self.content_id,
                "ContentType": self.content_type,
                "Filename": self.filename,
            }
        )


class AttachmentBuilder:
    """
    Accumulates attachment fields; ``build()`` validates and encodes.

    Example:
        attachment = (
            Attachment.builder()
            .filename("logo.png")
            .content(png_bytes)
            .content_id("logo")
            .build()
        )

    """

    def __init__(self) -> None:
        self._filename: str | None = None
        self._content: bytes | None = None
        self._content_id: str | None = None
        self._content_type: str | None = None

    def filename(self, name: str) -> "AttachmentBuilder":
        self._filename = name
        return self

    def content(self, content: bytes) -> "AttachmentBuilder":
        """Raw file content. Base64-encoded on build."""
        self._content = bytes(content)
        return self

    def content_id(self, content_id: str) -> "AttachmentBuilder":
        """Optional Content-ID; when set the file is attached inline."""
        self._content_id = content_id
        return self

    def content_type(self, content_type: str) -> "AttachmentBuilder":
        """Optional Content-Type; detected by the server when not set."""
        self._content_type = content_type
        return self

    def build(self) -> Attachment:
        """
        Build the attachment.

        Raises:
            AttachmentFilenameMissingError: If no filename was set
            AttachmentContentMissingError: If no content was set

        """
        if self._filename is None:
            raise AttachmentFilenameMissingError(
                "Trying to build an attachment without a filename. Set one on the builder."
            )
        if self._content is None:
            raise AttachmentContentMissingError(
                "Trying to build an attachment without content. Set content on the builder."
            )
        return Attachment(
            filename=self._filename,
            content=base64.b64encode(self._content).decode("ascii"),
            content_id=self._content_id,
            content_type=self._content_type,
        )


@dataclass(frozen=True)
class SendMessage:
    """A message for the send endpoint."""

    from_: Address
    to: list[Address] = field(default_factory=list)
    subject: str = ""
    text: str = ""
    html: str = ""
    cc: list[Address] | None = None
    bcc: list[str] | None = None
    reply_to: list[Address] | None = None
    headers: dict[str, str] | None = None
    tags: list[str] = field(default_factory=list)
    attachments: list[Attachment] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _drop_none(
            {
                "Attachments": [a.to_dict() for a in self.attachments] if self.attachments is not None else None,
                "Bcc": self.bcc,
                "Cc": [a.to_dict() for a in self.cc] if self.cc is not None else None,
                "From": self.from_.to_dict(),
                "HTML": self.html,
                "Headers": self.headers,
                "ReplyTo": [a.to_dict() for a in self.reply_to] if self.reply_to is not None else None,
                "Subject": self.subject,
                "Tags": self.tags,
                "Text": self.text,
                "To": [a.to_dict() for a in self.to],
            }
        )


@dataclass(frozen=True)
class SendMessageResponse:
    """Confirmation of the send endpoint."""

    id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SendMessageResponse":
        """Create from API response dict."""
        return cls(id=data["ID"])


# =============================================================================
# Check Types
# =============================================================================


@dataclass(frozen=True)
class HtmlTotalScores:
    """Total weighted result for all HTML check scores."""

    nodes: int = 0
    tests: int = 0
    supported: float = 0.0
    partial: float = 0.0
    unsupported: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HtmlTotalScores":
        """Create from API response dict."""
        return cls(
            nodes=data.get("Nodes", 0),
            tests=data.get("Tests", 0),
            supported=float(data.get("Supported", 0)),
            partial=float(data.get("Partial", 0)),
            unsupported=float(data.get("Unsupported", 0)),
        )


@dataclass(frozen=True)
class WarningResult:
    """Support of one feature on one client platform."""

    name: str = ""
    family: str = ""
    platform: str = ""
    version: str = ""
    support: str = ""
    note_number: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WarningResult":
        """Create from API response dict."""
        return cls(
            name=data.get("Name") or "",
            family=data.get("Family") or "",
            platform=data.get("Platform") or "",
            version=data.get("Version") or "",
            support=data.get("Support") or "",
            note_number=data.get("NoteNumber") or "",
        )


@dataclass(frozen=True)
class WarningScore:
    """Score of a single HTML check warning."""

    found: int = 0
    supported: float = 0.0
    partial: float = 0.0
    unsupported: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WarningScore":
        """Create from API response dict."""
        return cls(
            found=data.get("Found", 0),
            supported=float(data.get("Supported", 0)),
            partial=float(data.get("Partial", 0)),
            unsupported=float(data.get("Unsupported", 0)),
        )


@dataclass(frozen=True)
class HtmlWarning:
    """A feature detected in the HTML and its support across clients."""

    slug: str
    title: str = ""
    category: str = ""
    description: str = ""
    keywords: str = ""
    tags: list[str] = field(default_factory=list)
    url: str = ""
    notes_by_number: dict[str, str] = field(default_factory=dict)
    results: list[WarningResult] = field(default_factory=list)
    score: WarningScore = field(default_factory=WarningScore)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HtmlWarning":
        """Create from API response dict."""
        return cls(
            slug=data.get("Slug") or "",
            title=data.get("Title") or "",
            category=data.get("Category") or "",
            description=data.get("Description") or "",
            keywords=data.get("Keywords") or "",
            tags=data.get("Tags") or [],
            url=data.get("URL") or "",
            notes_by_number=data.get("NotesByNumber") or {},
            results=[WarningResult.from_dict(r) for r in data.get("Results") or []],
            score=WarningScore.from_dict(data.get("Score") or {}),
        )


@dataclass(frozen=True)
class HtmlCheckResponse:
    """Result of the HTML compatibility check."""

    platforms: dict[str, list[str]] = field(default_factory=dict)
    total: HtmlTotalScores = field(default_factory=HtmlTotalScores)
    warnings: list[HtmlWarning] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HtmlCheckResponse":
        """Create from API response dict."""
        return cls(
            platforms=data.get("Platforms") or {},
            total=HtmlTotalScores.from_dict(data.get("Total") or {}),
            warnings=[HtmlWarning.from_dict(w) for w in data.get("Warnings") or []],
        )


@dataclass(frozen=True)
class TestedLink:
    """A link found in the message and the status it answered with."""

    __test__ = False  # not a pytest class

    url: str
    status: str = ""
    status_code: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestedLink":
        """Create from API response dict."""
        return cls(
            url=data["URL"],
            status=data.get("Status") or "",
            status_code=data.get("StatusCode", 0),
        )


@dataclass(frozen=True)
class LinkCheckResponse:
    """Result of the link check."""

    errors: int = 0
    links: list[TestedLink] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkCheckResponse":
        """Create from API response dict."""
        return cls(
            errors=data.get("Errors", 0),
            links=[TestedLink.from_dict(link) for link in data.get("Links") or []],
        )


@dataclass(frozen=True)
class SpamRule:
    """A SpamAssassin rule that matched."""

    name: str
    description: str = ""
    score: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpamRule":
        """Create from API response dict."""
        return cls(
            name=data.get("Name") or "",
            description=data.get("Description") or "",
            score=float(data.get("Score", 0)),
        )


@dataclass(frozen=True)
class SpamAssassinResponse:
    """
    SpamAssassin verdict for a message.

    When SpamAssassin is not enabled on the server the reason is reported
    in ``error`` rather than as an HTTP failure.
    """

    is_spam: bool = False
    score: float = 0.0
    rules: list[SpamRule] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpamAssassinResponse":
        """Create from API response dict."""
        return cls(
            is_spam=data.get("IsSpam", False),
            score=float(data.get("Score", 0)),
            rules=[SpamRule.from_dict(r) for r in data.get("Rules") or []],
            error=data.get("Error") or "",
        )


# =============================================================================
# Chaos Types
# =============================================================================


@dataclass(frozen=True)
class ChaosTrigger:
    """
    A Chaos trigger.

    ``error_code`` is the SMTP error to return (400-599) and ``probability``
    the chance of triggering it (0-100). Ranges are enforced by the server.
    """

    error_code: int = 451
    probability: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChaosTrigger":
        """Create from API response dict."""
        return cls(error_code=data.get("ErrorCode", 0), probability=data.get("Probability", 0))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"ErrorCode": self.error_code, "Probability": self.probability}


@dataclass(frozen=True)
class ChaosTriggersResponse:
    """Current Chaos triggers."""

    authentication: ChaosTrigger
    recipient: ChaosTrigger
    sender: ChaosTrigger

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChaosTriggersResponse":
        """Create from API response dict."""
        return cls(
            authentication=ChaosTrigger.from_dict(data["Authentication"]),
            recipient=ChaosTrigger.from_dict(data["Recipient"]),
            sender=ChaosTrigger.from_dict(data["Sender"]),
        )


@dataclass(frozen=True)
class ChaosTriggersConfiguration:
    """Chaos triggers to set. Omitted triggers are reset (0% probability)."""

    authentication: ChaosTrigger | None = None
    recipient: ChaosTrigger | None = None
    sender: ChaosTrigger | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _drop_none(
            {
                "Authentication": self.authentication.to_dict() if self.authentication else None,
                "Recipient": self.recipient.to_dict() if self.recipient else None,
                "Sender": self.sender.to_dict() if self.sender else None,
            }
        )
