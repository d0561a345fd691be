"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses matching the Mailpit API payloads
- Low-level HTTP client with auth and error classification
"""

from mailpit_client.core.client import APIClient, Response, check_response, parse_error_body
from mailpit_client.core.errors import (
    APIError,
    AttachmentContentMissingError,
    AttachmentFilenameMissingError,
    ConfigurationError,
    DecodeError,
    ErrorBody,
    InvalidUrlError,
    MailpitError,
    TransportError,
    ValidationError,
)
from mailpit_client.core.types import (
    Address,
    ApplicationInformation,
    Attachment,
    AttachmentBuilder,
    AttachmentInfo,
    ChaosTrigger,
    ChaosTriggersConfiguration,
    ChaosTriggersResponse,
    HtmlCheckResponse,
    HtmlTotalScores,
    HtmlWarning,
    LinkCheckResponse,
    ListUnsubscribe,
    MessageBase,
    MessageHeaders,
    MessageInfo,
    MessageRelay,
    MessagesSummary,
    MessageSummary,
    RuntimeStats,
    SendMessage,
    SendMessageResponse,
    SpamAssassinResponse,
    SpamRule,
    TagList,
    TestedLink,
    WarningResult,
    WarningScore,
    WebUIConfiguration,
)

__all__ = [
    "APIClient",
    "APIError",
    "Address",
    "ApplicationInformation",
    "Attachment",
    "AttachmentBuilder",
    "AttachmentContentMissingError",
    "AttachmentFilenameMissingError",
    "AttachmentInfo",
    "ChaosTrigger",
    "ChaosTriggersConfiguration",
    "ChaosTriggersResponse",
    "ConfigurationError",
    "DecodeError",
    "ErrorBody",
    "HtmlCheckResponse",
    "HtmlTotalScores",
    "HtmlWarning",
    "InvalidUrlError",
    "LinkCheckResponse",
    "ListUnsubscribe",
    "MailpitError",
    "MessageBase",
    "MessageHeaders",
    "MessageInfo",
    "MessageRelay",
    "MessageSummary",
    "MessagesSummary",
    "Response",
    "RuntimeStats",
    "SendMessage",
    "SendMessageResponse",
    "SpamAssassinResponse",
    "SpamRule",
    "TagList",
    "TestedLink",
    "TransportError",
    "ValidationError",
    "WarningResult",
    "WarningScore",
    "WebUIConfiguration",
    "check_response",
    "parse_error_body",
]
