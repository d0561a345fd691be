"""Error taxonomy for the Mailpit client."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ErrorBody:
    """Structured error body returned with non-2xx responses."""

    error: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorBody":
        """Create from API response dict."""
        return cls(error=str(data["Error"]))


class MailpitError(Exception):
    """Base error class for all client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(MailpitError):
    """The client could not be constructed (bad URL or credentials)."""


class InvalidUrlError(ConfigurationError):
    """The base URL is not an absolute http(s) URL."""


class TransportError(MailpitError):
    """The exchange could not complete (DNS, connection, timeout, TLS)."""


class DecodeError(MailpitError):
    """A successful response did not have the expected shape."""


class APIError(MailpitError):
    """Non-2xx response, with the status code and raw body text."""

    def __init__(self, status: int, text: str, body: ErrorBody | None = None):
        message = body.error if body is not None else f"HTTP {status}"
        super().__init__(message)
        self.status = status
        self.text = text
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["status"] = self.status
        return result


class ValidationError(MailpitError):
    """Validation error for local input/data issues (not API errors)."""


class AttachmentFilenameMissingError(ValidationError):
    """An attachment was built without a filename."""


class AttachmentContentMissingError(ValidationError):
    """An attachment was built without content."""
