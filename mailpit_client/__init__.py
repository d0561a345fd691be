"""
Mailpit client - Typed client for the Mailpit email-testing API.

Layers:
- core: Raw types, errors and HTTP client
- sdk: High-level MailpitClient with one method per endpoint
- cli: Command-line interface for inspecting a Mailpit server
"""

from mailpit_client.core.errors import APIError, MailpitError
from mailpit_client.core.types import Address, Attachment, SendMessage
from mailpit_client.sdk import MailpitClient

__version__ = "0.1.0"
__all__ = ["APIError", "Address", "Attachment", "MailpitClient", "MailpitError", "SendMessage"]
