"""
Live tests against a real Mailpit server.

Run with: MAILPIT_URL=http://localhost:8025 python -m pytest tests/test_live.py -v
Optional: MAILPIT_USERNAME / MAILPIT_PASSWORD (or a project .env file)

Each test sends its own uniquely tagged message and deletes it afterwards;
other messages in the mailbox are left alone.
"""

import os
import uuid

import pytest

from mailpit_client.core.errors import APIError
from mailpit_client.core.types import Address, Attachment, SendMessage
from mailpit_client.sdk import MailpitClient

pytestmark = pytest.mark.skipif(not os.environ.get("MAILPIT_URL"), reason="MAILPIT_URL required")


@pytest.fixture
def live_client():
    return MailpitClient()


@pytest.fixture
def sent_message(live_client):
    """Send a tagged message and delete it after the test."""
    tag = f"live-{uuid.uuid4().hex[:12]}"
    attachment = Attachment.builder().filename("hello.txt").content(b"Hello!").content_type("text/plain").build()
    response = live_client.message.send(
        SendMessage(
            from_=Address("john@example.com", "John Doe"),
            to=[Address("jane@example.com", "Jane Doe")],
            subject=f"Live test {tag}",
            text="Mailpit is awesome!",
            html="<p>Mailpit is <b>awesome</b>! <a href=\"http://localhost:8025/\">UI</a></p>",
            headers={"X-IP": "1.2.3.4"},
            tags=[tag],
            attachments=[attachment],
        )
    )
    yield response.id, tag
    live_client.messages.delete_by_search(f"tag:{tag}")


class TestLive:
    def test_info(self, live_client):
        info = live_client.application.info()
        assert info.version

    def test_webui(self, live_client):
        assert live_client.application.webui() is not None

    def test_send_and_read(self, live_client, sent_message):
        message_id, tag = sent_message

        message = live_client.message.get(message_id)

        assert message.subject == f"Live test {tag}"
        assert message.tags == [tag]
        [attachment] = message.attachments
        assert attachment.file_name == "hello.txt"
        assert live_client.message.attachment(message_id, attachment.part_id) == b"Hello!"
        assert "Subject" in live_client.message.headers(message_id)
        assert "Mailpit is awesome!" in live_client.message.source(message_id)
        assert "awesome" in live_client.view.text(message_id)
        assert "<b>awesome</b>" in live_client.view.html(message_id)

    def test_search_and_read_status(self, live_client, sent_message):
        message_id, tag = sent_message

        summary = live_client.messages.search(f"tag:{tag}")
        assert [m.id for m in summary.messages] == [message_id]

        assert live_client.messages.set_read_status(read=True, ids=[message_id])
        assert live_client.messages.search(f"tag:{tag} is:read").messages_count == 1

    def test_tags(self, live_client, sent_message):
        message_id, tag = sent_message
        renamed = f"{tag} renamed"

        assert tag in live_client.tags.list()
        assert live_client.tags.rename(tag, renamed)
        assert renamed in live_client.tags.list()
        assert live_client.tags.set([message_id], [tag, "live"])
        assert live_client.message.get(message_id).tags == sorted([tag, "live"])
        assert live_client.tags.delete("live")

    def test_checks(self, live_client, sent_message):
        message_id, _ = sent_message

        assert live_client.checks.html(message_id).total.tests >= 0
        assert live_client.checks.links(message_id, follow=False).links

    def test_missing_message(self, live_client):
        with pytest.raises(APIError) as exc_info:
            live_client.message.get("does-not-exist")
        assert exc_info.value.status == 404
