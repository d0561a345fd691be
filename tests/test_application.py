"""Tests for the application (server info / web UI) operations."""

from mailpit_client.core.types import ApplicationInformation, WebUIConfiguration

INFO = {
    "Database": "/data/mailpit.db",
    "DatabaseSize": 98304,
    "LatestVersion": "v1.21.0",
    "Messages": 12,
    "RuntimeStats": {
        "Memory": 1024,
        "MessagesDeleted": 3,
        "SMTPAccepted": 15,
        "SMTPAcceptedSize": 40960,
        "SMTPIgnored": 1,
        "SMTPRejected": 2,
        "Uptime": 3600,
    },
    "Tags": {"Tag 1": 2, "backups": 5},
    "Unread": 4,
    "Version": "v1.20.4",
}

WEBUI = {
    "ChaosEnabled": True,
    "DuplicatesIgnored": False,
    "HideDeleteAllButton": False,
    "Label": "staging",
    "MessageRelay": {
        "AllowedRecipients": "@example\\.com$",
        "BlockedRecipients": "",
        "Enabled": True,
        "OverrideFrom": "",
        "PreserveMessageIDs": True,
        "ReturnPath": "bounces@example.com",
        "SMTPServer": "smtp.example.com:587",
    },
    "SpamAssassin": False,
}


class TestApplicationInfo:
    def test_info(self, stub, client):
        stub.reply(INFO)

        info = client.application.info()

        assert stub.last.method == "GET"
        assert stub.last.path == "/api/v1/info"
        assert stub.last.query == {}
        assert isinstance(info, ApplicationInformation)
        assert info.version == "v1.20.4"
        assert info.latest_version == "v1.21.0"
        assert info.update_available
        assert info.messages == 12
        assert info.unread == 4
        assert info.tags == {"Tag 1": 2, "backups": 5}
        assert info.runtime_stats.smtp_accepted == 15
        assert info.runtime_stats.smtp_accepted_size == 40960
        assert info.runtime_stats.smtp_rejected == 2
        assert info.runtime_stats.uptime == 3600

    def test_info_up_to_date(self, stub, client):
        stub.reply({**INFO, "LatestVersion": "v1.20.4"})
        assert not client.application.info().update_available

    def test_info_sends_accept_header(self, stub, client):
        stub.reply(INFO)
        client.application.info()
        assert stub.last.headers["accept"] == "application/json"
        assert stub.last.headers["user-agent"].startswith("mailpit-client/")


class TestWebUIConfiguration:
    def test_webui(self, stub, client):
        stub.reply(WEBUI)

        config = client.application.webui()

        assert stub.last.path == "/api/v1/webui"
        assert isinstance(config, WebUIConfiguration)
        assert config.label == "staging"
        assert config.chaos_enabled
        assert not config.spam_assassin
        assert config.message_relay.enabled
        assert config.message_relay.smtp_server == "smtp.example.com:587"
        assert config.message_relay.preserve_message_ids
        assert config.message_relay.allowed_recipients == "@example\\.com$"
