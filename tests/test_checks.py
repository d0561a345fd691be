"""Tests for the HTML, link and SpamAssassin checks."""

from mailpit_client.core.types import HtmlCheckResponse, LinkCheckResponse, SpamAssassinResponse

HTML_CHECK = {
    "Platforms": {"outlook": ["windows", "windows-mail"], "gmail": ["desktop-webmail"]},
    "Total": {"Nodes": 42, "Partial": 3.5, "Supported": 91.2, "Tests": 180, "Unsupported": 5.3},
    "Warnings": [
        {
            "Category": "css",
            "Description": "Allows an element to be positioned",
            "Keywords": "position",
            "NotesByNumber": {"1": "Partial support with prefix"},
            "Results": [
                {
                    "Family": "outlook",
                    "Name": "Outlook 2019",
                    "NoteNumber": "1",
                    "Platform": "windows",
                    "Support": "no",
                    "Version": "2019",
                }
            ],
            "Score": {"Found": 2, "Partial": 0, "Supported": 60, "Unsupported": 40},
            "Slug": "css-position",
            "Tags": ["css"],
            "Title": "position",
            "URL": "https://www.caniemail.com/features/css-position/",
        }
    ],
}

LINK_CHECK = {
    "Errors": 1,
    "Links": [
        {"Status": "OK", "StatusCode": 200, "URL": "http://localhost:8025/api"},
        {"Status": "Not Found", "StatusCode": 404, "URL": "https://example.com/missing"},
    ],
}

SPAM_CHECK = {
    "Error": "",
    "IsSpam": False,
    "Rules": [{"Description": "Message has no Message-ID", "Name": "MISSING_MID", "Score": 0.1}],
    "Score": 0.1,
}


class TestHtmlCheck:
    def test_html_check(self, stub, client):
        stub.reply(HTML_CHECK)

        result = client.checks.html("database-id")

        assert stub.last.method == "GET"
        assert stub.last.path == "/api/v1/message/database-id/html-check"
        assert isinstance(result, HtmlCheckResponse)
        assert result.platforms["outlook"] == ["windows", "windows-mail"]
        assert result.total.nodes == 42
        assert result.total.supported == 91.2
        [warning] = result.warnings
        assert warning.slug == "css-position"
        assert warning.url == "https://www.caniemail.com/features/css-position/"
        assert warning.notes_by_number == {"1": "Partial support with prefix"}
        assert warning.results[0].note_number == "1"
        assert warning.score.found == 2
        assert warning.score.unsupported == 40.0


class TestLinkCheck:
    def test_link_check_follow(self, stub, client):
        stub.reply(LINK_CHECK)

        result = client.checks.links("database-id", follow=True)

        assert stub.last.path == "/api/v1/message/database-id/link-check"
        assert stub.last.query == {"follow": ["1"]}
        assert isinstance(result, LinkCheckResponse)
        assert result.errors == 1
        assert [link.url for link in result.links] == ["http://localhost:8025/api", "https://example.com/missing"]
        assert result.links[0].ok
        assert not result.links[1].ok

    def test_link_check_no_follow(self, stub, client):
        stub.reply(LINK_CHECK)
        client.checks.links("database-id", follow=False)
        assert stub.last.query == {"follow": ["0"]}

    def test_link_check_follow_unset(self, stub, client):
        stub.reply(LINK_CHECK)
        client.checks.links("database-id")
        assert stub.last.query == {}


class TestSpamCheck:
    def test_spam_check(self, stub, client):
        stub.reply(SPAM_CHECK)

        result = client.checks.spam("database-id")

        assert stub.last.path == "/api/v1/message/database-id/sa-check"
        assert isinstance(result, SpamAssassinResponse)
        assert not result.is_spam
        assert result.score == 0.1
        assert result.rules[0].name == "MISSING_MID"
        assert result.error == ""

    def test_spam_check_disabled(self, stub, client):
        stub.reply({"Error": "SpamAssassin is not enabled", "IsSpam": False, "Rules": [], "Score": 0})

        result = client.checks.spam("database-id")

        assert result.error == "SpamAssassin is not enabled"
        assert result.rules == []
