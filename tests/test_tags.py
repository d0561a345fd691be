"""Tests for tag operations."""

import pytest

from mailpit_client.core.errors import APIError, ValidationError


class TestTags:
    def test_list(self, stub, client):
        stub.reply(["Tag 1", "backups"])

        tags = client.tags.list()

        assert stub.last.method == "GET"
        assert stub.last.path == "/api/v1/tags"
        assert tags == ["Tag 1", "backups"]

    def test_set(self, stub, client):
        ok = client.tags.set(["A", "B"], ["x", "y"])

        assert ok is True
        assert stub.last.method == "PUT"
        assert stub.last.path == "/api/v1/tags"
        assert stub.last.body == b'{"IDs":["A","B"],"Tags":["x","y"]}'

    def test_set_empty_tags_clears(self, stub, client):
        client.tags.set(["A"], [])
        assert stub.last.body == b'{"IDs":["A"],"Tags":[]}'

    def test_set_non_ok_body(self, stub, client):
        stub.reply("no")
        assert client.tags.set(["A", "B"], ["x", "y"]) is False

    def test_set_error_body(self, stub, client):
        stub.reply({"Error": "bad id"}, status=400)

        with pytest.raises(APIError) as exc_info:
            client.tags.set(["A", "B"], ["x", "y"])

        assert exc_info.value.status == 400
        assert exc_info.value.message == "bad id"

    def test_rename(self, stub, client):
        ok = client.tags.rename("Tag 1", "Tag 2")

        assert ok is True
        assert stub.last.method == "PUT"
        assert stub.last.path == "/api/v1/tags/Tag%201"
        assert stub.last.body == b'{"Name":"Tag 2"}'

    def test_delete(self, stub, client):
        ok = client.tags.delete("Tag 1")

        assert ok is True
        assert stub.last.method == "DELETE"
        assert stub.last.path == "/api/v1/tags/Tag%201"
        assert stub.last.body == b""

    def test_delete_slash_in_tag(self, stub, client):
        client.tags.delete("clients/acme")
        assert stub.last.path == "/api/v1/tags/clients%2Facme"

    def test_empty_tag_rejected(self, stub, client):
        with pytest.raises(ValidationError):
            client.tags.delete("")
        with pytest.raises(ValidationError):
            client.tags.rename("", "new")
        assert stub.requests == []
