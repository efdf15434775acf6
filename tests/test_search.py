"""
Tests for the never-raising search operation.
"""

import threading
from unittest.mock import patch

import pytest

from gophersearch.client import GopherClient
from gophersearch.search import build_search_request, search

from conftest import FakeSession


class TestBuildSearchRequest:
    """Test the twitter search job built for a query."""

    def test_builds_searchbyquery(self):
        request = build_search_request("  golang  ", 15)
        assert request.to_payload() == {
            "type": "twitter",
            "arguments": {"type": "searchbyquery", "query": "golang", "max_results": 15},
        }

    def test_empty_query_rejected(self):
        with pytest.raises(ValueError):
            build_search_request("   ", 15)


class TestSearch:
    """Test search() end to end against a fake session."""

    def test_success(self, client, session, tweet_body):
        session.add((200, {"uuid": "abc123", "error": ""}), (404, ""), (200, tweet_body))

        output = search("golang", client=client)

        assert output.error is None
        assert [i.id for i in output.items] == ["1", "2"]

    def test_submission_rejected(self, client, session):
        session.add((401, {"message": "invalid token"}))

        output = search("golang", client=client)

        assert output.items == []
        assert output.error == "API error: invalid token"
        assert len(session.calls) == 1

    def test_timeout_reported_as_error(self, config):
        session = FakeSession((200, {"uuid": "abc123", "error": ""}), *[(200, {"status": "processing"})] * 3)
        client = GopherClient(config.with_overrides(poll_attempts=3), session=session)

        output = search("golang", client=client)

        assert output.items == []
        assert output.error == "timeout waiting for search results after 3 attempts"

    def test_transport_error_reported(self, client, session):
        session.add((200, {"uuid": "abc123", "error": ""}), (500, "boom"))

        output = search("golang", client=client)

        assert output.items == []
        assert output.error == "HTTP 500: boom"

    def test_invalid_query_reported(self, client, session):
        output = search("", client=client)

        assert output.items == []
        assert "query" in output.error
        assert session.calls == []

    def test_missing_configuration_reported(self, monkeypatch):
        monkeypatch.delenv("GOPHER_API", raising=False)

        output = search("golang")

        assert output.items == []
        assert "GOPHER_API" in output.error

    def test_cancelled_search(self, client, session):
        session.add((200, {"uuid": "abc123", "error": ""}))
        cancel = threading.Event()
        cancel.set()

        output = search("golang", client=client, cancel=cancel)

        assert output.items == []
        assert output.error == "search cancelled after 0 attempts"

    def test_uses_configured_max_results(self, config, session):
        session.add((200, {"uuid": "abc123", "error": ""}), (200, []))
        client = GopherClient(config.with_overrides(max_results=42), session=session)

        search("golang", client=client)

        assert session.calls[0][2]["json"]["arguments"]["max_results"] == 42

    def test_builds_and_closes_own_client(self, config, tweet_body):
        session = FakeSession((200, {"uuid": "abc123", "error": ""}), (200, tweet_body))

        with patch("gophersearch.client.requests.Session", return_value=session):
            output = search("golang", config=config)

        assert len(output.items) == 2
        assert session.closed

    @pytest.mark.parametrize("body", [
        "[" * 100000 + "]" * 100000,
        '[{"ID": "1", "Content": "x", "Score": 1' + "0" * 400 + "}]",
        '{"status": "processing", "detail": ' + "[" * 100000 + "}",
        "\xff\xfe\x00garbage",
    ])
    def test_never_raises_on_odd_result_bodies(self, client, session, body):
        session.add((200, {"uuid": "abc123", "error": ""}), (200, body), (200, []))

        output = search("bitcoin", client=client)

        assert output.error is None
        assert output.items == []
        assert len(session.calls) == 3

    def test_never_raises_when_budget_spent_on_odd_bodies(self, config):
        session = FakeSession((200, {"uuid": "abc123", "error": ""}), *[(200, "[" * 100000)] * 2)
        client = GopherClient(config.with_overrides(poll_attempts=2), session=session)

        output = search("bitcoin", client=client)

        assert output.items == []
        assert output.error == "timeout waiting for search results after 2 attempts"

    def test_never_raises_on_odd_submission_body(self, client, session):
        session.add((200, "[" * 100000))

        output = search("bitcoin", client=client)

        assert output.items == []
        assert output.error.startswith("failed to unmarshal response")

    def test_reused_client_stays_open(self, client, session):
        session.add((200, {"uuid": "abc123", "error": ""}), (200, []))

        search("golang", client=client)

        assert not session.closed
