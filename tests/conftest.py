"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, List, Tuple

import pytest

from gophersearch.config import ClientConfig
from gophersearch.client import GopherClient
from gophersearch.logger import get_logger, reset_logger


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int, body: Any = ""):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)


class FakeSession:
    """
    Replays queued responses in order and records every request.

    Queue entries are (status, body) tuples or exception instances to raise.
    """

    def __init__(self, *responses):
        self.queue: List[Any] = list(responses)
        self.calls: List[Tuple[str, str, dict]] = []
        self.closed = False

    def add(self, *responses):
        self.queue.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if not self.queue:
            raise AssertionError(f"unexpected request: {method} {url}")
        entry = self.queue.pop(0)
        if isinstance(entry, Exception):
            raise entry
        status, body = entry
        return FakeResponse(status, body)

    def mount(self, prefix, adapter):
        pass

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path_factory):
    """Route the global logger to a temp dir with no console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path_factory.mktemp("logs"), enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def config() -> ClientConfig:
    """Fast config: no waiting between poll attempts."""
    return ClientConfig(
        api_key="test-key",
        base_url="https://api.test/v1",
        max_results=15,
        request_timeout=5.0,
        poll_attempts=30,
        poll_interval=0.0,
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(config, session, quiet_logger) -> GopherClient:
    return GopherClient(config, session=session, logger=quiet_logger)


@pytest.fixture
def tweet_body():
    return [
        {"ID": "1", "Content": "hi", "Metadata": None, "Score": 0.9},
        {"ID": "2", "Content": "there", "Metadata": {"author": "gopher", "likes": 3}, "Score": 0.5},
    ]
