"""Shared fixtures and fakes for the streaming helper tests."""

import copy
import logging
from types import MappingProxyType

import pytest

from streaming.config import AppConfig
from streaming.pacer import TickClock


class FakeProvider:
    """
    Chat provider that replays canned replies and records every request.

    A reply is a string, a (content, finish_reason) tuple or an exception to raise.
    """

    name = "fake"
    model = "fake-model"

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def generate_chat(self, messages):
        self.calls.append(copy.deepcopy(messages))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        finish_reason = "STOP"
        if isinstance(reply, tuple):
            reply, finish_reason = reply
        return {
            "content": reply,
            "input_tokens": 10,
            "output_tokens": 20,
            "finish_reason": finish_reason,
        }


class RecordingSink:
    """CaptionSink that remembers what it was asked to display."""

    def __init__(self, title=""):
        self.title = title
        self.total = None
        self.advanced = 0
        self.labels = []  # (tick, label)
        self.finished = None

    def start(self, total):
        self.total = total

    def advance(self, amount=1):
        self.advanced += amount

    def set_label(self, label):
        self.labels.append((self.advanced - 1, label))

    def finish(self, completed=True):
        self.finished = completed


class FakeTime:
    """Monotonic clock that only moves when slept on."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def fake_clock(fake_time):
    return TickClock(1.0, monotonic=fake_time.monotonic, sleep=fake_time.sleep)


@pytest.fixture
def make_config(tmp_path):
    """Build an AppConfig pointing its prompt directory at tmp_path."""
    def _make(**overrides):
        values = dict(
            provider="openai",
            model="gpt-4o-mini",
            request_timeout=5.0,
            max_attempts=5,
            tick_seconds=1.0,
            prompt_dir=tmp_path,
            notify_url="https://example.test/api/live",
            notify_token_env="PERSONAL_PAGE_API_KEY",
            notify_timeout=1.0,
            sequences=MappingProxyType({}),
            secrets=MappingProxyType({
                "OPENAI_API_KEY": "sk-test",
                "ANTHROPIC_API_KEY": "sk-ant-test",
                "PERSONAL_PAGE_API_KEY": "page-token",
            }),
        )
        values.update(overrides)
        return AppConfig(**values)
    return _make


@pytest.fixture(autouse=True)
def reset_streaming_logger():
    """Undo handler changes made by configure_logging() between tests."""
    yield
    logger = logging.getLogger("streaming")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
