"""Tests for running a whole sequence from template to countdown."""

import dataclasses

import pytest

from conftest import FakeProvider, RecordingSink
from streaming.caption_acquirer import ExhaustedRetriesError
from streaming.config import TemplateNotFoundError
from streaming.sequence import PromptRequest, SequenceRunner

TEN = '["1", "2", "3", "4", "5", "6", "7", "8", "9", "10"]'


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "break_seq.prompt"
    path.write_text("Write %COUNT% lines. Really, %COUNT%.\n", encoding="utf-8")
    return path.name


class SinkFactory:
    def __init__(self):
        self.sinks = []

    def __call__(self, title):
        sink = RecordingSink(title)
        self.sinks.append(sink)
        return sink


class TestPromptRequest:

    def test_min_items_is_floor_of_sixth(self):
        assert PromptRequest("x", 600).min_items == 100
        assert PromptRequest("x", 65).min_items == 10
        assert PromptRequest("x", 5).min_items == 0

    def test_immutable(self):
        request = PromptRequest("x", 60)
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.duration_seconds = 10


class TestSequenceRunner:

    def test_runs_countdown_with_captions(self, make_config, template, fake_clock):
        provider = FakeProvider([TEN])
        sinks = SinkFactory()
        runner = SequenceRunner(make_config(), provider, sinks, clock=fake_clock)

        shown = runner.run_sequence(template, 60, title="Small break...")

        assert shown == [str(i) for i in range(1, 11)]
        assert provider.calls[0][0]["content"] == "Write 10 lines. Really, 10.\n"
        sink = sinks.sinks[0]
        assert sink.title == "Small break..."
        assert sink.advanced == 60
        assert [tick for tick, _ in sink.labels] == list(range(0, 60, 6))

    def test_missing_template(self, make_config, fake_clock):
        provider = FakeProvider([TEN])
        runner = SequenceRunner(make_config(), provider, SinkFactory(), clock=fake_clock)
        with pytest.raises(TemplateNotFoundError):
            runner.run_sequence("nope.prompt", 60)
        assert provider.calls == []

    def test_exhaustion_skips_countdown(self, make_config, template, fake_clock):
        provider = FakeProvider(["bad"] * 5)
        sinks = SinkFactory()
        runner = SequenceRunner(make_config(), provider, sinks, clock=fake_clock)
        with pytest.raises(ExhaustedRetriesError):
            runner.run_sequence(template, 60)
        assert sinks.sinks == []

    def test_attempt_budget_from_config(self, make_config, template, fake_clock):
        provider = FakeProvider(["bad"] * 5)
        runner = SequenceRunner(make_config(max_attempts=2), provider, SinkFactory(), clock=fake_clock)
        with pytest.raises(ExhaustedRetriesError):
            runner.run_sequence(template, 60)
        assert len(provider.calls) == 2

    def test_attempt_budget_never_exceeds_five(self, make_config, template, fake_clock):
        provider = FakeProvider(["bad"] * 9)
        runner = SequenceRunner(make_config(max_attempts=9), provider, SinkFactory(), clock=fake_clock)
        with pytest.raises(ExhaustedRetriesError):
            runner.run_sequence(template, 60)
        assert len(provider.calls) == 5
