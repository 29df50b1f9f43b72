"""
Tests for configuration, locks, serialization and error helpers.
"""

import asyncio
import datetime
import json
import logging

import pytest

from interviewiq.assessments.interview.answer_evaluation import MatchPolicy
from interviewiq.common.config import ANSWER_MATCH_POLICIES, ConfigLoader
from interviewiq.common.error_handling import (
    ErrorCode,
    InterviewIQError,
    SessionNotFoundError,
    convert_exception,
    error_response,
)
from interviewiq.common.locks import KeyedLock
from interviewiq.common.logger import JsonFormatter, log_execution_time
from interviewiq.common.serialization import format_timestamp, parse_timestamp


class TestConfigLoader:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)

        config = ConfigLoader(env_file=None).load()

        assert config.storage.backend == "file"
        assert config.assessment.question_count == 5
        assert config.assessment.question_time_limit == 30
        assert config.assessment.answer_match_policy == "exact"

    def test_file_then_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage": {"backend": "sql"}, "assessment": {"question_count": 3}}))
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("QUESTION_TIME_LIMIT", "45")

        config = ConfigLoader(str(path), env_file=None).load()

        assert config.storage.backend == "memory"
        assert config.assessment.question_count == 3
        assert config.assessment.question_time_limit == 45

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("environment: production\nnotifications:\n  enabled: true\n")

        config = ConfigLoader(str(path), env_file=None).load()

        assert config.is_production
        assert config.notifications.enabled

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)

        config = ConfigLoader(str(tmp_path / "absent.yaml"), env_file=None).load()

        assert config.storage.backend == "file"

    def test_answer_match_policy_is_normalized(self, monkeypatch):
        monkeypatch.setenv("ANSWER_MATCH_POLICY", " Keywords ")

        config = ConfigLoader(env_file=None).load()

        assert config.assessment.answer_match_policy == "keywords"

    def test_unknown_answer_match_policy_is_rejected(self, monkeypatch):
        monkeypatch.setenv("ANSWER_MATCH_POLICY", "fuzzy")

        with pytest.raises(ValueError, match="answer match policy"):
            ConfigLoader(env_file=None).load()

    def test_match_policies_cover_evaluator(self):
        assert set(ANSWER_MATCH_POLICIES) == {p.value for p in MatchPolicy}


@pytest.mark.asyncio
async def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    order = []

    async def worker(name):
        async with locks.hold("a@x.io"):
            assert locks.locked("a@x.io")
            order.append(f"{name}-in")
            await asyncio.sleep(0)
            order.append(f"{name}-out")

    await asyncio.gather(worker("one"), worker("two"))

    assert order == ["one-in", "one-out", "two-in", "two-out"]
    assert len(locks) == 0


def test_timestamps_accept_trailing_z():
    parsed = parse_timestamp("2024-01-15T10:00:00.000Z")

    assert parsed == datetime.datetime(2024, 1, 15, 10, 0, tzinfo=datetime.timezone.utc)
    assert parse_timestamp(None) is None
    assert parse_timestamp(format_timestamp(parsed)) == parsed


def test_naive_timestamp_is_utc():
    assert parse_timestamp("2024-01-15T10:00:00").tzinfo == datetime.timezone.utc


def test_error_response_shape():
    body = error_response(SessionNotFoundError("s1"))

    assert body["status"] == "error"
    assert body["code"] == "session_not_found"
    assert body["details"]["session_id"] == "s1"


def test_convert_exception_wraps_unknown_errors():
    converted = convert_exception(RuntimeError("boom"))

    assert isinstance(converted, InterviewIQError)
    assert converted.code == ErrorCode.UNKNOWN_ERROR
    assert isinstance(converted.cause, RuntimeError)


def test_json_formatter():
    record = logging.LogRecord("interviewiq", logging.INFO, __file__, 10, "hello %s", ("world",), None)

    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "hello world"
    assert data["level"] == "INFO"


@pytest.mark.asyncio
async def test_log_execution_time_keeps_async_result():
    @log_execution_time()
    async def compute():
        return 42

    assert await compute() == 42
