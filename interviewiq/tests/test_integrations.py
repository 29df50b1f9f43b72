"""
Tests for the LLM relay, email notifications and chat history.
"""

import asyncio
import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from interviewiq.common.config import AIConfig, NotificationConfig
from interviewiq.common.error_handling import ExternalServiceError, ExternalServiceTimeoutError, retry
from interviewiq.integrations.chat_history import ChatHistory, ChatHistoryRepository
from interviewiq.integrations.llm import EMPTY_REPLY, FALLBACK_REPLY, GeminiClient, extract_text
from interviewiq.integrations.notifications import EmailNotifier, build_login_message
from interviewiq.storage.sql_store import SQLAlchemyStore

LOGIN_TIME = datetime.datetime(2024, 1, 15, 10, 0, tzinfo=datetime.timezone.utc)

GEMINI_PAYLOAD = {
    "candidates": [{"content": {"parts": [{"text": "Practice closures and the event loop."}]}}]
}


class TestGeminiClient:
    def test_extract_text(self):
        assert extract_text(GEMINI_PAYLOAD) == "Practice closures and the event loop."
        assert extract_text({"candidates": []}) == EMPTY_REPLY
        assert extract_text({}) == EMPTY_REPLY

    def test_payload_and_endpoint(self):
        client = GeminiClient(AIConfig(api_key="k", model_name="gemini-pro", max_output_tokens=256))

        payload = client.build_payload("hello")

        assert payload["contents"][0]["parts"][0]["text"] == "hello"
        assert payload["generationConfig"]["maxOutputTokens"] == 256
        assert client.endpoint.endswith("/models/gemini-pro:generateContent")

    @pytest.mark.asyncio
    async def test_missing_key_returns_fallback(self):
        client = GeminiClient(AIConfig(api_key=None))

        reply = await client.generate("hello")

        assert reply.text == FALLBACK_REPLY
        assert not reply.ok

    @pytest.mark.asyncio
    async def test_generate_returns_reply_text(self):
        client = GeminiClient(AIConfig(api_key="k"))

        with patch.object(client, "_request_with_retry", AsyncMock(return_value=GEMINI_PAYLOAD)) as request:
            reply = await client.generate("How do I prepare?")

        request.assert_awaited_once_with("How do I prepare?")
        assert reply.ok
        assert reply.text == "Practice closures and the event loop."
        assert reply.to_dict() == {"text": "Practice closures and the event loop."}

    @pytest.mark.asyncio
    async def test_relay_failure_returns_fallback_with_error(self):
        client = GeminiClient(AIConfig(api_key="k"))
        failure = ExternalServiceTimeoutError("gemini", "generateContent", 30)

        with patch.object(client, "_request_with_retry", AsyncMock(side_effect=failure)):
            reply = await client.generate("hello")

        assert reply.text == FALLBACK_REPLY
        assert reply.error == failure.message
        await client.close()


@pytest.mark.asyncio
async def test_retry_retries_then_raises():
    calls = []

    @retry(max_retries=2, retry_delay=0, jitter=0, retry_exceptions=(ExternalServiceError,))
    async def flaky():
        calls.append(1)
        raise ExternalServiceError("gemini", "boom")

    with pytest.raises(ExternalServiceError):
        await flaky()
    assert len(calls) == 3


class TestEmailNotifier:
    def config(self, **overrides):
        values = dict(enabled=True, username="bot@x.io", password="secret", admin_email="admin@x.io")
        values.update(overrides)
        return NotificationConfig(**values)

    @pytest.mark.asyncio
    async def test_disabled_notifier_skips(self):
        notifier = EmailNotifier(NotificationConfig(enabled=False))

        assert not notifier.configured
        assert not await notifier.send_login_notification("Asha", "asha@x.io", LOGIN_TIME)

    @pytest.mark.asyncio
    async def test_sends_to_admin(self):
        notifier = EmailNotifier(self.config())

        with patch.object(notifier, "_deliver", MagicMock()) as deliver:
            sent = await notifier.send_login_notification("Asha", "asha@x.io", LOGIN_TIME, "10.0.0.1")

        assert sent
        msg, recipient = deliver.call_args.args
        assert recipient == "admin@x.io"
        assert msg["Subject"] == "User Login: Asha"

    @pytest.mark.asyncio
    async def test_smtp_failure_is_reported_not_raised(self):
        notifier = EmailNotifier(self.config())
        failure = ExternalServiceError("smtp", "connection refused")

        with patch.object(notifier, "_deliver", MagicMock(side_effect=failure)):
            assert not await notifier.send_login_notification("Asha", "asha@x.io", LOGIN_TIME)

    def test_message_escapes_html(self):
        msg = build_login_message("bot@x.io", "admin@x.io", "<b>Asha</b>", "asha@x.io", LOGIN_TIME)

        html = msg.get_payload()[1].get_payload(decode=True).decode()
        assert "&lt;b&gt;Asha&lt;/b&gt;" in html


class TestChatHistory:
    @pytest.mark.asyncio
    async def test_append_exchange_starts_and_extends_conversation(self, store):
        repo = ChatHistoryRepository(store)

        history = await repo.append_exchange(None, "What is a closure?", "A function with its scope.")
        history = await repo.append_exchange(history.id, "Example?", "A counter factory.")

        assert [m.role for m in history.messages] == ["user", "assistant", "user", "assistant"]
        assert history.title == "What is a closure?"
        assert len(await repo.list()) == 1

    @pytest.mark.asyncio
    async def test_save_upserts_and_delete(self, store):
        repo = ChatHistoryRepository(store)
        await repo.save(ChatHistory(id="c1", title="First"))
        await repo.save(ChatHistory(id="c1", title="Renamed"))
        await repo.save(ChatHistory(id="c2"))

        assert [h.title for h in await repo.list()] == ["Renamed", "New conversation"]
        assert await repo.delete("c1")
        assert not await repo.delete("c1")
        assert await repo.get("c1") is None

    @pytest.mark.asyncio
    async def test_concurrent_exchanges_on_one_conversation_are_not_lost(self):
        store = SQLAlchemyStore("sqlite://")
        repo = ChatHistoryRepository(store)
        await repo.append_exchange("h1", "Seed", "Ok")

        await asyncio.gather(*(repo.append_exchange("h1", f"Q{i}", f"A{i}") for i in range(5)))

        history = await repo.get("h1")
        assert len(history.messages) == 12
        assert {m.content for m in history.messages if m.role == "user"} == {"Seed", "Q0", "Q1", "Q2", "Q3", "Q4"}
        await store.close()
