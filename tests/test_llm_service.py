"""Tests for the LLM service wrapper with the provider client mocked out."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from tenacity import wait_none

from config import settings
from engine.flow import FlowError
from engine.scam_detector import detect_scam_message
from schemas.request import ScamCheckRequest
from services import llm_service
from services.llm_service import LLMError, chat_completion, chat_completion_json


def _reply(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def create():
    with patch.object(llm_service._client.chat.completions, "create", new_callable=AsyncMock) as mock, \
            patch("services.llm_service.wait_exponential", return_value=wait_none()):
        yield mock


@pytest.fixture
def attempts(monkeypatch):
    def _set(n: int) -> None:
        monkeypatch.setattr(settings, "llm_max_attempts", n)

    return _set


class TestAttemptBudget:
    def test_default_budget_makes_one_call(self, create, attempts):
        attempts(1)
        create.side_effect = RuntimeError("connection reset")
        with pytest.raises(RuntimeError):
            asyncio.run(chat_completion("sys", "hello"))
        assert create.await_count == 1

    def test_budget_of_two_retries_once(self, create, attempts):
        attempts(2)
        create.side_effect = RuntimeError("connection reset")
        with pytest.raises(RuntimeError):
            asyncio.run(chat_completion("sys", "hello"))
        assert create.await_count == 2

    def test_second_attempt_can_succeed(self, create, attempts):
        attempts(2)
        create.side_effect = [RuntimeError("connection reset"), _reply("  ok  ")]
        assert asyncio.run(chat_completion("sys", "hello")) == "ok"
        assert create.await_count == 2

    def test_request_shape(self, create, attempts):
        attempts(1)
        create.return_value = _reply('{"a": 1}')
        assert asyncio.run(chat_completion_json("sys", "hello", temperature=0.0)) == {"a": 1}
        kwargs = create.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hello"},
        ]


class TestUnusableReplies:
    @pytest.mark.parametrize("content", [None, "not json", "[1, 2]"])
    def test_rejected_by_json_helper(self, create, attempts, content):
        attempts(1)
        create.return_value = _reply(content)
        with pytest.raises(LLMError):
            asyncio.run(chat_completion_json("sys", "hello"))

    @pytest.mark.parametrize("content", [None, "not json", "[1, 2]"])
    def test_reach_flow_caller_as_flow_error(self, create, attempts, content):
        attempts(1)
        create.return_value = _reply(content)
        with pytest.raises(FlowError) as exc_info:
            asyncio.run(detect_scam_message(ScamCheckRequest(message="Are we still meeting at noon?")))
        assert exc_info.value.flow_name == "detectScamMessageFlow"
        assert isinstance(exc_info.value.__cause__, LLMError)
        assert create.await_count == 1
