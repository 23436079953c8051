"""Tests for the HTTP-backed oracle and its dataclasses."""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest
import requests

from editwise.config import LLMConfig
from editwise.errors import OracleCancelledError, OracleFailureError, OracleUnavailableError
from editwise.llm_client import LLMClient, LLMRequest, LLMResponse, create_llm_client


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_session(json_data=None, exc=None) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    if exc is not None:
        session.post.side_effect = exc
    else:
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = json_data
        session.post.return_value = response
    return session


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_url="http://localhost:8000/", model="test-model", api_key="secret")


class TestLLMRequest:
    def test_basic_creation(self):
        request = LLMRequest(content="Test prompt")
        assert request.content == "Test prompt"
        assert request.max_tokens is None
        assert request.temperature is None
        assert request.abort_signal is None

    def test_messages_include_system_prompt(self):
        request = LLMRequest(content="hi", system_prompt="be brief")
        assert request.messages() == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ]

    def test_messages_without_system_prompt(self):
        assert LLMRequest(content="hi").messages() == [{"role": "user", "content": "hi"}]


def test_response_defaults():
    response = LLMResponse(
        content="x", success=True, llm_used="m", duration_seconds=0.1, input_tokens=1
    )
    assert response.error is None


class TestPayload:
    def test_request_values_override_config(self, llm_config):
        client = LLMClient(llm_config, session=make_session())
        payload = client.build_payload(
            LLMRequest(content="p", max_tokens=10, temperature=0.0, top_p=1.0)
        )
        assert payload["model"] == "test-model"
        assert payload["max_tokens"] == 10
        assert payload["temperature"] == 0.0
        assert payload["top_p"] == 1.0
        assert payload["stream"] is False
        assert "response_format" not in payload

    def test_config_defaults_fill_in(self, llm_config):
        payload = LLMClient(llm_config).build_payload(LLMRequest(content="p"))
        assert payload["max_tokens"] == llm_config.max_tokens
        assert payload["temperature"] == llm_config.temperature
        assert "top_p" not in payload

    def test_structured_output(self, llm_config):
        client = LLMClient(llm_config)
        schema = {"name": "x", "schema": {"type": "object"}}
        payload = client.build_payload(
            LLMRequest(content="p", structured_output={"json_schema": schema})
        )
        assert payload["response_format"] == {"type": "json_schema", "json_schema": schema}

        payload = client.build_payload(LLMRequest(content="p", structured_output={"json": True}))
        assert payload["response_format"] == {"type": "json_object"}


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success(self, llm_config):
        session = make_session(completion('{"ok": true}'))
        client = LLMClient(llm_config, session=session)

        response = await client.generate(LLMRequest(content="abcdefgh"))

        assert response.success
        assert response.content == '{"ok": true}'
        assert response.llm_used == "test-model"
        assert response.input_tokens == 2
        url = session.post.call_args.args[0]
        assert url == "http://localhost:8000/v1/chat/completions"
        headers = session.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"
        assert session.post.call_args.kwargs["timeout"] == llm_config.timeout_seconds

    @pytest.mark.asyncio
    async def test_not_configured(self):
        client = LLMClient(LLMConfig(), session=make_session())
        with pytest.raises(OracleUnavailableError):
            await client.generate(LLMRequest(content="p"))

    @pytest.mark.asyncio
    async def test_transport_error(self, llm_config):
        client = LLMClient(llm_config, session=make_session(exc=requests.ConnectionError("refused")))
        with pytest.raises(OracleUnavailableError):
            await client.generate(LLMRequest(content="p"))

    @pytest.mark.asyncio
    async def test_timeout(self, llm_config):
        client = LLMClient(llm_config, session=make_session(exc=requests.Timeout()))
        with pytest.raises(OracleUnavailableError, match="timed out"):
            await client.generate(LLMRequest(content="p"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [{}, {"choices": []}, completion("   ")])
    async def test_empty_or_invalid_answer(self, llm_config, data):
        client = LLMClient(llm_config, session=make_session(data))
        with pytest.raises(OracleFailureError):
            await client.generate(LLMRequest(content="p"))

    @pytest.mark.asyncio
    async def test_already_aborted(self, llm_config):
        session = make_session(completion("x"))
        abort = asyncio.Event()
        abort.set()
        with pytest.raises(OracleCancelledError):
            await LLMClient(llm_config, session=session).generate(
                LLMRequest(content="p", abort_signal=abort)
            )
        session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_abort_while_waiting(self, llm_config):
        release = threading.Event()
        session = make_session(completion("late"))
        original_post = session.post.return_value

        def slow_post(*args, **kwargs):
            release.wait(timeout=5)
            return original_post

        session.post.side_effect = slow_post
        abort = asyncio.Event()
        client = LLMClient(llm_config, session=session)

        async def trigger():
            await asyncio.sleep(0.05)
            abort.set()

        try:
            with pytest.raises(OracleCancelledError):
                await asyncio.gather(
                    client.generate(LLMRequest(content="p", abort_signal=abort)), trigger()
                )
        finally:
            release.set()


def test_create_llm_client_uses_given_config(llm_config):
    client = create_llm_client(llm_config)
    assert isinstance(client, LLMClient)
    assert client.config is llm_config
