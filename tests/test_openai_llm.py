import asyncio
import json

import httpx
import pytest

from fakes import ScriptedLLM
from llm import OpenAILLM, get_llm, providers, register_llm
from llm.base import ToolDefinition

TOOLS = [
    ToolDefinition(
        name="read_file",
        description="Read a file",
        parameters={"type": "object", "properties": {"path": {"type": "string"}}},
    )
]


def make_llm(handler):
    return OpenAILLM(model="gpt-5", api_key="sk-test", transport=httpx.MockTransport(handler))


def test_generate_parses_tool_calls():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "choices": [
                    {
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {
                                        "name": "read_file",
                                        "arguments": '{"path": "README.md"}',
                                    },
                                }
                            ],
                        }
                    }
                ]
            },
        )

    turn = asyncio.run(make_llm(handler).generate([{"role": "user", "content": "hi"}], TOOLS))

    assert turn.text == ""
    assert len(turn.tool_calls) == 1
    assert turn.tool_calls[0].name == "read_file"
    assert json.loads(turn.tool_calls[0].arguments) == {"path": "README.md"}
    assert turn.message["tool_calls"][0]["id"] == "call_1"

    payload = json.loads(requests[0].content)
    assert payload["model"] == "gpt-5"
    assert payload["tools"][0]["function"]["name"] == "read_file"
    assert requests[0].headers["Authorization"] == "Bearer sk-test"


def test_generate_plain_answer():
    def handler(request):
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": "All done."}}]},
        )

    turn = asyncio.run(make_llm(handler).generate([], []))

    assert turn.text == "All done."
    assert turn.tool_calls == []
    assert turn.message == {"role": "assistant", "content": "All done."}


def test_generate_omits_tools_when_none():
    payloads = []

    def handler(request):
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    asyncio.run(make_llm(handler).generate([], []))

    assert "tools" not in payloads[0]


def test_generate_raises_on_http_error():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(make_llm(handler).generate([], TOOLS))


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        OpenAILLM()


def test_model_defaults_to_env(monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "gpt-5-mini")

    assert OpenAILLM(api_key="sk-test").model_name == "gpt-5-mini"


def test_get_llm_unknown_provider():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        get_llm("nope")


def test_registered_provider_is_selectable(monkeypatch):
    class LocalLLM(ScriptedLLM):
        def __init__(self, model=None):
            super().__init__([])
            self.model = model

    monkeypatch.setattr("llm._PROVIDERS", {"openai": OpenAILLM})
    register_llm("Local", LocalLLM)

    llm = get_llm("local", model="tiny")

    assert isinstance(llm, LocalLLM)
    assert llm.model == "tiny"
    assert providers() == ["local", "openai"]


def test_non_function_tool_calls_are_dropped_from_history():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "choices": [
                    {
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {"id": "call_x", "type": "custom", "custom": {"name": "grep"}},
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {"name": "list_files", "arguments": "{}"},
                                },
                            ],
                        }
                    }
                ]
            },
        )

    turn = asyncio.run(make_llm(handler).generate([], TOOLS))

    assert [call.id for call in turn.tool_calls] == ["call_1"]
    assert [call["id"] for call in turn.message["tool_calls"]] == ["call_1"]


def test_only_unsupported_tool_calls_leave_plain_message():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "choices": [
                    {
                        "message": {
                            "content": "Thinking.",
                            "tool_calls": [{"id": "call_x", "type": "custom", "custom": {}}],
                        }
                    }
                ]
            },
        )

    turn = asyncio.run(make_llm(handler).generate([], TOOLS))

    assert turn.tool_calls == []
    assert turn.message == {"role": "assistant", "content": "Thinking."}
