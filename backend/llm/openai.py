"""OpenAI LLM provider."""

import logging
import os
from typing import Any

import httpx

from config import DEFAULT_MODEL
from llm.base import BaseLLM, ModelTurn, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAILLM(BaseLLM):
    """OpenAI LLM provider using the chat completions API with function tools."""

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        api_url: str = OPENAI_CHAT_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the OpenAI LLM.

        Args:
            model: Model name to use. Defaults to LLM_MODEL env var or gpt-5.
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            api_url: Chat completions endpoint.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self._model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

        if not self._api_key:
            raise ValueError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
            )

        logger.info("Initialized OpenAI LLM with model: %s", self._model)

    @property
    def model_name(self) -> str:
        """Return the model name being used."""
        return self._model

    def _build_payload(
        self,
        messages: list[dict[str, Any]],
        tools: list[ToolDefinition],
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
        }
        if tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    },
                }
                for tool in tools
            ]
        return payload

    async def generate(
        self,
        messages: list[dict[str, Any]],
        tools: list[ToolDefinition],
    ) -> ModelTurn:
        """Run one chat completion step.

        Raises:
            httpx.HTTPStatusError: If the API rejects the request.
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = self._build_payload(messages, tools)

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                self._api_url,
                headers=headers,
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()

        return self._parse_turn(data)

    @staticmethod
    def _parse_turn(data: dict[str, Any]) -> ModelTurn:
        message = data["choices"][0]["message"]
        text = message.get("content") or ""

        function_calls = [
            call
            for call in message.get("tool_calls") or []
            if call.get("type", "function") == "function"
        ]
        tool_calls = [
            ToolCall(
                id=call["id"],
                name=call["function"]["name"],
                arguments=call["function"].get("arguments") or "{}",
            )
            for call in function_calls
        ]

        # Every tool_call kept in history must be answered by a tool message
        assistant_message: dict[str, Any] = {"role": "assistant", "content": message.get("content")}
        if function_calls:
            assistant_message["tool_calls"] = function_calls

        logger.debug("Model step returned %d tool call(s)", len(tool_calls))
        return ModelTurn(text=text, tool_calls=tool_calls, message=assistant_message)
