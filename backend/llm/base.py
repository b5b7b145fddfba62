"""Base LLM protocol for tool-calling providers."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolDefinition:
    """A tool offered to the model: name, description and JSON schema."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass
class ToolCall:
    """One tool invocation requested by the model."""

    id: str
    name: str
    arguments: str


@dataclass
class ModelTurn:
    """Result of a single model step.

    ``message`` is the assistant message to append to the conversation before
    any tool results, in OpenAI chat format.
    """

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    message: dict[str, Any] = field(default_factory=dict)


def tool_result_message(call: ToolCall, result: dict[str, Any]) -> dict[str, Any]:
    """Build the conversation message carrying a tool's result back to the model."""
    return {
        "role": "tool",
        "tool_call_id": call.id,
        "content": json.dumps(result, default=str),
    }


class BaseLLM(ABC):
    """Abstract base class for LLM providers.

    Conversations are lists of OpenAI chat-format messages. Implement this to
    add support for new providers (Anthropic, local, etc.).

    Example:
        class AnthropicLLM(BaseLLM):
            def __init__(self, model: str = "claude-sonnet-4-5"):
                self.model = model
                self.client = AsyncAnthropic()

            async def generate(self, messages, tools) -> ModelTurn:
                # Translate messages and tools, call the API, map tool_use blocks
                ...
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model name being used."""

    @abstractmethod
    async def generate(
        self,
        messages: list[dict[str, Any]],
        tools: list[ToolDefinition],
    ) -> ModelTurn:
        """Run one model step.

        Args:
            messages: Conversation so far.
            tools: Tools the model may call in this step.

        Returns:
            ModelTurn with the text answer and any requested tool calls.
        """
