"""LLM providers for tool-calling generation."""

from config import DEFAULT_PROVIDER
from llm.base import BaseLLM, ModelTurn, ToolCall, ToolDefinition, tool_result_message
from llm.openai import OpenAILLM

# Providers the agent can be driven by, keyed by LLM_PROVIDER value
_PROVIDERS: dict[str, type[BaseLLM]] = {
    "openai": OpenAILLM,
}


def providers() -> list[str]:
    return sorted(_PROVIDERS)


def get_llm(provider: str = DEFAULT_PROVIDER, **kwargs) -> BaseLLM:
    """Build the tool-calling model for ``provider``.

    Args:
        provider: Registered provider name, usually from LLM_PROVIDER.
        **kwargs: Passed to the provider, e.g. ``model``.

    Raises:
        ValueError: If the provider is unknown or missing its credentials.
    """
    llm_class = _PROVIDERS.get(provider.lower())
    if llm_class is None:
        raise ValueError(
            f"Unknown LLM provider: {provider}. Available: {', '.join(providers())}"
        )
    return llm_class(**kwargs)


def register_llm(name: str, llm_class: type[BaseLLM]) -> None:
    """Make ``llm_class`` selectable through LLM_PROVIDER=``name``."""
    _PROVIDERS[name.lower()] = llm_class


__all__ = [
    "BaseLLM",
    "ModelTurn",
    "OpenAILLM",
    "ToolCall",
    "ToolDefinition",
    "get_llm",
    "providers",
    "register_llm",
    "tool_result_message",
]
