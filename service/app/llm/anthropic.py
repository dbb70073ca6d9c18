"""Anthropic LLM provider (Claude via the Messages API).

The default backend. langchain-anthropic sends the system prompt, the user
message and the bound tool definitions as a single Messages API request
and returns tool_use blocks as ``AIMessage.tool_calls``.
"""

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel

from app.config import Settings
from app.llm.provider import LLMProvider


class AnthropicProvider(LLMProvider):
    def __init__(self, settings: Settings) -> None:
        self._model_name = settings.anthropic_model
        self._api_key = settings.anthropic_api_key
        self._max_tokens = settings.llm_max_tokens

    def get_chat_model(self) -> BaseChatModel:
        return ChatAnthropic(
            model=self._model_name,
            api_key=self._api_key,
            max_tokens=self._max_tokens,
            temperature=0,
        )

    def get_model_name(self) -> str:
        return f"anthropic/{self._model_name}"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def missing_credential_hint(self) -> str:
        return (
            "Anthropic API key is not set. Please set your Anthropic API key: "
            "export DATACHATTER_ANTHROPIC_API_KEY=your_api_key_here"
        )
