"""OpenRouter LLM provider (Claude via OpenAI-compatible API).

OpenRouter exposes an OpenAI-compatible endpoint, so we use
langchain-openai's ChatOpenAI pointed at openrouter.ai. Tool definitions
in Anthropic's ``input_schema`` form are converted by ``bind_tools``.
"""

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.config import Settings
from app.llm.provider import LLMProvider

_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(LLMProvider):
    def __init__(self, settings: Settings) -> None:
        self._model_name = settings.openrouter_model
        self._api_key = settings.openrouter_api_key
        self._max_tokens = settings.llm_max_tokens

    def get_chat_model(self) -> BaseChatModel:
        return ChatOpenAI(
            model=self._model_name,
            openai_api_key=self._api_key,
            openai_api_base=_OPENROUTER_BASE_URL,
            temperature=0,
            max_tokens=self._max_tokens,
        )

    def get_model_name(self) -> str:
        return f"openrouter/{self._model_name}"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def missing_credential_hint(self) -> str:
        return "OpenRouter API key is not set (DATACHATTER_OPENROUTER_API_KEY)."
