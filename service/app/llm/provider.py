"""Model-agnostic LLM provider abstraction.

Swapping from Claude to Gemini is a config change (DATACHATTER_LLM_PROVIDER),
no code changes needed. Every provider returns a LangChain BaseChatModel,
so the LLM client binds tools and parses tool calls the same way for all
of them.
"""

from abc import ABC, abstractmethod

from langchain_core.language_models import BaseChatModel

from app.config import Settings


class LLMProvider(ABC):
    """Interface that every LLM backend must implement."""

    @abstractmethod
    def get_chat_model(self) -> BaseChatModel:
        """Return a LangChain chat model ready for inference."""

    @abstractmethod
    def get_model_name(self) -> str:
        """Human-readable model identifier for logging."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True if the credentials this backend needs are present."""

    def missing_credential_hint(self) -> str:
        return f"{self.get_model_name()} is not configured."


def create_provider(settings: Settings) -> LLMProvider:
    """Factory: instantiate the configured LLM provider."""
    if settings.llm_provider == "anthropic":
        from app.llm.anthropic import AnthropicProvider

        return AnthropicProvider(settings)

    if settings.llm_provider == "openrouter":
        from app.llm.openrouter import OpenRouterProvider

        return OpenRouterProvider(settings)

    if settings.llm_provider == "vertex_ai":
        from app.llm.vertex_ai import VertexAIProvider

        return VertexAIProvider(settings)

    raise ValueError(
        f"Unknown LLM provider: {settings.llm_provider!r}. "
        "Must be 'anthropic', 'openrouter' or 'vertex_ai'."
    )
