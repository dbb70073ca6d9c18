"""Vertex AI (Gemini) LLM provider.

Uses langchain-google-vertexai with application default credentials, so
the only thing that has to be configured is the GCP project.
"""

from langchain_core.language_models import BaseChatModel
from langchain_google_vertexai import ChatVertexAI

from app.config import Settings
from app.llm.provider import LLMProvider


class VertexAIProvider(LLMProvider):
    def __init__(self, settings: Settings) -> None:
        self._model_name = settings.vertex_model
        self._project = settings.gcp_project
        self._location = settings.gcp_region
        self._max_tokens = settings.llm_max_tokens

    def get_chat_model(self) -> BaseChatModel:
        return ChatVertexAI(
            model_name=self._model_name,
            project=self._project,
            location=self._location,
            temperature=0,
            max_output_tokens=self._max_tokens,
        )

    def get_model_name(self) -> str:
        return f"vertex_ai/{self._model_name}"

    def is_configured(self) -> bool:
        return bool(self._project)

    def missing_credential_hint(self) -> str:
        return "GCP project is not set (DATACHATTER_GCP_PROJECT)."
