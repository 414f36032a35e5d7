"""
AI Service - Handles OpenAI API calls that generate alternatives and comparisons
"""
import logging
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from partfinder.errors import ConfigurationError, GenerationError
from partfinder.models import Prompt
from partfinder.services.azure_ai_service import AzureAIService
from partfinder.settings import Settings

logger = logging.getLogger(__name__)


class AIService:
    """Generation client backed by the OpenAI Responses API."""

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        """
        Initialize OpenAI client

        Raises:
            ConfigurationError: OPENAI_API_KEY is not set and no client was given
        """
        if client is None:
            if not settings.openai_api_key:
                raise ConfigurationError.missing("OPENAI_API_KEY")
            client = OpenAI(api_key=settings.openai_api_key, timeout=settings.generation_timeout)
        self.client = client
        self.model = settings.openai_model
        self.web_search = settings.openai_web_search

    def generate(self, prompt: Prompt) -> str:
        """
        Send the prompt and return the generated markdown.

        Args:
            prompt: System and user messages plus output bounds

        Returns:
            Generated markdown text

        Raises:
            GenerationError: the API call failed or returned no text
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "instructions": prompt.system,
            "input": prompt.user,
            "max_output_tokens": prompt.max_tokens,
        }
        if prompt.temperature is not None:
            request["temperature"] = prompt.temperature
        if self.web_search:
            request["tools"] = [{"type": "web_search"}]

        try:
            resp = self.client.responses.create(**request)
        except OpenAIError as e:
            message = getattr(e, "message", None) or str(e)
            logger.error("OpenAI request failed: %s", message)
            raise GenerationError(f"API Error: {message}") from e

        text = (getattr(resp, "output_text", None) or "").strip()
        if not text:
            raise GenerationError("Empty response from model")

        logger.info("Generated %d characters with %s", len(text), self.model)
        return text


def build_generation_client(settings: Settings):
    """
    Create the generation client selected by GENERATION_PROVIDER.

    Raises:
        ConfigurationError: the provider is unknown or its credentials are missing
    """
    if settings.generation_provider == "azure":
        return AzureAIService(settings)
    if settings.generation_provider == "openai":
        return AIService(settings)
    raise ConfigurationError(f"Unknown GENERATION_PROVIDER '{settings.generation_provider}'")
