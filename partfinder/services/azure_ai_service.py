"""
Azure AI Service - Generation through an Azure AI Foundry agent (GENERATION_PROVIDER=azure)
"""
import logging
from typing import Optional

from azure.ai.agents.models import ListSortOrder
from azure.ai.projects import AIProjectClient
from azure.identity import DefaultAzureCredential

from partfinder.errors import ConfigurationError, GenerationError
from partfinder.models import Prompt
from partfinder.settings import Settings

logger = logging.getLogger(__name__)


class AzureAIService:
    def __init__(self, settings: Settings, project: Optional[AIProjectClient] = None):
        if not settings.azure_endpoint:
            raise ConfigurationError.missing("AZURE_AI_API_ENDPOINT")
        if not settings.azure_agent:
            raise ConfigurationError.missing("AZURE_AI_AGENT")

        self.project = project or AIProjectClient(
            credential=DefaultAzureCredential(),
            endpoint=settings.azure_endpoint,
        )
        self.agent_name = settings.azure_agent
        self._agent = None

    @property
    def agent(self):
        if self._agent is None:
            self._agent = self.project.agents.get_agent(self.agent_name)
        return self._agent

    @staticmethod
    def _get_assistant_message_text(messages) -> Optional[str]:
        """
        Return the text of the last assistant message, or None if there is none.
        """
        for message in reversed(list(messages)):
            if getattr(message, "role", None) != "assistant":
                continue
            text_messages = getattr(message, "text_messages", None)
            if not text_messages:
                continue
            # The SDK stores the text value under `.text.value`
            text_val = getattr(getattr(text_messages[-1], "text", None), "value", None)
            if text_val and text_val.strip():
                return text_val.strip()
        return None

    def generate(self, prompt: Prompt) -> str:
        """
        Run the prompt on a fresh agent thread and return the assistant's reply.

        Raises:
            GenerationError: the run failed or produced no assistant text
        """
        try:
            thread = self.project.agents.threads.create()
            try:
                self.project.agents.messages.create(thread_id=thread.id, role="system", content=prompt.system)
            except Exception as e:
                # Some agents only accept user messages; their instructions live server-side
                logger.debug("System message rejected by agent %s: %s", self.agent_name, e)
            self.project.agents.messages.create(thread_id=thread.id, role="user", content=prompt.user)

            run = self.project.agents.runs.create_and_process(
                thread_id=thread.id,
                agent_id=self.agent.id,
            )
            if getattr(run, "status", None) == "failed":
                error_msg = getattr(run, "last_error", None) or "Run failed"
                raise GenerationError(f"API Error: {error_msg}")

            messages = self.project.agents.messages.list(thread_id=thread.id, order=ListSortOrder.ASCENDING)
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Azure agent request failed: %s", e)
            raise GenerationError(f"API Error: {e}") from e

        text = self._get_assistant_message_text(messages)
        if not text:
            raise GenerationError("Empty response from model")
        return text
