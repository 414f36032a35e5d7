"""
Finder Service - Runs one request end to end:
validate input -> check configuration -> aggregate context -> build prompt ->
generate -> render.
"""
import logging
from typing import Any, Callable, Dict, Optional

from partfinder.errors import InputError
from partfinder.models import AggregatedContext, GeneratedAnswer, TemplateKind
from partfinder.services.ai_service import build_generation_client
from partfinder.services.answer_logger import log_answer
from partfinder.services.context_service import ContextAggregator
from partfinder.services.prompt_service import PromptBuilder
from partfinder.services.render_service import render_markdown
from partfinder.settings import Settings

logger = logging.getLogger(__name__)


def require_part_number(value: Any, message: str) -> str:
    """Return the stripped identifier or raise InputError if it is missing/empty."""
    if not isinstance(value, str) or not value.strip():
        raise InputError(message)
    return value.strip()


class PartFinderService:
    def __init__(
        self,
        settings: Settings,
        aggregator: ContextAggregator,
        prompt_builder: Optional[PromptBuilder] = None,
        generator_factory: Optional[Callable[[Settings], Any]] = None,
    ):
        self.settings = settings
        self.aggregator = aggregator
        self.prompt_builder = prompt_builder or PromptBuilder(settings)
        self._generator_factory = generator_factory or build_generation_client
        self._generator = None

    def get_generator(self):
        # Raises ConfigurationError before any outbound call when credentials are missing
        if self._generator is None:
            self._generator = self._generator_factory(self.settings)
        return self._generator

    def _generate(self, parts, context: AggregatedContext, kind: TemplateKind, generator) -> GeneratedAnswer:
        prompt = self.prompt_builder.build(parts, context, kind)
        logger.debug("Prompt for %s (%d chars): %s", parts, len(prompt.user), prompt.user[:200])

        text = generator.generate(prompt)
        html = render_markdown(text, comparison=kind == TemplateKind.COMPARISON)

        log_answer(self.settings.answer_log_dir, kind.value, list(parts), text, context.to_dict())
        return GeneratedAnswer(markdown=text, html=html)

    def find_alternatives(self, part_number: Any) -> Dict[str, Any]:
        """
        Suggest alternatives for one part.

        Returns:
            {alternatives, raw, packageInfoList, searchResults, context}
        """
        part_number = require_part_number(part_number, "Part number is required")
        generator = self.get_generator()

        logger.info("Finding alternatives for %s", part_number)
        context = self.aggregator.aggregate_alternatives(part_number)
        answer = self._generate([part_number], context, TemplateKind.ALTERNATIVES, generator)

        part_context = context.part(0)
        return {
            "alternatives": answer.html,
            "raw": answer.markdown,
            "packageInfoList": [fields.to_dict() for fields in part_context.distributor_fields],
            "searchResults": [result.link for result in part_context.search_results],
            "context": context.to_dict(),
        }

    def compare(self, part_a: Any, part_b: Any) -> Dict[str, Any]:
        """
        Compare two parts.

        Returns:
            {html, raw, partA, partB, similarities, differences, sources, context}
        """
        message = "Both partA and partB are required"
        part_a = require_part_number(part_a, message)
        part_b = require_part_number(part_b, message)
        generator = self.get_generator()

        logger.info("Comparing %s with %s", part_a, part_b)
        context = self.aggregator.aggregate_comparison(part_a, part_b)
        answer = self._generate([part_a, part_b], context, TemplateKind.COMPARISON, generator)

        side_a, side_b = context.part(0), context.part(1)
        comparison = context.comparison.to_dict() if context.comparison else {"similarities": [], "differences": []}
        return {
            "html": answer.html,
            "raw": answer.markdown,
            "partA": side_a.part_record.to_dict() if side_a.part_record else None,
            "partB": side_b.part_record.to_dict() if side_b.part_record else None,
            "similarities": comparison["similarities"],
            "differences": comparison["differences"],
            "sources": {"partA": side_a.source.value, "partB": side_b.source.value},
            "context": context.to_dict(),
        }
