"""
Prompt Service - Render an AggregatedContext into the prompt for the generation call
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence

from partfinder import config
from partfinder.models import (
    NOT_FOUND,
    AggregatedContext,
    ContextSource,
    PartContext,
    Prompt,
    SpecComparison,
    TemplateKind,
)
from partfinder.settings import Settings

UNAVAILABLE_LABELS = {
    "distributor-search": "distributor search",
    "distributor-pages": "distributor product pages",
    "datasheet-search": "datasheet search",
    "datasheet": "datasheet text",
    "parts-database": "parts database",
}


@dataclass(frozen=True)
class PromptPolicy:
    """One prompt variant: system messages plus the accuracy instruction block."""

    name: str
    alternatives_system: str
    compare_system: str
    accuracy: str


POLICIES: Dict[str, PromptPolicy] = {
    "standard": PromptPolicy(
        name="standard",
        alternatives_system=config.SYSTEM_PROMPT_ALTERNATIVES,
        compare_system=config.SYSTEM_PROMPT_COMPARE,
        accuracy=config.ACCURACY_POLICY,
    ),
    "strict": PromptPolicy(
        name="strict",
        alternatives_system=config.SYSTEM_PROMPT_ALTERNATIVES_STRICT,
        compare_system=config.SYSTEM_PROMPT_COMPARE_STRICT,
        accuracy=config.ACCURACY_POLICY_STRICT,
    ),
}


def get_policy(name: str) -> PromptPolicy:
    return POLICIES.get((name or "").lower(), POLICIES["standard"])


def _render_part(context: PartContext) -> str:
    lines: List[str] = [f"### {context.part_number}"]

    if context.part_record is not None:
        record = context.part_record
        lines.append("")
        lines.append(f"Parts database record (manufacturer: {record.manufacturer}, MPN: {record.mpn}):")
        if record.specs:
            for name, value in record.specs.items():
                lines.append(f"- {name}: {value or NOT_FOUND}")
        else:
            lines.append("[No attributes listed]")
        if record.datasheet_url:
            lines.append(f"Datasheet: {record.datasheet_url}")

    if context.source == ContextSource.WEB_SEARCH:
        lines.append("")
        lines.append("Search results:")
        if context.search_results:
            for idx, result in enumerate(context.search_results, 1):
                lines.append(f"{idx}. {result.title} - {result.link}")
                if result.snippet:
                    lines.append(f"   {result.snippet}")
        else:
            lines.append("[No search results found]")

        lines.append("")
        lines.append("Distributor fields (N/A = not found on the page):")
        if context.distributor_fields:
            for field_set in context.distributor_fields:
                lines.append(f"Source: {field_set.source_url}")
                for name, value in field_set.fields.items():
                    status = "unconfirmed" if value == NOT_FOUND else "confirmed"
                    lines.append(f"- {name}: {value} ({status})")
        else:
            lines.append("[No package info found]")

    if context.datasheets:
        for excerpt in context.datasheets:
            lines.append("")
            lines.append(f"Datasheet excerpt (source: {excerpt.source_url}):")
            lines.append('"""')
            lines.append(excerpt.text)
            lines.append('"""')
    elif context.datasheet_results:
        lines.append("")
        lines.append("Datasheet links (text could not be extracted):")
        for result in context.datasheet_results:
            lines.append(f"- {result.link}")

    if context.unavailable:
        labels = ", ".join(UNAVAILABLE_LABELS.get(name, name) for name in context.unavailable)
        lines.append("")
        lines.append(f"Could not be confirmed from: {labels}. Treat related details as unverified.")

    if not context.has_data:
        lines.append("")
        lines.append(f"No reference data was found for {context.part_number}; its details cannot be confirmed.")

    return "\n".join(lines)


def _render_comparison(comparison: SpecComparison) -> str:
    lines = ["### Attribute comparison from the parts database", "", "Matching attributes:"]
    if comparison.similarities:
        for item in comparison.similarities:
            lines.append(f"- {item['attribute']}: {item['value']}")
    else:
        lines.append("[None]")
    lines.append("")
    lines.append("Differing attributes (part A / part B):")
    if comparison.differences:
        for item in comparison.differences:
            lines.append(f"- {item['attribute']}: {item['partA']} / {item['partB']}")
    else:
        lines.append("[None]")
    return "\n".join(lines)


def render_context(context: AggregatedContext) -> str:
    sections = [_render_part(part) for part in context.parts]
    if context.comparison is not None:
        sections.append(_render_comparison(context.comparison))
    return "\n\n".join(sections)


class PromptBuilder:
    def __init__(self, settings: Settings):
        self.policy = get_policy(settings.prompt_policy)
        self.alternatives_max_tokens = settings.alternatives_max_tokens
        self.compare_max_tokens = settings.compare_max_tokens
        self.compare_temperature = settings.compare_temperature

    def build(self, parts: Sequence[str], context: AggregatedContext, kind: TemplateKind) -> Prompt:
        """
        Fill the template for `kind` with the part numbers and rendered context.

        Args:
            parts: The part number(s) as the user typed them
            context: Aggregated reference data
            kind: TemplateKind.ALTERNATIVES (one part) or COMPARISON (two parts)

        Returns:
            Prompt with system and user messages
        """
        rendered = render_context(context)

        if kind == TemplateKind.ALTERNATIVES:
            if len(parts) != 1:
                raise ValueError("The alternatives template takes exactly one part number")
            user = config.ALTERNATIVES_USER_TEMPLATE.format(
                part_number=parts[0],
                context=rendered,
                ranking=" > ".join(config.RANKING_PRIORITY),
                accuracy=self.policy.accuracy,
            )
            return Prompt(
                system=self.policy.alternatives_system,
                user=user,
                max_tokens=self.alternatives_max_tokens,
            )

        if len(parts) != 2:
            raise ValueError("The comparison template takes exactly two part numbers")
        user = config.COMPARE_USER_TEMPLATE.format(
            part_a=parts[0],
            part_b=parts[1],
            context=rendered,
            accuracy=self.policy.accuracy,
        )
        return Prompt(
            system=self.policy.compare_system,
            user=user,
            max_tokens=self.compare_max_tokens,
            temperature=self.compare_temperature,
        )
