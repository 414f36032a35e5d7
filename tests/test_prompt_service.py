from dataclasses import replace

import pytest

from partfinder import config
from partfinder.models import (
    AggregatedContext,
    ContextSource,
    DatasheetExcerpt,
    DistributorFieldSet,
    PartContext,
    PartRecord,
    SearchResult,
    SpecComparison,
    TemplateKind,
)
from partfinder.services.prompt_service import PromptBuilder, get_policy, render_context


def lm317_context():
    part = PartContext(
        part_number="LM317",
        search_results=[SearchResult("LM317T Digi-Key", "https://www.digikey.com/p/lm317", "Linear regulator")],
        distributor_fields=[DistributorFieldSet(
            "https://www.digikey.com/p/lm317",
            {"Package / Case": "TO-220-3", "Unit Price": "N/A"},
        )],
        datasheets=[DatasheetExcerpt("https://www.ti.com/lm317.pdf", "Adjustable output from 1.25 V")],
    )
    return AggregatedContext(kind=TemplateKind.ALTERNATIVES, parts=[part])


def test_alternatives_prompt_contains_part_and_reference_data(settings):
    prompt = PromptBuilder(settings).build(["LM317"], lm317_context(), TemplateKind.ALTERNATIVES)

    assert "LM317" in prompt.user
    assert "- Package / Case: TO-220-3 (confirmed)" in prompt.user
    assert "- Unit Price: N/A (unconfirmed)" in prompt.user
    assert "Adjustable output from 1.25 V" in prompt.user
    assert "package match > functional match > lifecycle status > distributor availability > price" in prompt.user
    assert "(---)" in prompt.user
    assert "Summary and Conclusion" in prompt.user
    assert prompt.system == config.SYSTEM_PROMPT_ALTERNATIVES
    assert prompt.max_tokens == settings.alternatives_max_tokens
    assert prompt.temperature is None


def test_empty_context_says_details_cannot_be_confirmed(settings):
    context = AggregatedContext(
        kind=TemplateKind.ALTERNATIVES,
        parts=[PartContext("XYZ123", unavailable=["distributor-search", "datasheet-search"])],
    )

    prompt = PromptBuilder(settings).build(["XYZ123"], context, TemplateKind.ALTERNATIVES)

    assert "[No search results found]" in prompt.user
    assert "[No package info found]" in prompt.user
    assert "Could not be confirmed from: distributor search, datasheet search." in prompt.user
    assert "No reference data was found for XYZ123" in prompt.user


def test_strict_policy_changes_instructions(settings):
    builder = PromptBuilder(replace(settings, prompt_policy="strict"))

    prompt = builder.build(["LM317"], lm317_context(), TemplateKind.ALTERNATIVES)

    assert prompt.system == config.SYSTEM_PROMPT_ALTERNATIVES_STRICT
    assert "UNVERIFIED" in prompt.user


def test_unknown_policy_falls_back_to_standard():
    assert get_policy("nonsense").name == "standard"
    assert get_policy("STRICT").name == "strict"


def test_comparison_prompt_uses_both_parts_and_bounds(settings):
    context = AggregatedContext(
        kind=TemplateKind.COMPARISON,
        parts=[
            PartContext("LM317", source=ContextSource.PARTS_DATABASE,
                        part_record=PartRecord("LM317", "Texas Instruments", {"Package": "TO-220"})),
            PartContext("LM338", source=ContextSource.PARTS_DATABASE,
                        part_record=PartRecord("LM338", "onsemi", {"Package": "TO-220"})),
        ],
        comparison=SpecComparison(similarities=[{"attribute": "Package", "value": "TO-220"}]),
    )

    prompt = PromptBuilder(settings).build(["LM317", "LM338"], context, TemplateKind.COMPARISON)

    assert '"LM317" vs "LM338"' in prompt.user
    assert "manufacturer: Texas Instruments" in prompt.user
    assert "- Package: TO-220" in prompt.user
    assert "Matching attributes:" in prompt.user
    assert "OVERVIEW TABLE" in prompt.user
    assert "DROP-IN COMPATIBILITY ASSESSMENT" in prompt.user
    # Parts database sides skip the web search sections
    assert "Search results:" not in prompt.user
    assert prompt.system == config.SYSTEM_PROMPT_COMPARE
    assert prompt.max_tokens == settings.compare_max_tokens
    assert prompt.temperature == settings.compare_temperature


def test_render_context_keeps_request_order():
    context = AggregatedContext(
        kind=TemplateKind.COMPARISON,
        parts=[PartContext("B-PART"), PartContext("A-PART")],
    )
    rendered = render_context(context)
    assert rendered.index("### B-PART") < rendered.index("### A-PART")


def test_build_rejects_wrong_part_count(settings):
    builder = PromptBuilder(settings)
    with pytest.raises(ValueError):
        builder.build(["A", "B"], lm317_context(), TemplateKind.ALTERNATIVES)
    with pytest.raises(ValueError):
        builder.build(["A"], lm317_context(), TemplateKind.COMPARISON)
