import pytest

from ccontent.content.models import Difficulty, Page, Section, Subsection
from ccontent.content.normalizer import (
    assign_id,
    normalize_subsection,
    normalize_subsections,
    parse_module_markdown,
    parse_subsection_markdown,
    resolve_duplicate_ids,
)
from ccontent.core.config import PipelineSettings
from ccontent.core.policies import ContentPolicies
from ccontent.core.validation import ContentValidator, ValidationFailure

SCENARIO = "#### Intro\nHello world.\n\n#### Details\nPara one.\n\nPara two.\n\nPara three."


def test_assign_id_priority() -> None:
    assert assign_id("explicit-id", "Some Title", "m1", 0) == "explicit-id"
    assert assign_id("  ", "Some Title!", "m1", 0) == "some-title"
    assert assign_id(None, "???", "m1", 4) == "subsection-m1-4"
    assert assign_id(7, "Title", "m1", 0) == "7"


def test_parse_module_markdown_scenario() -> None:
    subsections = parse_module_markdown(SCENARIO, module_id="m1")

    assert [s.id for s in subsections] == ["intro", "details"]
    details = subsections[1]
    assert len(details.pages) == 2
    assert details.pages[0].content == "Para one.\n\nPara two."
    assert details.pages[1].content == "Para three."
    assert details.summary == "Learn about Details"
    assert details.difficulty is Difficulty.INTERMEDIATE
    assert details.estimated_time == "5 minutes"


def test_parse_module_markdown_empty_input() -> None:
    assert parse_module_markdown("", module_id="m1") == []


def test_heading_without_body_gets_placeholder_page() -> None:
    subsections = parse_module_markdown("#### Coming Soon\n#### Ready\nText.")

    assert subsections[0].pages[0].content == "Content will be available soon."
    assert subsections[0].key_points == []


def test_normalizer_is_idempotent() -> None:
    first = [s.to_payload() for s in parse_module_markdown(SCENARIO, module_id="m1")]
    second = [s.to_payload() for s in parse_module_markdown(SCENARIO, module_id="m1")]

    assert first == second


def test_to_payload_uses_camel_case() -> None:
    payload = parse_module_markdown(SCENARIO)[0].to_payload()

    assert set(payload) == {"id", "title", "summary", "keyPoints", "pages", "difficulty", "estimatedTime"}
    assert set(payload["pages"][0]) == {"pageNumber", "pageTitle", "content", "keyTakeaway"}
    assert payload["difficulty"] == "intermediate"


def test_duplicate_titles_get_suffixes() -> None:
    subsections = parse_module_markdown("#### Loops\nA.\n#### Loops\nB.\n#### Loops\nC.")

    assert [s.id for s in subsections] == ["loops", "loops-2", "loops-3"]
    assert ContentValidator(strict=True).validate_subsections(subsections).valid


def test_suffix_skips_ids_already_taken() -> None:
    entries = [
        {"id": "loops", "title": "Loops", "content": "a"},
        {"id": "loops-2", "title": "Loops 2", "content": "b"},
        {"id": "loops", "title": "Loops again", "content": "c"},
    ]

    ids = [s.id for s in normalize_subsections(entries, module_id="m1")]

    assert ids == ["loops", "loops-2", "loops-3"]


def test_duplicate_ids_can_be_rejected() -> None:
    settings = PipelineSettings(duplicate_ids="reject")

    with pytest.raises(ValidationFailure):
        parse_module_markdown("#### Loops\nA.\n#### Loops\nB.", settings=settings)


def test_resolve_duplicate_ids_noop_for_unique_list() -> None:
    subsections = parse_module_markdown(SCENARIO)

    assert resolve_duplicate_ids(subsections) == subsections


def test_mapping_with_existing_pages_is_kept() -> None:
    entry = {
        "id": "sub-1",
        "title": "Sorting",
        "summary": "All about sorting",
        "keyPoints": ["stable sorts keep order"],
        "difficulty": "Advanced",
        "estimatedTime": "25-30 minutes",
        "pages": [
            {"pageTitle": "Bubble sort", "content": "Swap neighbours."},
            {"title": "Merge sort", "content": "Divide and merge.", "keyTakeaway": "Merge is stable."},
            "Raw string page.",
        ],
    }

    subsection = normalize_subsection(entry, module_id="m1", index=0)

    assert subsection.id == "sub-1"
    assert subsection.difficulty is Difficulty.ADVANCED
    assert subsection.estimated_time == "25-30 minutes"
    assert subsection.summary == "All about sorting"
    assert subsection.key_points == ["stable sorts keep order"]
    assert [page.page_number for page in subsection.pages] == [1, 2, 3]
    assert subsection.pages[0].key_takeaway == "This section completes your understanding of Bubble sort."
    assert subsection.pages[1].key_takeaway == "Merge is stable."
    assert subsection.pages[2].page_title == "Sorting - Part 3"


def test_mapping_without_pages_is_paginated() -> None:
    entry = {"title": "Hashing", "explanation": "One.\n\nTwo.\n\nThree.", "complexity": "beginner"}

    subsection = normalize_subsection(entry, module_id="m1", index=2)

    assert subsection.id == "hashing"
    assert subsection.difficulty is Difficulty.BEGINNER
    assert len(subsection.pages) == 2
    assert subsection.summary == "Learn about Hashing"


def test_mapping_with_labeled_markdown_uses_field_extractor() -> None:
    entry = {
        "title": "Stacks",
        "generatedMarkdown": "**Summary:**\nLIFO structures.\n\n#### Push\nAdd on top.\n**Key Takeaway:** Push is O(1).",
    }

    subsection = normalize_subsection(entry)

    assert subsection.summary == "LIFO structures."
    assert subsection.pages[0].page_title == "Push"
    assert subsection.pages[0].key_takeaway == "Push is O(1)."


def test_mapping_without_title_or_text_uses_positional_fallbacks() -> None:
    subsection = normalize_subsection({}, module_id="m9", index=3)

    assert subsection.title == "Subsection 4"
    assert subsection.id == "subsection-4"
    assert len(subsection.pages) == 1


def test_unknown_difficulty_falls_back_to_default() -> None:
    subsection = normalize_subsection({"title": "X", "content": "y", "difficulty": "legendary"})

    assert subsection.difficulty is Difficulty.INTERMEDIATE


def test_default_difficulty_policy_is_overridable() -> None:
    policies = ContentPolicies(default_difficulty=lambda title, body: "advanced")

    subsection = normalize_subsection(Section(title="Proofs", body="text"), policies=policies)

    assert subsection.difficulty is Difficulty.ADVANCED


def test_normalize_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError):
        normalize_subsection(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_subsection_instances_pass_through() -> None:
    existing = Subsection(
        id="kept",
        title="Kept",
        pages=[Page(page_number=1, page_title="Kept", content="x")],
    )

    assert normalize_subsection(existing) is existing


def test_parse_subsection_markdown_builds_record() -> None:
    markdown = "**Summary:**\nQueues are FIFO.\n\n**Key Learning Points:**\n- enqueue\n- dequeue\n\n#### Enqueue\nAdd to back."

    subsection = parse_subsection_markdown(markdown, "Queues", subsection_id="q-1", difficulty="beginner")

    assert subsection.id == "q-1"
    assert subsection.summary == "Queues are FIFO."
    assert subsection.key_points == ["enqueue", "dequeue"]
    assert subsection.difficulty is Difficulty.BEGINNER
    assert [page.page_title for page in subsection.pages] == ["Enqueue"]


def test_long_body_estimate() -> None:
    body = "word " * 200  # 1000 chars

    subsection = normalize_subsection(Section(title="Long", body=body))

    assert subsection.estimated_time == "12 minutes"


@pytest.mark.parametrize("markdown", ["#### Empty heading", SCENARIO, "Intro text.\n\n#### Bulleted\n- one\n- two"])
def test_renormalizing_payloads_is_a_no_op(markdown: str) -> None:
    for subsection in parse_module_markdown(markdown, module_id="m1"):
        assert normalize_subsection(subsection.to_payload(), module_id="m1") == subsection


def test_placeholder_content_never_becomes_a_key_point() -> None:
    entry = {"title": "Later", "pages": [{"content": "Content will be available soon."}]}

    subsection = normalize_subsection(entry, module_id="m1")

    assert subsection.key_points == []
    assert subsection.pages[0].content == "Content will be available soon."
