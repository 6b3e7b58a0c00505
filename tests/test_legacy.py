"""
Tests for the legacy instruction prompt and its output handling.
"""

import pytest

from editprompt.budget import reset_budget_config
from editprompt.exceptions import ExcerptRangeError, LegacyOutputError
from editprompt.legacy import (
    clean_legacy_output,
    compute_edits,
    format_legacy_event,
    format_legacy_events,
    format_legacy_events_within_budget,
    format_legacy_excerpt,
    format_legacy_from_input,
    parse_legacy_edits,
    parse_legacy_output,
)
from editprompt.schemas import OffsetRange

from conftest import make_event, make_input


INSTRUCTION = (
    "### Instruction:\n"
    "You are a code completion assistant and your task is to analyze user edits and then rewrite an "
    "excerpt that the user provides, suggesting the appropriate edits within the excerpt, taking "
    "into account the cursor location.\n"
    "\n"
    "### User Edits:\n"
    "\n"
)


def _range(start, end):
    return OffsetRange(start=start, end=end)


class TestLegacyPrompt:
    """Instruction header, events, fenced excerpt and response header."""

    def test_basic(self):
        excerpt = "fn before() {}\nfn foo() {\n    let x = 1;\n}\nfn after() {}\n"
        prompt_input = make_input(
            excerpt, (15, 41), 30,
            events=[make_event("other.rs", "-old\n+new\n")],
            cursor_path="src/main.rs",
            excerpt_start_row=0,
        )
        prompt = format_legacy_from_input(prompt_input, _range(15, 41), _range(0, len(excerpt)))
        assert prompt == (
            INSTRUCTION
            + "User edited other.rs:\n"
            "```diff\n"
            "-old\n"
            "+new\n"
            "\n"
            "```\n"
            "\n"
            "### User Excerpt:\n"
            "\n"
            "```src/main.rs\n"
            "<|start_of_file|>\n"
            "fn before() {}\n"
            "<|editable_region_start|>\n"
            "fn foo() {\n"
            "    <|user_cursor_is_here|>let x = 1;\n"
            "\n"
            "<|editable_region_end|>}\n"
            "fn after() {}\n"
            "\n"
            "```\n"
            "\n"
            "### Response:\n"
        )

    def test_no_start_of_file(self):
        excerpt = "fn foo() {\n    let x = 1;\n}\n"
        prompt_input = make_input(excerpt, (0, 28), 15, cursor_path="src/main.rs", excerpt_start_row=10)
        assert format_legacy_from_input(prompt_input) == (
            INSTRUCTION
            + "\n"
            "\n"
            "### User Excerpt:\n"
            "\n"
            "```src/main.rs\n"
            "<|editable_region_start|>\n"
            "fn foo() {\n"
            "    <|user_cursor_is_here|>let x = 1;\n"
            "}\n"
            "\n"
            "<|editable_region_end|>\n"
            "```\n"
            "\n"
            "### Response:\n"
        )

    def test_sub_ranges(self):
        excerpt = "// prefix\nfn foo() {\n    let x = 1;\n}\n// suffix\n"
        prompt_input = make_input(excerpt, (10, 37), 25, excerpt_start_row=0)
        assert format_legacy_from_input(prompt_input, _range(10, 37), _range(0, len(excerpt))) == (
            INSTRUCTION
            + "\n"
            "\n"
            "### User Excerpt:\n"
            "\n"
            "```test.rs\n"
            "<|start_of_file|>\n"
            "// prefix\n"
            "<|editable_region_start|>\n"
            "fn foo() {\n"
            "    <|user_cursor_is_here|>let x = 1;\n"
            "}\n"
            "<|editable_region_end|>\n"
            "// suffix\n"
            "\n"
            "```\n"
            "\n"
            "### Response:\n"
        )

    def test_unknown_start_row_has_no_start_of_file(self):
        prompt_input = make_input("a\n", (0, 2), 0)
        assert "<|start_of_file|>" not in format_legacy_from_input(prompt_input)

    def test_narrowed_context_has_no_start_of_file(self):
        prompt_input = make_input("a\nb\nc\n", (2, 4), 2, excerpt_start_row=0)
        excerpt = format_legacy_excerpt(prompt_input, _range(2, 4), _range(2, 6))
        assert excerpt == (
            "```test.rs\n"
            "<|editable_region_start|>\n"
            "<|user_cursor_is_here|>b\n"
            "\n"
            "<|editable_region_end|>c\n"
            "\n"
            "```"
        )

    def test_editable_outside_context(self):
        prompt_input = make_input("a\nb\nc\n", (0, 4), 2)
        with pytest.raises(ExcerptRangeError):
            format_legacy_excerpt(prompt_input, _range(0, 4), _range(2, 6))

    def test_cursor_outside_editable(self):
        prompt_input = make_input("a\nb\nc\n", (2, 4), 5)
        with pytest.raises(ExcerptRangeError):
            format_legacy_from_input(prompt_input)


class TestLegacyEvents:
    """Prose descriptions of buffer changes."""

    def test_edit(self):
        assert format_legacy_event(make_event("a.rs", "-1\n")) == "User edited a.rs:\n```diff\n-1\n\n```"

    def test_rename_without_diff(self):
        event = make_event("b.rs", "", old_path="a.rs")
        assert format_legacy_event(event) == "User renamed a.rs to b.rs\n\n"

    def test_rename_with_diff(self):
        event = make_event("b.rs", "+x\n", old_path="a.rs")
        assert format_legacy_event(event) == "User renamed a.rs to b.rs\n\nUser edited b.rs:\n```diff\n+x\n\n```"

    def test_empty_event_skipped(self):
        events = [make_event("a.rs", "-1\n"), make_event("b.rs", ""), make_event("c.rs", "-3\n")]
        assert format_legacy_events(events) == (
            "User edited a.rs:\n```diff\n-1\n\n```\n\nUser edited c.rs:\n```diff\n-3\n\n```"
        )

    def test_within_budget_keeps_newest(self):
        events = [make_event("a.rs", "-1\n"), make_event("b.rs", "-2\n")]
        text, count = format_legacy_events_within_budget(events, 15)
        assert count == 1
        assert text == "User edited b.rs:\n```diff\n-2\n\n```"

    def test_within_budget_keeps_order(self):
        events = [make_event("a.rs", "-1\n"), make_event("b.rs", "-2\n")]
        text, count = format_legacy_events_within_budget(events, 22)
        assert count == 2
        assert text.index("a.rs") < text.index("b.rs")

    def test_within_configured_budget(self, monkeypatch):
        monkeypatch.setenv("EDITPROMPT_LEGACY_MAX_EVENT_TOKENS", "0")
        reset_budget_config()
        assert format_legacy_events_within_budget([make_event("a.rs", "-1\n")]) == ("", 0)


class TestCleanLegacyOutput:
    """Region extraction with cursor marker conversion."""

    def test_basic(self):
        output = (
            "<|editable_region_start|>\n"
            "fn main() {\n"
            "    println!(\"hello\");\n"
            "}\n"
            "<|editable_region_end|>\n"
        )
        assert clean_legacy_output(output) == "fn main() {\n    println!(\"hello\");\n}"

    def test_with_cursor(self):
        output = (
            "<|editable_region_start|>\n"
            "fn main() {\n"
            "    <|user_cursor_is_here|>println!(\"hello\");\n"
            "}\n"
            "<|editable_region_end|>\n"
        )
        assert clean_legacy_output(output) == "fn main() {\n    <|user_cursor|>println!(\"hello\");\n}"

    def test_no_markers(self):
        assert clean_legacy_output("fn main() {}\n") == "fn main() {}\n"

    def test_empty_region(self):
        assert clean_legacy_output("<|editable_region_start|>\n<|editable_region_end|>\n") == ""

    def test_multibyte_before_cursor(self):
        output = "<|editable_region_start|>\ncafé<|user_cursor_is_here|> au lait\n<|editable_region_end|>"
        assert clean_legacy_output(output) == "café<|user_cursor|> au lait"

    def test_echoed_excerpt(self):
        """Cleaning the prompt's own excerpt yields the editable region with the cursor."""
        prompt_input = make_input("fn foo() {\n    let x = 1;\n}\n", (0, 28), 15, cursor_path="src/main.rs")
        excerpt = format_legacy_excerpt(prompt_input, _range(0, 28), _range(0, 28))
        assert clean_legacy_output(excerpt) == "fn foo() {\n    <|user_cursor|>let x = 1;\n}\n"


class TestParseLegacyOutput:
    """Strict region extraction for edit computation."""

    def test_strips_cursor(self):
        output = "<|editable_region_start|>\na<|user_cursor_is_here|>b\n<|editable_region_end|>"
        assert parse_legacy_output(output) == "ab"

    def test_no_markers_drops_trailing_newline(self):
        assert parse_legacy_output("fn main() {}\n") == "fn main() {}"

    def test_empty_region(self):
        assert parse_legacy_output("<|editable_region_start|>\n<|editable_region_end|>") == ""

    @pytest.mark.parametrize("marker", [
        "<|editable_region_start|>",
        "<|editable_region_end|>",
        "<|start_of_file|>",
    ])
    def test_duplicated_marker(self, marker):
        output = f"{marker}\nx\n{marker}\n"
        with pytest.raises(LegacyOutputError) as exc_info:
            parse_legacy_output(output)
        assert exc_info.value.marker == marker
        assert exc_info.value.count == 2


class TestComputeEdits:
    """Line diff refined to minimal byte ranges."""

    def test_identical(self):
        assert compute_edits("a\nb\n", "a\nb\n") == []

    def test_word_change(self):
        edits = compute_edits("let x = 1;\n", "let x = 2;\n")
        assert len(edits) == 1
        assert (edits[0].range.start, edits[0].range.end) == (8, 9)
        assert edits[0].text == "2"

    def test_line_deleted(self):
        edits = compute_edits("a\nb\nc\n", "a\nc\n", offset=10)
        assert [(e.range.start, e.range.end, e.text) for e in edits] == [(12, 14, "")]

    def test_line_inserted(self):
        edits = compute_edits("a\nc\n", "a\nb\nc\n")
        assert [(e.range.start, e.range.end, e.text) for e in edits] == [(2, 2, "b\n")]

    def test_byte_offsets_after_multibyte(self):
        edits = compute_edits("é\n", "éa\n")
        assert [(e.range.start, e.range.end, e.text) for e in edits] == [(2, 2, "a")]


class TestParseLegacyEdits:
    """Model output to buffer edits."""

    def test_empty_region_deletes_everything(self):
        text = "fn foo() {\n    let x = 42;\n}\n"
        edits = parse_legacy_edits("<|editable_region_start|>\n<|editable_region_end|>", text)
        assert len(edits) == 1
        assert (edits[0].range.start, edits[0].range.end) == (0, len(text))
        assert edits[0].text == ""

    def test_multibyte_before_end_marker(self):
        output = "<|editable_region_start|>\n// café<|editable_region_end|>"
        assert parse_legacy_edits(output, "// café") == []

    def test_multibyte_after_start_marker(self):
        output = "<|editable_region_start|>é is great\n<|editable_region_end|>"
        assert parse_legacy_edits(output, "é is great") == []
