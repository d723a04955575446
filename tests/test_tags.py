"""Tests for geoffrey.tags."""

from __future__ import annotations

import pytest

from geoffrey.errors import MalformedTagError, MissingCodeBlockError
from geoffrey.models import ElidedNamed, Named, PartialElided, WholeFile
from geoffrey.tags import FENCE_LOOKAHEAD, parse_attributes, parse_tags


def test_parse_attributes_selector_forms() -> None:
    assert parse_attributes(" [src/main.cpp] ") == ("src/main.cpp", WholeFile())
    assert parse_attributes("[src/main.cpp] [main function]") == (
        "src/main.cpp",
        Named("main function"),
    )
    assert parse_attributes("[src/main.cpp] [[main function]]") == (
        "src/main.cpp",
        ElidedNamed("main function"),
    )
    assert parse_attributes("[a.cpp] [ [main] [one] [two] [one] ]") == (
        "a.cpp",
        PartialElided("main", ("one", "two")),
    )


@pytest.mark.parametrize(
    "attributes, detail",
    [
        ("", "missing source file attribute"),
        ("[a.cpp] [x", "unmatched '['"),
        ("[a.cpp] [[x] [y]", "unmatched nested brackets"),
        ("[a.cpp] [x] [y]", "unexpected remainder"),
        ("[a.cpp] []", "empty attribute"),
        ("[a.cpp] x", "unexpected 'x'"),
    ],
)
def test_parse_attributes_rejects_bad_grammar(attributes: str, detail: str) -> None:
    with pytest.raises(ValueError) as excinfo:
        parse_attributes(attributes)
    assert detail in str(excinfo.value)


def test_parse_tags_records_spans_and_lines() -> None:
    markdown = (
        "# Title\n"
        "\n"
        "<!-- [geoffrey] [src/main.cpp] [includes] -->\n"
        "```cpp\n"
        "old\n"
        "```\n"
        "after\n"
    )
    (tag,) = parse_tags(markdown)
    assert tag.source_path == "src/main.cpp"
    assert tag.selector == Named("includes")
    assert tag.line == 3
    assert tag.indent == ""
    assert markdown[slice(*tag.comment_span)] == "<!-- [geoffrey] [src/main.cpp] [includes] -->"
    assert markdown[slice(*tag.block_span)] == "old\n"
    assert tag.comment_span[1] <= tag.block_span[0]


def test_parse_tags_in_document_order() -> None:
    markdown = (
        "<!-- [geoffrey] [a.cpp] [one] -->\n"
        "```\n"
        "```\n"
        "text\n"
        "<!-- [geoffrey] [b.cpp] -->\n"
        "```\n"
        "x\n"
        "```\n"
    )
    tags = parse_tags(markdown)
    assert [tag.source_path for tag in tags] == ["a.cpp", "b.cpp"]
    assert [tag.line for tag in tags] == [1, 5]
    first, second = tags
    assert first.block_span[0] == first.block_span[1]
    assert first.block_span[1] < second.comment_span[0]


def test_parse_tags_ignores_tags_inside_ordinary_code_blocks() -> None:
    markdown = (
        "```markdown\n"
        "<!-- [geoffrey] [a.cpp] -->\n"
        "```\n"
        "<!-- just a comment -->\n"
    )
    assert parse_tags(markdown) == []


def test_parse_tags_tolerates_blank_lines_before_fence() -> None:
    blanks = "\n" * FENCE_LOOKAHEAD
    markdown = f"<!-- [geoffrey] [a.cpp] -->\n{blanks}```\nx\n```\n"
    (tag,) = parse_tags(markdown)
    assert markdown[slice(*tag.block_span)] == "x\n"


def test_parse_tags_rejects_distant_fence() -> None:
    blanks = "\n" * (FENCE_LOOKAHEAD + 1)
    markdown = f"<!-- [geoffrey] [a.cpp] -->\n{blanks}```\nx\n```\n"
    with pytest.raises(MissingCodeBlockError) as excinfo:
        parse_tags(markdown)
    assert excinfo.value.line == 1


def test_parse_tags_requires_code_block() -> None:
    markdown = "intro\n<!-- [geoffrey] [a.cpp] -->\nSome paragraph.\n"
    with pytest.raises(MissingCodeBlockError) as excinfo:
        parse_tags(markdown)
    assert excinfo.value.line == 2


def test_parse_tags_requires_closing_fence() -> None:
    markdown = "<!-- [geoffrey] [a.cpp] -->\n\n```cpp\nx\n"
    with pytest.raises(MissingCodeBlockError) as excinfo:
        parse_tags(markdown)
    assert excinfo.value.line == 3
    assert "end of the code block" in str(excinfo.value)


@pytest.mark.parametrize(
    "line",
    [
        "<!-- [geoffrey] [a.cpp]",
        "<!-- [geoffrey] [a.cpp] --> trailing text",
        "<!-- [geoffrey] -->",
        "<!-- [geoffrey] [a.cpp] [[x] -->",
    ],
)
def test_parse_tags_rejects_malformed_tags(line: str) -> None:
    markdown = f"{line}\n```\n```\n"
    with pytest.raises(MalformedTagError) as excinfo:
        parse_tags(markdown)
    assert excinfo.value.line == 1


def test_parse_tags_supports_tilde_fences_and_longer_closers() -> None:
    markdown = "<!-- [geoffrey] [a.cpp] -->\n~~~~ cpp\nx\n~~~\n~~~~~\nafter\n"
    (tag,) = parse_tags(markdown)
    assert markdown[slice(*tag.block_span)] == "x\n~~~\n"
    assert (tag.fence_char, tag.fence_length) == ("~", 4)


def test_parse_tags_ignores_backtick_fence_with_backtick_info() -> None:
    markdown = "<!-- [geoffrey] [a.cpp] -->\n``` a`b\nx\n```\n"
    with pytest.raises(MissingCodeBlockError):
        parse_tags(markdown)


def test_parse_tags_records_fence_indentation() -> None:
    markdown = "- item\n\n  <!-- [geoffrey] [a.cpp] -->\n  ```\n  x\n  ```\n"
    (tag,) = parse_tags(markdown)
    assert tag.indent == "  "
    assert markdown[slice(*tag.block_span)] == "  x\n"
