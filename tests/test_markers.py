"""Tests for geoffrey.markers."""

from __future__ import annotations

import pytest

from geoffrey.errors import CrossedMarkersError, DuplicateMarkerError, EmptyMarkerError, UnmatchedMarkerError
from geoffrey.markers import DOXYGEN_HASH, REGION, MarkerSyntax, extract, get_syntax
from geoffrey.models import RegionForest


def _body(forest: RegionForest, name: str) -> str:
    region = forest.find(name)
    assert region is not None
    return forest.text[region.start_offset : region.end_offset]


def test_extract_builds_nested_forest(main_forest: RegionForest) -> None:
    assert [region.name for region in main_forest.regions] == ["includes", "main function"]
    main = main_forest.regions[1]
    assert [child.name for child in main.children] == [
        "define answer",
        "print till answer",
        "print answer",
    ]
    assert _body(main_forest, "includes") == "#include <iostream>\n"
    assert _body(main_forest, "define answer") == "    constexpr uint64_t ANSWER {42};\n"


def test_extract_records_lines_and_indentation(main_forest: RegionForest) -> None:
    assert main_forest.find("includes").line == 1
    assert main_forest.find("main function").line == 5
    define = main_forest.find("define answer")
    assert define.line == 8
    assert define.indent == "    "
    assert main_forest.find("main function").indent == ""


def test_extract_children_are_contained_in_parents(main_forest: RegionForest) -> None:
    for region in main_forest.walk():
        assert region.open_offset < region.start_offset <= region.end_offset < region.close_offset
        for child in region.children:
            for descendant in child.walk():
                assert descendant.open_offset >= region.start_offset
                assert descendant.close_offset <= region.end_offset
        starts = [child.start_offset for child in region.children]
        assert starts == sorted(starts)


def test_extract_marker_lines_are_excluded_from_bodies(main_forest: RegionForest) -> None:
    for region in main_forest.walk():
        body = main_forest.text[region.start_offset : region.end_offset]
        assert f"//! [{region.name}]" not in body


def test_extract_without_markers_returns_empty_forest() -> None:
    forest = extract("int main() {}\n")
    assert forest.regions == ()
    assert forest.text == "int main() {}\n"


def test_extract_handles_missing_trailing_newline() -> None:
    text = "//! [a]\nx\n//! [a]"
    forest = extract(text)
    region = forest.find("a")
    assert region.close_offset == len(text)
    assert _body(forest, "a") == "x\n"


def test_extract_allows_empty_region() -> None:
    forest = extract("//! [a]\n//! [a]\n")
    region = forest.find("a")
    assert region.start_offset == region.end_offset


def test_extract_allows_sequential_siblings_with_same_name() -> None:
    forest = extract("//! [a]\none\n//! [a]\n//! [a]\ntwo\n//! [a]\n")
    assert [region.name for region in forest.regions] == ["a", "a"]
    assert _body(forest, "a") == "one\n"


def test_extract_reports_unmatched_marker() -> None:
    with pytest.raises(UnmatchedMarkerError) as excinfo:
        extract("code\n//! [a]\nmore code\n")
    assert excinfo.value.line == 2
    assert excinfo.value.name == "a"


def test_extract_reports_crossed_markers() -> None:
    with pytest.raises(CrossedMarkersError) as excinfo:
        extract("//! [a]\n//! [b]\n//! [a]\n//! [b]\n")
    assert excinfo.value.line == 3
    assert excinfo.value.innermost == "b"


def test_extract_reports_empty_marker_name() -> None:
    with pytest.raises(EmptyMarkerError):
        extract("//! []\n")


def test_region_syntax_uses_distinct_open_and_close_markers() -> None:
    forest = extract("# region a\nx = 1\n# region b\ny = 2\n# endregion b\n# endregion a\n", REGION)
    assert _body(forest, "b") == "y = 2\n"
    assert [child.name for child in forest.find("a").children] == ["b"]
    assert forest.placeholder == "# ..."


def test_region_syntax_reports_stray_close() -> None:
    with pytest.raises(UnmatchedMarkerError):
        extract("# endregion a\n", REGION)


def test_region_syntax_reports_crossed_and_duplicate_markers() -> None:
    with pytest.raises(CrossedMarkersError):
        extract("# region a\n# region b\n# endregion a\n# endregion b\n", REGION)
    with pytest.raises(DuplicateMarkerError):
        extract("# region a\n# region a\n", REGION)


def test_doxygen_hash_syntax() -> None:
    forest = extract("##! [setup]\nimport os\n##! [setup]\n", DOXYGEN_HASH)
    assert _body(forest, "setup") == "import os\n"


def test_custom_syntax_requires_named_groups() -> None:
    with pytest.raises(ValueError):
        MarkerSyntax.from_patterns("broken", r"^// (\w+)$")


def test_custom_syntax_recognizes_markers() -> None:
    syntax = MarkerSyntax.from_patterns(
        "shell",
        r"^(?P<indent>\s*)# >>> (?P<name>.*?)\s*$",
        r"^(?P<indent>\s*)# <<< (?P<name>.*?)\s*$",
        placeholder="# ...",
    )
    forest = extract("# >>> greet\necho hi\n# <<< greet\n", syntax)
    assert _body(forest, "greet") == "echo hi\n"


def test_get_syntax_rejects_unknown_name() -> None:
    assert get_syntax("region") is REGION
    with pytest.raises(KeyError):
        get_syntax("nope")
