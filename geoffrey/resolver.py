"""Resolve tag selectors against a region forest into code block text."""

from __future__ import annotations

from typing import AbstractSet, List, Optional, Tuple

from .errors import RegionNotFoundError
from .models import ElidedNamed, Named, PartialElided, Region, RegionForest, Selector, WholeFile

_LINE = "line"
_MARKER = "marker"
_PLACEHOLDER = "placeholder"

_Token = Tuple[str, str]


def resolve(forest: RegionForest, selector: Selector) -> str:
    """Return the text selected by ``selector``, marker lines removed.

    The result is a sequence of ``\\n``-terminated lines without trailing blank
    lines, or the empty string.
    """
    if isinstance(selector, WholeFile):
        tokens: List[_Token] = []
        _render(forest, 0, len(forest.text), forest.regions, None, tokens)
        return _join(_normalise(tokens))

    region = forest.find(selector.name)
    if region is None:
        raise RegionNotFoundError(selector.name)

    keep: Optional[AbstractSet[str]]
    if isinstance(selector, Named):
        keep = None
    elif isinstance(selector, ElidedNamed):
        keep = frozenset()
    elif isinstance(selector, PartialElided):
        keep = frozenset(selector.keep)
    else:  # pragma: no cover - exhaustive over Selector
        raise TypeError(f"Unsupported selector {selector!r}")

    tokens = []
    _render(forest, region.start_offset, region.end_offset, region.children, keep, tokens)
    lines = _normalise(tokens)
    return _join(_dedent(lines, region.indent))


def _render(
    forest: RegionForest,
    start: int,
    end: int,
    children: Tuple[Region, ...],
    keep: Optional[AbstractSet[str]],
    tokens: List[_Token],
) -> None:
    # keep=None expands every nested region; otherwise only children named in
    # keep are expanded, each name matching once per nesting level.
    remaining = None if keep is None else set(keep)
    position = start
    for child in children:
        tokens.extend((_LINE, line) for line in _split_lines(forest.text, position, child.open_offset))
        if remaining is None or child.name in remaining:
            if remaining is not None:
                remaining.discard(child.name)
            tokens.append((_MARKER, ""))
            _render(forest, child.start_offset, child.end_offset, child.children, keep, tokens)
            tokens.append((_MARKER, ""))
        else:
            tokens.append((_PLACEHOLDER, f"{child.indent}{forest.placeholder}"))
        position = child.close_offset
    tokens.extend((_LINE, line) for line in _split_lines(forest.text, position, end))


def _split_lines(text: str, start: int, end: int) -> List[str]:
    segment = text[start:end]
    if not segment:
        return []
    lines = segment.split("\n")
    if segment.endswith("\n"):
        lines.pop()
    return lines


def _normalise(tokens: List[_Token]) -> List[str]:
    """Drop marker tokens without letting their removal double a blank line."""
    output: List[str] = []
    drop_blank = False
    for kind, content in tokens:
        if kind == _MARKER:
            if output and _is_blank(output[-1]):
                drop_blank = True
            continue
        if drop_blank and kind == _LINE and _is_blank(content):
            drop_blank = False
            continue
        drop_blank = False
        output.append(content)

    while output and _is_blank(output[-1]):
        output.pop()
    return output


def _dedent(lines: List[str], indent: str) -> List[str]:
    if not indent:
        return lines
    return [line[len(indent):] if line.startswith(indent) else line for line in lines]


def _is_blank(line: str) -> bool:
    return not line.strip()


def _join(lines: List[str]) -> str:
    return "\n".join(lines) + "\n" if lines else ""


__all__ = ["resolve"]
