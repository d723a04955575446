"""Snippet marker recognition and region extraction for source files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Pattern, Tuple

from .errors import CrossedMarkersError, DuplicateMarkerError, EmptyMarkerError, UnmatchedMarkerError
from .logging import TRACE, get_logger
from .models import Region, RegionForest

logger = get_logger("markers")


@dataclass(frozen=True)
class MarkerSyntax:
    """Line recognizers for opening and closing snippet markers.

    Both patterns must define the named groups ``indent`` and ``name``. When
    they are identical, as with doxygen snippets, the same marker line opens a
    region and later closes it.
    """

    name: str
    open: Pattern[str]
    close: Pattern[str]
    placeholder: str = "// ..."

    @property
    def toggles(self) -> bool:
        return self.open.pattern == self.close.pattern

    @classmethod
    def from_patterns(
        cls,
        name: str,
        open_pattern: str,
        close_pattern: str | None = None,
        *,
        placeholder: str = "// ...",
    ) -> "MarkerSyntax":
        """Compile a syntax from regular expressions, validating the named groups."""
        open_re = re.compile(open_pattern)
        close_re = open_re if close_pattern is None else re.compile(close_pattern)
        for pattern in (open_re, close_re):
            missing = {"indent", "name"} - set(pattern.groupindex)
            if missing:
                raise ValueError(
                    f"Marker pattern {pattern.pattern!r} lacks group(s): {', '.join(sorted(missing))}"
                )
        return cls(name=name, open=open_re, close=close_re, placeholder=placeholder)


DOXYGEN = MarkerSyntax.from_patterns(
    "doxygen",
    r"^(?P<indent>[ \t]*)//!\s*\[(?P<name>[^\]]*)\]\s*$",
    placeholder="// ...",
)

DOXYGEN_HASH = MarkerSyntax.from_patterns(
    "doxygen-hash",
    r"^(?P<indent>[ \t]*)##!\s*\[(?P<name>[^\]]*)\]\s*$",
    placeholder="# ...",
)

REGION = MarkerSyntax.from_patterns(
    "region",
    r"^(?P<indent>[ \t]*)#[ \t]*region\b[ \t]*(?P<name>.*?)\s*$",
    r"^(?P<indent>[ \t]*)#[ \t]*endregion\b[ \t]*(?P<name>.*?)\s*$",
    placeholder="# ...",
)

SYNTAXES: Dict[str, MarkerSyntax] = {
    syntax.name: syntax for syntax in (DOXYGEN, DOXYGEN_HASH, REGION)
}


def get_syntax(name: str) -> MarkerSyntax:
    try:
        return SYNTAXES[name]
    except KeyError:
        known = ", ".join(sorted(SYNTAXES))
        raise KeyError(f"Unknown marker syntax '{name}' (known: {known})") from None


@dataclass
class _OpenRegion:
    name: str
    indent: str
    line: int
    open_offset: int
    start_offset: int
    children: List[Region] = field(default_factory=list)


def iter_lines(text: str) -> Iterator[Tuple[int, int, int, str]]:
    """Yield ``(line_number, start, end, content)`` for every line of ``text``.

    ``end`` is the offset past the line's newline; ``content`` excludes it.
    """
    offset = 0
    number = 0
    length = len(text)
    while offset < length:
        newline = text.find("\n", offset)
        if newline == -1:
            content_end = end = length
        else:
            content_end, end = newline, newline + 1
        number += 1
        yield number, offset, end, text[offset:content_end]
        offset = end


def extract(source_text: str, syntax: MarkerSyntax = DOXYGEN) -> RegionForest:
    """Build the region forest for ``source_text``.

    Raises ``UnmatchedMarkerError``, ``CrossedMarkersError``,
    ``DuplicateMarkerError`` or ``EmptyMarkerError`` on inconsistent markers.
    """
    stack: List[_OpenRegion] = []
    roots: List[Region] = []

    for number, start, end, content in iter_lines(source_text):
        marker = _match_marker(syntax, content)
        if marker is None:
            continue
        is_open, name, indent = marker
        logger.log(TRACE, "Marker '%s' at line %d", name, number)
        if not name:
            raise EmptyMarkerError(line=number)

        open_names = [frame.name for frame in stack]
        if syntax.toggles:
            is_open = not (stack and stack[-1].name == name)
            if is_open and name in open_names:
                raise CrossedMarkersError(name, stack[-1].name, line=number)

        if is_open:
            if name in open_names:
                raise DuplicateMarkerError(name, line=number)
            stack.append(
                _OpenRegion(
                    name=name,
                    indent=indent,
                    line=number,
                    open_offset=start,
                    start_offset=end,
                )
            )
            continue

        if not stack or stack[-1].name != name:
            if name in open_names:
                raise CrossedMarkersError(name, stack[-1].name, line=number)
            raise UnmatchedMarkerError(name, line=number, closing=True)

        frame = stack.pop()
        region = Region(
            name=frame.name,
            start_offset=frame.start_offset,
            end_offset=start,
            open_offset=frame.open_offset,
            close_offset=end,
            indent=frame.indent,
            line=frame.line,
            children=tuple(frame.children),
        )
        if stack:
            stack[-1].children.append(region)
        else:
            roots.append(region)

    if stack:
        frame = stack[-1]
        raise UnmatchedMarkerError(frame.name, line=frame.line)

    forest = RegionForest(text=source_text, regions=tuple(roots), placeholder=syntax.placeholder)
    logger.debug(
        "Extracted %d region(s) using %s markers",
        sum(1 for _ in forest.walk()),
        syntax.name,
    )
    return forest


def _match_marker(syntax: MarkerSyntax, content: str) -> Optional[Tuple[bool, str, str]]:
    match = syntax.open.match(content)
    is_open = True
    if match is None and not syntax.toggles:
        match = syntax.close.match(content)
        is_open = False
    if match is None:
        return None
    return is_open, (match.group("name") or "").strip(), match.group("indent") or ""


__all__ = [
    "DOXYGEN",
    "DOXYGEN_HASH",
    "MarkerSyntax",
    "REGION",
    "SYNTAXES",
    "extract",
    "get_syntax",
    "iter_lines",
]
