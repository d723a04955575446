"""Locate geoffrey tags and their fenced code blocks in markdown text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .errors import MalformedTagError, MissingCodeBlockError
from .logging import get_logger
from .markers import iter_lines
from .models import ElidedNamed, Named, PartialElided, Selector, Tag, WholeFile

logger = get_logger("tags")

# Blank lines tolerated between a tag and the opening fence of its code block.
FENCE_LOOKAHEAD = 3

_TAG_START = re.compile(r"^[ \t]*<!--\s*\[geoffrey\]")
_TAG_LINE = re.compile(
    r"^(?P<indent>[ \t]*)(?P<comment><!--\s*\[geoffrey\](?P<attrs>.*?)-->)\s*$"
)
_FENCE_OPEN = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*?)\s*$")
_FENCE_CLOSE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})\s*$")

_Line = Tuple[int, int, int, str]


@dataclass(frozen=True)
class _Fence:
    indent: str
    char: str
    length: int


class _GrammarError(ValueError):
    """Raised by the attribute scanner; converted into MalformedTagError."""


class _AttributeScanner:
    """Tokenizer for the bracketed ``[path] [selector]`` attribute list."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def at_end(self) -> bool:
        self.skip_whitespace()
        return self.pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def attribute(self) -> Optional[str]:
        """Consume ``[name]`` and return the trimmed name, or None if no ``[`` follows."""
        self.skip_whitespace()
        if self.peek() != "[":
            return None
        close = self.text.find("]", self.pos + 1)
        if close == -1:
            raise _GrammarError("unmatched '['")
        content = self.text[self.pos + 1 : close]
        if "[" in content:
            raise _GrammarError(f"unexpected '[' in attribute '{content}'")
        name = content.strip()
        if not name:
            raise _GrammarError("empty attribute")
        self.pos = close + 1
        return name

    def nested_open(self) -> bool:
        """Consume ``[`` when it starts a ``[[main] [sub]...]`` group."""
        self.skip_whitespace()
        if self.peek() != "[":
            return False
        lookahead = self.pos + 1
        while lookahead < len(self.text) and self.text[lookahead].isspace():
            lookahead += 1
        if lookahead < len(self.text) and self.text[lookahead] == "[":
            self.pos = lookahead
            return True
        return False

    def expect(self, char: str) -> None:
        self.skip_whitespace()
        if self.peek() != char:
            raise _GrammarError(f"expected '{char}'")
        self.pos += 1


def parse_attributes(attributes: str) -> Tuple[str, Selector]:
    """Parse ``[path] [selector-expr]`` into the source path and selector.

    Raises ``ValueError`` describing the first grammar violation.
    """
    scanner = _AttributeScanner(attributes)
    path = scanner.attribute()
    if path is None:
        raise _GrammarError("missing source file attribute")

    selector: Selector
    if scanner.at_end():
        selector = WholeFile()
    elif scanner.nested_open():
        main = scanner.attribute()
        if main is None:
            raise _GrammarError("missing snippet name")
        keep: List[str] = []
        while True:
            sub = scanner.attribute()
            if sub is None:
                break
            if sub not in keep:
                keep.append(sub)
        try:
            scanner.expect("]")
        except _GrammarError:
            raise _GrammarError("unmatched nested brackets") from None
        selector = PartialElided(main, tuple(keep)) if keep else ElidedNamed(main)
    else:
        name = scanner.attribute()
        if name is None:
            raise _GrammarError(f"unexpected '{attributes[scanner.pos:].strip()}'")
        selector = Named(name)

    if not scanner.at_end():
        raise _GrammarError(f"unexpected remainder '{attributes[scanner.pos:].strip()}'")
    return path, selector


def iter_tags(markdown_text: str) -> Iterator[Tag]:
    """Yield the geoffrey tags of ``markdown_text`` in document order.

    Tags inside ordinary fenced code blocks are ignored. Raises
    ``MalformedTagError`` and ``MissingCodeBlockError`` with 1-based lines.
    """
    lines = list(iter_lines(markdown_text))
    index = 0
    while index < len(lines):
        content = lines[index][3]
        fence = _open_fence(content)
        if fence is not None:
            closing = _find_close(lines, index + 1, fence)
            index = len(lines) if closing is None else closing + 1
            continue
        if not _TAG_START.match(content):
            index += 1
            continue
        tag, index = _parse_tag(lines, index)
        logger.debug("Found tag for '%s' at line %d", tag.source_path, tag.line)
        yield tag


def parse_tags(markdown_text: str) -> List[Tag]:
    return list(iter_tags(markdown_text))


def _parse_tag(lines: List[_Line], index: int) -> Tuple[Tag, int]:
    number, start, _, content = lines[index]
    text = content.strip()
    match = _TAG_LINE.match(content)
    if match is None:
        raise MalformedTagError(text, "the tag comment must be closed and end the line", line=number)
    try:
        source_path, selector = parse_attributes(match.group("attrs"))
    except _GrammarError as exc:
        raise MalformedTagError(text, str(exc), line=number) from None

    fence_index = index + 1
    while fence_index < len(lines) and not lines[fence_index][3].strip():
        fence_index += 1
    if fence_index - index - 1 > FENCE_LOOKAHEAD or fence_index >= len(lines):
        raise MissingCodeBlockError(text, line=number)
    fence = _open_fence(lines[fence_index][3])
    if fence is None:
        raise MissingCodeBlockError(text, line=number)

    closing = _find_close(lines, fence_index + 1, fence)
    if closing is None:
        raise MissingCodeBlockError(
            text, "The end of the code block is not present", line=lines[fence_index][0]
        )

    tag = Tag(
        source_path=source_path,
        selector=selector,
        comment_span=(start + match.start("comment"), start + match.end("comment")),
        block_span=(lines[fence_index][2], lines[closing][1]),
        indent=fence.indent,
        line=number,
        text=text,
        fence_char=fence.char,
        fence_length=fence.length,
    )
    return tag, closing + 1


def _open_fence(content: str) -> Optional[_Fence]:
    match = _FENCE_OPEN.match(content)
    if match is None:
        return None
    fence = match.group("fence")
    if fence[0] == "`" and "`" in match.group("info"):
        return None
    return _Fence(indent=match.group("indent"), char=fence[0], length=len(fence))


def closes_fence(line: str, char: str, length: int) -> bool:
    """Return True when ``line`` would close a fence of ``length`` ``char``s."""
    match = _FENCE_CLOSE.match(line)
    if match is None:
        return False
    candidate = match.group("fence")
    return candidate[0] == char and len(candidate) >= length


def _find_close(lines: List[_Line], index: int, fence: _Fence) -> Optional[int]:
    for position in range(index, len(lines)):
        if closes_fence(lines[position][3], fence.char, fence.length):
            return position
    return None


__all__ = ["FENCE_LOOKAHEAD", "closes_fence", "iter_tags", "parse_attributes", "parse_tags"]
