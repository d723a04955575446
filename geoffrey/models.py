"""Core data models shared across geoffrey components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

Span = Tuple[int, int]


@dataclass(frozen=True)
class Region:
    """Named span of source text between a pair of snippet markers.

    ``start_offset``/``end_offset`` delimit the body without the marker lines,
    ``open_offset``/``close_offset`` include them.
    """

    name: str
    start_offset: int
    end_offset: int
    open_offset: int
    close_offset: int
    indent: str = ""
    line: int = 0
    children: Tuple["Region", ...] = ()

    def walk(self) -> Iterator["Region"]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class RegionForest:
    """Top-level regions of one source text together with that text."""

    text: str
    regions: Tuple[Region, ...] = ()
    placeholder: str = "// ..."

    def walk(self) -> Iterator[Region]:
        for region in self.regions:
            yield from region.walk()

    def find(self, name: str) -> Optional[Region]:
        """Return the first region called ``name`` in depth-first document order."""
        for region in self.walk():
            if region.name == name:
                return region
        return None


@dataclass(frozen=True)
class WholeFile:
    """Select the full source file."""


@dataclass(frozen=True)
class Named:
    """Select one region with all nested regions expanded."""

    name: str


@dataclass(frozen=True)
class ElidedNamed:
    """Select one region with every nested region collapsed."""

    name: str


@dataclass(frozen=True)
class PartialElided:
    """Select one region, expanding only the nested regions listed in ``keep``."""

    name: str
    keep: Tuple[str, ...] = field(default_factory=tuple)


Selector = Union[WholeFile, Named, ElidedNamed, PartialElided]


@dataclass(frozen=True)
class Tag:
    """A geoffrey tag found in a markdown document plus its code block.

    ``fence_char`` and ``fence_length`` describe the opening fence; a line in
    the block made of at least ``fence_length`` of ``fence_char`` closes it.
    """

    source_path: str
    selector: Selector
    comment_span: Span
    block_span: Span
    indent: str = ""
    line: int = 0
    text: str = ""
    fence_char: str = "`"
    fence_length: int = 3


__all__ = [
    "ElidedNamed",
    "Named",
    "PartialElided",
    "Region",
    "RegionForest",
    "Selector",
    "Span",
    "Tag",
    "WholeFile",
]
