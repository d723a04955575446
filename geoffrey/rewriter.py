"""Rewrite the code blocks that follow geoffrey tags in a markdown document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .errors import FenceCollisionError, GeoffreyError, RegionNotFoundError
from .logging import get_logger
from .models import RegionForest, Tag
from .resolver import resolve
from .tags import closes_fence, iter_tags

logger = get_logger("rewriter")

ForestProvider = Callable[[str], RegionForest]


@dataclass(frozen=True)
class RewriteResult:
    """Outcome of rewriting one markdown document."""

    text: str
    changed: bool
    tags: Tuple[Tag, ...] = ()


def indent_text(text: str, indent: str) -> str:
    """Prefix every non-blank line of ``text`` with ``indent``."""
    if not indent or not text:
        return text
    lines = text.split("\n")
    last = lines.pop()
    prefixed = [f"{indent}{line}" if line.strip() else line for line in lines]
    prefixed.append(f"{indent}{last}" if last.strip() else last)
    return "\n".join(prefixed)


def splice(markdown_text: str, replacements: Sequence[Tuple[Tag, str]]) -> str:
    """Replace each tag's code block body with its resolved text.

    Offsets refer to ``markdown_text``; the output is assembled from the
    untouched slices in between, so earlier replacements never shift later ones.
    """
    ordered = sorted(replacements, key=lambda item: item[0].block_span[0])
    pieces: List[str] = []
    position = 0
    for tag, resolved in ordered:
        start, end = tag.block_span
        if start < position:
            raise ValueError(f"Overlapping code block spans at offset {start}")
        pieces.append(markdown_text[position:start])
        pieces.append(indent_text(resolved, tag.indent))
        position = end
    pieces.append(markdown_text[position:])
    return "".join(pieces)


def rewrite(markdown_text: str, forest_provider: ForestProvider) -> RewriteResult:
    """Resolve every tag of ``markdown_text`` and rewrite its code block.

    ``forest_provider`` maps a tag's source path to the parsed region forest.
    Any error aborts the whole document; no partial result is produced.
    """
    forests: Dict[str, RegionForest] = {}
    replacements: List[Tuple[Tag, str]] = []
    for tag in iter_tags(markdown_text):
        forest = forests.get(tag.source_path)
        if forest is None:
            try:
                forest = forest_provider(tag.source_path)
            except GeoffreyError as exc:
                # Errors without a line of their own point at the tag.
                if exc.line is None:
                    exc.line = tag.line
                raise
            forests[tag.source_path] = forest
        try:
            resolved = resolve(forest, tag.selector)
        except RegionNotFoundError as exc:
            raise RegionNotFoundError(exc.name, source_path=tag.source_path, line=tag.line) from None
        _check_fence(tag, resolved)
        replacements.append((tag, resolved))

    new_text = splice(markdown_text, replacements)
    changed = new_text != markdown_text
    logger.debug("Resolved %d tag(s); changed=%s", len(replacements), changed)
    return RewriteResult(
        text=new_text,
        changed=changed,
        tags=tuple(tag for tag, _ in replacements),
    )


def _check_fence(tag: Tag, resolved: str) -> None:
    for line in resolved.split("\n"):
        if closes_fence(line, tag.fence_char, tag.fence_length):
            raise FenceCollisionError(tag.text, line, line=tag.line)


__all__ = ["ForestProvider", "RewriteResult", "indent_text", "rewrite", "splice"]
