"""Markdown document discovery."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .errors import DocPathNotFoundError, NoMarkdownFilesError, NotAMarkdownFileError

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
}

_MARKDOWN_SUFFIXES = {".md"}


@dataclass
class ExcludeRule:
    """An exclude pattern from .geoffrey.yml, matched against relative paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_exclude_rule(pattern: str) -> ExcludeRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return ExcludeRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


def is_markdown_file(path: Path) -> bool:
    return path.suffix.lower() in _MARKDOWN_SUFFIXES


def find_markdown_files(doc_path: Path, exclude_paths: Sequence[str] = ()) -> List[Path]:
    """Return the markdown files at ``doc_path``, sorted.

    ``doc_path`` may be a single markdown file or a directory searched
    recursively.
    """
    if not doc_path.exists():
        raise DocPathNotFoundError(doc_path)

    if doc_path.is_file():
        if not is_markdown_file(doc_path):
            raise NotAMarkdownFileError(doc_path)
        return [doc_path]

    rules = [rule for rule in map(build_exclude_rule, exclude_paths) if rule is not None]
    md_files = sorted(path for path in _iter_files(doc_path, rules) if is_markdown_file(path))
    if not md_files:
        raise NoMarkdownFilesError(doc_path)
    return md_files


def _should_exclude(rel_path: str, is_dir: bool, rules: Sequence[ExcludeRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


def _iter_files(root: Path, rules: Sequence[ExcludeRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        filtered_dirs = []
        for name in dirnames:
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_exclude(rel_path, True, rules):
                continue
            filtered_dirs.append(name)
        dirnames[:] = filtered_dirs

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_exclude(rel_path, False, rules):
                continue
            yield current_dir / filename


__all__ = ["ExcludeRule", "build_exclude_rule", "find_markdown_files", "is_markdown_file"]
