"""Error types raised while syncing markdown code blocks."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class GeoffreyError(RuntimeError):
    """Base error carrying the offending file and line when known."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        self.line = line

    def located(self, path: Path | str) -> "GeoffreyError":
        """Attach ``path`` unless the error already names a file."""
        if self.path is None:
            self.path = Path(path)
        return self

    def __str__(self) -> str:
        if self.path is None and self.line is None:
            return self.message
        location = str(self.path) if self.path is not None else "<text>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class MarkerError(GeoffreyError):
    """Raised when snippet markers in a source file are inconsistent."""


class UnmatchedMarkerError(MarkerError):
    def __init__(self, name: str, *, line: int, closing: bool = False) -> None:
        if closing:
            message = f"Closing marker '{name}' has no opening marker"
        else:
            message = f"End marker for '{name}' not found"
        super().__init__(message, line=line)
        self.name = name


class CrossedMarkersError(MarkerError):
    def __init__(self, name: str, innermost: str, *, line: int) -> None:
        super().__init__(
            f"Marker '{name}' closes while '{innermost}' is still open; markers must nest",
            line=line,
        )
        self.name = name
        self.innermost = innermost


class DuplicateMarkerError(MarkerError):
    def __init__(self, name: str, *, line: int) -> None:
        super().__init__(f"Marker '{name}' opened while already open", line=line)
        self.name = name


class EmptyMarkerError(MarkerError):
    def __init__(self, *, line: int) -> None:
        super().__init__("Empty marker name detected", line=line)


class RegionNotFoundError(GeoffreyError):
    def __init__(
        self, name: str, *, source_path: str | None = None, line: Optional[int] = None
    ) -> None:
        if source_path:
            message = f"The snippet '{name}' was not found in '{source_path}'"
        else:
            message = f"The snippet '{name}' was not found"
        super().__init__(message, line=line)
        self.name = name
        self.source_path = source_path


class TagError(GeoffreyError):
    """Raised when a geoffrey tag in a markdown file cannot be used."""


class MalformedTagError(TagError):
    def __init__(self, text: str, detail: str, *, line: int) -> None:
        super().__init__(f"Malformed tag '{text}': {detail}", line=line)
        self.text = text
        self.detail = detail


class MissingCodeBlockError(TagError):
    def __init__(self, text: str, detail: str | None = None, *, line: int) -> None:
        message = detail or "The code block must immediately follow the tag"
        super().__init__(f"{message} (tag '{text}')", line=line)
        self.text = text


class FenceCollisionError(TagError):
    def __init__(self, text: str, snippet_line: str, *, line: int) -> None:
        super().__init__(
            f"The snippet line '{snippet_line.strip()}' would close the code block; "
            f"use a longer fence (tag '{text}')",
            line=line,
        )
        self.text = text
        self.snippet_line = snippet_line


class SourceFileNotFoundError(GeoffreyError):
    def __init__(self, source_path: str, *, resolved: Path) -> None:
        super().__init__(f"The content file '{source_path}' was not found at {resolved}")
        self.source_path = source_path
        self.resolved = resolved


class DocPathNotFoundError(GeoffreyError):
    def __init__(self, doc_path: Path) -> None:
        super().__init__(
            f"The provided doc path does either not exist or is not readable: '{doc_path}'"
        )


class NotAMarkdownFileError(GeoffreyError):
    def __init__(self, doc_path: Path) -> None:
        super().__init__(f"The provided doc path '{doc_path}' is not a markdown file")


class NoMarkdownFilesError(GeoffreyError):
    def __init__(self, doc_path: Path) -> None:
        super().__init__(f"The provided doc path '{doc_path}' does not contain markdown files")


class GitToplevelError(GeoffreyError):
    def __init__(self, directory: Path, detail: str = "") -> None:
        message = f"Could not get git toplevel for '{directory}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigError(GeoffreyError):
    """Raised when the configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "CrossedMarkersError",
    "DocPathNotFoundError",
    "DuplicateMarkerError",
    "EmptyMarkerError",
    "FenceCollisionError",
    "GeoffreyError",
    "GitToplevelError",
    "MalformedTagError",
    "MarkerError",
    "MissingCodeBlockError",
    "NoMarkdownFilesError",
    "NotAMarkdownFileError",
    "RegionNotFoundError",
    "SourceFileNotFoundError",
    "TagError",
    "UnmatchedMarkerError",
]
