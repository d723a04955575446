"""Pipeline orchestration: sync every markdown file under a doc path."""

from __future__ import annotations

import difflib
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .config import GeoffreyConfig, load_config
from .documents import find_markdown_files
from .errors import DocPathNotFoundError, GeoffreyError, MarkerError, SourceFileNotFoundError
from .git import GitRepository
from .logging import get_logger
from .models import RegionForest
from .rewriter import ForestProvider, rewrite
from .stores import ForestCache

# Files are synced one at a time unless more workers are requested.
_DEFAULT_WORKERS = 1


@dataclass
class FileOutcome:
    """Result of syncing one markdown file."""

    path: Path
    changed: bool = False
    diff: str = ""
    tags: int = 0
    error: Optional[GeoffreyError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """Result of a sync run over a doc path."""

    doc_path: Path
    dry_run: bool
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def changed(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok and outcome.changed]

    @property
    def failed(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class Orchestrator:
    """Coordinates document discovery, snippet resolution and write-back."""

    def __init__(
        self,
        git: GitRepository | None = None,
        cache: ForestCache | None = None,
        config_loader: Callable[[Path], GeoffreyConfig] = load_config,
        workers: Optional[int] = None,
    ) -> None:
        self.git = git or GitRepository()
        self.cache = cache or ForestCache()
        self._config_loader = config_loader
        self._workers = workers
        self.logger = get_logger("orchestrator")

    def run(self, doc_path: str | Path, *, dry_run: bool = False) -> SyncReport:
        """Sync all markdown files found at ``doc_path``.

        Per-file errors are recorded on the report; errors that prevent the run
        from starting (missing path, no git repository, bad config) are raised.
        """
        path = Path(doc_path).expanduser().resolve()
        if not path.exists():
            raise DocPathNotFoundError(path)

        toplevel = self.git.toplevel(path)
        config = self._config_loader(toplevel)
        source_root = config.source_root or toplevel
        self.logger.debug("Resolving source paths relative to %s", source_root)

        md_files = find_markdown_files(path, config.exclude_paths)
        self.logger.info("Syncing %d markdown file(s) under %s", len(md_files), path)

        workers = self._workers or config.workers or _DEFAULT_WORKERS
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(
                pool.map(
                    lambda md_file: self.sync_file(md_file, source_root, config, dry_run=dry_run),
                    md_files,
                )
            )

        report = SyncReport(doc_path=path, dry_run=dry_run, outcomes=outcomes)
        self.logger.info(
            "%d file(s) %s, %d failed",
            len(report.changed),
            "out of date" if dry_run else "updated",
            len(report.failed),
        )
        return report

    def sync_file(
        self,
        md_path: Path,
        source_root: Path,
        config: GeoffreyConfig,
        *,
        dry_run: bool = False,
    ) -> FileOutcome:
        """Rewrite one markdown file, leaving it untouched on any error."""
        try:
            original = read_text(md_path)
            result = rewrite(original, self.forest_provider(source_root, config))
        except GeoffreyError as exc:
            exc.located(md_path)
            self._log_failure(exc)
            return FileOutcome(path=md_path, error=exc)
        except (OSError, UnicodeDecodeError) as exc:
            error = GeoffreyError(str(exc), path=md_path)
            self._log_failure(error)
            return FileOutcome(path=md_path, error=error)

        outcome = FileOutcome(path=md_path, changed=result.changed, tags=len(result.tags))
        if not result.changed:
            self.logger.debug("%s already up to date", md_path)
            return outcome

        outcome.diff = "".join(
            difflib.unified_diff(
                original.splitlines(keepends=True),
                result.text.splitlines(keepends=True),
                fromfile=f"a/{md_path.name}",
                tofile=f"b/{md_path.name}",
            )
        )
        if dry_run:
            self.logger.info("%s is out of date (dry-run)", md_path)
            return outcome

        try:
            write_text(md_path, result.text)
        except OSError as exc:
            error = GeoffreyError(f"Could not write file: {exc}", path=md_path)
            self._log_failure(error)
            return FileOutcome(path=md_path, error=error)
        self.logger.info("Updated %s (%d tag(s))", md_path, outcome.tags)
        return outcome

    def forest_provider(self, source_root: Path, config: GeoffreyConfig) -> ForestProvider:
        """Return a provider that loads and caches forests relative to ``source_root``."""

        def provide(source_path: str) -> RegionForest:
            resolved = source_root / source_path
            if not resolved.is_file():
                raise SourceFileNotFoundError(source_path, resolved=resolved)
            text = read_text(resolved)
            syntax = config.markers.syntax_for(resolved)
            try:
                return self.cache.get_or_extract(str(resolved), text, syntax)
            except MarkerError as exc:
                raise exc.located(resolved)

        return provide

    def _log_failure(self, exc: GeoffreyError) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("Sync failed: %s", exc)
        else:
            self.logger.error("Sync failed: %s", exc)


def read_text(path: Path) -> str:
    """Read ``path`` without newline translation so rewrites stay byte-exact."""
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_text(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)


__all__ = ["FileOutcome", "Orchestrator", "SyncReport", "read_text", "write_text"]
