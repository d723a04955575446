"""Git helpers used to resolve tag source paths."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Sequence

from .errors import GitToplevelError

Runner = Callable[..., str]


class GitRepository:
    """Queries git for repository metadata."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner

    def toplevel(self, path: Path) -> Path:
        """Return the top-level directory of the repository containing ``path``."""
        directory = path if path.is_dir() else path.parent
        try:
            output = self._runner(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=directory,
                capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise GitToplevelError(directory, _describe(exc)) from exc

        toplevel = output.strip()
        if not toplevel:
            raise GitToplevelError(directory, "git returned no path")
        return Path(toplevel)

    @staticmethod
    def _default_runner(
        args: Sequence[str],
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _describe(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
        return stderr or f"git exited with status {exc.returncode}"
    return str(exc)


__all__ = ["GitRepository"]
