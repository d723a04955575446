"""CLI entrypoint for geoffrey."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import GeoffreyError
from .logging import configure_logging
from .orchestrator import Orchestrator, SyncReport


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoffrey",
        description="Sync markdown code blocks with snippets from source files.",
    )
    parser.add_argument(
        "doc_path",
        help="Path to file or folder with the markdown documentation to sync.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for debug, -vv for trace output).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Additionally write log output to this file.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the changes as a diff without writing files.",
    )
    mode.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if any file is out of date; nothing is written.",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of markdown files processed in parallel.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for geoffrey."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbosity=args.verbose, log_file=args.log_file)

    orchestrator = Orchestrator(workers=args.workers)
    dry_run = bool(args.dry_run or args.check)
    try:
        report = orchestrator.run(args.doc_path, dry_run=dry_run)
    except GeoffreyError as exc:
        parser.exit(1, f"geoffrey failed: {exc}\n")

    _print_report(report, show_diff=bool(args.dry_run))

    if report.failed:
        parser.exit(1, f"{len(report.failed)} file(s) could not be synced\n")
    if args.check and report.changed:
        parser.exit(1, f"{len(report.changed)} file(s) out of date\n")


def _print_report(report: SyncReport, *, show_diff: bool) -> None:
    for outcome in report.changed:
        rel_path = _relativize(outcome.path)
        if report.dry_run:
            print(f"{rel_path} is out of date")
            if show_diff:
                print(outcome.diff, end="")
        else:
            print(f"{rel_path} updated")
    for outcome in report.failed:
        rel_path = _relativize(outcome.path)
        if outcome.error is not None and outcome.error.path == outcome.path:
            print(f"error: {outcome.error}", file=sys.stderr)
        else:
            print(f"error: {rel_path}: {outcome.error}", file=sys.stderr)
    if not report.changed and not report.failed:
        print("Documentation already up to date")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
