"""CLI entrypoint for gocmt."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, load_config
from .errors import AnnotationServiceError, ConfigError, DiscoveryError
from .llm.runner import LLMRunner
from .logging import DEFAULT_LOG_FILE, configure_logging
from .models import FileOutcome, ProgressState
from .orchestrator import Orchestrator

_EPILOG = """\
Examples:
  gocmt -f /path/to/example.go
  gocmt -f /path/to/dir/
  gocmt -c HEAD
  gocmt -c HEAD^
  gocmt -c commitID1...commitID2
"""


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("concurrency must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gocmt",
        description="Add missing documentation comments to Go code.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "-f",
        dest="path",
        metavar="PATH",
        help="File or directory containing Go code.",
    )
    target.add_argument(
        "-c",
        dest="ref",
        metavar="REF",
        help="Specify a commit hash or reference (e.g., HEAD, HEAD^, commitID1...commitID2).",
    )
    parser.add_argument(
        "-n",
        dest="concurrency",
        type=_positive_int,
        default=None,
        help="Number of concurrent executions (default: 1).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help=f"Append-only log file (default: {DEFAULT_LOG_FILE}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(CONFIG_FILENAME),
        help=f"Configuration file (default: ./{CONFIG_FILENAME}).",
    )
    return parser


def _print_start(path: Path) -> None:
    print(f"» Processing {path}...")


def _print_progress(progress: ProgressState, outcome: FileOutcome) -> None:
    if outcome.ok:
        print(f"✔ Processed file {outcome.path}")
    else:
        print(f"× Error: {outcome.error}, File: {outcome.path}")
    print(f"Progress: {progress.completed}/{progress.total}, {progress.percent:.2f}%")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gocmt."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"× Error: {exc}\n")

    log_file = args.log_file or config.log_file or DEFAULT_LOG_FILE
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    orchestrator = Orchestrator(config)
    try:
        files = orchestrator.discover(path=args.path, ref=args.ref)
    except DiscoveryError as exc:
        source = f"-c {args.ref}" if args.ref is not None else f"-f {args.path}"
        parser.exit(1, f"× Error: get go files by {source} as {exc}\n")

    if not files:
        print("Hint: no go files found for processing.")
        return
    listing = "\n".join(str(path) for path in files)
    print(f"» Comments will be added to these go files soon:\n{listing}\n")

    try:
        runner = LLMRunner.from_env(
            model=config.llm.model,
            base_url=config.llm.base_url,
            temperature=config.llm.temperature
            if config.llm.temperature is not None
            else LLMRunner.DEFAULT_TEMPERATURE,
            max_tokens=config.llm.max_tokens or LLMRunner.DEFAULT_MAX_TOKENS,
            request_timeout=config.llm.request_timeout or 120.0,
        )
    except AnnotationServiceError as exc:
        parser.exit(1, f"× Error: {exc}\n")

    summary = orchestrator.run(
        files,
        runner.run,
        concurrency=args.concurrency,
        on_start=_print_start,
        on_progress=_print_progress,
    )
    print(f"\nAll files processed. ({summary.succeeded} succeeded, {summary.failed} failed)")


if __name__ == "__main__":
    main(sys.argv[1:])
