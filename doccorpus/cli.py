"""CLI entrypoints for doccorpus commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, DocCorpusConfig, load_config
from .logging import configure_logging
from .pipeline import Pipeline, validate_corpus


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=CONFIG_FILENAME,
        help=f"Path to the configuration file or its directory (defaults to ./{CONFIG_FILENAME}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doccorpus",
        description="Build and validate a documentation corpus from source projects.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Regenerate the corpus, navigation and summary, then validate them.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_config_option(build_parser)
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run every step but write nothing.",
    )
    build_parser.add_argument(
        "--base-path",
        action="append",
        default=None,
        help="Scan this directory for projects instead of the configured descriptors (repeatable).",
    )
    build_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of projects processed in parallel.",
    )
    build_parser.add_argument(
        "--date",
        default=None,
        help="Value written to lastUpdated (YYYY-MM-DD); defaults to today.",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate an existing corpus without regenerating it.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    _add_config_option(validate_parser)
    validate_parser.add_argument(
        "--docs-dir",
        default=None,
        help="Corpus directory to validate (defaults to the configured output directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for doccorpus commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    try:
        config = load_config(Path(args.config).expanduser())
    except ConfigError as exc:
        parser.exit(2, f"Invalid configuration: {exc}\n")

    if args.command == "build":
        _apply_build_overrides(config, args)
        dry_run = bool(getattr(args, "dry_run", False))
        pipeline = Pipeline(config, today=args.date, dry_run=dry_run)
        try:
            outcome = pipeline.run()
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"doccorpus build failed: {exc}\nRun with --verbose for more details.\n")
        for issue in outcome.issues:
            print(f"{issue.severity.upper()}: {issue}")
        if outcome.report is not None:
            print(outcome.report.render())
        documents = len(outcome.documents)
        suffix = " (dry-run)" if dry_run else ""
        print(f"{documents} documents for {outcome.summary.total_projects} projects{suffix}")
        if not outcome.passed:
            parser.exit(1, "Build finished with errors.\n")
    elif args.command == "validate":
        docs_dir = Path(args.docs_dir).expanduser().resolve() if args.docs_dir else None
        report = validate_corpus(config, docs_dir=docs_dir)
        print(report.render())
        if not report.passed:
            parser.exit(1, "Fix all errors before publishing the corpus.\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _apply_build_overrides(config: DocCorpusConfig, args: argparse.Namespace) -> None:
    if args.base_path:
        config.projects = []
        config.scan.base_paths = [Path(value).expanduser().resolve() for value in args.base_path]
    if args.workers is not None:
        config.workers = max(1, args.workers)


if __name__ == "__main__":
    main(sys.argv[1:])
