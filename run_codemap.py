#!/usr/bin/env python3
"""
Command-line entry point for codemap extraction.

Extracts imports and declarations from a source file or directory tree and
prints them as markdown or JSON, followed by the token total.

Usage:
    python run_codemap.py src/
    python run_codemap.py src/lib.rs --docs
    python run_codemap.py ./web --public-only --format json --workers 8
    python run_codemap.py ./svc --config codemap.yml --report-dir output/run_reports
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import replace
from typing import List, Optional, Sequence

from codemap.errors import UnsupportedLanguageError
from codemap.extractor import ExtractionStats, extract_directory, extract_file
from codemap.models import Codemap
from codemap.render import codemap_to_json, render_codemaps
from codemap.tokens import SUPPORTED_ENCODINGS, TokenCounter
from core.run_artifacts import build_run_report, write_run_report
from core.startup_config import (
    OUTPUT_FORMATS,
    ConfigValidationError,
    RunConfig,
    load_run_config,
    resolve_strict_config_validation,
)
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNSUPPORTED = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="codemap",
        description="Extract a compact declaration map from Rust, TypeScript, JavaScript, Python and Go sources.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  codemap src/\n"
            "  codemap src/lib.rs --docs\n"
            "  codemap ./web --public-only --format json\n"
        ),
    )

    parser.add_argument("source", help="Source file or directory to extract from.")
    parser.add_argument(
        "--docs",
        action="store_true",
        default=None,
        help="Include documentation comments and docstrings.",
    )
    parser.add_argument(
        "--public-only",
        action="store_true",
        default=False,
        help="Only emit Public declarations, members and fields.",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format. Default: text (or the config file's output_format).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads for directory extraction.",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML run configuration.")
    parser.add_argument(
        "--encoding",
        default=None,
        help=f"Token encoding ({', '.join(SUPPORTED_ENCODINGS)}).",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Write a JSON run report into this directory.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level. Default: WARNING",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail fast on invalid configuration instead of falling back to defaults.",
    )

    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> RunConfig:
    """Load the run config and apply command-line overrides on top."""
    config = load_run_config(args.config, strict=args.strict_config)
    overrides = {}
    if args.docs:
        overrides["include_docs"] = True
    if args.public_only:
        overrides["include_private"] = False
    if args.format:
        overrides["output_format"] = args.format
    if args.workers is not None:
        if args.workers < 1:
            raise ConfigValidationError("--workers must be a positive integer")
        overrides["max_workers"] = args.workers
    if args.encoding:
        overrides["encoding"] = TokenCounter(args.encoding).encoding
    if args.report_dir:
        overrides["report_dir"] = args.report_dir
    return replace(config, **overrides)


def extract_source(source: str, config: RunConfig) -> tuple[List[Codemap], ExtractionStats]:
    """Extract a single file or a whole directory.

    Raises:
        FileNotFoundError: If source does not exist.
        UnsupportedLanguageError: If a single file has no supported extension.
    """
    options = config.to_extract_options()
    counter = TokenCounter(config.encoding)

    if os.path.isfile(source):
        codemap = extract_file(source, options, token_counter=counter)
        stats = ExtractionStats()
        stats.record(codemap)
        return [codemap], stats

    if os.path.isdir(source):
        return extract_directory(
            source,
            options,
            max_workers=config.max_workers,
            languages=config.languages or None,
            token_counter=counter,
        )

    raise FileNotFoundError(f"Source not found: {source}")


def format_output(codemaps: List[Codemap], config: RunConfig) -> str:
    if config.output_format == "json":
        return codemap_to_json(codemaps)
    total = sum(c.token_count for c in codemaps)
    return f"{render_codemaps(codemaps)}\nTotal: {total} tokens\n"


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line and return its exit code."""
    args = parse_args(argv)
    configure_structured_logging(level=args.log_level)
    run_id = set_run_id()

    config: Optional[RunConfig] = None
    stats = ExtractionStats()
    status = "failed"
    error: Optional[str] = None
    exit_code = EXIT_FAILURE

    try:
        with phase_scope("config"):
            config = resolve_config(args)

        t0 = time.time()
        with phase_scope("extract"):
            codemaps, stats = extract_source(args.source, config)
        logger.info(f"Extraction completed in {time.time() - t0:.2f}s: {stats}")

        if not codemaps:
            error = f"No supported source files found in {args.source}"
            logger.error(error)
        else:
            with phase_scope("render"):
                sys.stdout.write(format_output(codemaps, config))
            status = "success"
            exit_code = EXIT_OK

    except UnsupportedLanguageError as e:
        logger.error(f"Unsupported input: {e}")
        error = str(e)
        exit_code = EXIT_UNSUPPORTED
    except (FileNotFoundError, ConfigValidationError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        error = str(e)
    except Exception as e:
        logger.error(f"Extraction failed: {e}", exc_info=True)
        error = str(e)

    if config is not None and config.report_dir:
        report = build_run_report(
            args.source,
            status,
            stats=stats.to_dict(),
            config=config.to_dict(),
            error=error,
        )
        report_path = write_run_report(report, run_id, config.report_dir)
        logger.info("Run report written: %s", report_path)

    return exit_code


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
