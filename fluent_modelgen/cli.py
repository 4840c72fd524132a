"""Command line front end.

Usage:
    python -m fluent_modelgen src -o generated
    python -m fluent_modelgen src -o generated --skip library.models.Draft
    python -m fluent_modelgen src -o generated --debug

Exit Codes:
    0 - Success: every generation root was emitted
    1 - Errors: at least one error diagnostic was reported
    2 - Usage error: bad arguments or missing source directory
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fluent_modelgen.adapters.filesystem import DirectoryFiler
from fluent_modelgen.core.diagnostics import DiagnosticCollector
from fluent_modelgen.core.options import ProcessorOptions
from fluent_modelgen.core.processor import ModelProcessor
from fluent_modelgen.core.sources import discover_sources

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fluent_modelgen",
        description="Generate fluent metamodel accessor modules for mapped entity classes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", type=Path, help="Root directory of the entity sources")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        required=True,
        help="Directory receiving the generated modules",
    )
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="NAME",
        help="Class to exclude from generation (qualified or simple name); repeatable",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Report a note per generated or skipped class",
    )
    return parser


def main(args: list[str] | None = None) -> int:
    """Run one generation batch. Returns the process exit code."""
    parsed = _parser().parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if parsed.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not parsed.source.is_dir():
        logger.error("Source directory not found: %s", parsed.source)
        return 2

    options = ProcessorOptions(skip=parsed.skip, debug=parsed.debug)
    messager = DiagnosticCollector()
    processor = ModelProcessor(DirectoryFiler(parsed.output), messager, options)
    result = processor.process(discover_sources(parsed.source))

    for module in result.generated:
        print(module)
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
