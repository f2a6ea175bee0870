#!/usr/bin/env python3
"""sjavac/main.py — CLI entry-point for the s-Java verifier.

Usage examples
--------------
    # Verify a source file; prints 0, 1 or 2 on stdout
    sjavac program.sjava

    # Machine-readable diagnostics
    sjavac program.sjava --format json

    # Dump the validated scope tree (debugging aid)
    sjavac program.sjava --dump-scopes sexp -vv

Exit codes
----------
    0   The program is valid.
    1   The program is syntactically or semantically invalid.
    2   The file could not be read (missing, bad suffix, undecodable),
        or the command line itself is malformed.

The module doubles as ``python -m sjavac`` via ``sjavac/__main__.py``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from typing import Optional, Sequence, TextIO

from sjavac import __version__
from sjavac.config import VerifierConfig
from sjavac.errors import EXIT_SOURCE, SjavaError
from sjavac.verifier import (
    VerificationReport,
    check_file,
    scope_tree_to_dict,
    scope_tree_to_sexp,
)

_log = logging.getLogger("sjavac")

EXIT_INTERRUPTED: int = 130


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``sjavac`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("sjavac")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)


def _config_from_args(args: argparse.Namespace) -> VerifierConfig:
    return VerifierConfig(
        literal_aware_braces=not args.raw_braces,
        enforce_suffix=not args.no_suffix_check,
    )


def _emit_error(error: SjavaError, fmt: str, stream: TextIO) -> None:
    """Write *error* to *stream* in the chosen format."""
    if fmt == "json":
        stream.write(json.dumps(error.to_json()) + "\n")
    elif fmt == "gcc":
        stream.write(error.to_gcc_format() + "\n")
    else:
        stream.write(str(error) + "\n")


def _emit_scopes(report: VerificationReport, fmt: str, stream: TextIO) -> None:
    if report.root is None:
        return
    if fmt == "json":
        stream.write(json.dumps(scope_tree_to_dict(report.root), indent=2) + "\n")
    else:
        stream.write(scope_tree_to_sexp(report.root) + "\n")


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sjavac",
        description="Static verifier for s-Java source files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              sjavac program.sjava
              sjavac program.sjava --format gcc
              sjavac program.sjava --dump-scopes json -v
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument("file", metavar="FILE", help="The .sjava source file to verify.")
    parser.add_argument(
        "-f", "--format",
        choices=["summary", "gcc", "json"],
        default="summary",
        help="Diagnostic format on stderr (default: summary).",
    )
    parser.add_argument(
        "--dump-scopes",
        choices=["sexp", "json"],
        default=None,
        metavar="FMT",
        help="After a successful run, print the scope tree (sexp or json) on stderr.",
    )

    g = parser.add_argument_group("verifier tuning")
    g.add_argument(
        "--raw-braces",
        action="store_true",
        help="Count braces inside string/char literals when matching blocks.",
    )
    g.add_argument(
        "--no-suffix-check",
        action="store_true",
        help="Accept source files without the .sjava suffix.",
    )
    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the verifier CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_SOURCE

    _configure_logging(args.verbose)

    config = _config_from_args(args)
    problems = config.validate()
    if problems:
        for problem in problems:
            _log.error("invalid configuration: %s", problem)
        sys.stdout.write(f"{EXIT_SOURCE}\n")
        return EXIT_SOURCE

    try:
        report = check_file(args.file, config)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return EXIT_INTERRUPTED

    sys.stdout.write(f"{report.exit_code}\n")
    if report.error is not None:
        _emit_error(report.error, args.format, sys.stderr)
    elif args.dump_scopes:
        # The dumps nest one level per scope; the verdict above stands.
        try:
            _emit_scopes(report, args.dump_scopes, sys.stderr)
        except RecursionError:
            _log.error("scope tree is nested too deeply to dump")
    return report.exit_code


# ---------------------------------------------------------------------------
# Module execution support
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
