"""
Command-line interface.

    usdtgen fmt [--format python|decl|defn] SOURCE
    usdtgen emit SOURCE [-o DIR]
    usdtgen check SOURCE PYFILE...

Errors are printed to stderr as ``path:line:column: message`` and the
process exits with status 1.
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .checker import check_path
from .pipeline import ArtifactKind, compile_file, emit, generate_artifact
from .utils.config import get_config, load_config, set_config
from .utils.exceptions import ProbeSyntaxError, UsdtError, ValidationError
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usdtgen",
        description="Generate USDT probe trampolines and Python bindings from provider definitions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to a YAML or JSON configuration file.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (defaults to the configured level).",
    )
    parser.add_argument(
        "--max-args",
        type=int,
        help="Maximum number of arguments per probe (defaults to the configured limit).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fmt_parser = subparsers.add_parser("fmt", help="Print one generated artifact to stdout.")
    fmt_parser.add_argument(
        "--format",
        choices=[kind.value for kind in ArtifactKind],
        default=ArtifactKind.PYTHON.value,
        help="Artifact to print (default: python).",
    )
    fmt_parser.add_argument("source", help="Provider definition file (.d).")

    emit_parser = subparsers.add_parser("emit", help="Write all three artifacts to a directory.")
    emit_parser.add_argument("source", help="Provider definition file (.d).")
    emit_parser.add_argument(
        "-o", "--out-dir", default=".", help="Output directory (default: current directory)."
    )

    check_parser = subparsers.add_parser("check", help="Check probe fire call sites in Python files.")
    check_parser.add_argument("source", help="Provider definition file (.d).")
    check_parser.add_argument("files", nargs="+", help="Python files to check.")

    return parser


def _format_error(error: UsdtError, source: Optional[str]) -> List[str]:
    if isinstance(error, ValidationError):
        lines = []
        for issue in error.errors:
            position = getattr(issue, "position", None)
            prefix = f"{source}:{position}" if position is not None else source
            lines.append(f"{prefix}: {issue}")
        return lines
    if isinstance(error, ProbeSyntaxError):
        return [f"{source}:{error}"]
    return [str(error)]


def _run(args) -> int:
    if args.command == "fmt":
        provider_file = compile_file(args.source, args.max_args)
        sys.stdout.write(generate_artifact(provider_file, args.format).content)
        return 0

    if args.command == "emit":
        for path in emit(args.source, args.out_dir, args.max_args):
            print(path)
        return 0

    provider_file = compile_file(args.source, args.max_args)
    errors = []
    for path in args.files:
        errors.extend(check_path(provider_file, path))
    for error in errors:
        print(error, file=sys.stderr)
    return 1 if errors else 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for usdtgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config:
            set_config(load_config(args.config))
        config = get_config()
        setup_logging(
            args.log_level or config.logging.level,
            config.logging.log_file if config.logging.enable_file_logging else None,
        )
        return _run(args)
    except UsdtError as e:
        for line in _format_error(e, getattr(args, "source", None)):
            print(line, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"usdtgen: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
