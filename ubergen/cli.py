"""CLI entrypoints for ubergen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import ManifestCorrectedError, UbergenError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the uber-package directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ubergen",
        description="Assemble jsii library packages into a single uber-package.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .ubergen.yml (defaults to the one in the package directory).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report corrections and failures.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Verify dependencies and assemble the merged source tree.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)

    verify_parser = subparsers.add_parser(
        "verify",
        help="Only check (and fix) the uber-package and workspace manifests.",
    )
    _add_verbose_option(verify_parser, suppress_default=True)
    _add_path_argument(verify_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for ubergen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )
    logger = get_logger("cli")

    try:
        config = load_config(args.config or Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = Orchestrator(config)

    try:
        if args.command == "build":
            outcome = orchestrator.run_build()
            print(f"Assembled {len(outcome.libraries)} libraries into {_relativize(outcome.output_root)}")
        elif args.command == "verify":
            verified = orchestrator.run_verify()
            print(f"Dependencies are consistent for {len(verified.libraries)} libraries")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ManifestCorrectedError as exc:
        parser.exit(1, f"{exc}\n")
    except (UbergenError, OSError) as exc:
        logger.error("An error occurred", exc_info=True)
        parser.exit(1, f"ubergen {args.command} failed: {exc}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
