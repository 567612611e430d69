"""certhooks command-line entry point.

Usage::

    certhooks -c /etc/certhooks/config.yaml --validate-only
    certhooks -c config.yaml list
    certhooks -c config.yaml run --certificate www --event challenge-http-01 \\
        --set domain=example.com --set file_name=TOKEN --set proof=TOKEN.THUMB
    python -m certhooks -c config.yaml list
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_HOOK_FAILED = 2


def _get_version() -> str:
    from certhooks import __version__

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certhooks",
        description="certhooks: run certificate lifecycle hooks",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Path to the configuration file (YAML or JSON).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration file and exit.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # list
    subparsers.add_parser("list", help="Show certificates and their hooks")

    # run
    run_parser = subparsers.add_parser("run", help="Run the hooks of one event")
    run_parser.add_argument("--certificate", required=True, help="Certificate name")
    run_parser.add_argument("--event", required=True, help="Lifecycle event name")
    run_parser.add_argument(
        "--set",
        dest="fields",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Context field (repeatable)",
    )
    run_parser.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra environment variable for the hooks (repeatable)",
    )

    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    print(f"certhooks: error: {message}", file=sys.stderr)  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Parses arguments, loads config, runs the command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # -- resolve config path ---
    config_path = Path(args.config)
    if not config_path.is_file():
        _print_error(f"configuration file not found: {config_path}")
        sys.exit(EXIT_CONFIG)

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # -- load & validate config ---
    try:
        from certhooks.config import CertHooksConfig, ConfigValidationError

        config = CertHooksConfig(config_file=config_path)
    except ConfigValidationError as exc:
        _print_error(str(exc))
        sys.exit(EXIT_CONFIG)
    except Exception as exc:
        if args.debug:
            raise
        _print_error(f"failed to load configuration: {exc}")
        sys.exit(EXIT_CONFIG)

    # -- replace bootstrap logging with structured logging ---
    from certhooks.logging import configure_logging

    configure_logging(config.settings.logging)
    if args.debug:
        logging.getLogger("certhooks").setLevel(logging.DEBUG)

    if args.validate_only:
        _print_settings_summary(config)
        sys.exit(EXIT_OK)

    command = args.command

    if command == "run":
        from certhooks.cli.commands.run import run_hooks

        sys.exit(run_hooks(config, args))
    elif command == "list":
        from certhooks.cli.commands.show import show_certificates

        show_certificates(config)
    else:
        _print_settings_summary(config)


def _print_settings_summary(config) -> None:
    """Print a short summary of the loaded configuration."""
    settings = config.settings
    print(  # noqa: T201
        f"Configuration OK: {len(settings.hooks)} hook(s), "
        f"{len(settings.groups)} group(s), "
        f"{len(settings.certificates)} certificate(s)",
    )
