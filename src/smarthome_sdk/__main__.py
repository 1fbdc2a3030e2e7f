"""Smarthome SDK command line."""

import truststore

truststore.inject_into_ssl()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import logging  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

from rich.console import Console  # noqa: E402
from rich.text import Text  # noqa: E402

logger = logging.getLogger(__name__)

error_console = Console(stderr=True)

_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _setup_logging(log_level_str: str) -> None:
    """Configure root logger with consistent timestamp format."""
    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt=_LOG_DATE_FORMAT,
    )


def _parse_script_arg(value: str) -> tuple[str, str]:
    key, sep, arg_value = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{value}'")
    return key, arg_value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smarthome-sdk",
        description="Interact with a Smarthome server. Connection settings are read "
        "from SMARTHOME_* environment variables or a .env file.",
    )
    parser.add_argument("-V", "--version", action="store_true", help="print the SDK version")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("version", help="show the server version")

    run = subparsers.add_parser("run", help="run or lint a Homescript file")
    run.add_argument("file", type=Path, help="Homescript source file")
    run.add_argument("--lint", action="store_true", help="only lint the code")
    run.add_argument(
        "--arg",
        dest="args",
        action="append",
        default=[],
        type=_parse_script_arg,
        metavar="KEY=VALUE",
        help="argument passed to the script (repeatable)",
    )

    subparsers.add_parser("export", help="print the exported server configuration")
    return parser


async def _run_command(args: argparse.Namespace, code: str | None) -> int:
    from smarthome_sdk import __version__
    from smarthome_sdk.client.rest_client import SmarthomeClient
    from smarthome_sdk.config import get_global_settings
    from smarthome_sdk.homescript.models import HomescriptArg

    settings = get_global_settings()

    async with await SmarthomeClient.connect(
        settings.smarthome_url, settings.auth_strategy(), timeout=settings.timeout
    ) as client:
        if args.command == "version":
            info = client.version_info
            print(f"Smarthome server {info.version} (Go {info.go_version})")
            print(f"smarthome-sdk {__version__}")
            return 0

        if args.command == "export":
            print(await client.export_config())
            return 0

        result = await client.exec_homescript_code(
            code or "",
            [HomescriptArg(key=key, value=value) for key, value in args.args],
            lint=args.lint,
        )
        if result.output:
            print(result.output, end="" if result.output.endswith("\n") else "\n")
        for report in result.render_errors(color=error_console.is_terminal):
            error_console.print(Text.from_ansi(report), end="\n\n", soft_wrap=True)
        return 0 if result.success else 1


def main() -> None:
    """Run the command line interface."""
    parser = build_parser()
    args = parser.parse_args()

    if args.version:
        from importlib.metadata import version

        print(f"smarthome-sdk {version('smarthome-sdk')}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    from pydantic import ValidationError

    from smarthome_sdk.config import get_global_settings
    from smarthome_sdk.errors import SmarthomeError, explain

    try:
        settings = get_global_settings()
        settings.auth_strategy()
    except (ValidationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    _setup_logging(settings.log_level)

    code = None
    if args.command == "run":
        try:
            code = args.file.read_text(encoding="utf-8")
        except OSError as e:
            print(f"Could not read {args.file}: {e}", file=sys.stderr)
            sys.exit(1)

    try:
        sys.exit(asyncio.run(_run_command(args, code)))
    except SmarthomeError as e:
        logger.debug("Command failed", exc_info=True)
        print(explain(e), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
