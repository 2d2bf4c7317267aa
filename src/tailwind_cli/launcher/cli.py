from __future__ import annotations

import argparse
import logging
from pathlib import Path

from tailwind_cli import __version__ as TAILWIND_CLI_VERSION
from tailwind_cli.common.config import RuntimeConfig
from tailwind_cli.common.errors import (
    ChecksumMismatchError,
    DownloadError,
    ExecutionError,
    MetadataUnavailableError,
    UnsupportedPlatformError,
)
from tailwind_cli.common.logging_utils import configure_logging
from tailwind_cli.common.types import RunOption, TailwindVersion
from tailwind_cli.tailwind import TailwindCLI


log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TOOL_FAILED = 1
EXIT_FETCH_FAILED = 2
EXIT_UNSUPPORTED_PLATFORM = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailwind-cli",
        description="Download, verify and run the tailwindcss-extra standalone CLI.",
    )
    parser.add_argument("--input", "-i", help="Input stylesheet passed to tailwindcss.")
    parser.add_argument("--output", "-o", help="Output stylesheet written by tailwindcss.")
    parser.add_argument("--directory", help="Cache root for downloaded releases.")
    parser.add_argument("--version", default="latest", help="Release to use: 'latest' or X.Y.Z.")
    parser.add_argument("--watch", action="store_true", help="Watch for changes and rebuild as needed.")
    parser.add_argument("--minify", action="store_true", help="Optimize and minify the output.")
    parser.add_argument("--optimize", action="store_true", help="Optimize the output without minifying.")
    parser.add_argument("--map", action="store_true", help="Generate a source map.")
    parser.add_argument(
        "--flag",
        action="append",
        default=[],
        metavar="FLAG",
        help="Extra flag passed verbatim to tailwindcss. Repeatable. Write values that start with "
        "a dash as --flag=--poll.",
    )
    parser.add_argument(
        "extra",
        nargs="*",
        metavar="-- FLAG",
        help="Flags after a bare -- are passed verbatim to tailwindcss.",
    )
    parser.add_argument("--no-strict", action="store_true", help="Skip checksum verification.")
    parser.add_argument("--fetch-only", action="store_true", help="Download the release and exit.")
    parser.add_argument("--log-level", default="INFO", help="Log level.")
    parser.add_argument("--log-dir", help="Also write logs to this directory.")
    parser.add_argument("-V", "--cli-version", action="version", version=TAILWIND_CLI_VERSION)
    return parser


def options_from_args(args: argparse.Namespace) -> list[RunOption]:
    options: list[RunOption] = []
    if args.watch:
        options.append(RunOption.WATCH)
    if args.minify:
        options.append(RunOption.MINIFY)
    if args.optimize:
        options.append(RunOption.OPTIMIZE)
    if args.map:
        options.append(RunOption.MAP)
    options.extend(RunOption.custom(flag) for flag in args.flag)
    options.extend(RunOption.custom(flag) for flag in args.extra)
    return options


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.fetch_only and (not args.input or not args.output):
        parser.error("--input and --output are required unless --fetch-only is given")

    configure_logging(args.log_level, Path(args.log_dir) if args.log_dir else None)

    try:
        version = TailwindVersion.parse(args.version)
    except ValueError as exc:
        parser.error(str(exc))

    cli = TailwindCLI(version, strict_mode=False if args.no_strict else None, runtime=RuntimeConfig.from_env())
    try:
        if args.fetch_only:
            assets = cli.download(args.directory)
            log.info("tailwindcss %s available at %s", assets.version, assets.executable)
            return EXIT_OK
        cli.run(args.input, args.output, directory=args.directory, options=options_from_args(args))
    except UnsupportedPlatformError as exc:
        log.error("%s", exc)
        return EXIT_UNSUPPORTED_PLATFORM
    except (MetadataUnavailableError, DownloadError, ChecksumMismatchError) as exc:
        log.error("Fetching tailwindcss failed: %s", exc)
        return EXIT_FETCH_FAILED
    except ExecutionError as exc:
        log.error("%s", exc)
        return EXIT_TOOL_FAILED
    except OSError as exc:
        log.exception("Filesystem error: %s", exc)
        return EXIT_FETCH_FAILED

    log.info("Wrote %s", args.output)
    return EXIT_OK
