from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from sb2backup.core.config import Settings
from sb2backup.core.errors import ConversionError
from sb2backup.core.logging import setup_logging
from sb2backup.main import create_app
from sb2backup.services.converter import backup_name_for, convert_file

logger = logging.getLogger("sb2backup.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a Smart Budget 2 db3 database into a .sb2backup file"
    )
    parser.add_argument("-i", dest="input", help="input file to process")
    parser.add_argument(
        "-o", dest="output", help="output file to write (default: <input>.sb2backup)"
    )
    parser.add_argument(
        "-port",
        "--port",
        dest="port",
        type=int,
        default=None,
        help="run web server on selected port, 0 to run as a command-line tool",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="do not report optional keys missing from DBKeyValue",
    )
    return parser


def run_server(settings: Settings) -> None:
    setup_logging(settings.log_level, settings.log_file)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


def convert(input_path: Path, output_path: Path, verbose: bool = True) -> int:
    print(f"Converting {input_path} -> {output_path}")
    try:
        conversion = convert_file(input_path, verbose=verbose)
    except ConversionError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        output_path.write_bytes(conversion.payload)
    except OSError as exc:
        print(f"Error saving file, {exc}", file=sys.stderr)
        return 1

    logger.info("Successfully exported %d commands", conversion.command_count)
    if conversion.last_command is not None:
        logger.info("Last command is %s", conversion.last_command)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings()

    port = settings.port if args.port is None else args.port
    if port:
        run_server(settings.model_copy(update={"port": port}))
        return 0

    if not args.input:
        parser.error("-i flag is mandatory")

    setup_logging(settings.log_level)
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else Path(backup_name_for(args.input))
    return convert(input_path, output_path, verbose=not args.quiet)


if __name__ == "__main__":
    raise SystemExit(main())
