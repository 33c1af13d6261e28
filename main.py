"""CLI entrypoint: convert a plain TeX bibliography to BibTeX."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date, datetime
from typing import IO, Any

from dotenv import load_dotenv

from converter import convert
from errors import BibError
from models import NO_DEFAULT_URLDATE, NO_DEFAULT_YEAR, ConverterConfig

URLDATE_FORMAT = "%Y-%m-%d"

EXIT_OK = 0
EXIT_CONVERSION_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags. Defaults come from TEX2BIB_* environment variables."""
    parser = argparse.ArgumentParser(description="Convert a plain TeX bibliography into BibTeX")
    parser.add_argument("--in", dest="input", default="-", help="The input file (default: stdin)")
    parser.add_argument("--out", dest="output", default="-", help="The output file (default: stdout)")
    parser.add_argument(
        "--default-year",
        default=os.getenv("TEX2BIB_DEFAULT_YEAR", str(NO_DEFAULT_YEAR)),
        help="The year to use when an entry has none (0: leave the year out)",
    )
    parser.add_argument(
        "--default-urldate",
        default=os.getenv("TEX2BIB_DEFAULT_URLDATE", ""),
        help="The urldate to stamp on every entry, formatted YYYY-MM-DD",
    )
    parser.add_argument(
        "--print-finished",
        action="store_true",
        help="Print a message when the conversion is finished",
    )
    return parser.parse_args(argv)


def parse_urldate(raw: str) -> date | None:
    """Parse a YYYY-MM-DD string; an empty string means no urldate."""
    if not raw:
        return NO_DEFAULT_URLDATE
    return datetime.strptime(raw, URLDATE_FORMAT).date()


def _open_input(path: str) -> IO[Any]:
    if path == "-":
        return sys.stdin.buffer
    return open(path, "rb")


def _open_output(path: str) -> IO[Any]:
    if path == "-":
        return sys.stdout.buffer
    return open(path, "wb")


def run(args: argparse.Namespace) -> int:
    """Run one conversion for the parsed flags and return the exit code."""
    try:
        default_year = int(args.default_year or NO_DEFAULT_YEAR)
    except ValueError:
        logging.error("Error in 'default-year' value: %r, expected an integer", args.default_year)
        return EXIT_USAGE

    try:
        visited = parse_urldate(args.default_urldate)
    except ValueError:
        logging.error("Error in 'default-urldate' format: %r, expected YYYY-MM-DD", args.default_urldate)
        return EXIT_USAGE

    try:
        input_stream = _open_input(args.input)
    except OSError as exc:
        logging.error("Error opening file %s: %s", args.input, exc)
        return EXIT_USAGE

    try:
        output_stream = _open_output(args.output)
    except OSError as exc:
        logging.error("Failed to open output file %s: %s", args.output, exc)
        if args.input != "-":
            input_stream.close()
        return EXIT_USAGE

    config = ConverterConfig(
        input=input_stream,
        output=output_stream,
        default_year=default_year,
        default_visited=visited,
    )

    exit_code = EXIT_OK
    try:
        written = convert(config)
    except (BibError, OSError, UnicodeDecodeError) as exc:
        logging.error("error: %s", exc)
        exit_code = EXIT_CONVERSION_FAILED
    else:
        logging.info("Converted %s entries from %s to %s", written, args.input, args.output)
    finally:
        try:
            output_stream.flush()
        except OSError as exc:
            logging.error("Error in flushing: %s", exc)
            exit_code = EXIT_CONVERSION_FAILED
        if args.output != "-":
            output_stream.close()
        if args.input != "-":
            input_stream.close()

    if exit_code == EXIT_OK and args.print_finished:
        print("Conversion finished")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the conversion."""
    load_dotenv()
    level_name = os.getenv("TEX2BIB_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    if not isinstance(level, int):
        logging.error("Error in 'TEX2BIB_LOG_LEVEL' value: %r", level_name)
        return EXIT_USAGE

    args = parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
