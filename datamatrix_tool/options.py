from __future__ import annotations

import argparse
import codecs
import sys
from dataclasses import dataclass
from typing import List, Optional

from datamatrix_tool import __version__
from datamatrix_tool.codec import SUPPORTED_EXTENSIONS
from datamatrix_tool.console import EXIT_OK


@dataclass(frozen=True)
class InvocationOptions:
    """Parsed command line for one run."""

    read_mode: bool = False
    write_mode: bool = False
    in_file: Optional[str] = None
    text: Optional[str] = None
    out_file: Optional[str] = None

    encoding: str = "utf-8"
    timeout_ms: Optional[int] = None  # None: no decode deadline
    no_pause: bool = False
    verbose: bool = False

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> "InvocationOptions":
        return cls(
            read_mode=args.read,
            write_mode=args.write,
            in_file=args.in_file,
            text=args.text,
            out_file=args.out_file,
            encoding=args.encoding,
            timeout_ms=args.timeout_ms,
            no_pause=args.no_pause,
            verbose=args.verbose,
        )


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class _ArgumentParser(argparse.ArgumentParser):
    """Parse errors show usage and end the run with a neutral status."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_OK, f"{self.prog}: error: {message}\n")


def parse_positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer") from e
    if n <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return n


def parse_encoding(value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError as e:
        raise argparse.ArgumentTypeError(f"unknown encoding '{value}'") from e
    return value


def build_argparser() -> argparse.ArgumentParser:
    formats = ", ".join(f"*{ext}" for ext in SUPPORTED_EXTENSIONS)
    p = _ArgumentParser(
        prog="datamatrix-tool",
        description="Write text into a DataMatrix image, or read the text back out of one.",
    )
    p.add_argument(
        "-r", "--read",
        action="store_true",
        help="Sets mode to read an existing datamatrix image file.",
    )
    p.add_argument(
        "-w", "--write",
        action="store_true",
        help="Sets mode to write (or overwrite) a datamatrix image file.",
    )
    p.add_argument(
        "-f", "--in-file",
        default=None,
        metavar="FILE",
        help="In write mode: FILE containing text to be used in the datamatrix. "
        "In read mode: FILE containing a datamatrix image to decode.",
    )
    p.add_argument(
        "-t", "--text",
        default=None,
        help="Text to be represented in the datamatrix out-file.",
    )
    p.add_argument(
        "-o", "--out-file",
        default=None,
        metavar="FILE",
        help=f"In write mode: FILE generated containing the datamatrix image "
        f"(supported image formats: {formats}). "
        "In read mode: the decoded message will be written to FILE.",
    )
    p.add_argument(
        "-e", "--encoding",
        type=parse_encoding,
        default="utf-8",
        help="Text encoding for in-file, payload bytes and decoded output (default: utf-8).",
    )
    p.add_argument(
        "--timeout-ms",
        type=parse_positive_int,
        default=None,
        help="Give up decoding after this many milliseconds (default: no limit).",
    )
    p.add_argument(
        "--no-pause",
        action="store_true",
        help="Do not wait for a key press before exiting.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print diagnostic messages to stderr.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_args(argv: Optional[List[str]] = None) -> InvocationOptions:
    args = build_argparser().parse_args(argv)
    return InvocationOptions.from_namespace(args)
