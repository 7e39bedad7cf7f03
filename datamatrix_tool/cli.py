#!/usr/bin/env python3

"""
Convert between text and DataMatrix images.

Usage:
  datamatrix-tool --write --text "HELLO" --out-file out.png
  datamatrix-tool --write --in-file message.txt --out-file out.tiff
  datamatrix-tool --read --in-file out.png [--out-file message.txt]

Exactly one mode runs per invocation; --write wins if both are given.
Failures print a message, wait for a key and exit with status -1.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from datamatrix_tool.console import EXIT_OK, Console
from datamatrix_tool.errors import DatamatrixToolError
from datamatrix_tool.options import InvocationOptions, parse_args
from datamatrix_tool.read import read_datamatrix
from datamatrix_tool.write import write_datamatrix

logger = logging.getLogger(__name__)


def run(options: InvocationOptions, console: Console) -> int:
    if options.write_mode:
        return write_datamatrix(options, console)
    if options.read_mode:
        return read_datamatrix(options, console)
    logger.debug("neither --read nor --write given, nothing to do")
    return EXIT_OK


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    options = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    if console is None:
        console = Console(pause_enabled=not options.no_pause)

    try:
        status = run(options, console)
    except DatamatrixToolError as exc:
        console.abort("{0}", exc)
    except Exception as exc:
        logger.debug("unhandled exception", exc_info=True)
        console.abort("An unexpected error occurred:\n{0}", exc)

    if options.write_mode or options.read_mode:
        console.pause()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
