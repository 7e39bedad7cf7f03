"""READ mode: decode the message stored in a DataMatrix image."""

from __future__ import annotations

import logging
from pathlib import Path

from datamatrix_tool import codec
from datamatrix_tool.console import EXIT_OK, Console
from datamatrix_tool.errors import FileIOError, NotFoundError
from datamatrix_tool.options import InvocationOptions, is_blank

logger = logging.getLogger(__name__)

MAX_SYMBOLS = 1


def read_datamatrix(options: InvocationOptions, console: Console) -> int:
    if is_blank(options.in_file) or not Path(options.in_file).is_file():
        raise NotFoundError(f"The file to be read '{options.in_file}' does not exist")

    img = codec.load_image(Path(options.in_file))
    logger.debug("loaded %s (%dx%d, mode %s)", options.in_file, img.width, img.height, img.mode)

    decoded = codec.decode(
        img,
        max_symbols=MAX_SYMBOLS,
        timeout_ms=options.timeout_ms,
        encoding=options.encoding,
    )
    if not decoded:
        console.print("Message could not be decoded")
        return EXIT_OK

    console.print("Message found:")
    for fragment in decoded:
        console.print(fragment, end="")
    console.print()

    if not is_blank(options.out_file):
        try:
            with open(options.out_file, "w", encoding=options.encoding, newline="") as fh:
                for fragment in decoded:
                    fh.write(fragment)
        except (OSError, UnicodeEncodeError) as exc:
            raise FileIOError(
                f"When trying to write decoded message to file '{options.out_file}' "
                f"an exception occurred:\n{exc}"
            ) from exc
        console.print(f"Message contents are in {options.out_file}")

    return EXIT_OK
