"""WRITE mode: turn a text file or literal text into a DataMatrix image."""

from __future__ import annotations

import codecs
import logging
from pathlib import Path
from typing import Optional

from datamatrix_tool import codec
from datamatrix_tool.console import EXIT_OK, Console
from datamatrix_tool.errors import ConfigurationError, FileIOError, NotFoundError
from datamatrix_tool.options import InvocationOptions, is_blank

logger = logging.getLogger(__name__)

# in-files above this many bytes need the operator's go-ahead
LARGE_FILE_BYTES = 1000

ENCODE_OPTIONS = codec.EncodeOptions()


def check_sources(options: InvocationOptions) -> None:
    # can only use text or file, not both
    if is_blank(options.in_file) == is_blank(options.text):
        raise ConfigurationError(
            "You must specify either the in-file or text switch when writing a "
            "datamatrix image however you cannot use both switches"
        )


def check_out_file(options: InvocationOptions) -> None:
    if is_blank(options.out_file) or not options.out_file.strip().lower().endswith(codec.SUPPORTED_EXTENSIONS):
        raise ConfigurationError("Out-file was not in a supported format")


def source_encoding(encoding: str) -> str:
    """UTF-8 in-files may start with a byte order mark; it is not payload."""
    if codecs.lookup(encoding).name == "utf-8":
        return "utf-8-sig"
    return encoding


def read_in_file(options: InvocationOptions, console: Console) -> Optional[str]:
    """
    Contents of the in-file, or None if the operator declined a large file.
    """
    path = Path(options.in_file)
    if not path.is_file():
        raise NotFoundError(f"The in-file '{options.in_file}' does not exist")

    size = path.stat().st_size
    if size > LARGE_FILE_BYTES:
        logger.debug("%s is %d bytes, asking for confirmation", path, size)
        if not console.confirm("You are trying to encode a large file this may take some time... continue? (y/[n])"):
            return None

    try:
        # newline="" keeps CRLF line endings in the payload
        with open(path, encoding=source_encoding(options.encoding), newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIOError(f"When reading file '{options.in_file}' an exception occurred:\n{exc}") from exc


def write_datamatrix(options: InvocationOptions, console: Console) -> int:
    check_sources(options)
    check_out_file(options)

    # what is to be encoded into the datamatrix
    if not is_blank(options.in_file):
        data = read_in_file(options, console)
        if data is None:
            return EXIT_OK
    else:
        data = options.text

    if is_blank(data):
        raise ConfigurationError("No data to encode, aborting...")

    console.print("Encoding data...")
    img = codec.encode(data, ENCODE_OPTIONS, encoding=options.encoding)

    try:
        out_path = codec.save_image(img, options.out_file.strip())
    except (OSError, ValueError) as exc:
        logger.debug("saving %s failed", options.out_file, exc_info=True)
        console.print(f"When saving the datamatrix image an exception occurred:\n{exc}")
        return EXIT_OK

    console.print("Generated Data Matrix")
    console.print(f"  Output file : {out_path}")
    console.print(f"  Image size  : {img.size[0]} x {img.size[1]} px")
    return EXIT_OK
