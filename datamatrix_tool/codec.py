"""
DataMatrix and raster image collaborators.

Symbols are encoded and decoded with pylibdmtx (libdmtx bindings); images are
loaded, re-rendered and saved with Pillow. Decoding works on an 8-bit
grayscale copy prepared with OpenCV.

Dependencies:
  pip install pylibdmtx pillow opencv-python numpy
System:
  sudo apt install libdmtx0b libdmtx-dev
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError
from pylibdmtx.pylibdmtx import decode as dmtx_decode
from pylibdmtx.pylibdmtx import encode as dmtx_encode
from pylibdmtx.pylibdmtx_error import PyLibDMTXError

from datamatrix_tool.errors import DecodeError, EncodeError, FileIOError, InvalidImageError

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)

# extension -> Pillow format name
IMAGE_FORMATS = {
    ".png": "PNG",
    ".bmp": "BMP",
    ".gif": "GIF",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".tiff": "TIFF",
}
SUPPORTED_EXTENSIONS = tuple(IMAGE_FORMATS)


@dataclass(frozen=True)
class EncodeOptions:
    fg: Color = BLACK
    bg: Color = WHITE
    module_size: int = 8  # pixels per symbol cell
    margin_size: int = 60  # blank border in pixels
    scheme: str = "Ascii"
    shape: str = "SquareAuto"


def image_format_for(path: str) -> Optional[str]:
    """Pillow format for ``path``'s extension (case-insensitive), or None."""
    return IMAGE_FORMATS.get(Path(path.strip()).suffix.lower())


def _module_grid(raw: Image.Image) -> Image.Image:
    """
    Reduce a libdmtx rendering to one pixel per module.

    libdmtx draws with its own module size and quiet zone. The symbol is
    cropped to its dark bounding box; the top edge of a DataMatrix symbol
    alternates dark/light starting with a dark module, so the first dark run
    on that row gives the native module size.
    """
    gray = raw.convert("L")
    dark = gray.point(lambda p: 255 if p < 128 else 0)
    bbox = dark.getbbox()
    if bbox is None:
        raise EncodeError("The encoder produced an empty image")

    symbol = gray.crop(bbox)
    top_row = [symbol.getpixel((x, 0)) for x in range(symbol.width)]
    native = next((i for i, p in enumerate(top_row) if p >= 128), symbol.width)

    cols = max(1, symbol.width // native)
    rows = max(1, symbol.height // native)
    # Nearest-neighbour sampling lands on each module's centre.
    return symbol.resize((cols, rows), resample=Image.Resampling.NEAREST)


def recolor(img: Image.Image, fg: Color, bg: Color) -> Image.Image:
    """Threshold to 1-bit then paint ``fg`` where the image is dark."""
    gray = img.convert("L")
    bw = gray.point(lambda p: 0 if p < 128 else 255, mode="1")
    rgb = Image.new("RGB", bw.size, bg)
    mask = bw.point(lambda p: 255 if p == 0 else 0, mode="L")
    fg_img = Image.new("RGB", bw.size, fg)
    rgb.paste(fg_img, (0, 0), mask)
    return rgb


def encode(payload: str, options: EncodeOptions = EncodeOptions(), encoding: str = "utf-8") -> Image.Image:
    """Render ``payload`` as a DataMatrix symbol using ``options``."""
    try:
        data = payload.encode(encoding)
    except UnicodeEncodeError as exc:
        raise EncodeError(f"The data cannot be represented as {encoding}: {exc}") from exc

    try:
        enc = dmtx_encode(data, scheme=options.scheme, size=options.shape)
    except PyLibDMTXError as exc:
        raise EncodeError(f"The data could not be encoded as a datamatrix:\n{exc}") from exc

    # enc.pixels is raw RGB bytes
    raw = Image.frombytes("RGB", (enc.width, enc.height), enc.pixels)
    grid = _module_grid(raw)
    logger.debug("encoded %d bytes into a %dx%d symbol", len(data), grid.width, grid.height)

    scaled = grid.resize(
        (grid.width * options.module_size, grid.height * options.module_size),
        resample=Image.Resampling.NEAREST,
    )
    colored = recolor(scaled, fg=options.fg, bg=options.bg)
    return ImageOps.expand(colored, border=options.margin_size, fill=options.bg)


def _to_gray(image: Image.Image) -> np.ndarray:
    rgb = np.asarray(image.convert("RGB"))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)


def _run_decoder(gray: np.ndarray, max_symbols: int, timeout_ms: Optional[int]):
    try:
        return dmtx_decode(gray, timeout=timeout_ms, max_count=max_symbols)
    except PyLibDMTXError as exc:
        raise DecodeError(f"The image could not be decoded:\n{exc}") from exc


def decode(
    image: Image.Image,
    max_symbols: int = 1,
    timeout_ms: Optional[int] = None,
    encoding: str = "utf-8",
) -> List[str]:
    """
    Decode up to ``max_symbols`` symbols from ``image``.

    ``timeout_ms=None`` lets libdmtx search for as long as it needs. Returns
    the decoded payloads in the order found; an empty list means no symbol.
    """
    gray = _to_gray(image)
    results = _run_decoder(gray, max_symbols, timeout_ms)

    if not results:
        # Second pass on a binarised copy, helps with scans and photos.
        _, otsu = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        logger.debug("no symbol on first pass, retrying on Otsu threshold")
        results = _run_decoder(otsu, max_symbols, timeout_ms)

    decoded = [r.data.decode(encoding, errors="replace") for r in results]
    logger.debug("decoded %d symbol(s)", len(decoded))
    return decoded


def load_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            img.load()
            # detach from the file handle, multi-frame formats keep it open
            loaded = img.copy()
    except UnidentifiedImageError as exc:
        raise InvalidImageError(f"The file '{path}' is not a readable image:\n{exc}") from exc
    except OSError as exc:
        raise FileIOError(f"When loading image '{path}' an exception occurred:\n{exc}") from exc
    return loaded


def save_image(img: Image.Image, out_file: str) -> Path:
    """
    Save ``img`` in the container matching ``out_file``'s extension.

    An unknown extension gets ``.png`` appended and is saved as PNG. Returns
    the path actually written.
    """
    image_format = image_format_for(out_file)
    out_path = Path(out_file)
    if image_format is None:
        out_path = Path(out_file + ".png")
        image_format = "PNG"

    out_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(out_path, format=image_format)
    logger.debug("saved %s image to %s", image_format, out_path)
    return out_path
