import io

import pytest
from PIL import Image

from datamatrix_tool.console import Console


def make_console(keys: str = "", pause_enabled: bool = False) -> Console:
    """Console reading ``keys`` and writing to a StringIO."""
    return Console(stdin=io.StringIO(keys), stdout=io.StringIO(), pause_enabled=pause_enabled)


def output_of(console: Console) -> str:
    return console.stdout.getvalue()


@pytest.fixture
def console():
    return make_console()


@pytest.fixture
def blank_png(tmp_path):
    """A white image with no symbol in it."""
    path = tmp_path / "blank.png"
    Image.new("RGB", (200, 200), (255, 255, 255)).save(path)
    return path
