from unittest import mock

import pytest
from PIL import Image

from datamatrix_tool import codec
from datamatrix_tool.errors import ConfigurationError, FileIOError, NotFoundError
from datamatrix_tool.options import InvocationOptions
from datamatrix_tool.write import LARGE_FILE_BYTES, write_datamatrix
from tests.conftest import make_console, output_of


def write_options(**kwargs):
    return InvocationOptions(write_mode=True, **kwargs)


@pytest.mark.parametrize(
    "sources",
    [
        {},
        {"text": "   "},
        {"in_file": "message.txt", "text": "HELLO"},
    ],
)
def test_exactly_one_source_required(sources, tmp_path, console):
    options = write_options(out_file=str(tmp_path / "out.png"), **sources)
    with mock.patch("datamatrix_tool.write.Path") as path_cls, mock.patch.object(codec, "encode") as encode:
        with pytest.raises(ConfigurationError, match="either the in-file or text switch"):
            write_datamatrix(options, console)

    path_cls.assert_not_called()
    encode.assert_not_called()


@pytest.mark.parametrize("out_file", [None, "", "out.txt", "out.pdf", "out"])
def test_unsupported_out_file_rejected_before_reading_payload(out_file, tmp_path, console):
    # the in-file does not exist: the format check must fire first
    options = write_options(in_file=str(tmp_path / "missing.txt"), out_file=out_file)
    with pytest.raises(ConfigurationError, match="Out-file was not in a supported format"):
        write_datamatrix(options, console)


def test_missing_in_file(tmp_path, console):
    options = write_options(in_file=str(tmp_path / "missing.txt"), out_file=str(tmp_path / "out.png"))
    with pytest.raises(NotFoundError, match="missing.txt"):
        write_datamatrix(options, console)


def test_whitespace_only_file_payload(tmp_path, console):
    src = tmp_path / "blank.txt"
    src.write_text(" \n\t\n")
    options = write_options(in_file=str(src), out_file=str(tmp_path / "out.png"))
    with pytest.raises(ConfigurationError, match="No data to encode"):
        write_datamatrix(options, console)


def test_unreadable_in_file(tmp_path, console):
    src = tmp_path / "latin1.txt"
    src.write_bytes("caf\xe9".encode("latin-1"))
    options = write_options(in_file=str(src), out_file=str(tmp_path / "out.png"))
    with pytest.raises(FileIOError, match="When reading file"):
        write_datamatrix(options, console)


@pytest.mark.parametrize("ext, fmt", [(".png", "PNG"), (".bmp", "BMP"), (".gif", "GIF"), (".jpg", "JPEG"), (".jpeg", "JPEG"), (".tiff", "TIFF")])
def test_text_written_in_requested_format(ext, fmt, tmp_path, console):
    out = tmp_path / f"out{ext}"
    status = write_datamatrix(write_options(text="HELLO", out_file=str(out)), console)

    assert status == 0
    with Image.open(out) as img:
        assert img.format == fmt
    assert "Encoding data..." in output_of(console)


def test_text_payload_is_used_verbatim(tmp_path, console):
    with mock.patch.object(codec, "encode", wraps=codec.encode) as encode:
        write_datamatrix(write_options(text="  HELLO  ", out_file=str(tmp_path / "out.png")), console)
    assert encode.call_args.args[0] == "  HELLO  "


def test_encode_uses_fixed_options(tmp_path, console):
    with mock.patch.object(codec, "encode", wraps=codec.encode) as encode:
        write_datamatrix(write_options(text="HELLO", out_file=str(tmp_path / "out.png")), console)

    options = encode.call_args.args[1]
    assert options.module_size == 8
    assert options.margin_size == 60
    assert options.fg == (0, 0, 0)
    assert options.bg == (255, 255, 255)


def large_file(tmp_path):
    src = tmp_path / "large.txt"
    src.write_text("A" * (LARGE_FILE_BYTES + 1))
    return src


@pytest.mark.parametrize("answer", ["n", "N", "", "q"])
def test_declining_large_file_writes_nothing(answer, tmp_path):
    console = make_console(answer)
    out = tmp_path / "out.png"
    with mock.patch.object(codec, "encode") as encode:
        status = write_datamatrix(write_options(in_file=str(large_file(tmp_path)), out_file=str(out)), console)

    assert status == 0
    assert "continue? (y/[n])" in output_of(console)
    encode.assert_not_called()
    assert not out.exists()


def test_accepting_large_file_encodes_it(tmp_path):
    console = make_console("y")
    out = tmp_path / "out.png"
    status = write_datamatrix(write_options(in_file=str(large_file(tmp_path)), out_file=str(out)), console)

    assert status == 0
    assert out.exists()


def test_small_file_is_not_confirmed(tmp_path):
    src = tmp_path / "small.txt"
    src.write_text("A" * LARGE_FILE_BYTES)
    console = make_console()
    with mock.patch.object(console, "confirm") as confirm:
        write_datamatrix(write_options(in_file=str(src), out_file=str(tmp_path / "out.png")), console)
    confirm.assert_not_called()


def test_save_failure_is_reported_not_fatal(tmp_path, console):
    out = tmp_path / "taken.png"
    out.mkdir()
    status = write_datamatrix(write_options(text="HELLO", out_file=str(out)), console)

    assert status == 0
    assert "When saving the datamatrix image an exception occurred" in output_of(console)


def test_directory_in_file_is_not_found(tmp_path):
    for i in range(200):
        (tmp_path / f"entry-{i:03d}.txt").write_text("x")
    console = make_console("y")
    with mock.patch.object(console, "confirm") as confirm:
        with pytest.raises(NotFoundError, match="does not exist"):
            write_datamatrix(write_options(in_file=str(tmp_path), out_file=str(tmp_path / "out.png")), console)
    confirm.assert_not_called()


def test_utf8_byte_order_mark_is_not_payload(tmp_path, console):
    src = tmp_path / "bom.txt"
    src.write_bytes(b"\xef\xbb\xbfHELLO")
    with mock.patch.object(codec, "encode", wraps=codec.encode) as encode:
        write_datamatrix(write_options(in_file=str(src), out_file=str(tmp_path / "out.png")), console)
    assert encode.call_args.args[0] == "HELLO"
