"""
Tests for file type detection, loading and image preparation.
"""

import io

import pytest
from PIL import Image

from packslip.input_handler import Document, ImageProcessor, InputHandler, group_words_into_lines
from packslip.utils.exceptions import (
    CorruptedFileError,
    DocumentNotFoundError,
    UnsupportedFileTypeError
)


@pytest.fixture
def handler():
    return InputHandler()


def png_bytes(size=(40, 20), mode="RGB"):
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.parametrize("mime_type, file_name, expected", [
    ("application/pdf", "slip.pdf", "pdf"),
    ("application/pdf", "", "pdf"),
    ("", "SLIP.PDF", "pdf"),
    ("application/octet-stream", "slip.pdf", "pdf"),
    ("image/jpeg", "photo", "image"),
    ("", "scan.JPG", "image"),
    (None, "scan.tiff", "image"),
])
def test_detect_file_type(handler, mime_type, file_name, expected):
    assert handler.detect_file_type(mime_type, file_name) == expected


@pytest.mark.parametrize("mime_type, file_name", [
    ("text/plain", "notes.txt"),
    ("", ""),
    (None, None),
    ("application/zip", "slips.zip"),
])
def test_detect_file_type_rejects_others(handler, mime_type, file_name):
    with pytest.raises(UnsupportedFileTypeError):
        handler.detect_file_type(mime_type, file_name)

    assert not handler.is_supported(mime_type, file_name)


def test_load_reads_bytes_and_guesses_mime(handler, tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes())

    document = handler.load(path)

    assert document.file_name == "photo.png"
    assert document.mime_type == "image/png"
    assert document.size == path.stat().st_size


def test_load_missing_file(handler, tmp_path):
    with pytest.raises(DocumentNotFoundError):
        handler.load(tmp_path / "missing.pdf")


def test_load_empty_file(handler, tmp_path):
    path = tmp_path / "empty.pdf"
    path.write_bytes(b"")

    with pytest.raises(CorruptedFileError):
        handler.load(path)


def test_load_unsupported_file(handler, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    with pytest.raises(UnsupportedFileTypeError):
        handler.load(path)


def test_list_files_filters_and_sorts(handler, tmp_path):
    for name in ["b.pdf", "a.PNG", "notes.txt"]:
        (tmp_path / name).write_bytes(b"x")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "c.jpg").write_bytes(b"x")

    assert [p.name for p in handler.list_files(tmp_path)] == ["a.PNG", "b.pdf"]
    assert sorted(p.name for p in handler.list_files(tmp_path, recursive=True)) == ["a.PNG", "b.pdf", "c.jpg"]


def test_document_repr_hides_content():
    document = Document(content=b"x" * 2048, mime_type="application/pdf", file_name="slip.pdf")

    assert "slip.pdf" in repr(document)
    assert "xxx" not in repr(document)


def test_group_words_into_lines():
    words = [
        {"text": "Shipped", "x0": 80, "top": 10.0},
        {"text": "Ordered", "x0": 10, "top": 11.5},
        {"text": "CAP", "x0": 60, "top": 30.2},
        {"text": "10", "x0": 5, "top": 30.0},
        {"text": "", "x0": 0, "top": 50.0},
    ]

    assert group_words_into_lines(words, tolerance=3) == ["Ordered Shipped", "10 CAP"]


def test_prepare_converts_to_rgb():
    processor = ImageProcessor()

    image = processor.prepare(png_bytes(mode="RGBA"), "photo.png")

    assert image.mode == "RGB"
    assert image.size == (40, 20)


def test_prepare_downscales_large_images():
    processor = ImageProcessor()
    processor.max_width = 100
    processor.max_height = 100

    image = processor.prepare(Image.new("L", (400, 200)))

    assert image.mode == "RGB"
    assert max(image.size) <= 100


def test_decode_rejects_garbage():
    with pytest.raises(CorruptedFileError):
        ImageProcessor().decode(b"definitely not an image", "photo.jpg")


def test_decode_rejects_oversized_image(monkeypatch):
    """Pillow's decompression bomb guard surfaces as a corrupted file"""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(CorruptedFileError):
        ImageProcessor().decode(png_bytes(size=(40, 20)), "big.png")
