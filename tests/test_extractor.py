"""
Tests for the text extraction orchestrator.

The PDF processor and OCR engine are replaced by fakes so the tests run
without Tesseract, Poppler or PyMuPDF installed.
"""

import io
import threading

import pytest
from PIL import Image

from packslip.extraction import ExtractionMethod, ExtractionResult, TextExtractor
from packslip.extraction import extractor as extractor_module
from packslip.input_handler import RasterizedPDF
from packslip.utils.exceptions import (
    ExtractionFailedError,
    OCREngineNotAvailableError,
    RasterizerUnavailableError,
    UnsupportedFileTypeError
)

PLACEHOLDER = "(No text could be extracted)"
RICH_TEXT = (
    "PACK SLIP\nCustomer PO 4471\nOrdered Shipped BackOrder Unit Description\n"
    "10 10 0 pc GALV DOME CAP 2-3/8\n24 24 0 ea TENSION BAND 2-3/8\n"
)


class FakePages(RasterizedPDF):
    """In-memory page handle; None entries fail to render"""

    backend = "fake"

    def __init__(self, pages):
        super().__init__(dpi=300)
        self.pages = pages
        self.rendered = []
        self.closed = False

    @property
    def page_count(self):
        return len(self.pages)

    def render_page(self, page_number):
        page = self.pages[page_number - 1]
        if page is None:
            raise RuntimeError("render failed")
        self.rendered.append(page_number)
        return page

    def close(self):
        self.closed = True


class FakePDFProcessor:
    def __init__(self, text="", page_count=1, pages=None, extract_error=None):
        self.text = text
        self.page_count = page_count
        self.pages = pages
        self.extract_error = extract_error

    def extract_text(self, pdf_bytes, name="pdf", max_pages=None):
        if self.extract_error is not None:
            raise self.extract_error
        return self.text, self.page_count

    def rasterize(self, pdf_bytes, dpi=None):
        if self.pages is None:
            raise RasterizerUnavailableError("No PDF rasterizer available")
        return self.pages


class FakeOCR:
    """Returns the 'image' itself as text, so pages can be plain strings"""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def recognize(self, image, language=None, name="image"):
        self.calls.append(name)
        if isinstance(image, str) and image in self.fail_on:
            raise RuntimeError("ocr failed")
        return image if isinstance(image, str) else "IMAGE TEXT from slip"


@pytest.fixture
def no_ocr(monkeypatch):
    """Make OCR engine construction fail as if Tesseract were missing"""
    def unavailable(*args, **kwargs):
        raise OCREngineNotAvailableError("tesseract", "not installed")

    monkeypatch.setattr(extractor_module, "OCREngine", unavailable)


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def test_pdf_with_text_layer_skips_ocr():
    ocr = FakeOCR()
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(RICH_TEXT, 2), ocr_engine=ocr)

    result = extractor.extract(b"%PDF", "application/pdf", "slip.pdf")

    assert result == ExtractionResult(RICH_TEXT, ExtractionMethod.PDF_TEXT, 2)
    assert ocr.calls == []


def test_scanned_pdf_without_rasterizer_returns_placeholder(no_ocr):
    """Blank text layer, no OCR or rasterizer: placeholder with text-layer page count"""
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("  \n ", 3))

    result = extractor.extract(b"%PDF", "application/pdf", "scan.pdf")

    assert result.method is ExtractionMethod.NONE
    assert result.text == PLACEHOLDER
    assert result.page_count == 3
    assert result.is_degraded


def test_thin_text_layer_kept_without_rasterizer(no_ocr):
    """Scanned-looking text is still better than a placeholder"""
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("Page 1", 3))

    result = extractor.extract(b"%PDF", "application/pdf", "scan.pdf")

    assert result == ExtractionResult("Page 1", ExtractionMethod.PDF_TEXT_PARTIAL, 3)


def test_scanned_pdf_with_ocr_but_no_rasterizer():
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("", 1), ocr_engine=FakeOCR())

    result = extractor.extract(b"%PDF", "", "scan.pdf")

    assert result.method is ExtractionMethod.NONE
    assert result.page_count == 1


def test_scanned_pdf_uses_ocr_when_richer():
    pages = FakePages(["page one 10 pc GALV CAP", "page two 5 pc TENSION BAND"])
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("", 2, pages), ocr_engine=FakeOCR())

    result = extractor.extract(b"%PDF", "application/pdf", "scan.pdf")

    assert result.method is ExtractionMethod.PDF_OCR
    assert result.text == "page one 10 pc GALV CAP\n\npage two 5 pc TENSION BAND"
    assert result.page_count == 2
    assert pages.closed


def test_thin_text_layer_kept_when_ocr_finds_less():
    pages = FakePages([""])
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("Page 1 of 1", 1, pages), ocr_engine=FakeOCR())

    result = extractor.extract(b"%PDF", "application/pdf", "scan.pdf")

    assert result == ExtractionResult("Page 1 of 1", ExtractionMethod.PDF_TEXT_PARTIAL, 1)


def test_ocr_stops_at_page_cap():
    pages = FakePages([f"page {n} text" for n in range(1, 6)])
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("", 5, pages), ocr_engine=FakeOCR())
    extractor.max_pages = 2

    result = extractor.extract(b"%PDF", "application/pdf", "long.pdf")

    assert pages.rendered == [1, 2]
    assert result.page_count == 2


def test_failed_pages_are_skipped():
    """A page that fails to render or recognize doesn't sink the document"""
    pages = FakePages(["first page text", None, "bad page", "last page text"])
    ocr = FakeOCR(fail_on={"bad page"})
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("", 4, pages), ocr_engine=ocr)

    result = extractor.extract(b"%PDF", "application/pdf", "mixed.pdf")

    assert result.method is ExtractionMethod.PDF_OCR
    assert result.text == "first page text\n\nlast page text"
    assert result.page_count == 3


def test_cancel_stops_page_ocr():
    pages = FakePages(["page one", "page two"])
    cancel = threading.Event()
    cancel.set()
    extractor = TextExtractor(pdf_processor=FakePDFProcessor("", 2, pages), ocr_engine=FakeOCR())

    result = extractor.extract(b"%PDF", "application/pdf", "scan.pdf", cancel=cancel)

    assert pages.rendered == []
    assert result.method is ExtractionMethod.NONE


def test_text_layer_failure_propagates():
    error = ExtractionFailedError("broken.pdf", "not a PDF")
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(extract_error=error), ocr_engine=FakeOCR())

    with pytest.raises(ExtractionFailedError):
        extractor.extract(b"garbage", "application/pdf", "broken.pdf")


def test_image_is_ocred():
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(), ocr_engine=FakeOCR())

    result = extractor.extract(png_bytes(), "image/png", "photo.png")

    assert result == ExtractionResult("IMAGE TEXT from slip", ExtractionMethod.OCR_IMAGE, 1)


def test_image_with_no_text_returns_placeholder():
    class BlankOCR(FakeOCR):
        def recognize(self, image, language=None, name="image"):
            return "  \n"

    extractor = TextExtractor(pdf_processor=FakePDFProcessor(), ocr_engine=BlankOCR())

    result = extractor.extract(png_bytes(), "", "photo.jpg")

    assert result == ExtractionResult(PLACEHOLDER, ExtractionMethod.NONE, 1)


def test_image_without_ocr_engine_returns_placeholder(no_ocr):
    extractor = TextExtractor(pdf_processor=FakePDFProcessor())

    result = extractor.extract(png_bytes(), "image/png", "photo.png")

    assert result.method is ExtractionMethod.NONE
    assert result.page_count == 1


def test_undecodable_image_fails():
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(), ocr_engine=FakeOCR())

    with pytest.raises(ExtractionFailedError):
        extractor.extract(b"not an image", "image/jpeg", "photo.jpg")


def test_oversized_image_fails(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(), ocr_engine=FakeOCR())

    with pytest.raises(ExtractionFailedError):
        extractor.extract(png_bytes(), "image/png", "big.png")


def test_unsupported_type_rejected():
    extractor = TextExtractor(pdf_processor=FakePDFProcessor(), ocr_engine=FakeOCR())

    with pytest.raises(UnsupportedFileTypeError):
        extractor.extract(b"hello", "text/plain", "notes.txt")


def test_result_dict_round_trip():
    result = ExtractionResult("text", "pdf-ocr", 4)

    assert result.method is ExtractionMethod.PDF_OCR
    assert ExtractionResult.from_dict(result.to_dict()) == result
