"""
Tests for the OCR engine and Tesseract backend.

pytesseract is replaced with a stand-in module so the tests don't need the
Tesseract binary.
"""

import sys
import types

import pytest
from PIL import Image

from packslip.ocr_engine import OCREngine, TesseractBackend
from packslip.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError


def fake_pytesseract(text="10 pc GALV CAP\n", version="5.3.0", error=None):
    module = types.ModuleType("pytesseract")
    module.calls = []

    def get_tesseract_version():
        if version is None:
            raise EnvironmentError("tesseract is not installed")
        return version

    def image_to_string(image, lang=None, config=None):
        module.calls.append({"mode": image.mode, "size": image.size, "lang": lang, "config": config})
        if error is not None:
            raise error
        return text

    module.get_tesseract_version = get_tesseract_version
    module.image_to_string = image_to_string
    module.get_languages = lambda: ["eng", "osd", "spa"]
    return module


@pytest.fixture
def tesseract(monkeypatch):
    module = fake_pytesseract()
    monkeypatch.setitem(sys.modules, "pytesseract", module)
    return module


def test_recognize_prepares_image_and_strips_text(tesseract):
    engine = OCREngine()

    text = engine.recognize(Image.new("L", (60, 30), 255), name="page 1")

    assert text == "10 pc GALV CAP"
    call = tesseract.calls[0]
    assert call["mode"] == "RGB"
    assert call["lang"] == "eng"
    assert call["config"] == "--psm 6 --oem 3"


def test_language_hint_overrides_config(tesseract):
    engine = OCREngine()

    engine.recognize(Image.new("RGB", (10, 10)), language="spa")

    assert tesseract.calls[0]["lang"] == "spa"


def test_unknown_backend_falls_back_to_tesseract(tesseract):
    engine = OCREngine(backend="cuneiform")

    assert engine.backend_name == "tesseract"
    assert isinstance(engine.backend, TesseractBackend)


def test_invalid_input_rejected(tesseract):
    with pytest.raises(OCRProcessingError):
        OCREngine().recognize("not an image")


def test_missing_binary_reported(monkeypatch):
    monkeypatch.setitem(sys.modules, "pytesseract", fake_pytesseract(version=None))

    with pytest.raises(OCREngineNotAvailableError):
        OCREngine()


def test_recognition_failure_wrapped(monkeypatch):
    monkeypatch.setitem(sys.modules, "pytesseract", fake_pytesseract(error=RuntimeError("crash")))

    with pytest.raises(OCRProcessingError):
        TesseractBackend().recognize(Image.new("RGB", (10, 10)))


def test_available_languages_skip_osd(tesseract):
    assert TesseractBackend().get_available_languages() == ["eng", "spa"]
