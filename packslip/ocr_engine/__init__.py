"""
OCR Engine Module for the pack slip pipeline.

Wraps Tesseract behind a small recognize() interface used for scanned
PDF pages and photographed slips.
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'TesseractBackend']
