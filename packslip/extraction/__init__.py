"""
Text extraction for pack slips: scan classification and the
text-layer / OCR orchestrator.
"""

from .result import ExtractionMethod, ExtractionResult
from .scan_detector import looks_scanned, coerce_text
from .extractor import TextExtractor

__all__ = [
    'ExtractionMethod',
    'ExtractionResult',
    'looks_scanned',
    'coerce_text',
    'TextExtractor'
]
