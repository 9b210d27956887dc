"""
Input Handler Module for the pack slip pipeline.

This module provides functionality for:
    - Detecting file types (PDF vs Image)
    - Loading input files as Documents
    - Reading the embedded PDF text layer
    - Rasterizing PDF pages for OCR
    - Preparing images for OCR
"""

from .handler import Document, InputHandler
from .pdf_processor import PDFProcessor, RasterizedPDF, group_words_into_lines
from .image_processor import ImageProcessor

__all__ = [
    'Document',
    'InputHandler',
    'PDFProcessor',
    'RasterizedPDF',
    'group_words_into_lines',
    'ImageProcessor'
]
