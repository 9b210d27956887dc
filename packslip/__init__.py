"""
Pack Slip Pipeline - Source Package.

This package contains the core modules of the pack slip pipeline, which
turns supplier pack slips (PDFs and photos) into structured line items.

Modules:
    - input_handler: File type detection, PDF text layer and rasterization, image preparation
    - ocr_engine: Tesseract OCR
    - extraction: Scanned-document detection and text extraction orchestration
    - postprocessor: OCR text normalization and the fence product library
    - vendors: Vendor registry and detection
    - parser: Line-item parser strategies
    - pipeline: Pack slip records and end-to-end processing
    - output_handler: SQLite record store and webhook forwarding

Architecture:
    Input → Extraction (text layer / OCR) → Vendor Detection → Line-Item Parsing → Review → Webhook
                                                                                     ↓
                                                                                  Storage
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'ocr_engine',
    'extraction',
    'postprocessor',
    'vendors',
    'parser',
    'pipeline',
    'output_handler',
    'utils'
]
