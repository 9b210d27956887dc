"""
Post-Processing Module for the pack slip pipeline.

This module provides functionality for:
    - OCR artifact repair at text and line level
    - Unit canonicalization and description cleanup
    - Fence product vocabulary (keywords, unit inference, categories)
"""

from .normalizers import (
    TextNormalizer,
    normalize_unit,
    clean_description,
    to_number
)
from .product_library import (
    contains_product_keyword,
    infer_unit,
    product_category,
    product_keyword_pattern
)

__all__ = [
    'TextNormalizer',
    'normalize_unit',
    'clean_description',
    'to_number',
    'contains_product_keyword',
    'infer_unit',
    'product_category',
    'product_keyword_pattern'
]
