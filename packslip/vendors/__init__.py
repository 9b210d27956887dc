"""
Vendor registry and detection.
"""

from .registry import VendorProfile, VendorRegistry, get_registry
from .detection import (
    DetectionSource,
    VendorDetection,
    resolve_vendor,
    AUTO_CONFIDENCE
)

__all__ = [
    'VendorProfile',
    'VendorRegistry',
    'get_registry',
    'DetectionSource',
    'VendorDetection',
    'resolve_vendor',
    'AUTO_CONFIDENCE'
]
