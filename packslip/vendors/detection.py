"""
Vendor detection results.

A user-selected vendor always wins over auto-detection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from packslip.utils.logger import get_logger
from .registry import VendorProfile, VendorRegistry, get_registry

logger = get_logger(__name__)

# Keyword matches are unverified
AUTO_CONFIDENCE = 0.8
USER_CONFIDENCE = 1.0


class DetectionSource(str, Enum):
    USER = "user"
    AUTO = "auto"
    NONE = "none"
    PENDING = "pending"


@dataclass(frozen=True)
class VendorDetection:
    """
    How a document's vendor was determined.
    
    Attributes:
        vendor_id: Detected vendor id, or None
        source: user, auto, none or pending
        confidence: 1.0 for user, 0.8 for auto, 0 otherwise
    """
    vendor_id: Optional[str]
    source: DetectionSource
    confidence: float
    
    @classmethod
    def from_user(cls, vendor_id: str) -> "VendorDetection":
        return cls(vendor_id, DetectionSource.USER, USER_CONFIDENCE)
    
    @classmethod
    def from_auto(cls, vendor_id: str) -> "VendorDetection":
        return cls(vendor_id, DetectionSource.AUTO, AUTO_CONFIDENCE)
    
    @classmethod
    def none(cls) -> "VendorDetection":
        return cls(None, DetectionSource.NONE, 0.0)
    
    @classmethod
    def pending(cls) -> "VendorDetection":
        return cls(None, DetectionSource.PENDING, 0.0)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'vendor_id': self.vendor_id,
            'source': self.source.value,
            'confidence': self.confidence
        }
    
    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "VendorDetection":
        if not data:
            return cls.pending()
        source = DetectionSource(data.get('source', DetectionSource.PENDING.value))
        vendor_id = data.get('vendor_id')
        if source is DetectionSource.USER:
            return cls.from_user(vendor_id)
        if source is DetectionSource.AUTO:
            return cls.from_auto(vendor_id)
        if source is DetectionSource.NONE:
            return cls.none()
        return cls.pending()


def resolve_vendor(
    text: Optional[str],
    user_vendor_id: Optional[str] = None,
    registry: Optional[VendorRegistry] = None
) -> Tuple[VendorDetection, Optional[VendorProfile]]:
    """
    Determine the vendor of a document.
    
    Args:
        text: Extracted document text.
        user_vendor_id: Vendor chosen by the user, if any.
        registry: Vendor registry; defaults to the shared one.
        
    Returns:
        Tuple of (VendorDetection, matching VendorProfile or None).
    """
    if registry is None:
        registry = get_registry()
    
    if user_vendor_id:
        profile = registry.get(user_vendor_id)
        if profile is not None:
            return VendorDetection.from_user(profile.id), profile
        logger.warning(f"Unknown vendor id '{user_vendor_id}', falling back to auto-detection")
    
    profile = registry.detect(text)
    if profile is None:
        logger.info("No vendor detected")
        return VendorDetection.none(), None
    
    logger.info(f"Auto-detected vendor: {profile.display_name}")
    return VendorDetection.from_auto(profile.id), profile
