"""
Extraction result types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ExtractionMethod(str, Enum):
    """How the text of a document was obtained."""
    PDF_TEXT = "pdf-text"
    PDF_TEXT_PARTIAL = "pdf-text-partial"
    PDF_OCR = "pdf-ocr"
    OCR_IMAGE = "ocr-image"
    NONE = "none"
    FAILED = "failed"


DEGRADED_METHODS = {ExtractionMethod.PDF_TEXT_PARTIAL, ExtractionMethod.NONE, ExtractionMethod.FAILED}


@dataclass
class ExtractionResult:
    """
    Outcome of one extraction attempt.
    
    Attributes:
        text: Extracted text, or a placeholder when nothing was extracted
        method: Extraction path that produced the text
        page_count: Pages seen by the extraction path that won
    """
    text: str
    method: ExtractionMethod
    page_count: int = 0
    
    def __post_init__(self) -> None:
        self.method = ExtractionMethod(self.method)
    
    @property
    def is_degraded(self) -> bool:
        """True when the text is partial, a placeholder, or missing."""
        return self.method in DEGRADED_METHODS
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'method': self.method.value,
            'page_count': self.page_count
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionResult":
        return cls(
            text=data.get('text', ''),
            method=ExtractionMethod(data.get('method', ExtractionMethod.NONE.value)),
            page_count=int(data.get('page_count', 0) or 0)
        )
