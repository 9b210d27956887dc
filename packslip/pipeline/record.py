"""
Pack slip record: the stored state of one document as it moves through
the pipeline.

    uploaded -> extracted -> review -> submitted
    uploaded -> failed    (extraction error)
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from packslip.utils.helpers import utc_now_iso
from packslip.extraction.result import ExtractionResult
from packslip.vendors.detection import VendorDetection
from packslip.parser.line_item import LineItem


class PackSlipStatus(str, Enum):
    UPLOADED = "uploaded"
    EXTRACTED = "extracted"
    REVIEW = "review"
    SUBMITTED = "submitted"
    FAILED = "failed"


def new_record_id() -> str:
    return str(uuid.uuid4())


@dataclass
class PackSlipRecord:
    """
    One uploaded pack slip and everything derived from it.
    
    Attributes:
        id: Record id (uuid4)
        status: Pipeline state
        file_name: Original file name
        mime_type: Declared MIME type
        file_size: Upload size in bytes
        extraction: Extraction result, once extracted
        vendor: Vendor detection
        line_items: Parsed (or reviewed) line items
        metadata: Reviewer-supplied fields (PO number, job, notes, ...)
        errors: Error messages recorded along the way
        created_at: ISO-8601 UTC creation time
        updated_at: ISO-8601 UTC time of the last change
        submitted_at: ISO-8601 UTC submission time
    """
    file_name: str = ""
    mime_type: str = ""
    file_size: int = 0
    id: str = field(default_factory=new_record_id)
    status: PackSlipStatus = PackSlipStatus.UPLOADED
    extraction: Optional[ExtractionResult] = None
    vendor: VendorDetection = field(default_factory=VendorDetection.pending)
    line_items: List[LineItem] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    submitted_at: Optional[str] = None
    
    def __post_init__(self) -> None:
        self.status = PackSlipStatus(self.status)
    
    @property
    def extracted_text(self) -> str:
        return self.extraction.text if self.extraction else ""
    
    def touch(self) -> None:
        self.updated_at = utc_now_iso()
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'status': self.status.value,
            'file_name': self.file_name,
            'mime_type': self.mime_type,
            'file_size': self.file_size,
            'extraction': self.extraction.to_dict() if self.extraction else None,
            'vendor': self.vendor.to_dict(),
            'line_items': [item.to_dict() for item in self.line_items],
            'metadata': dict(self.metadata),
            'errors': list(self.errors),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'submitted_at': self.submitted_at
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackSlipRecord":
        extraction = data.get('extraction')
        return cls(
            id=data['id'],
            status=PackSlipStatus(data.get('status', PackSlipStatus.UPLOADED.value)),
            file_name=data.get('file_name') or '',
            mime_type=data.get('mime_type') or '',
            file_size=int(data.get('file_size') or 0),
            extraction=ExtractionResult.from_dict(extraction) if extraction else None,
            vendor=VendorDetection.from_dict(data.get('vendor')),
            line_items=[LineItem.from_dict(item) for item in data.get('line_items') or []],
            metadata=dict(data.get('metadata') or {}),
            errors=list(data.get('errors') or []),
            created_at=data.get('created_at') or utc_now_iso(),
            updated_at=data.get('updated_at') or utc_now_iso(),
            submitted_at=data.get('submitted_at')
        )
