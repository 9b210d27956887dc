"""
Pack Slip Pipeline Module.

Wires the pipeline together for one document:

    create record -> extract text -> detect vendor -> parse -> review
    review -> (human edits) -> submit -> webhook

Usage:
    from packslip.pipeline import PackSlipPipeline
    from packslip.input_handler import InputHandler
    
    pipeline = PackSlipPipeline()
    record = pipeline.process(InputHandler().load("slip.pdf"))
    print(record.status, len(record.line_items))
"""

import threading
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.dedupe import DedupeCache
from packslip.utils.helpers import utc_now_iso
from packslip.utils.exceptions import ExtractionFailedError, WebhookDeliveryError
from packslip.input_handler import Document
from packslip.extraction import ExtractionMethod, ExtractionResult, TextExtractor
from packslip.postprocessor.normalizers import TextNormalizer, to_number
from packslip.parser import LineItem, LineItemParser
from packslip.vendors import VendorRegistry, get_registry, resolve_vendor
from .record import PackSlipRecord, PackSlipStatus

if TYPE_CHECKING:
    from packslip.output_handler import PackSlipStore, WebhookForwarder

# Initialize module logger
logger = get_logger(__name__)


def normalize_submitted_items(items: Optional[Iterable[Union[LineItem, Dict[str, Any]]]]) -> List[LineItem]:
    """
    Coerce reviewer-edited items into LineItems.
    
    Blank descriptions, units and notes become "", and a quantity that is
    not numeric becomes 0. Reviewed items are kept as entered.
    """
    normalized = []
    for item in items or []:
        data = item.to_dict() if isinstance(item, LineItem) else dict(item or {})
        normalized.append(LineItem(
            sku=str(data.get('sku') or ''),
            description=str(data.get('description') or ''),
            quantity=to_number(data.get('quantity')) or 0,
            unit=str(data.get('unit') or ''),
            price=to_number(data.get('price')) or 0,
            notes=str(data.get('notes') or '')
        ))
    return normalized


def build_webhook_payload(record: PackSlipRecord) -> Dict[str, Any]:
    """Build the downstream payload for a submitted record."""
    extraction = record.extraction
    return {
        'id': record.id,
        'status': record.status.value,
        'metadata': dict(record.metadata),
        'lineItems': [item.to_dict() for item in record.line_items],
        'extractedText': record.extracted_text,
        'file': {
            'name': record.file_name,
            'mimeType': record.mime_type,
            'size': record.file_size
        },
        'extractMeta': {
            'method': extraction.method.value if extraction else None,
            'pageCount': extraction.page_count if extraction else 0,
            'vendor': record.vendor.to_dict()
        }
    }


class PackSlipPipeline:
    """
    End-to-end pack slip processing.
    
    Every collaborator can be injected; defaults are built from
    configuration.
    
    Attributes:
        extractor: Text extraction orchestrator
        parser: Line-item parser
        registry: Vendor registry
        store: Record persistence
        forwarder: Webhook forwarder used by submit()
        dedupe: Duplicate-event cache used by ingest_event()
        
    Example:
        >>> pipeline = PackSlipPipeline(store=PackSlipStore(":memory:"))
        >>> record = pipeline.process(document, vendor_id="stephens-pipe-steel")
        >>> record.vendor.confidence
        1.0
    """
    
    def __init__(
        self,
        extractor: Optional[TextExtractor] = None,
        parser: Optional[LineItemParser] = None,
        registry: Optional[VendorRegistry] = None,
        store: Optional["PackSlipStore"] = None,
        forwarder: Optional["WebhookForwarder"] = None,
        normalizer: Optional[TextNormalizer] = None,
        dedupe: Optional[DedupeCache] = None
    ) -> None:
        from packslip.output_handler import PackSlipStore, WebhookForwarder
        
        self.extractor = extractor or TextExtractor()
        self.parser = parser or LineItemParser()
        self.registry = registry if registry is not None else get_registry()
        self.store = store if store is not None else PackSlipStore()
        self.forwarder = forwarder or WebhookForwarder()
        self.normalizer = normalizer or TextNormalizer()
        self.dedupe = dedupe if dedupe is not None else DedupeCache(get_config("events.dedupe_ttl_seconds", 300))
        
        logger.debug("PackSlipPipeline initialized")
    
    def process(
        self,
        document: Document,
        vendor_id: Optional[str] = None,
        cancel: Optional[threading.Event] = None
    ) -> PackSlipRecord:
        """
        Extract, detect the vendor of, and parse one document.
        
        Args:
            document: Uploaded file.
            vendor_id: Vendor chosen by the user, if any.
            cancel: Optional event to stop PDF page OCR early.
            
        Returns:
            The stored record, in review (or failed if extraction threw).
            
        Raises:
            UnsupportedFileTypeError: Before any record is created.
        """
        self.extractor.input_handler.detect_file_type(document.mime_type, document.file_name)
        
        record = self.store.create(PackSlipRecord(
            file_name=document.file_name,
            mime_type=document.mime_type,
            file_size=document.size
        ))
        logger.info(f"Processing {document.file_name} as record {record.id}")
        
        try:
            extraction = self.extractor.extract_document(document, cancel=cancel)
        except ExtractionFailedError as e:
            logger.error(f"Extraction failed for {document.file_name}: {e.message}")
            record.extraction = ExtractionResult("", ExtractionMethod.FAILED, 0)
            record.status = PackSlipStatus.FAILED
            record.errors.append(e.message)
            return self.store.save(record)
        
        record.extraction = extraction
        record.status = PackSlipStatus.EXTRACTED
        self.store.save(record)
        
        self._analyze(record, vendor_id)
        return self.store.save(record)
    
    def _analyze(self, record: PackSlipRecord, vendor_id: Optional[str]) -> None:
        """Detect the vendor and parse line items; moves the record to review."""
        text = record.extracted_text
        
        detection, profile = resolve_vendor(self.normalizer.normalize_text(text), vendor_id, self.registry)
        record.vendor = detection
        record.line_items = self.parser.parse(text, profile)
        record.status = PackSlipStatus.REVIEW
        
        logger.info(
            f"Record {record.id}: vendor={detection.vendor_id or 'unknown'} "
            f"({detection.source.value}), {len(record.line_items)} line items"
        )
    
    def reparse(self, record_id: str, vendor_id: Optional[str] = None) -> PackSlipRecord:
        """
        Re-run vendor detection and parsing on stored text.
        
        Args:
            record_id: Record id.
            vendor_id: Vendor chosen by the user, if any.
            
        Raises:
            RecordNotFoundError: If no record has this id.
            ValueError: If the record was already submitted or has no text.
        """
        record = self.store.get(record_id)
        if record.status is PackSlipStatus.SUBMITTED:
            raise ValueError(f"Record {record_id} was already submitted")
        if record.extraction is None or record.status is PackSlipStatus.FAILED:
            raise ValueError(f"Record {record_id} has no extracted text")
        
        self._analyze(record, vendor_id)
        return self.store.save(record)
    
    def submit(
        self,
        record_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        line_items: Optional[Iterable[Union[LineItem, Dict[str, Any]]]] = None
    ) -> PackSlipRecord:
        """
        Store the reviewed items and forward the pack slip downstream.
        
        Args:
            record_id: Record id.
            metadata: Reviewer-supplied fields, merged into the record.
            line_items: Reviewed items; the parsed items are kept when None.
            
        Returns:
            The submitted record.
            
        Raises:
            RecordNotFoundError: If no record has this id.
            WebhookDeliveryError: If delivery fails; the record stays in
                review with the error recorded.
        """
        record = self.store.get(record_id)
        
        record.metadata.update(metadata or {})
        if line_items is not None:
            record.line_items = normalize_submitted_items(line_items)
        record.errors = []
        record.status = PackSlipStatus.SUBMITTED
        record.submitted_at = utc_now_iso()
        
        try:
            result = self.forwarder.send(build_webhook_payload(record))
        except WebhookDeliveryError as e:
            record.status = PackSlipStatus.REVIEW
            record.submitted_at = None
            record.errors.append(f"{e.message}: {e.details.get('reason')}")
            self.store.save(record)
            raise
        
        if result.get("skipped"):
            logger.warning(f"Record {record.id} submitted without webhook delivery")
        
        logger.info(f"Record {record.id} submitted with {len(record.line_items)} line items")
        return self.store.save(record)
    
    def ingest_event(
        self,
        event_id: str,
        document: Document,
        vendor_id: Optional[str] = None
    ) -> Optional[PackSlipRecord]:
        """
        Process a document delivered by an upstream event at most once.
        
        Args:
            event_id: Upstream event id.
            document: File attached to the event.
            vendor_id: Vendor chosen by the user, if any.
            
        Returns:
            The new record, or None for a duplicate event.
        """
        if self.dedupe.seen(event_id):
            logger.info(f"Duplicate event {event_id} ignored")
            return None
        return self.process(document, vendor_id=vendor_id)
