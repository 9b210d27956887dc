"""
Text Extraction Orchestrator.

Turns an uploaded file into text, choosing between the PDF text layer, OCR
of rasterized PDF pages, and OCR of an uploaded image:

    image  -> OCR                                      (ocr-image)
    PDF    -> text layer, unless it looks scanned      (pdf-text)
           -> OCR of each page when the layer is thin  (pdf-ocr, if richer)
           -> thin text layer kept as best effort      (pdf-text-partial)
           -> placeholder when nothing was extracted   (none)

Pages are rendered and recognized one at a time. A page that fails to
render or recognize is logged and skipped.

Usage:
    from packslip.extraction import TextExtractor
    
    extractor = TextExtractor()
    result = extractor.extract(pdf_bytes, "application/pdf", "slip.pdf")
    print(result.method, result.page_count)
"""

import threading
from typing import Optional, Tuple

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.exceptions import (
    CorruptedFileError,
    ExtractionBackendUnavailableError,
    ExtractionFailedError,
    OCREngineNotAvailableError,
    RasterizerUnavailableError
)
from packslip.input_handler import Document, InputHandler, ImageProcessor, PDFProcessor
from packslip.ocr_engine import OCREngine
from .result import ExtractionMethod, ExtractionResult
from .scan_detector import looks_scanned

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_PLACEHOLDER = "(No text could be extracted)"


class TextExtractor:
    """
    Extracts text from pack slip PDFs and images.
    
    extract() only raises for unsupported file types and for hard failures
    of the PDF text-layer extractor (or undecodable image bytes). Missing
    OCR or rasterization backends degrade the result instead of failing.
    
    Attributes:
        input_handler: File type detection
        pdf_processor: Text layer and rasterization
        image_processor: Image decoding
        max_pages: Maximum number of pages rasterized for OCR
        placeholder_text: Text returned when nothing could be extracted
        
    Example:
        >>> extractor = TextExtractor()
        >>> result = extractor.extract(content, "image/jpeg", "slip.jpg")
        >>> result.method
        <ExtractionMethod.OCR_IMAGE: 'ocr-image'>
    """
    
    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        ocr_engine: Optional[OCREngine] = None,
        input_handler: Optional[InputHandler] = None,
        image_processor: Optional[ImageProcessor] = None
    ) -> None:
        self.input_handler = input_handler or InputHandler()
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.image_processor = image_processor or ImageProcessor()
        self.max_pages = get_config("input.pdf.max_pages", 20)
        self.placeholder_text = get_config("extraction.placeholder_text", DEFAULT_PLACEHOLDER)
        
        self._ocr_engine = ocr_engine
        self._ocr_error: Optional[OCREngineNotAvailableError] = None
        self._ocr_lock = threading.Lock()
    
    def _get_ocr_engine(self) -> OCREngine:
        """
        Return the OCR engine, creating it on first use.
        
        Raises:
            OCREngineNotAvailableError: If the engine cannot run here. The
                failure is remembered so later documents skip OCR quickly.
        """
        with self._ocr_lock:
            if self._ocr_engine is not None:
                return self._ocr_engine
            if self._ocr_error is not None:
                raise self._ocr_error
            try:
                self._ocr_engine = OCREngine(image_processor=self.image_processor)
            except OCREngineNotAvailableError as e:
                self._ocr_error = e
                raise
            return self._ocr_engine
    
    def _placeholder(self, page_count: int) -> ExtractionResult:
        return ExtractionResult(self.placeholder_text, ExtractionMethod.NONE, page_count)
    
    def extract(
        self,
        content: bytes,
        mime_type: Optional[str],
        file_name: Optional[str],
        cancel: Optional[threading.Event] = None
    ) -> ExtractionResult:
        """
        Extract text from an uploaded file.
        
        Args:
            content: Raw file bytes.
            mime_type: Declared MIME type, possibly empty.
            file_name: Original file name, possibly empty.
            cancel: Optional event; once set, no further PDF pages are
                rasterized and the pages already recognized are used.
                
        Returns:
            ExtractionResult.
            
        Raises:
            UnsupportedFileTypeError: If the file is neither PDF nor image.
            ExtractionFailedError: If the PDF text layer cannot be read or
                the image bytes cannot be decoded.
        """
        file_type = self.input_handler.detect_file_type(mime_type, file_name)
        name = file_name or file_type
        
        logger.info(f"Extracting text from {name} ({file_type})")
        
        if file_type == 'image':
            result = self._extract_image(content, name)
        else:
            result = self._extract_pdf(content, name, cancel)
        
        logger.info(
            f"Extraction finished for {name}: method={result.method.value}, "
            f"pages={result.page_count}, characters={len(result.text)}"
        )
        return result
    
    def extract_document(self, document: Document, cancel: Optional[threading.Event] = None) -> ExtractionResult:
        """Extract text from a Document."""
        return self.extract(document.content, document.mime_type, document.file_name, cancel=cancel)
    
    def _extract_image(self, content: bytes, name: str) -> ExtractionResult:
        try:
            image = self.image_processor.decode(content, name)
        except CorruptedFileError as e:
            raise ExtractionFailedError(name, e.message)
        
        try:
            engine = self._get_ocr_engine()
        except ExtractionBackendUnavailableError as e:
            logger.warning(f"OCR unavailable, cannot read image {name}: {e.message}")
            return self._placeholder(page_count=1)
        
        try:
            text = engine.recognize(image, name=name)
        except Exception as e:
            logger.warning(f"OCR failed for image {name}: {e}")
            text = ""
        
        if not text.strip():
            return self._placeholder(page_count=1)
        
        return ExtractionResult(text, ExtractionMethod.OCR_IMAGE, 1)
    
    def _extract_pdf(self, content: bytes, name: str, cancel: Optional[threading.Event]) -> ExtractionResult:
        pdf_text, page_count = self.pdf_processor.extract_text(content, name=name)
        
        if not looks_scanned(pdf_text):
            return ExtractionResult(pdf_text, ExtractionMethod.PDF_TEXT, page_count)
        
        logger.info(f"{name} looks scanned ({len(pdf_text.strip())} characters in text layer), trying OCR")
        
        ocr_text, ocr_pages = self._ocr_pdf_pages(content, name, cancel)
        if len(ocr_text.strip()) > len(pdf_text.strip()):
            return ExtractionResult(ocr_text, ExtractionMethod.PDF_OCR, ocr_pages)
        
        if pdf_text.strip():
            logger.info(f"Keeping partial text layer for {name}")
            return ExtractionResult(pdf_text, ExtractionMethod.PDF_TEXT_PARTIAL, page_count)
        
        logger.warning(f"No text could be extracted from {name}")
        return self._placeholder(page_count)
    
    def _ocr_pdf_pages(
        self,
        content: bytes,
        name: str,
        cancel: Optional[threading.Event]
    ) -> Tuple[str, int]:
        """
        Rasterize and OCR PDF pages sequentially.
        
        Returns:
            Tuple of (page texts joined by blank lines, pages rasterized).
            ("", 0) when OCR or rasterization is unavailable.
        """
        try:
            engine = self._get_ocr_engine()
        except ExtractionBackendUnavailableError as e:
            logger.warning(f"OCR unavailable, skipping OCR fallback for {name}: {e.message}")
            return "", 0
        
        try:
            pages = self.pdf_processor.rasterize(content)
        except RasterizerUnavailableError as e:
            logger.warning(f"Rasterizer unavailable, skipping OCR fallback for {name}: {e.message}")
            return "", 0
        except Exception as e:
            logger.error(f"Could not open {name} for rasterization: {e}")
            return "", 0
        
        texts = []
        rendered = 0
        
        with pages:
            try:
                total = pages.page_count
            except Exception as e:
                logger.error(f"Could not count pages of {name}: {e}")
                return "", 0

            if total > self.max_pages:
                logger.warning(f"{name} has {total} pages, limiting OCR to {self.max_pages}")
                total = self.max_pages
            
            for page_number in range(1, total + 1):
                if cancel is not None and cancel.is_set():
                    logger.info(f"Extraction of {name} cancelled after {rendered} page(s)")
                    break
                
                try:
                    image = pages.render_page(page_number)
                except Exception as e:
                    logger.warning(f"Failed to render {name} page {page_number}: {e}")
                    continue
                
                rendered += 1
                
                try:
                    text = engine.recognize(image, name=f"{name} page {page_number}")
                except Exception as e:
                    logger.warning(f"OCR failed for {name} page {page_number}: {e}")
                    continue
                
                if text.strip():
                    texts.append(text)
        
        logger.debug(f"OCR fallback for {name}: {rendered} page(s) rasterized using {pages.backend}")
        return "\n\n".join(texts), rendered
