"""
PDF Processor Module.

This module handles PDF file processing including:
    - Embedded text-layer extraction (pdfplumber)
    - Page rasterization for OCR (PyMuPDF, falling back to pdf2image)

Rasterization is exposed one page at a time through RasterizedPDF so
callers can stop early (page caps, cancellation) without rendering the
whole document up front.
"""

import io
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.exceptions import (
    ExtractionFailedError,
    RasterizerUnavailableError
)

# Initialize module logger
logger = get_logger(__name__)


def group_words_into_lines(words: List[Dict[str, Any]], tolerance: float = 5.0) -> List[str]:
    """
    Group positioned words into text lines.
    
    Words whose vertical position is within `tolerance` of a line's first
    word join that line. Lines are ordered top to bottom and words within a
    line left to right.
    
    Args:
        words: pdfplumber word dicts with 'text', 'x0' and 'top' keys.
        tolerance: Maximum vertical distance for the same line.
        
    Returns:
        List of line strings.
    """
    lines: List[Dict[str, Any]] = []
    
    for word in words:
        text = word.get('text', '')
        if not text:
            continue
        for line in lines:
            if abs(line['top'] - word['top']) <= tolerance:
                line['words'].append(word)
                break
        else:
            lines.append({'top': word['top'], 'words': [word]})
    
    lines.sort(key=lambda line: line['top'])
    return [
        " ".join(w['text'] for w in sorted(line['words'], key=lambda w: w['x0']))
        for line in lines
    ]


class RasterizedPDF:
    """
    Base class for page-by-page PDF renderers.
    
    Use as a context manager so backend resources are released.
    """
    
    backend = ""
    
    def __init__(self, dpi: int) -> None:
        self.dpi = dpi
    
    @property
    def page_count(self) -> int:
        raise NotImplementedError
    
    def render_page(self, page_number: int) -> Image.Image:
        """Render a 1-based page number to an RGB image."""
        raise NotImplementedError
    
    def close(self) -> None:
        pass
    
    def __enter__(self) -> "RasterizedPDF":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class _PyMuPDFPages(RasterizedPDF):
    """Renders pages with PyMuPDF (faster method)."""
    
    backend = "pymupdf"
    
    def __init__(self, fitz, pdf_bytes: bytes, dpi: int) -> None:
        super().__init__(dpi)
        self._fitz = fitz
        self._doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    
    @property
    def page_count(self) -> int:
        return self._doc.page_count
    
    def render_page(self, page_number: int) -> Image.Image:
        page = self._doc.load_page(page_number - 1)
        
        # Default PDF resolution is 72 DPI
        zoom = self.dpi / 72.0
        pix = page.get_pixmap(matrix=self._fitz.Matrix(zoom, zoom))
        image = Image.open(io.BytesIO(pix.tobytes("png")))
        
        if image.mode != 'RGB':
            image = image.convert('RGB')
        return image
    
    def close(self) -> None:
        self._doc.close()


class _Pdf2ImagePages(RasterizedPDF):
    """Renders pages with pdf2image (Poppler-based)."""
    
    backend = "pdf2image"
    
    def __init__(self, pdf2image, pdf_bytes: bytes, dpi: int) -> None:
        super().__init__(dpi)
        self._pdf2image = pdf2image
        self._pdf_bytes = pdf_bytes
        
        info = pdf2image.pdfinfo_from_bytes(pdf_bytes)
        self._page_count = int(info.get('Pages', 0))
    
    @property
    def page_count(self) -> int:
        return self._page_count
    
    def render_page(self, page_number: int) -> Image.Image:
        images = self._pdf2image.convert_from_bytes(
            self._pdf_bytes,
            dpi=self.dpi,
            first_page=page_number,
            last_page=page_number,
            fmt='png'
        )
        if not images:
            raise ValueError(f"pdf2image returned no image for page {page_number}")
        
        image = images[0]
        return image.convert('RGB') if image.mode != 'RGB' else image


class PDFProcessor:
    """
    Processor for PDF files.
    
    Handles both digital PDFs (with embedded text) and scanned PDFs
    (image-only). Converts PDF pages to images for OCR processing.
    
    Attributes:
        dpi: Resolution for PDF to image conversion
        line_tolerance: Vertical tolerance for grouping words into lines
        rasterizer: Preferred rasterizer ('auto', 'pymupdf' or 'pdf2image')
        
    Example:
        >>> processor = PDFProcessor()
        >>> text, page_count = processor.extract_text(pdf_bytes)
        >>> with processor.rasterize(pdf_bytes) as pages:
        ...     first = pages.render_page(1)
    """
    
    def __init__(self) -> None:
        """Initialize the PDF processor with configuration."""
        self.dpi = get_config("input.pdf.dpi", 300)
        self.line_tolerance = get_config("input.pdf.line_tolerance", 5)
        self.rasterizer = get_config("input.pdf.rasterizer", "auto")
        
        # Check for required libraries
        self._check_dependencies()
        
        logger.debug(f"PDFProcessor initialized (DPI={self.dpi}, rasterizer={self.rasterizer})")
    
    def _check_dependencies(self) -> None:
        """Detect which PDF processing libraries are available."""
        try:
            import pdf2image
            self._pdf2image = pdf2image
        except ImportError:
            logger.debug("pdf2image not available. Install with: pip install pdf2image")
            self._pdf2image = None
        
        try:
            import fitz  # PyMuPDF
            self._pymupdf = fitz
        except ImportError:
            logger.debug("PyMuPDF not available. Using pdf2image as primary.")
            self._pymupdf = None
        
        try:
            import pdfplumber
            self._pdfplumber = pdfplumber
        except ImportError:
            logger.warning("pdfplumber not available. PDF text extraction disabled.")
            self._pdfplumber = None
    
    def extract_text(
        self,
        pdf_bytes: bytes,
        name: str = "pdf",
        max_pages: Optional[int] = None
    ) -> Tuple[str, int]:
        """
        Extract the embedded text layer of a PDF.
        
        Pages are joined with a blank line. A page that fails to extract is
        logged and skipped.
        
        Args:
            pdf_bytes: Raw PDF content.
            name: File name used in log and error messages.
            max_pages: Optional cap on pages read.
            
        Returns:
            Tuple of (extracted text, possibly empty; document page count).
            
        Raises:
            ExtractionFailedError: If pdfplumber is missing or the document
                cannot be opened.
        """
        if self._pdfplumber is None:
            raise ExtractionFailedError(name, "pdfplumber is not installed")
        
        page_texts = []
        try:
            with self._pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                page_count = len(pdf.pages)
                pages = pdf.pages if max_pages is None else pdf.pages[:max_pages]
                for index, page in enumerate(pages, start=1):
                    try:
                        words = page.extract_words()
                        page_texts.append("\n".join(group_words_into_lines(words, self.line_tolerance)))
                    except Exception as e:
                        logger.warning(f"Text extraction failed on {name} page {index}: {e}")
        except Exception as e:
            raise ExtractionFailedError(name, f"Could not open PDF: {e}")
        
        text = "\n\n".join(page_texts)
        logger.debug(f"Text layer of {name} yielded {len(text.strip())} characters from {page_count} page(s)")
        return text, page_count
    
    def rasterize(self, pdf_bytes: bytes, dpi: Optional[int] = None) -> RasterizedPDF:
        """
        Open a PDF for page-by-page rendering.
        
        Args:
            pdf_bytes: Raw PDF content.
            dpi: Render resolution; defaults to the configured DPI.
            
        Returns:
            RasterizedPDF handle (use as a context manager).
            
        Raises:
            RasterizerUnavailableError: If no rasterizer library or system
                binary is available.
        """
        dpi = dpi or self.dpi
        use_pymupdf = self._pymupdf is not None and self.rasterizer in ("auto", "pymupdf")
        use_pdf2image = self._pdf2image is not None and self.rasterizer in ("auto", "pdf2image")
        
        if use_pymupdf:
            logger.debug("Using PyMuPDF for PDF conversion")
            return _PyMuPDFPages(self._pymupdf, pdf_bytes, dpi)
        
        if use_pdf2image:
            logger.debug("Using pdf2image for PDF conversion")
            from pdf2image.exceptions import PDFInfoNotInstalledError
            try:
                return _Pdf2ImagePages(self._pdf2image, pdf_bytes, dpi)
            except PDFInfoNotInstalledError as e:
                raise RasterizerUnavailableError(f"Poppler is not installed: {e}")
        
        raise RasterizerUnavailableError(
            "No PDF rasterizer available. Install PyMuPDF or pdf2image with Poppler."
        )
