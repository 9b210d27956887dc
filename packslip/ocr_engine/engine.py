"""
Main OCR Engine Module.

This module provides the OCREngine class, the single entry point the
extraction layer uses to turn an image (or encoded image bytes) into text.

Usage:
    from packslip.ocr_engine import OCREngine
    
    engine = OCREngine()
    text = engine.recognize(image)
"""

from typing import Optional, Union

from PIL import Image

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.exceptions import OCRProcessingError
from packslip.input_handler.image_processor import ImageProcessor
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Unified OCR interface.
    
    Images are run through ImageProcessor.prepare before recognition so
    photos, scans and rendered PDF pages get the same treatment.
    
    Supported Backends:
        - tesseract: Tesseract OCR (default)
    
    Attributes:
        backend_name: Name of the active OCR backend
        backend: The active OCR backend instance
        
    Raises:
        OCREngineNotAvailableError: From the constructor when the backend
            cannot run on this machine.
        
    Example:
        >>> engine = OCREngine()
        >>> text = engine.recognize(png_bytes, language="eng")
    """
    
    SUPPORTED_BACKENDS = ['tesseract']
    
    def __init__(self, backend: Optional[str] = None, image_processor: Optional[ImageProcessor] = None) -> None:
        self.backend_name = backend or get_config("ocr.engine", "tesseract")
        
        if self.backend_name == "pytesseract":
            self.backend_name = "tesseract"
        
        if self.backend_name not in self.SUPPORTED_BACKENDS:
            logger.warning(
                f"Unknown backend '{self.backend_name}', falling back to tesseract"
            )
            self.backend_name = "tesseract"
        
        self.backend = TesseractBackend()
        self.image_processor = image_processor or ImageProcessor()
        
        logger.info(f"OCR Engine initialized with backend: {self.backend_name}")
    
    def recognize(
        self,
        image: Union[Image.Image, bytes],
        language: Optional[str] = None,
        name: str = "image"
    ) -> str:
        """
        Recognize text on an image.
        
        Args:
            image: PIL Image or encoded image bytes.
            language: Optional OCR language hint.
            name: Name used in log and error messages.
            
        Returns:
            Recognized text (may be empty).
            
        Raises:
            CorruptedFileError: If bytes cannot be decoded as an image.
            OCRProcessingError: If recognition fails.
        """
        if not isinstance(image, (Image.Image, bytes, bytearray)):
            raise OCRProcessingError(name, "Invalid image input")
        
        prepared = self.image_processor.prepare(image, name=name)
        
        logger.debug(f"Recognizing {name} using {self.backend_name} backend")
        return self.backend.recognize(prepared, language=language, name=name)
