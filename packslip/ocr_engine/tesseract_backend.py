"""
Tesseract backend (pytesseract).

The tesseract binary must be on PATH. Its absence is reported at
construction as OCREngineNotAvailableError so callers can degrade to
"no OCR" instead of failing per page.
"""

import time
from typing import Any, Dict, List, Optional

from PIL import Image

from config import ConfigurationManager
from packslip.utils.logger import get_logger
from packslip.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

logger = get_logger(__name__)


class TesseractBackend:
    """
    Runs Tesseract on prepared page images.
    
    Settings come from ``ocr.tesseract``: ``lang``, ``psm`` (6 treats the
    slip as one uniform block, which keeps table rows on one line),
    ``oem``, extra ``config`` flags and an optional per-page ``timeout``
    in seconds.
    
    Example:
        >>> backend = TesseractBackend()
        >>> backend.recognize(page_image, name="slip.pdf page 1")
        '144 144 0 ft BLKVNL ...'
    """
    
    name = "tesseract"
    
    def __init__(self, settings: Optional[Dict[str, Any]] = None) -> None:
        if settings is None:
            settings = ConfigurationManager().section("ocr.tesseract")
        
        self.language = settings.get("lang") or "eng"
        self.psm = settings.get("psm", 6)
        self.oem = settings.get("oem", 3)
        self.extra_config = settings.get("config") or ""
        self.timeout = settings.get("timeout") or 0
        
        self._pytesseract = self._load_pytesseract()
        self.config_string = self._build_config()
    
    @staticmethod
    def _load_pytesseract():
        try:
            import pytesseract
        except ImportError:
            raise OCREngineNotAvailableError("pytesseract", "package is not installed")
        
        try:
            version = pytesseract.get_tesseract_version()
        except Exception as e:
            raise OCREngineNotAvailableError("tesseract", f"binary not found on PATH: {e}")
        
        logger.info(f"Using Tesseract {version}")
        return pytesseract
    
    def _build_config(self) -> str:
        flags = [f"--psm {self.psm}", f"--oem {self.oem}"]
        if self.extra_config:
            flags.append(self.extra_config)
        return ' '.join(flags)
    
    def recognize(self, image: Image.Image, language: Optional[str] = None, name: str = "image") -> str:
        """
        OCR one image.
        
        Returns:
            Stripped text, possibly empty.
        
        Raises:
            OCRProcessingError: If Tesseract fails or times out on the image.
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')
        
        kwargs: Dict[str, Any] = {"lang": language or self.language, "config": self.config_string}
        if self.timeout:
            kwargs["timeout"] = self.timeout
        
        started = time.monotonic()
        try:
            text = self._pytesseract.image_to_string(image, **kwargs)
        except Exception as e:
            raise OCRProcessingError(name, str(e))
        
        text = (text or "").strip()
        logger.debug(f"Tesseract read {len(text)} characters from {name} in {time.monotonic() - started:.2f}s")
        return text
    
    def get_available_languages(self) -> List[str]:
        """Installed language packs, without the orientation model."""
        try:
            return [lang for lang in self._pytesseract.get_languages() if lang != 'osd']
        except Exception as e:
            logger.debug(f"Could not list Tesseract languages: {e}")
            return [self.language]
