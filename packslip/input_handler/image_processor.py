"""
Image Processor Module.

Prepares uploaded photos and scans, and rendered PDF pages, for OCR:
    - Decoding from raw bytes
    - Orientation correction from EXIF
    - RGB conversion
    - Downscaling oversized images
    - Light contrast/sharpness enhancement
"""

import io
from typing import Union

from PIL import Image, ImageOps, ImageEnhance, UnidentifiedImageError

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image inputs (JPG, PNG, TIFF, BMP, ...).
    
    Attributes:
        max_width: Maximum image width in pixels
        max_height: Maximum image height in pixels
        auto_orient: Whether to auto-correct orientation
        enhance_contrast: Whether to apply contrast enhancement
        
    Example:
        >>> processor = ImageProcessor()
        >>> image = processor.prepare(jpeg_bytes)
    """
    
    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.max_width = get_config("input.image.max_width", 3508)
        self.max_height = get_config("input.image.max_height", 4961)
        self.auto_orient = get_config("input.image.auto_orient", True)
        self.enhance_contrast = get_config("input.image.enhance_contrast", True)
        
        logger.debug(f"ImageProcessor initialized (max_size={self.max_width}x{self.max_height})")
    
    def decode(self, content: bytes, source: str = "image") -> Image.Image:
        """
        Decode raw bytes into a PIL Image.
        
        Args:
            content: Encoded image bytes.
            source: Name used in error messages.
            
        Returns:
            Loaded PIL Image.
            
        Raises:
            CorruptedFileError: If the bytes are not a readable image.
        """
        if not content:
            raise CorruptedFileError(source, "Image content is empty")
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise CorruptedFileError(source, f"Cannot decode image: {e}")
        return image
    
    def prepare(self, source: Union[bytes, Image.Image], name: str = "image") -> Image.Image:
        """
        Apply the processing pipeline to an image.
        
        Processing steps:
            1. Decode (when given bytes)
            2. Fix orientation from EXIF data
            3. Convert to RGB
            4. Resize if too large
            5. Enhance contrast (optional)
        
        Args:
            source: Encoded image bytes or a PIL Image.
            name: Name used in log and error messages.
            
        Returns:
            Processed PIL Image.
            
        Raises:
            CorruptedFileError: If bytes cannot be decoded.
        """
        image = self.decode(source, name) if isinstance(source, (bytes, bytearray)) else source
        original_size = image.size
        
        if self.auto_orient:
            image = self._fix_orientation(image)
        
        image = self._convert_to_rgb(image)
        image = self._resize_if_needed(image)
        
        if self.enhance_contrast:
            image = self._enhance_image(image)
        
        logger.debug(
            f"Prepared {name}: {image.width}x{image.height} "
            f"(original: {original_size[0]}x{original_size[1]})"
        )
        return image
    
    def _fix_orientation(self, image: Image.Image) -> Image.Image:
        """Rotate according to the EXIF orientation tag, if present."""
        try:
            return ImageOps.exif_transpose(image)
        except Exception as e:
            logger.debug(f"Could not fix orientation: {e}")
            return image
    
    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        """
        Flatten to RGB. Transparent areas (screenshots, exported PNGs)
        become white paper rather than black.
        """
        if image.mode == 'RGB':
            return image
        
        mode = image.mode
        transparent = mode in ('RGBA', 'LA') or (mode == 'P' and 'transparency' in image.info)
        
        if transparent:
            rgba = image.convert('RGBA')
            flattened = Image.new('RGB', rgba.size, (255, 255, 255))
            flattened.paste(rgba, mask=rgba.getchannel('A'))
            image = flattened
        else:
            image = image.convert('RGB')
        
        logger.debug(f"Flattened {mode} image to RGB")
        return image
    
    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Downscale to fit max_width x max_height, keeping aspect ratio."""
        width, height = image.size
        
        if width <= self.max_width and height <= self.max_height:
            return image
        
        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (int(width * ratio), int(height * ratio))
        
        image = image.resize(new_size, Image.LANCZOS)
        logger.debug(f"Resized image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image
    
    def _enhance_image(self, image: Image.Image) -> Image.Image:
        try:
            image = ImageEnhance.Contrast(image).enhance(1.2)
            image = ImageEnhance.Sharpness(image).enhance(1.1)
        except Exception as e:
            logger.debug(f"Could not enhance image: {e}")
        return image
