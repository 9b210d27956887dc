"""
Main Input Handler Module.

This module provides the Document value object and the InputHandler class
that decides whether an upload is a PDF or an image and loads files from
disk for the command-line surface.

Usage:
    from packslip.input_handler import InputHandler
    
    handler = InputHandler()
    document = handler.load("slip.pdf")
    file_type = handler.detect_file_type(document.mime_type, document.file_name)

Classes:
    Document: Immutable uploaded file (bytes, MIME type, file name)
    InputHandler: File type detection and loading
"""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.helpers import get_file_extension, format_file_size
from packslip.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    DocumentNotFoundError,
    CorruptedFileError
)


logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class Document:
    """
    An uploaded pack slip file.
    
    Created once at upload and never modified by the pipeline.
    
    Attributes:
        content: Raw file bytes
        mime_type: Declared MIME type (may be empty)
        file_name: Original file name
    """
    content: bytes = field(repr=False)
    mime_type: str = ""
    file_name: str = ""
    
    @property
    def size(self) -> int:
        return len(self.content)
    
    def __repr__(self) -> str:
        return (
            f"Document(file_name='{self.file_name}', "
            f"mime_type='{self.mime_type}', "
            f"size={format_file_size(self.size)})"
        )


class InputHandler:
    """
    Detects supported file types and loads documents.
    
    A file is a PDF when its MIME type is application/pdf or its name ends
    in .pdf; it is an image when its MIME type starts with image/ or its
    extension is a known image extension. Anything else is rejected.
    
    Attributes:
        supported_extensions: Set of supported file extensions
        
    Example:
        >>> handler = InputHandler()
        >>> handler.detect_file_type("application/pdf", "slip.pdf")
        'pdf'
        >>> handler.detect_file_type("", "scan.JPG")
        'image'
    """
    
    PDF_EXTENSIONS = {'.pdf'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.gif', '.webp'}
    
    def __init__(self) -> None:
        """Initialize the InputHandler from configuration."""
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                list(self.PDF_EXTENSIONS | self.IMAGE_EXTENSIONS)
            )
        }
        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")
    
    def detect_file_type(self, mime_type: Optional[str], file_name: Optional[str]) -> str:
        """
        Detect the type of an uploaded file.
        
        Args:
            mime_type: Declared MIME type, possibly empty.
            file_name: Original file name, possibly empty.
            
        Returns:
            File type string: 'pdf' or 'image'.
            
        Raises:
            UnsupportedFileTypeError: If neither hint indicates PDF or image.
        """
        mime = (mime_type or "").strip().lower()
        extension = get_file_extension(file_name)
        
        if mime == PDF_MIME_TYPE or extension in self.PDF_EXTENSIONS:
            return 'pdf'
        if mime.startswith("image/") or extension in self.IMAGE_EXTENSIONS:
            return 'image'
        
        raise UnsupportedFileTypeError(mime_type or None, file_name or None)
    
    def is_supported(self, mime_type: Optional[str], file_name: Optional[str]) -> bool:
        """Return True when detect_file_type would accept the file."""
        try:
            self.detect_file_type(mime_type, file_name)
        except UnsupportedFileTypeError:
            return False
        return True
    
    def guess_mime_type(self, file_name: Union[str, Path]) -> str:
        """
        Guess a MIME type from a file name.
        
        Returns:
            MIME type string, or empty string if unknown.
        """
        mime_type, _ = mimetypes.guess_type(str(file_name))
        return mime_type or ""
    
    def load(self, filepath: Union[str, Path], mime_type: Optional[str] = None) -> Document:
        """
        Load a file from disk as a Document.
        
        Args:
            filepath: Path to the pack slip file.
            mime_type: Optional MIME type; guessed from the name when omitted.
            
        Returns:
            Document with the file's bytes.
            
        Raises:
            DocumentNotFoundError: If the file doesn't exist.
            InputError: If the path is not a regular file.
            CorruptedFileError: If the file is empty.
            UnsupportedFileTypeError: If the file is neither PDF nor image.
        """
        path = Path(filepath)
        
        if not path.exists():
            raise DocumentNotFoundError(str(filepath))
        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")
        
        mime_type = mime_type or self.guess_mime_type(path.name)
        self.detect_file_type(mime_type, path.name)
        
        content = path.read_bytes()
        if not content:
            raise CorruptedFileError(str(filepath), "File is empty")
        
        document = Document(content=content, mime_type=mime_type, file_name=path.name)
        logger.info(f"Loaded {document!r}")
        return document
    
    def list_files(self, directory: Union[str, Path], recursive: bool = False) -> List[Path]:
        """
        List all supported files in a directory.
        
        Args:
            directory: Directory to scan.
            recursive: Whether to search subdirectories.
            
        Returns:
            Sorted list of file paths.
            
        Raises:
            DocumentNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a directory.
        """
        directory = Path(directory)
        
        if not directory.exists():
            raise DocumentNotFoundError(str(directory))
        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")
        
        pattern = "**/*" if recursive else "*"
        files = sorted(
            p for p in directory.glob(pattern)
            if p.is_file() and p.suffix.lower() in self.supported_extensions
        )
        
        logger.info(f"Found {len(files)} files to process in {directory}")
        return files
