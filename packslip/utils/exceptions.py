"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the pack slip
pipeline. Using specific exceptions allows for better error handling
and more informative error messages.

Exception Hierarchy:
    PackSlipError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── DocumentNotFoundError
    │   └── CorruptedFileError
    ├── ExtractionError
    │   ├── ExtractionFailedError
    │   ├── ExtractionBackendUnavailableError
    │   │   ├── RasterizerUnavailableError
    │   │   └── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── StorageError
    │   ├── RecordNotFoundError
    │   └── DatabaseError
    └── OutputError
        └── WebhookDeliveryError

A document with no recognisable vendor, or with no parseable line items,
is not an error: detection returns None and the parser returns an empty
list.
"""

from typing import Optional


class PackSlipError(Exception):
    """
    Base exception for all pack slip pipeline errors.
    
    All custom exceptions in this system inherit from this class,
    allowing for easy catching of all system-specific errors.
    
    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """
    
    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize the exception.
        
        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(PackSlipError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when neither MIME type nor file name indicate a PDF or an image.
    
    Example:
        >>> raise UnsupportedFileTypeError("application/msword", "slip.doc")
    """
    
    def __init__(self, mime_type: Optional[str], file_name: Optional[str] = None):
        label = mime_type or file_name or "unknown"
        message = f"Unsupported file type: '{label}'"
        details = {"mime_type": mime_type, "file_name": file_name}
        super().__init__(message, details)


class DocumentNotFoundError(InputError):
    """Raised when an input file cannot be found."""
    
    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted or unreadable."""
    
    def __init__(self, filepath: str, reason: Optional[str] = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(PackSlipError):
    """Base exception for text extraction errors."""
    pass


class ExtractionFailedError(ExtractionError):
    """
    Raised when the text-layer extractor itself fails on a document.
    
    This is the only extraction failure that reaches the caller.
    """
    
    def __init__(self, file_name: str, reason: Optional[str] = None):
        message = f"Text extraction failed for: {file_name}"
        details = {"file_name": file_name, "reason": reason}
        super().__init__(message, details)


class ExtractionBackendUnavailableError(ExtractionError):
    """Raised when an optional extraction backend cannot run here."""
    
    def __init__(self, backend: str, reason: Optional[str] = None):
        message = f"Extraction backend unavailable: {backend}"
        details = {"backend": backend, "reason": reason}
        super().__init__(message, details)


class RasterizerUnavailableError(ExtractionBackendUnavailableError):
    """Raised when no PDF page rasterizer is installed or runnable."""
    
    def __init__(self, reason: Optional[str] = None):
        super().__init__("pdf-rasterizer", reason)


class OCREngineNotAvailableError(ExtractionBackendUnavailableError):
    """Raised when the configured OCR engine is not available."""
    
    def __init__(self, engine_name: str, reason: Optional[str] = None):
        super().__init__(engine_name, reason)


class OCRProcessingError(ExtractionError):
    """Raised when OCR of a single image fails."""
    
    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(PackSlipError):
    """Base exception for record storage errors."""
    pass


class RecordNotFoundError(StorageError):
    """Raised when a pack slip record id is unknown."""
    
    def __init__(self, record_id: str):
        message = f"Pack slip not found: {record_id}"
        details = {"record_id": record_id}
        super().__init__(message, details)


class DatabaseError(StorageError):
    """Raised when database operations fail."""
    
    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Database operation failed: {operation}"
        details = {"operation": operation, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(PackSlipError):
    """Base exception for output handling errors."""
    pass


class WebhookDeliveryError(OutputError):
    """Raised when the downstream webhook rejects or never receives a payload."""
    
    def __init__(self, url: str, reason: Optional[str] = None, status_code: Optional[int] = None):
        message = f"Webhook delivery failed: {url}"
        details = {"url": url, "reason": reason, "status_code": status_code}
        super().__init__(message, details)


__all__ = [
    'PackSlipError',
    'InputError',
    'UnsupportedFileTypeError',
    'DocumentNotFoundError',
    'CorruptedFileError',
    'ExtractionError',
    'ExtractionFailedError',
    'ExtractionBackendUnavailableError',
    'RasterizerUnavailableError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'StorageError',
    'RecordNotFoundError',
    'DatabaseError',
    'OutputError',
    'WebhookDeliveryError',
]
