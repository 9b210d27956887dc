"""
Scanned-document classifier.

Decides whether text pulled from a PDF text layer is real content or a sign
that the pages are images (a scanned slip) needing OCR.

The thresholds are an approximation:
    - more than 100 non-whitespace characters is never scanned
    - more than 30 with an order-document keyword is not scanned
    - otherwise scanned when fewer than 50
"""

import re
from typing import Any

SCANNED_MAX_LENGTH = 100
KEYWORD_MIN_LENGTH = 30
SCANNED_THRESHOLD = 50

ORDER_DOCUMENT_KEYWORDS = (
    "order", "ship", "deliver", "item", "qty", "quantity", "description",
    "total", "invoice", "pack slip", "customer", "date", "po", "unit",
    "price", "amount",
)

_WHITESPACE = re.compile(r'\s+')


def coerce_text(value: Any) -> str:
    """
    Normalize extractor output to a string.
    
    Accepts None, strings, lists of strings (joined by newline), and dicts
    or objects carrying a ``text`` field.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, dict):
        return coerce_text(value.get("text"))
    if isinstance(value, (list, tuple)):
        return "\n".join(coerce_text(item) for item in value)
    if hasattr(value, "text"):
        return coerce_text(value.text)
    return str(value)


def looks_scanned(text: Any) -> bool:
    """
    Check whether extracted text indicates an image-only document.
    
    Args:
        text: Extracted text (or anything coerce_text accepts).
        
    Returns:
        True if the text is too thin to be a real text layer.
        
    Example:
        >>> looks_scanned("")
        True
        >>> looks_scanned("Customer PO 4471 ship date 03/02 qty 12 pc")
        False
    """
    raw = coerce_text(text)
    length = len(_WHITESPACE.sub('', raw))
    
    if length > SCANNED_MAX_LENGTH:
        return False
    
    lower = raw.lower()
    if length > KEYWORD_MIN_LENGTH and any(keyword in lower for keyword in ORDER_DOCUMENT_KEYWORDS):
        return False
    
    return length < SCANNED_THRESHOLD
