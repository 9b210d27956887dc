"""
Text Normalizers Module.

This module repairs OCR artifacts before line-item matching:
    - Whole-text and per-line rule tables (pattern, replacement)
    - Unit token canonicalization
    - Description tail cleanup
    - OCR-tolerant number parsing

All functions are pure string transforms. The order of rules in each table
is significant: broad punctuation stripping first, then targeted unit-token
repairs, then whitespace collapse.
"""

import math
import re
from typing import List, Optional, Pattern, Sequence, Tuple, Union

from packslip.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

Rule = Tuple[Pattern, str]


# Applied to each line before line-shape matching
LINE_RULES: List[Rule] = [
    # "200]" -> "200"
    (re.compile(r'(\d+)\]'), r'\1'),
    # Table-border punctuation
    (re.compile(r'[|\[\]—~{}]'), ' '),
    # "0Olpc", "00lpc", "Olpc" -> " pc "
    (re.compile(r'\b[oO0]+l?(pc|ft|ea|rl)\b', re.IGNORECASE), r' \1 '),
    # "Ofea", "0fea" -> " ea "
    (re.compile(r'\b[oO0]f?(ea|pc|ft)\b', re.IGNORECASE), r' \1 '),
    (re.compile(r'\bo\s*ft\b', re.IGNORECASE), ' ft '),
    (re.compile(r'\bo\s*pc\b', re.IGNORECASE), ' pc '),
    (re.compile(r'\bo\s*ea\b', re.IGNORECASE), ' ea '),
    # "IE", "IEE", "BE", "BEE" noise tokens
    (re.compile(r'\b[IB]E{1,2}\b', re.IGNORECASE), ' '),
    (re.compile(r'\s+'), ' '),
]

# Applied to the whole extracted text before vendor detection
TEXT_RULES: List[Rule] = [
    (re.compile(r'[|\[\]{}]'), ' '),
    (re.compile(r'\bolpc\b', re.IGNORECASE), '0 pc'),
    (re.compile(r'\bole\b', re.IGNORECASE), '0 ea'),
    (re.compile(r'\boft\b', re.IGNORECASE), '0 ft'),
    # A lone lowercase "l" is almost always a "1"
    (re.compile(r'\bl\b'), '1'),
    (re.compile(r'[ \t\f\v]+'), ' '),
]

# Stripped from the end of descriptions, up to DESCRIPTION_PASSES times
DESCRIPTION_TAIL_PATTERNS: List[Pattern] = [
    re.compile(r'\s+[IiEe]{1,3}\s*$'),
    re.compile(r'\s+[Ee]s\s*$', re.IGNORECASE),
    re.compile(r'\s+EE+\s*$', re.IGNORECASE),
    re.compile(r'\s+I\s*$', re.IGNORECASE),
    re.compile(r'\s+[—\-~]+\s*$'),
    # Trailing 1-2 digit numbers are extraction artifacts, not quantities
    re.compile(r'\s+\d{1,2}\s*$'),
]

DESCRIPTION_PASSES = 3

UNIT_ALIASES = {
    'pc': 'pc', 'pcs': 'pc', 'piece': 'pc', 'pieces': 'pc', 'lpc': 'pc',
    'ft': 'ft', 'feet': 'ft', 'foot': 'ft', 'lf': 'ft', 'lft': 'ft',
    'ea': 'ea', 'each': 'ea', 'iee': 'ea', 'bee': 'ea',
    'rl': 'rl', 'rll': 'rl', 'roll': 'rl', 'rolls': 'rl', 'r11': 'rl',
    'bag': 'bag', 'bags': 'bag',
    'set': 'set', 'sets': 'set',
    'lb': 'lb', 'lbs': 'lb', 'pound': 'lb',
    'gal': 'gal', 'gallon': 'gal',
    'box': 'box', 'bx': 'box',
    'pkg': 'pkg', 'package': 'pkg',
}

DEFAULT_UNIT = 'ea'
MAX_UNIT_LENGTH = 4

_UNIT_LEADING_NOISE = re.compile(r'^[0o\s.:,]+')
_UNIT_TRAILING_NOISE = re.compile(r'[\s.:,]+\Z')


def apply_rules(text: str, rules: Sequence[Rule]) -> str:
    """Apply (pattern, replacement) rules in order."""
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


class TextNormalizer:
    """
    Stateless OCR text repair at two granularities.
    
    Attributes:
        line_rules: Rules applied by normalize_line
        text_rules: Rules applied by normalize_text
        
    Example:
        >>> normalizer = TextNormalizer()
        >>> normalizer.normalize_line("24 0lpc | TENSION BAND ]")
        '24 pc TENSION BAND'
    """
    
    def __init__(
        self,
        line_rules: Optional[Sequence[Rule]] = None,
        text_rules: Optional[Sequence[Rule]] = None
    ) -> None:
        self.line_rules = list(line_rules if line_rules is not None else LINE_RULES)
        self.text_rules = list(text_rules if text_rules is not None else TEXT_RULES)
    
    def normalize_line(self, line: Optional[str]) -> str:
        """
        Clean a single line of OCR text.
        
        Args:
            line: Raw line.
            
        Returns:
            Cleaned line with collapsed whitespace, possibly empty.
        """
        if not line:
            return ""
        return apply_rules(line, self.line_rules).strip()
    
    def normalize_text(self, text: Optional[str]) -> str:
        """
        Clean a whole extracted text.
        
        Line breaks are kept so the result can still be split into lines.
        
        Args:
            text: Raw extracted text.
            
        Returns:
            Cleaned text.
        """
        if not text:
            return ""
        lines = (apply_rules(line, self.text_rules).strip() for line in text.splitlines())
        return "\n".join(line for line in lines if line)
    
    def split_lines(self, text: Optional[str]) -> List[str]:
        """
        Split text into normalized, non-empty lines.
        
        Args:
            text: Raw extracted text.
            
        Returns:
            List of cleaned lines in document order.
        """
        if not text:
            return []
        lines = (self.normalize_line(line) for line in re.split(r'\r?\n', text))
        return [line for line in lines if line]


def normalize_unit(unit: Optional[str]) -> str:
    """
    Map a unit token to a canonical short code.
    
    Leading zero/letter-O noise and surrounding punctuation are removed,
    known spellings and OCR confusions map to pc, ft, ea, rl, bag, set, lb,
    gal, box or pkg, and anything else is truncated to four characters.
    Applying the function twice gives the same result as applying it once.
    
    Args:
        unit: Raw unit token, possibly empty.
        
    Returns:
        Canonical unit code.
        
    Example:
        >>> normalize_unit("00lpc")
        'pc'
        >>> normalize_unit("R11")
        'rl'
    """
    if not unit:
        return DEFAULT_UNIT
    
    u = _UNIT_LEADING_NOISE.sub('', unit.strip().lower())
    u = _UNIT_TRAILING_NOISE.sub('', u)
    if not u:
        return DEFAULT_UNIT
    
    if u in UNIT_ALIASES:
        return UNIT_ALIASES[u]
    
    # Trim again: the cut can end on whitespace or punctuation
    truncated = _UNIT_TRAILING_NOISE.sub('', u[:MAX_UNIT_LENGTH])
    return UNIT_ALIASES.get(truncated, truncated)


def clean_description(description: Optional[str], passes: int = DESCRIPTION_PASSES) -> str:
    """
    Strip trailing OCR noise from a description.
    
    Args:
        description: Captured description text.
        passes: Maximum number of passes over the tail patterns.
        
    Returns:
        Cleaned description, possibly empty.
        
    Example:
        >>> clean_description("GALV TENSION BAND 2-3/8 ee 4")
        'GALV TENSION BAND 2-3/8'
    """
    if not description:
        return ""
    
    cleaned = description.strip()
    for _ in range(passes):
        previous = cleaned
        for pattern in DESCRIPTION_TAIL_PATTERNS:
            cleaned = pattern.sub('', cleaned)
        cleaned = cleaned.strip()
        if cleaned == previous:
            break
    
    return cleaned


def to_number(value: Union[str, int, float, None]) -> Optional[Union[int, float]]:
    """
    Parse an OCR-read number.
    
    Commas are removed and the letter O is read as zero.
    
    Args:
        value: Raw value.
        
    Returns:
        int when integral, float otherwise, or None when not numeric.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).replace(',', '').replace('o', '0').replace('O', '0').strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number
