"""
Product Library Module.

Fence and construction product vocabulary used by the line-item parser:
    - Product keywords for gating candidate lines
    - Description patterns with a typical unit and product category
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern

PRODUCT_KEYWORDS: List[str] = [
    # Fabric/Mesh
    "fabric", "mesh", "chain link", "cl fabric",
    # Posts
    "post", "line post", "corner post", "end post", "terminal", "gate post",
    # Rails
    "rail", "top rail", "bottom rail", "brace rail",
    # Caps
    "cap", "dome cap", "loop cap", "eye top", "ball cap",
    # Fittings
    "band", "brace band", "tension band", "rail end",
    "bracket", "rail bracket", "barb arm", "extension",
    "tension bar", "tension wire", "tie wire",
    "sleeve", "top sleeve", "bottom sleeve",
    "clamp", "t-clamp", "line clamp",
    "bolt", "carriage bolt", "nut",
    "clip", "hog ring", "fence tie",
    # Gates
    "gate", "gate frame", "gate hardware", "hinge", "latch",
    "drop rod", "fork latch", "bulldog",
    # Barbed wire
    "barb", "barbed", "barb wire",
    # Slats
    "slat", "privacy slat", "winged slat",
    # Colors/Coatings
    "vnl", "vinyl", "blk", "black", "grn", "green", "wht", "white", "galv", "galvanized",
    # Schedule pipe
    "sp20", "sp40", "sch20", "sch40",
    # Sizes
    "1-3/8", "1-5/8", "1-7/8", "2-1/2", "2-3/8", "3-1/2", "4\"", "6\"", "8\"",
    "2x9", "2x8", "2x11", "2x12",
    "9ga", "11ga", "12ga", "12.5ga", "6ga",
]

# Pack-slip shorthand that is too loose for descriptions but marks item rows
SHORTHAND_KEYWORDS: List[str] = [
    "chain", "tension", "brace", "tie", "wire", "ext", "core", "ft/", "rl", "roll",
    "hot dip", "hotdip", "fitting", "washer",
] + [f"sp{digit}" for digit in range(10)]


def product_keyword_pattern(keywords: Optional[Iterable[str]] = None) -> Pattern:
    """
    Compile a case-insensitive substring pattern for a keyword vocabulary.

    Defaults to PRODUCT_KEYWORDS plus SHORTHAND_KEYWORDS. Longer keywords
    are tried first.
    """
    if keywords is None:
        keywords = PRODUCT_KEYWORDS + SHORTHAND_KEYWORDS
    unique = sorted({k.lower() for k in keywords if k}, key=len, reverse=True)
    if not unique:
        return re.compile(r"(?!)")
    return re.compile("|".join(re.escape(k) for k in unique), re.IGNORECASE)


PRODUCT_KEYWORD_PATTERN = product_keyword_pattern()


@dataclass(frozen=True)
class ProductPattern:
    """A description pattern with the unit and category it implies."""
    pattern: Pattern
    default_unit: str
    category: str


def _pattern(regex: str, default_unit: str, category: str) -> ProductPattern:
    return ProductPattern(re.compile(regex, re.IGNORECASE), default_unit, category)


# First match wins
PRODUCT_PATTERNS: List[ProductPattern] = [
    # Chain link fabric, sold by the foot
    _pattern(r'\d+x\d+.*(?:core|ga).*(?:ft/|rll|roll)', "ft", "fabric"),
    _pattern(r'fabric.*\d+ft', "ft", "fabric"),
    _pattern(r'cl\s+\d+.*\d+ga', "ft", "fabric"),
    # Posts
    _pattern(r'post.*(?:sp\d+|sch\d+)', "pc", "post"),
    _pattern(r'(?:line|corner|end|terminal|gate)\s*post', "pc", "post"),
    # Rails
    _pattern(r'(?:top|bottom|brace)\s*rail', "ft", "rail"),
    _pattern(r'rail.*(?:sp\d+|sch\d+)', "ft", "rail"),
    # Caps
    _pattern(r'(?:dome|loop|eye|ball)\s*(?:cap|top)', "pc", "cap"),
    # Fittings
    _pattern(r'(?:brace|tension)\s*band', "ea", "fitting"),
    _pattern(r'rail\s*end', "ea", "fitting"),
    _pattern(r'tension\s*bar', "ea", "fitting"),
    _pattern(r'barb\s*arm', "ea", "fitting"),
    _pattern(r't-?clamp', "ea", "fitting"),
    _pattern(r'bracket', "ea", "fitting"),
    _pattern(r'sleeve', "ea", "fitting"),
    # Hardware
    _pattern(r'carriage\s*bolt', "ea", "hardware"),
    _pattern(r'(?:bolt|nut|clip|ring)', "ea", "hardware"),
    # Gates
    _pattern(r'gate.*(?:frame|single|double)', "ea", "gate"),
    _pattern(r'(?:hinge|latch|drop\s*rod)', "ea", "gate"),
    # Barb wire
    _pattern(r'barb(?:ed)?\s*wire', "ft", "barb"),
    # Slats
    _pattern(r'slat.*(?:bag|box)', "bag", "slat"),
    _pattern(r'(?:privacy\s*)?slat', "pc", "slat"),
    # Tension/tie wire
    _pattern(r'(?:tension|tie)\s*wire', "ft", "wire"),
]

def contains_product_keyword(line: Optional[str], keywords: Optional[List[str]] = None) -> bool:
    """
    Check whether a line mentions a product keyword.
    
    Matching is a plain substring test so run-together OCR tokens such as
    "BLKVNL" still match.
    """
    if not line:
        return False
    pattern = PRODUCT_KEYWORD_PATTERN if keywords is None else product_keyword_pattern(keywords)
    return bool(pattern.search(line))


def _match_product(description: Optional[str]) -> Optional[ProductPattern]:
    if not description:
        return None
    for product in PRODUCT_PATTERNS:
        if product.pattern.search(description):
            return product
    return None


def infer_unit(description: Optional[str]) -> Optional[str]:
    """
    Infer the typical unit for a product description.
    
    Returns:
        Unit code, or None if no product pattern matches.
    """
    product = _match_product(description)
    return product.default_unit if product else None


def product_category(description: Optional[str]) -> Optional[str]:
    """
    Get the product category for a description.
    
    Returns:
        Category name (fabric, post, rail, ...), or None.
    """
    product = _match_product(description)
    return product.category if product else None

