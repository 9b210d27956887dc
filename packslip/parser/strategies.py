"""
Parser strategy tables.

Each strategy is data: boundary patterns that stop the scan, boilerplate
patterns that skip a line, an optional product-keyword gate, and an ordered
list of line-shape patterns (most specific first). Line-shape patterns use
named groups:

    ordered      ordered (or only) quantity
    shipped      shipped quantity, preferred over ordered when nonzero
    unit         unit token
    description  product description
    sku          supplier item number

Adding a vendor layout means adding a ParserStrategy here and registering
it in STRATEGIES; the cascade engine does not change.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from packslip.utils.logger import get_logger
from packslip.postprocessor.product_library import PRODUCT_KEYWORD_PATTERN

logger = get_logger(__name__)

GENERIC = "generic"
SPS = "sps"


def _compile_all(regexes: Sequence[str], flags: int = re.IGNORECASE) -> Tuple[Pattern, ...]:
    return tuple(re.compile(regex, flags) for regex in regexes)


@dataclass(frozen=True)
class LinePattern:
    """
    One line-shape pattern.
    
    Attributes:
        name: Pattern name (for logging)
        regex: Compiled pattern with named groups
        default_unit: Unit used when no unit is captured or inferred
        unit_from_description: Look for a unit token or product pattern in
            the description when no unit group matched
        min_description_length: Overrides the strategy minimum when set
    """
    name: str
    regex: Pattern
    default_unit: str = "ea"
    unit_from_description: bool = False
    min_description_length: Optional[int] = None


@dataclass(frozen=True)
class ParserStrategy:
    """
    A named cascade of line-shape patterns for one document layout.
    
    Attributes:
        id: Strategy id
        stop_patterns: A line matching any of these ends the scan
        skip_patterns: A line (or description) matching any of these is skipped
        patterns: Line-shape patterns, tried in order
        product_keywords: When set, a line must match it to be considered
        header_terms: When set, scanning starts after the first line
            containing all of these terms
        min_line_length: Shorter lines are skipped
        min_description_length: Shorter cleaned descriptions are rejected
    """
    id: str
    stop_patterns: Tuple[Pattern, ...]
    skip_patterns: Tuple[Pattern, ...]
    patterns: Tuple[LinePattern, ...]
    product_keywords: Optional[Pattern] = None
    header_terms: Tuple[str, ...] = field(default_factory=tuple)
    min_line_length: int = 8
    min_description_length: int = 4
    
    def is_stop(self, line: str) -> bool:
        return any(p.search(line) for p in self.stop_patterns)
    
    def is_skip(self, line: str) -> bool:
        return any(p.search(line) for p in self.skip_patterns)
    
    def has_product_keyword(self, line: str) -> bool:
        return self.product_keywords is None or bool(self.product_keywords.search(line))
    
    def find_start(self, lines: List[str]) -> int:
        """Index of the first line to scan."""
        if not self.header_terms:
            return 0
        for index, line in enumerate(lines):
            lower = line.lower()
            if all(term in lower for term in self.header_terms):
                return index + 1
        return 0


# Address and sales-contact boilerplate shared by both layouts
_METADATA_SKIPS = [
    r'customer acct',
    r'payment terms',
    r'customer po',
    r'visit our website',
    r'sales person',
    r'sales fax',
    r'sales phone',
    r'contact name',
    r'fax number',
    r'shipped via',
    r'quote valid',
    r'^po box',
    r'email only',
    r'not responsible',
    r'verify all materials',
    r'remit payment',
    r'billing date',
]


# Stephens Pipe & Steel: Ordered | Shipped | BackOrder | Unit | Description
SPS_STRATEGY = ParserStrategy(
    id=SPS,
    stop_patterns=_compile_all([
        r'signature acknowledges',
        r'review all items',
        r'print name.*date',
        r'received by:',
        r'convenience fee',
        r'restock fee',
    ]),
    skip_patterns=_compile_all(_METADATA_SKIPS + [
        r'^\*+',
        r'your signature',
        r'items accurately',
        r'at the time',
        r'verify selvage',
        r'sold to:',
        r'ship to:',
        r'\d+(st|nd|rd|th)\s+street',
        r'russell springs',
        r'bladensburg',
        r'richmond',
        r'stephens pipe',
        r'pipessteel',
        r'spsfence',
        r'hurricane fence',
        r'pack slip',
    ]),
    # Substring match so run-together tokens like "BLKVNL" pass
    product_keywords=PRODUCT_KEYWORD_PATTERN,
    patterns=(
        # "144 144 0 ft BLKVNL 4 x18 x SP40x8pc"
        LinePattern(
            name="ordered-shipped-backorder-unit",
            regex=re.compile(
                r'^\s*(?P<ordered>\d+)\s+(?P<shipped>\d+)\s+(?P<backorder>\d+)\s*'
                r'(?P<unit>[a-zA-Z]{1,4})\s+(?P<description>.+)$'
            ),
        ),
        # Backorder column missing
        LinePattern(
            name="ordered-shipped-unit",
            regex=re.compile(
                r'^\s*(?P<ordered>\d+)\s+(?P<shipped>\d+)\s*'
                r'(?P<unit>[a-zA-Z]{1,4})\s+(?P<description>.+)$'
            ),
        ),
        LinePattern(
            name="quantity-unit",
            regex=re.compile(r'^\s*(?P<ordered>\d+)\s*(?P<unit>[a-zA-Z]{1,4})\s+(?P<description>[A-Z].+)$'),
        ),
        LinePattern(
            name="fence-product",
            regex=re.compile(
                r'(?P<ordered>\d+)\s*(?:pc|ft|ea)?\s*'
                r'(?P<description>(?:BLK|GRN|WHT|GALV|VNL|BLACK|GREEN|WHITE|CHAIN|MESH|FABRIC|'
                r'TENSION|BRACE|POST|RAIL|CAP|TOP|BOTTOM|GATE|SLAT|TIE).+)',
                re.IGNORECASE
            ),
            default_unit="pc",
            unit_from_description=True,
            min_description_length=5,
        ),
        # "6ga 2x9 Galv Fabric 50ft rolls"
        LinePattern(
            name="wire-mesh",
            regex=re.compile(
                r'(?P<ordered>\d+)\s*(?P<unit>rolls?|pcs?|ea|ft)?\s*'
                r'(?P<description>(?:\d+ga|galv|vinyl|fabric|mesh|wire).+)',
                re.IGNORECASE
            ),
            min_description_length=5,
        ),
    ),
    header_terms=("ordered", "shipped"),
    min_line_length=10,
)


GENERIC_STRATEGY = ParserStrategy(
    id=GENERIC,
    stop_patterns=_compile_all([
        r'signature acknowledges',
        r'received by:',
        r'convenience fee',
        r'restock fee',
        r'lbs:\s*\d+\s*p/d',
    ]),
    skip_patterns=_compile_all(_METADATA_SKIPS + [
        r'^(ordered|shipped|description|item|product|qty|quantity|unit|price|amount|total|'
        r'page|date|order|customer|ship|sold|bill|invoice|pack|delivery|your signature|'
        r'verify|po\s*#|invoice\s*#)',
        r'sold to',
        r'ship to',
        r'po box',
        r'\d+\s*(st|nd|rd|th)\s+street',
        r'\d+\s+\w+\s+(street|st|avenue|ave|road|rd|drive|dr|boulevard|blvd|lane|ln|way|court|ct)\b',
        # ZIP codes
        r'^\d{5}(-\d{4})?$',
    ]),
    patterns=(
        # "12 14 0 pc Widget Assembly"
        LinePattern(
            name="leading-quantities-unit",
            regex=re.compile(
                r'^\s*(?P<ordered>\d+)\s+(?:(?P<shipped>\d+)\s+)?(?:\d+\s+)*'
                r'(?P<unit>[a-zA-Z]{1,5})\s+(?P<description>[A-Za-z].{4,})$'
            ),
        ),
        # "24 pc Galvanized Post Cap 2-3/8"
        LinePattern(
            name="quantity-unit",
            regex=re.compile(r'^\s*(?P<ordered>\d+)\s+(?P<unit>[a-zA-Z]{1,5})\s+(?P<description>.{5,})$'),
        ),
        # "Galvanized Post Cap 2-3/8 24 EA"
        LinePattern(
            name="description-quantity",
            regex=re.compile(
                r'^(?P<description>[A-Za-z].{4,}?)\s+(?P<ordered>\d+)\s*'
                r'(?P<unit>EA|PC|FT|LF|LB|KG|GAL|BOX|BAG|PKG|RLL|EACH|PCS)?\s*$',
                re.IGNORECASE
            ),
        ),
        LinePattern(
            name="product-keyword",
            regex=re.compile(
                r'(?P<ordered>\d+)\s*(?:pc|ft|ea)?\s*'
                r'(?P<description>(?:GALV|VNL|VINYL|BLACK|TENSION|BRACE|POST|RAIL|CAP|TOP|BOTTOM|'
                r'GATE|HINGE|LATCH|TIE|WIRE|FABRIC|MESH|SLAT|BOLT|NUT|WASHER|SCREW|BRACKET|CLAMP|'
                r'CONCRETE|CEMENT|LUMBER|BOARD|PIPE|TUBE|STEEL|ALUMINUM|WOOD).+)',
                re.IGNORECASE
            ),
            unit_from_description=True,
            min_description_length=5,
        ),
        # "ABC123 Widget Description 12 EA"
        LinePattern(
            name="sku-description-quantity",
            regex=re.compile(
                r'^(?P<sku>[A-Z0-9\-]{3,15})\s+(?P<description>.{5,}?)\s+(?P<ordered>\d+)\s*'
                r'(?P<unit>[A-Z]{1,5})?\s*$',
                re.IGNORECASE
            ),
        ),
    ),
    min_line_length=8,
    min_description_length=4,
)


STRATEGIES: Dict[str, ParserStrategy] = {
    SPS: SPS_STRATEGY,
    GENERIC: GENERIC_STRATEGY,
}

# Vendors whose layout matches an existing strategy
STRATEGY_ALIASES: Dict[str, str] = {
    "masterhalco": SPS,
    "oldcastle": GENERIC,
}

# Checked in order against the raw (uncleaned) text
FORMAT_SIGNATURES: List[Tuple[Pattern, str]] = [
    (re.compile(r'stephens pipe|sps\s*fence|spsfence\.com|pipe.?steel', re.IGNORECASE), SPS),
    (re.compile(r'master\s*halco', re.IGNORECASE), "masterhalco"),
    (re.compile(r'oldcastle|apg.*company', re.IGNORECASE), "oldcastle"),
    (re.compile(r'ordered.*shipped', re.IGNORECASE), SPS),
]


def get_strategy(strategy_id: Optional[str]) -> ParserStrategy:
    """
    Look up a strategy by id or alias.
    
    Unknown ids fall back to the generic strategy with a warning.
    """
    key = STRATEGY_ALIASES.get(strategy_id or GENERIC, strategy_id or GENERIC)
    strategy = STRATEGIES.get(key)
    if strategy is None:
        logger.warning(f"Parser strategy not found: {strategy_id}, using {GENERIC}")
        return STRATEGIES[GENERIC]
    return strategy


def detect_format(text: Optional[str]) -> str:
    """
    Pick a strategy id from distinctive phrases in the raw text.
    
    Returns:
        Strategy id (possibly an alias), "generic" when nothing matches.
    """
    if not text:
        return GENERIC
    for signature, strategy_id in FORMAT_SIGNATURES:
        if signature.search(text):
            return strategy_id
    return GENERIC
