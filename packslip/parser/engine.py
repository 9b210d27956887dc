"""
Line-Item Parser Module.

Converts extracted pack slip text into an ordered list of LineItems:

    1. Split into lines and repair OCR artifacts per line
    2. Pick a strategy: the vendor's, else one detected from the raw text
    3. Scan lines with the strategy's cascade of line-shape patterns
    4. If nothing was found, walk the fallback chain (generic, then sps)

parse() never raises: a strategy that fails counts as finding nothing, and
an empty list is a valid result meaning "nothing confidently parseable".

Usage:
    from packslip.parser import LineItemParser
    
    parser = LineItemParser()
    items = parser.parse(text, vendor_profile)
"""

import re
from typing import List, Optional, Sequence, Union

from config import get_config
from packslip.utils.logger import get_logger
from packslip.postprocessor.normalizers import (
    TextNormalizer,
    clean_description,
    normalize_unit,
    to_number
)
from packslip.postprocessor.product_library import infer_unit, product_category
from packslip.vendors.registry import VendorProfile
from .line_item import LineItem
from .strategies import (
    GENERIC,
    SPS,
    LinePattern,
    ParserStrategy,
    detect_format,
    get_strategy
)

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_MAX_ITEMS = 200
DEFAULT_FALLBACK_CHAIN = [GENERIC, SPS]

_DESCRIPTION_UNIT = re.compile(r'\b(pc|ft|ea|lf|each)\b', re.IGNORECASE)


class LineItemParser:
    """
    Cascading strategy engine for pack slip line items.
    
    Attributes:
        normalizer: Per-line OCR repair
        max_items: Hard cap on items returned
        fallback_chain: Strategy ids tried when the selected one finds nothing
        
    Example:
        >>> parser = LineItemParser()
        >>> items = parser.parse("Ordered Shipped BackOrder Unit\\n144 144 0 ft BLKVNL 4 x18 x SP40x8pc")
        >>> items[0].quantity, items[0].unit
        (144, 'ft')
    """
    
    def __init__(
        self,
        normalizer: Optional[TextNormalizer] = None,
        max_items: Optional[int] = None,
        fallback_chain: Optional[Sequence[str]] = None
    ) -> None:
        self.normalizer = normalizer or TextNormalizer()
        self.max_items = max_items or get_config("parser.max_items", DEFAULT_MAX_ITEMS)
        self.fallback_chain = list(
            fallback_chain if fallback_chain is not None
            else get_config("parser.fallback_chain", DEFAULT_FALLBACK_CHAIN)
        )
    
    def select_strategy(self, text: Optional[str], vendor_profile: Optional[VendorProfile] = None) -> str:
        """
        Choose the strategy id for a document.
        
        Args:
            text: Raw extracted text.
            vendor_profile: Vendor, when known.
            
        Returns:
            The vendor's strategy id, or one detected from the text.
        """
        if vendor_profile is not None and vendor_profile.parser_strategy_id:
            logger.info(
                f"Using vendor-specified parser: {vendor_profile.parser_strategy_id} "
                f"for {vendor_profile.display_name}"
            )
            return vendor_profile.parser_strategy_id
        
        strategy_id = detect_format(text)
        logger.info(f"Auto-detected format: {strategy_id}")
        return strategy_id
    
    def parse(self, text: Optional[str], vendor_profile: Optional[VendorProfile] = None) -> List[LineItem]:
        """
        Parse pack slip text into line items.
        
        Args:
            text: Extracted text.
            vendor_profile: Vendor, when known.
            
        Returns:
            Line items in document order (at most max_items), possibly empty.
        """
        if not text or not text.strip():
            logger.warning("Empty text provided to parser")
            return []
        
        lines = self.normalizer.split_lines(text)
        selected = self.select_strategy(text, vendor_profile)
        
        tried = set()
        for strategy_id in [selected] + self.fallback_chain:
            strategy = get_strategy(strategy_id)
            if strategy.id in tried:
                continue
            tried.add(strategy.id)
            
            if strategy_id != selected:
                logger.info(f"No items found, falling back to {strategy.id} parser")
            
            items = self._run_safely(strategy, lines)
            if items:
                logger.info(
                    f"Parsed {len(items)} line items with {strategy.id} parser "
                    f"(vendor: {vendor_profile.display_name if vendor_profile else 'auto-detect'})"
                )
                return items
        
        logger.info("No line items parsed")
        return []
    
    def _run_safely(self, strategy: ParserStrategy, lines: List[str]) -> List[LineItem]:
        try:
            return self.run_strategy(strategy, lines)
        except Exception:
            logger.exception(f"Parser strategy {strategy.id} failed")
            return []
    
    def run_strategy(self, strategy: Union[ParserStrategy, str], lines: List[str]) -> List[LineItem]:
        """
        Scan cleaned lines with one strategy.
        
        Args:
            strategy: Strategy or strategy id.
            lines: Cleaned, non-empty lines.
            
        Returns:
            Accepted line items in document order.
        """
        if isinstance(strategy, str):
            strategy = get_strategy(strategy)
        
        items: List[LineItem] = []
        
        for line in lines[strategy.find_start(lines):]:
            if strategy.is_stop(line):
                logger.debug(f"{strategy.id}: stop marker reached: {line!r}")
                break
            if len(line) < strategy.min_line_length or strategy.is_skip(line):
                continue
            if not strategy.has_product_keyword(line):
                continue
            
            for pattern in strategy.patterns:
                item = self._match(strategy, pattern, line)
                if item is not None:
                    items.append(item)
                    break
            
            if len(items) >= self.max_items:
                logger.warning(f"{strategy.id}: item cap of {self.max_items} reached")
                break
        
        logger.debug(f"{strategy.id} parser found {len(items)} items")
        return items
    
    def _match(self, strategy: ParserStrategy, pattern: LinePattern, line: str) -> Optional[LineItem]:
        """Build an item from one pattern, or None when it doesn't fit."""
        match = pattern.regex.search(line)
        if match is None:
            return None
        groups = match.groupdict()
        
        # Shipped wins over ordered when present and nonzero
        quantity = to_number(groups.get('shipped')) or to_number(groups.get('ordered'))
        if not quantity or quantity <= 0:
            return None
        
        description = clean_description(groups.get('description'))
        min_length = pattern.min_description_length or strategy.min_description_length
        if len(description) < min_length or strategy.is_skip(description):
            return None
        
        return LineItem(
            sku=(groups.get('sku') or '').strip(),
            description=description,
            quantity=quantity,
            unit=self._resolve_unit(pattern, groups.get('unit'), description),
            notes=self._notes(description)
        )
    
    @staticmethod
    def _resolve_unit(pattern: LinePattern, captured: Optional[str], description: str) -> str:
        if captured:
            return normalize_unit(captured)
        if pattern.unit_from_description:
            token = _DESCRIPTION_UNIT.search(description)
            if token:
                return normalize_unit(token.group(1))
            inferred = infer_unit(description)
            if inferred:
                return inferred
        return normalize_unit(pattern.default_unit)
    
    @staticmethod
    def _notes(description: str) -> str:
        category = product_category(description)
        return f"category:{category}" if category else ""
