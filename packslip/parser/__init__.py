"""
Line-item parser: strategy tables and the cascading engine.
"""

from .line_item import LineItem
from .strategies import (
    LinePattern,
    ParserStrategy,
    STRATEGIES,
    STRATEGY_ALIASES,
    detect_format,
    get_strategy
)
from .engine import LineItemParser

__all__ = [
    'LineItem',
    'LinePattern',
    'ParserStrategy',
    'STRATEGIES',
    'STRATEGY_ALIASES',
    'detect_format',
    'get_strategy',
    'LineItemParser'
]
