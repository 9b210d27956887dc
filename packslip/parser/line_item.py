"""
Line item value object.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Union

Number = Union[int, float]


@dataclass
class LineItem:
    """
    One reconstructed row of a pack slip.
    
    Items produced by the parser always have quantity > 0 and a canonical
    unit code.
    
    Attributes:
        sku: Supplier item number, when the layout has one
        description: Cleaned product description
        quantity: Shipped (or ordered) quantity
        unit: Canonical unit code (pc, ft, ea, rl, ...)
        price: Unit price, 0 when not on the slip
        notes: Free-form notes (the parser writes "category:<name>")
    """
    sku: str = ""
    description: str = ""
    quantity: Number = 0
    unit: str = "ea"
    price: Number = 0
    notes: str = ""
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        return cls(
            sku=str(data.get('sku') or ''),
            description=str(data.get('description') or ''),
            quantity=data.get('quantity') or 0,
            unit=str(data.get('unit') or ''),
            price=data.get('price') or 0,
            notes=str(data.get('notes') or '')
        )
