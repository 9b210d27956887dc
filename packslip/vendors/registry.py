"""
Vendor Registry Module.

Static catalog of known suppliers loaded from ``config/vendors.yaml``.
The registry is read-only once built and safe to share between threads.

Usage:
    from packslip.vendors import get_registry
    
    registry = get_registry()
    vendor = registry.detect(extracted_text)
    if vendor:
        print(vendor.display_name, vendor.parser_strategy_id)
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import yaml

from config import config_file
from packslip.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_STRATEGY = "generic"


@dataclass(frozen=True)
class VendorProfile:
    """
    A known supplier.
    
    Attributes:
        id: Stable vendor identifier (e.g., "stephens-pipe-steel")
        display_name: Human-readable name
        aliases: Other names the vendor goes by
        keywords: Lowercase substrings that identify the vendor's documents
        parser_strategy_id: Line-item parser strategy for this vendor
        priority: Detection priority (lower is checked first); None for
            standard vendors
        has_dedicated_parser: Whether the strategy is tuned to this vendor
    """
    id: str
    display_name: str
    aliases: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    parser_strategy_id: str = DEFAULT_STRATEGY
    priority: Optional[int] = None
    has_dedicated_parser: bool = False
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VendorProfile":
        """
        Build a profile from a registry entry.
        
        Raises:
            ValueError: If the entry has no id.
        """
        vendor_id = str(data.get('id') or '').strip()
        if not vendor_id:
            raise ValueError(f"Vendor entry without id: {data}")
        
        priority = data.get('priority')
        return cls(
            id=vendor_id,
            display_name=str(data.get('name') or vendor_id),
            aliases=tuple(str(a) for a in data.get('aliases') or ()),
            keywords=tuple(str(k).lower() for k in data.get('keywords') or () if str(k).strip()),
            parser_strategy_id=str(data.get('parser') or DEFAULT_STRATEGY),
            priority=int(priority) if priority is not None else None,
            has_dedicated_parser=bool(data.get('has_profile', False))
        )
    
    def matches(self, lower_text: str) -> bool:
        """Check whether any keyword is a substring of already-lowercased text."""
        return any(keyword in lower_text for keyword in self.keywords)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.display_name,
            'aliases': list(self.aliases),
            'parser': self.parser_strategy_id,
            'priority': self.priority,
            'has_profile': self.has_dedicated_parser
        }


class VendorRegistry:
    """
    Read-only collection of vendor profiles.
    
    Example:
        >>> registry = VendorRegistry.from_yaml()
        >>> registry.get("master-halco").parser_strategy_id
        'masterhalco'
    """
    
    def __init__(self, profiles: Iterable[VendorProfile]) -> None:
        """
        Args:
            profiles: Vendor profiles in registry order.
            
        Raises:
            ValueError: If two profiles share an id.
        """
        self._profiles: Dict[str, VendorProfile] = {}
        for profile in profiles:
            if profile.id in self._profiles:
                raise ValueError(f"Duplicate vendor id: {profile.id}")
            self._profiles[profile.id] = profile
        
        self._priority = sorted(
            (p for p in self._profiles.values() if p.priority is not None),
            key=lambda p: p.priority
        )
        self._standard = [p for p in self._profiles.values() if p.priority is None]
    
    @classmethod
    def from_yaml(cls, path: Optional[Union[str, Path]] = None) -> "VendorRegistry":
        """
        Load the registry from a YAML file.
        
        Args:
            path: Registry file. Defaults to ``vendors.registry_file``
                from configuration, relative to the config directory.
                
        Returns:
            VendorRegistry instance.
        """
        if path is None:
            path = config_file("vendors.registry_file", "vendors.yaml")
        path = Path(path)
        
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        
        registry = cls(VendorProfile.from_dict(entry) for entry in data.get('vendors') or [])
        logger.debug(f"Loaded {len(registry)} vendors from {path}")
        return registry
    
    def get(self, vendor_id: Optional[str]) -> Optional[VendorProfile]:
        """Return the profile for an id, or None."""
        if not vendor_id:
            return None
        return self._profiles.get(vendor_id)
    
    def list_vendors(self) -> List[VendorProfile]:
        """
        List vendors for display.
        
        Returns:
            Priority vendors by priority, then the rest alphabetically by
            display name.
        """
        standard = sorted(self._standard, key=lambda p: p.display_name.lower())
        return list(self._priority) + standard
    
    def detect(self, text: Optional[str]) -> Optional[VendorProfile]:
        """
        Detect the vendor of a document from its text.
        
        Priority vendors are checked first in ascending priority, then the
        remaining vendors in registry order. Keywords match as plain
        substrings of the lowercased text.
        
        Args:
            text: Extracted document text.
            
        Returns:
            The first matching VendorProfile, or None.
        """
        if not text:
            return None
        
        lower = text.lower()
        for profile in self._priority:
            if profile.matches(lower):
                logger.debug(f"Detected priority vendor: {profile.id}")
                return profile
        
        for profile in self._standard:
            if profile.matches(lower):
                logger.debug(f"Detected vendor: {profile.id}")
                return profile
        
        return None
    
    def __len__(self) -> int:
        return len(self._profiles)
    
    def __contains__(self, vendor_id: object) -> bool:
        return vendor_id in self._profiles
    
    def __iter__(self) -> Iterator[VendorProfile]:
        return iter(self._profiles.values())


_registry: Optional[VendorRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> VendorRegistry:
    """
    Get the process-wide vendor registry, loading it on first use.
    
    Returns:
        Shared VendorRegistry instance.
    """
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = VendorRegistry.from_yaml()
        return _registry
