"""
Time-bounded duplicate detection.

Upstream event sources (chat platforms, webhooks) redeliver the same event
when they do not get a fast acknowledgement. DedupeCache remembers keys for
a fixed TTL so a redelivered event is processed at most once. It is an
ordinary object: construct one per consumer and pass it where needed.
"""

import threading
import time
from typing import Callable, Dict, Optional


class DedupeCache:
    """
    Remembers keys for ``ttl_seconds`` after they are first seen.
    
    Attributes:
        ttl_seconds: How long a key counts as seen.
        
    Example:
        >>> cache = DedupeCache(ttl_seconds=300)
        >>> cache.seen("evt-1")
        False
        >>> cache.seen("evt-1")
        True
    """
    
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Optional[Callable[[], float]] = None
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._expiry: Dict[str, float] = {}
        self._lock = threading.Lock()
    
    def seen(self, key: str) -> bool:
        """
        Check and record a key in one step.
        
        Args:
            key: Event identifier.
            
        Returns:
            True if the key was seen within the TTL, otherwise False
            (and the key is recorded).
        """
        with self._lock:
            now = self._clock()
            self._prune(now)
            expires = self._expiry.get(key)
            if expires is not None and expires > now:
                return True
            self._expiry[key] = now + self.ttl_seconds
            return False
    
    def prune(self) -> None:
        """Drop expired keys."""
        with self._lock:
            self._prune(self._clock())
    
    def _prune(self, now: float) -> None:
        expired = [key for key, expires in self._expiry.items() if expires <= now]
        for key in expired:
            del self._expiry[key]
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._expiry)
