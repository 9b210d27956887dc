"""
Utility Module for the Pack Slip Pipeline.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and time helpers
    - Duplicate-event cache and retry policy
"""

from .logger import setup_logger, setup_logger_from_config, set_level, get_logger
from .helpers import ensure_directory, get_file_extension, generate_timestamp, utc_now_iso
from .dedupe import DedupeCache
from .retry import with_retry

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'set_level',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp',
    'utc_now_iso',
    'DedupeCache',
    'with_retry',
]
