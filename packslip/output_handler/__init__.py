"""
Output collaborators for the pack slip pipeline.

This module provides:
    - SQLite persistence of pack slip records
    - Webhook forwarding of submitted pack slips
"""

from .database_handler import PackSlipStore
from .webhook import WebhookForwarder

__all__ = ['PackSlipStore', 'WebhookForwarder']
