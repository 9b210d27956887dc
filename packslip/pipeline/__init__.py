"""
Pack slip pipeline: record model and orchestration.
"""

from .record import PackSlipRecord, PackSlipStatus
from .processor import PackSlipPipeline, build_webhook_payload, normalize_submitted_items

__all__ = [
    'PackSlipRecord',
    'PackSlipStatus',
    'PackSlipPipeline',
    'build_webhook_payload',
    'normalize_submitted_items'
]
