"""
Data models for the sales portal campaign pipeline.
"""

from .campaign import (
    CampaignType,
    OperationType,
    CampaignRecord,
    GroupResolution,
    OperationLogEntry,
)
from .import_workflow import (
    PreparedBatch,
    BatchValidation,
    UpsertSummary,
    IngestionOutcome,
)

__all__ = [
    'CampaignType',
    'OperationType',
    'CampaignRecord',
    'GroupResolution',
    'OperationLogEntry',
    'PreparedBatch',
    'BatchValidation',
    'UpsertSummary',
    'IngestionOutcome',
]
