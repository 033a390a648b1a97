"""
Row-level and batch-level validation for campaign batches.

Row-level checks reject a single row and let the rest of the batch
continue. The batch-level check (one group per campaign ID) rejects the
whole batch before anything is written.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.campaign import CampaignRecord
from ..models.import_workflow import BatchValidation

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r'^[+-]?\d+')

# Largest value a signed 64-bit INTEGER column can hold
MAX_CAMPAIGN_ID = 2 ** 63 - 1


def _describe(value: Any) -> str:
    try:
        return str(value)
    except ValueError:
        # int -> str refuses very long numbers
        return "out-of-range number"


def validate_campaign_id(value: Any) -> Tuple[Optional[int], Optional[str]]:
    """
    Parse a campaign ID into a positive integer.

    The leading integer of the text is used, so "42", " 42 ", "42.0"
    and the float 42.0 all yield 42.

    Returns:
        (campaign_id, None) on success, (None, error_message) otherwise
    """
    parsed: Optional[int] = None

    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else None
    elif value is not None:
        match = _LEADING_INTEGER.match(str(value).strip())
        # Anything past 19 digits is out of range; int() also caps huge digit strings
        if match and len(match.group(0).lstrip('+-').lstrip('0')) <= 19:
            parsed = int(match.group(0))

    if parsed is None or parsed <= 0 or parsed > MAX_CAMPAIGN_ID:
        return None, f'Invalid campaign ID "{_describe(value)}" - must be a positive number'
    return parsed, None


def find_group_conflicts(records: Iterable[CampaignRecord]) -> List[str]:
    """
    Report every campaign ID that appears with more than one group.

    The first group seen for an ID is the reference; each later row with a
    different group adds one message.
    """
    first_group: Dict[int, str] = {}
    conflicts: List[str] = []

    for record in records:
        existing = first_group.get(record.campaign_id)
        if existing is None:
            first_group[record.campaign_id] = record.campaign_group
        elif existing != record.campaign_group:
            conflicts.append(
                f'Campaign ID {record.campaign_id} has conflicting groups: '
                f'"{existing}" and "{record.campaign_group}"'
            )

    if conflicts:
        logger.warning(f"Detected {len(conflicts)} campaign group conflicts")
    return conflicts


def validate_batch(records: Iterable[CampaignRecord]) -> BatchValidation:
    """Batch-level validation; a batch with conflicts must not be written."""
    return BatchValidation(conflicts=find_group_conflicts(records))
