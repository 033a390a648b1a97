"""
Campaign performance entities.
Plain data structures shared by the importers, services and repositories.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ===================================================================
# ENUMS
# ===================================================================

class CampaignType(Enum):
    """Which ingestion pipeline a campaign record belongs to."""
    LIVE = "LIVE"
    PRODUCT = "PRODUCT"

    @property
    def slug(self) -> str:
        return "live-gmv" if self is CampaignType.LIVE else "product-gmv"

    @classmethod
    def from_value(cls, value: str) -> 'CampaignType':
        """Accept LIVE/PRODUCT, live/product or the live-gmv/product-gmv URL slugs."""
        normalized = (value or "").strip().lower()
        if normalized in {"live", "live-gmv", "live_gmv"}:
            return cls.LIVE
        if normalized in {"product", "product-gmv", "product_gmv"}:
            return cls.PRODUCT
        raise ValueError(f"Unknown campaign type: {value!r}")


class OperationType(Enum):
    """Kinds of entries in the operation log."""
    UPLOAD = "upload"
    UPDATE = "update"
    DELETE = "delete"
    MANUAL_ENTRY = "manual_entry"


# ===================================================================
# DATA MODELS
# ===================================================================

@dataclass(frozen=True)
class CampaignRecord:
    """One normalized, validated row ready for storage."""
    campaign_id: int
    campaign_group: str
    campaign_name: str
    cost: float = 0.0
    net_cost: float = 0.0
    live_views: int = 0
    orders_sku: int = 0
    gross_revenue: float = 0.0
    roi: float = 0.0
    currency: str = "RM"
    row_number: Optional[int] = None


@dataclass(frozen=True)
class GroupResolution:
    """Outcome of deriving a campaign group from a campaign name."""
    campaign_name: str
    group: Optional[str] = None
    has_marker: bool = False
    warning: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.error is None and bool(self.group)


@dataclass(frozen=True)
class OperationLogEntry:
    """A row of the append-only operation log."""
    operation_type: OperationType
    report_date: Optional[str]
    user_email: str
    action_details: Optional[dict] = None
    id: Optional[int] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'operation_type': self.operation_type.value,
            'report_date': self.report_date,
            'user_email': self.user_email,
            'action_details': self.action_details,
            'created_at': self.created_at,
        }
