from .campaign_repository import CampaignRepository, DailyTotals
from .operation_log_repository import OperationLogRepository

__all__ = ['CampaignRepository', 'DailyTotals', 'OperationLogRepository']
