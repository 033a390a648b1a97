"""
Read-side reporting over stored campaign performance.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .base_service import BaseService
from ..database.connection import DatabaseConnection
from ..models.campaign import CampaignType
from ..repositories.campaign_repository import CampaignRepository, DailyTotals

logger = logging.getLogger(__name__)

COMPARISON_PERIODS = ('all', 'yesterday', 'lastWeek', 'lastMonth', 'lastThreeMonths', 'customDate')

# (comparison key, response key, offset in days, offset in months)
_STANDARD_COMPARISONS = (
    ('yesterday', 'vsYesterday', -1, 0),
    ('lastWeek', 'vsLastWeek', -7, 0),
    ('lastMonth', 'vsLastMonth', 0, -1),
    ('lastThreeMonths', 'vsLastThreeMonths', 0, -3),
)


def shift_months(value: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def percentage_change(current: float, previous: float) -> Optional[float]:
    """Percentage change from previous to current; None when previous is 0."""
    if previous == 0:
        return None
    return ((current - previous) / previous) * 100


def compare_totals(current: DailyTotals, previous: Optional[DailyTotals]) -> Dict[str, Optional[float]]:
    if previous is None:
        return {'cost': None, 'orders': None, 'revenue': None, 'costPerOrder': None, 'roas': None}

    return {
        'cost': percentage_change(current.total_cost, previous.total_cost),
        'orders': percentage_change(current.total_orders, previous.total_orders),
        'revenue': percentage_change(current.total_revenue, previous.total_revenue),
        'costPerOrder': percentage_change(current.cost_per_order, previous.cost_per_order),
        'roas': percentage_change(current.roas, previous.roas),
    }


class CampaignReportService(BaseService):
    """Campaign listings, group roll-ups, report dates and daily KPIs."""

    def __init__(self, db_connection: DatabaseConnection, repository: Optional[CampaignRepository] = None):
        super().__init__(db_connection)
        self.repository = repository or CampaignRepository()

    def get_campaigns(
        self, report_date: str, campaign_type: CampaignType, campaign_group: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        with self.safe_connection() as conn:
            return self.repository.get_campaigns(report_date, campaign_type, conn, campaign_group)

    def get_group_performance(self, report_date: str, campaign_type: CampaignType) -> List[Dict[str, Any]]:
        with self.safe_connection() as conn:
            return self.repository.get_group_performance(report_date, campaign_type, conn)

    def get_report_dates(self, campaign_type: CampaignType) -> List[Dict[str, Any]]:
        with self.safe_connection() as conn:
            return self.repository.get_report_dates(campaign_type, conn)

    def get_latest_date(self, campaign_type: CampaignType) -> Optional[str]:
        with self.safe_connection() as conn:
            return self.repository.get_latest_date(campaign_type, conn)

    def get_daily_metrics(
        self,
        report_date: str,
        campaign_type: CampaignType,
        comparison_period: str = 'all',
        custom_date: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        KPIs for a date with percentage changes against earlier dates.

        Args:
            report_date: ISO date to report on
            campaign_type: Pipeline to aggregate
            comparison_period: One of COMPARISON_PERIODS
            custom_date: ISO date compared against when comparison_period is 'customDate'

        Returns:
            {'data': ..., 'comparisons': ...}, or None when the date has no data
        """
        if comparison_period not in COMPARISON_PERIODS:
            raise ValueError(f"Unknown comparison period: {comparison_period}")

        target = date.fromisoformat(report_date)

        with self.safe_connection() as conn:
            current = self.repository.get_daily_totals(report_date, campaign_type, conn)
            if current is None:
                logger.debug(f"No {campaign_type.value} metrics for {report_date}")
                return None

            data: Dict[str, Any] = current.to_dict()
            comparisons: Dict[str, Optional[Dict[str, Any]]] = {}

            for key, response_key, days, months in _STANDARD_COMPARISONS:
                previous = None
                if comparison_period in ('all', key):
                    previous_date = shift_months(target, months) + timedelta(days=days)
                    previous = self.repository.get_daily_totals(previous_date.isoformat(), campaign_type, conn)
                    comparisons[key] = previous.to_dict() if previous else None
                data[response_key] = compare_totals(current, previous)

            if comparison_period == 'customDate' and custom_date:
                previous = self.repository.get_daily_totals(custom_date, campaign_type, conn)
                comparisons['customDate'] = previous.to_dict() if previous else None
                if previous is not None:
                    data['vsCustomDate'] = compare_totals(current, previous)

        return {'data': data, 'comparisons': comparisons}
