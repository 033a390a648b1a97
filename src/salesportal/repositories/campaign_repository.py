#!/usr/bin/env python3
"""
Campaign Repository - Data access layer for the campaign_performance table.

Handles all SQL for storing campaign records and for the report queries
built on top of them.
"""

import sqlite3
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from ..models.campaign import CampaignRecord, CampaignType


# ============================================================================
# Value Objects
# ============================================================================


@dataclass(frozen=True)
class DailyTotals:
    """Aggregated KPIs of one pipeline for one report date."""

    report_date: str
    total_cost: float
    total_orders: int
    total_revenue: float
    cost_per_order: float
    roas: float
    num_groups: int
    num_campaigns: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_date": self.report_date,
            "total_cost": self.total_cost,
            "total_orders": self.total_orders,
            "total_revenue": self.total_revenue,
            "cost_per_order": self.cost_per_order,
            "roas": self.roas,
            "num_groups": self.num_groups,
            "num_campaigns": self.num_campaigns,
        }


# ============================================================================
# Repository
# ============================================================================


class CampaignRepository:
    """
    Data access layer for campaign_performance.

    Connections are passed in - this class doesn't manage connections.
    """

    UPSERT_SQL = """
        INSERT INTO campaign_performance (
            campaign_id, campaign_group, campaign_name, report_date, campaign_type,
            cost, net_cost, live_views, orders_sku, gross_revenue, roi,
            currency, uploaded_at, uploaded_by
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP, ?)
        ON CONFLICT (campaign_id, report_date) DO UPDATE SET
            campaign_group = excluded.campaign_group,
            campaign_name = excluded.campaign_name,
            campaign_type = excluded.campaign_type,
            cost = excluded.cost,
            net_cost = excluded.net_cost,
            live_views = excluded.live_views,
            orders_sku = excluded.orders_sku,
            gross_revenue = excluded.gross_revenue,
            roi = excluded.roi,
            currency = excluded.currency,
            uploaded_at = CURRENT_TIMESTAMP,
            uploaded_by = excluded.uploaded_by
    """

    def record_exists(
        self, campaign_id: int, report_date: str, conn: sqlite3.Connection
    ) -> bool:
        """Check whether a row already exists for (campaign_id, report_date)."""
        cursor = conn.execute(
            "SELECT 1 FROM campaign_performance WHERE campaign_id = ? AND report_date = ?",
            (campaign_id, report_date),
        )
        return cursor.fetchone() is not None

    def upsert(
        self,
        record: CampaignRecord,
        report_date: str,
        campaign_type: CampaignType,
        uploaded_by: str,
        conn: sqlite3.Connection,
    ) -> bool:
        """
        Insert or overwrite the row for (campaign_id, report_date).

        Must run inside the caller's write transaction so the existence
        lookup and the write see the same state.

        Args:
            record: Normalized campaign record
            report_date: ISO date shared by the whole batch
            campaign_type: Pipeline the record came from
            uploaded_by: Provenance written on insert and on update
            conn: Active database connection

        Returns:
            True if a new row was inserted, False if an existing row was updated
        """
        existed = self.record_exists(record.campaign_id, report_date, conn)

        conn.execute(
            self.UPSERT_SQL,
            (
                record.campaign_id,
                record.campaign_group,
                record.campaign_name,
                report_date,
                campaign_type.value,
                record.cost,
                record.net_cost,
                record.live_views,
                record.orders_sku,
                record.gross_revenue,
                record.roi,
                record.currency,
                uploaded_by,
            ),
        )

        return not existed

    def delete_by_date(
        self, report_date: str, campaign_type: CampaignType, conn: sqlite3.Connection
    ) -> int:
        """
        Delete every record of one pipeline for a report date.

        Returns:
            Number of rows deleted
        """
        cursor = conn.execute(
            "DELETE FROM campaign_performance WHERE report_date = ? AND campaign_type = ?",
            (report_date, campaign_type.value),
        )
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Report queries
    # ------------------------------------------------------------------

    def get_campaigns(
        self,
        report_date: str,
        campaign_type: CampaignType,
        conn: sqlite3.Connection,
        campaign_group: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Campaign rows for a date, highest gross revenue first."""
        query = """
            SELECT
                campaign_id, campaign_group, campaign_name, report_date,
                cost, net_cost, live_views, orders_sku, gross_revenue,
                roi, roas, currency, uploaded_at, uploaded_by
            FROM campaign_performance
            WHERE report_date = ?
            AND campaign_type = ?
        """
        params: List[Any] = [report_date, campaign_type.value]

        if campaign_group:
            query += " AND campaign_group = ?"
            params.append(campaign_group)

        query += " ORDER BY gross_revenue DESC, campaign_id"

        return [dict(row) for row in conn.execute(query, params).fetchall()]

    def get_group_performance(
        self, report_date: str, campaign_type: CampaignType, conn: sqlite3.Connection
    ) -> List[Dict[str, Any]]:
        """Per-group roll-up for a date, highest revenue first."""
        rows = conn.execute(
            """
            SELECT
                campaign_group,
                report_date,
                COUNT(DISTINCT campaign_id) AS num_campaigns,
                COALESCE(SUM(cost), 0) AS total_cost,
                COALESCE(SUM(net_cost), 0) AS total_net_cost,
                COALESCE(SUM(gross_revenue), 0) AS total_revenue,
                COALESCE(AVG(roi), 0) AS avg_roi,
                COALESCE(SUM(orders_sku), 0) AS total_orders_sku,
                COALESCE(SUM(live_views), 0) AS total_live_views,
                MAX(uploaded_at) AS last_uploaded_at
            FROM campaign_performance
            WHERE report_date = ?
            AND campaign_type = ?
            GROUP BY campaign_group, report_date
            ORDER BY total_revenue DESC, campaign_group
            """,
            (report_date, campaign_type.value),
        ).fetchall()

        groups = []
        for row in rows:
            group = dict(row)
            cost = group["total_cost"] or 0
            group["roas"] = group["total_revenue"] / cost if cost > 0 else 0
            groups.append(group)
        return groups

    def get_report_dates(
        self, campaign_type: CampaignType, conn: sqlite3.Connection
    ) -> List[Dict[str, Any]]:
        """Summary of every report date holding data, newest first."""
        rows = conn.execute(
            """
            SELECT
                report_date,
                COUNT(DISTINCT campaign_id) AS num_campaigns,
                COUNT(DISTINCT campaign_group) AS num_groups,
                COALESCE(SUM(cost), 0) AS total_cost,
                COALESCE(SUM(gross_revenue), 0) AS total_revenue,
                COALESCE(SUM(orders_sku), 0) AS total_orders,
                MAX(uploaded_at) AS last_uploaded
            FROM campaign_performance
            WHERE campaign_type = ?
            GROUP BY report_date
            ORDER BY report_date DESC
            """,
            (campaign_type.value,),
        ).fetchall()
        return [dict(row) for row in rows]

    def get_latest_date(
        self, campaign_type: CampaignType, conn: sqlite3.Connection
    ) -> Optional[str]:
        """Most recent report date holding data, or None."""
        row = conn.execute(
            "SELECT MAX(report_date) FROM campaign_performance WHERE campaign_type = ?",
            (campaign_type.value,),
        ).fetchone()
        return row[0] if row and row[0] else None

    def get_daily_totals(
        self, report_date: str, campaign_type: CampaignType, conn: sqlite3.Connection
    ) -> Optional[DailyTotals]:
        """Aggregate KPIs for a date, or None when the date has no data."""
        row = conn.execute(
            """
            SELECT
                report_date,
                SUM(cost) AS total_cost,
                SUM(orders_sku) AS total_orders,
                SUM(gross_revenue) AS total_revenue,
                CASE WHEN SUM(orders_sku) > 0 THEN SUM(cost) / SUM(orders_sku) ELSE 0 END
                    AS cost_per_order,
                CASE WHEN SUM(cost) > 0 THEN SUM(gross_revenue) / SUM(cost) ELSE 0 END
                    AS roas,
                COUNT(DISTINCT campaign_group) AS num_groups,
                COUNT(DISTINCT campaign_id) AS num_campaigns
            FROM campaign_performance
            WHERE report_date = ?
            AND campaign_type = ?
            GROUP BY report_date
            """,
            (report_date, campaign_type.value),
        ).fetchone()

        if row is None:
            return None

        return DailyTotals(
            report_date=row["report_date"],
            total_cost=float(row["total_cost"] or 0),
            total_orders=int(row["total_orders"] or 0),
            total_revenue=float(row["total_revenue"] or 0),
            cost_per_order=float(row["cost_per_order"] or 0),
            roas=float(row["roas"] or 0),
            num_groups=int(row["num_groups"] or 0),
            num_campaigns=int(row["num_campaigns"] or 0),
        )
