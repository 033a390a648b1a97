"""
Database schema for campaign performance storage.

Creates the campaign performance table, the operation log and their
indexes. Safe to run repeatedly.
"""

import sqlite3
import logging

logger = logging.getLogger(__name__)


def create_tables(conn: sqlite3.Connection) -> None:
    """Create all tables used by the ingestion pipeline and reports."""

    # 1. CAMPAIGN PERFORMANCE TABLE
    # roas is owned by storage; writers never supply it
    conn.execute("""
    CREATE TABLE IF NOT EXISTS campaign_performance (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        campaign_id INTEGER NOT NULL CHECK (campaign_id > 0),
        campaign_group TEXT NOT NULL,
        campaign_name TEXT NOT NULL,
        report_date DATE NOT NULL,
        campaign_type TEXT NOT NULL CHECK (campaign_type IN ('LIVE', 'PRODUCT')),
        cost REAL NOT NULL DEFAULT 0,
        net_cost REAL NOT NULL DEFAULT 0,
        live_views INTEGER NOT NULL DEFAULT 0,
        orders_sku INTEGER NOT NULL DEFAULT 0,
        gross_revenue REAL NOT NULL DEFAULT 0,
        roi REAL NOT NULL DEFAULT 0,
        roas REAL GENERATED ALWAYS AS (
            CASE WHEN cost > 0 THEN gross_revenue / cost ELSE 0 END
        ) VIRTUAL,
        currency TEXT NOT NULL DEFAULT 'RM',
        uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        uploaded_by TEXT,

        UNIQUE (campaign_id, report_date)
    )
    """)

    # 2. OPERATION LOGS TABLE (append-only audit trail)
    conn.execute("""
    CREATE TABLE IF NOT EXISTS operation_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        operation_type TEXT NOT NULL
            CHECK (operation_type IN ('upload', 'update', 'delete', 'manual_entry')),
        report_date DATE,
        user_email TEXT,
        action_details TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """)


def create_indexes(conn: sqlite3.Connection) -> None:
    """Create indexes for the report queries."""
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_campaign_performance_date_type "
        "ON campaign_performance (report_date, campaign_type)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_campaign_performance_group "
        "ON campaign_performance (campaign_group)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_operation_logs_date "
        "ON operation_logs (report_date, created_at)"
    )


def initialize_schema(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet."""
    create_tables(conn)
    create_indexes(conn)
    logger.info("Campaign performance schema is ready")
