#!/usr/bin/env python3
"""
Operation Log Repository - Data access layer for the operation_logs table.

The log is append-only: rows are inserted and listed, never updated.
"""

import json
import logging
import sqlite3
from typing import List, Optional

from ..models.campaign import OperationLogEntry, OperationType

logger = logging.getLogger(__name__)


class OperationLogRepository:
    """
    Data access layer for operation_logs.

    Connections are passed in - this class doesn't manage connections.
    """

    def insert(self, entry: OperationLogEntry, conn: sqlite3.Connection) -> Optional[int]:
        """
        Append one operation log row.

        Args:
            entry: Entry to store; action_details is serialized to JSON
            conn: Active database connection

        Returns:
            The inserted row ID
        """
        details = json.dumps(entry.action_details) if entry.action_details is not None else None
        cursor = conn.execute(
            """
            INSERT INTO operation_logs
            (operation_type, report_date, user_email, action_details, created_at)
            VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
        """,
            (
                entry.operation_type.value,
                entry.report_date,
                entry.user_email.lower(),
                details,
            ),
        )
        return cursor.lastrowid

    def list_entries(
        self,
        conn: sqlite3.Connection,
        report_date: Optional[str] = None,
        limit: int = 100,
    ) -> List[OperationLogEntry]:
        """Most recent entries first, optionally restricted to one report date."""
        query = """
            SELECT id, operation_type, report_date, user_email, action_details, created_at
            FROM operation_logs
        """
        params: list = []
        if report_date:
            query += " WHERE report_date = ?"
            params.append(report_date)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)

        entries = []
        for row in conn.execute(query, params).fetchall():
            entries.append(
                OperationLogEntry(
                    id=row["id"],
                    operation_type=OperationType(row["operation_type"]),
                    report_date=row["report_date"],
                    user_email=row["user_email"],
                    action_details=self._decode_details(row["action_details"]),
                    created_at=row["created_at"],
                )
            )
        return entries

    @staticmethod
    def _decode_details(raw: Optional[str]) -> Optional[dict]:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Unreadable operation log details: {raw!r}")
            return {"raw": raw}
