"""
Operation log service.

Writes are best-effort: a failure to record an operation is logged and
swallowed so it never fails the operation being recorded.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from .base_service import BaseService
from ..database.connection import DatabaseConnection
from ..models.campaign import OperationLogEntry, OperationType
from ..repositories.operation_log_repository import OperationLogRepository

logger = logging.getLogger(__name__)


def operation_type_for_counts(inserted: int, updated: int, manual: bool = False) -> OperationType:
    """
    Classify an ingestion for the log.

    A batch that both inserted and updated rows is an update; a batch that
    only inserted is an upload (or manual entry); anything else is an update.
    """
    if inserted > 0 and updated > 0:
        return OperationType.UPDATE
    if inserted > 0:
        return OperationType.MANUAL_ENTRY if manual else OperationType.UPLOAD
    return OperationType.UPDATE


class OperationLogService(BaseService):
    """Appends to and reads the operation log."""

    def __init__(
        self,
        db_connection: DatabaseConnection,
        repository: Optional[OperationLogRepository] = None,
        default_user: str = "unknown@unknown.com",
    ):
        super().__init__(db_connection)
        self.repository = repository or OperationLogRepository()
        self.default_user = default_user

    def log_operation(
        self,
        operation_type: OperationType,
        report_date: Optional[str],
        user_email: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[int]:
        """
        Record an operation. Never raises for storage problems.

        Returns:
            The new log row ID, or None if the write failed
        """
        entry = OperationLogEntry(
            operation_type=operation_type,
            report_date=report_date,
            user_email=(user_email or self.default_user).lower(),
            action_details=_drop_empty(details) if details is not None else None,
        )
        try:
            with self.safe_transaction() as conn:
                log_id = self.repository.insert(entry, conn)
            logger.debug(f"Logged {operation_type.value} operation for {report_date}")
            return log_id
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Failed to log operation: {e}")
            return None

    def list_logs(self, report_date: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        with self.safe_connection() as conn:
            entries = self.repository.list_entries(conn, report_date=report_date, limit=limit)
        return [entry.to_dict() for entry in entries]


def _drop_empty(details: Dict[str, Any]) -> Dict[str, Any]:
    # Empty error/warning lists are omitted from the stored JSON
    return {key: value for key, value in details.items() if value not in (None, [], {})}
