#!/usr/bin/env python3
"""
Base service class with consistent transaction management patterns.
Prevents nested transactions and keeps commit/rollback handling in one place.
"""

import sqlite3
import logging
from contextlib import contextmanager
from typing import Optional, Iterator

from ..database.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base service class providing consistent transaction management.

    Usage:
        ```python
        class MyService(BaseService):
            def do_work(self):
                with self.safe_transaction() as conn:
                    conn.execute("INSERT INTO table VALUES (?)", (value,))
        ```

    A ``safe_transaction`` opened while another one is active on the same
    service reuses the outer connection instead of nesting.
    """

    def __init__(self, db_connection: DatabaseConnection):
        """
        Initialize base service with database connection.

        Args:
            db_connection: DatabaseConnection instance for database operations
        """
        self.db = db_connection
        self._current_connection: Optional[sqlite3.Connection] = None
        self._in_transaction: bool = False

    @property
    def in_transaction(self) -> bool:
        """True while a safe_transaction block is active on this service."""
        return self._in_transaction and self._current_connection is not None

    @contextmanager
    def safe_transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for a write transaction.

        Opens ``BEGIN IMMEDIATE`` so the write lock is taken up front,
        commits on normal exit and rolls back (then re-raises) on any error.

        Yields:
            sqlite3.Connection: Database connection within transaction
        """
        if self.in_transaction:
            logger.debug("Already in transaction, reusing existing connection")
            yield self._current_connection
            return

        conn = self.db.connect()
        transaction_id = f"txn_{id(conn)}"
        logger.debug(f"Starting transaction {transaction_id}")

        try:
            conn.execute("BEGIN IMMEDIATE")
            self._current_connection = conn
            self._in_transaction = True
            yield conn
            conn.commit()
            logger.debug(f"Transaction {transaction_id} committed successfully")

        except Exception as e:
            conn.rollback()
            logger.error(f"Transaction {transaction_id} rolled back due to error: {e}")
            raise

        finally:
            self._current_connection = None
            self._in_transaction = False
            conn.close()

    @contextmanager
    def safe_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for read-only work without transaction overhead.

        Yields:
            sqlite3.Connection: Database connection
        """
        if self._current_connection is not None:
            yield self._current_connection
            return

        conn = self.db.connect()
        try:
            yield conn
        finally:
            conn.close()
