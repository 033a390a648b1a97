"""
Upsert executor: writes a validated batch in one transaction.
"""

import logging
from typing import Iterable, Optional

from .base_service import BaseService
from ..database.connection import DatabaseConnection
from ..models.campaign import CampaignRecord, CampaignType
from ..models.import_workflow import UpsertSummary
from ..repositories.campaign_repository import CampaignRepository

logger = logging.getLogger(__name__)


class CampaignUpsertExecutor(BaseService):
    """Persists campaign records keyed by (campaign_id, report_date)."""

    def __init__(
        self,
        db_connection: DatabaseConnection,
        repository: Optional[CampaignRepository] = None,
    ):
        super().__init__(db_connection)
        self.repository = repository or CampaignRepository()

    def execute(
        self,
        records: Iterable[CampaignRecord],
        report_date: str,
        campaign_type: CampaignType,
        uploaded_by: str,
    ) -> UpsertSummary:
        """
        Upsert every record inside a single transaction.

        Any storage error rolls back the whole batch and propagates to the
        caller; nothing is partially committed.

        Returns:
            UpsertSummary with insert and update counts
        """
        inserted = 0
        updated = 0

        with self.safe_transaction() as conn:
            for record in records:
                if self.repository.upsert(record, report_date, campaign_type, uploaded_by, conn):
                    inserted += 1
                else:
                    updated += 1

        logger.info(
            f"Upserted {campaign_type.value} batch for {report_date}: "
            f"{inserted} inserted, {updated} updated"
        )
        return UpsertSummary(inserted=inserted, updated=updated)
