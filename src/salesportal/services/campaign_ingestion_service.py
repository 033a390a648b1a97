#!/usr/bin/env python3
"""
Campaign ingestion service.

Runs the Live GMV and Product GMV pipelines:

    raw rows -> column normalization -> group extraction + numeric coercion
    -> row validation -> batch conflict check -> single-transaction upsert
    -> outcome + operation log

Both pipelines share this code path; what differs between them is held
by an IngestionStrategy.
"""

import logging
import re
import sqlite3
import traceback
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .base_service import BaseService
from .campaign_validation import validate_batch, validate_campaign_id
from .operation_log_service import OperationLogService, operation_type_for_counts
from .upsert_executor import CampaignUpsertExecutor
from ..config.settings import IngestionConfig
from ..config.vocabulary import (
    ColumnVocabulary,
    CurrencyVocabulary,
    DEFAULT_COLUMN_VOCABULARY,
    currency_vocabulary_for,
)
from ..database.connection import DatabaseConnection
from ..importers.column_normalizer import ColumnNormalizer, available_columns
from ..importers.excel_reader import ExcelReader, ExcelReadError, NoWorksheetError, ExcelSource
from ..importers.group_extractor import IngestionStrategy, collect_base_names, get_strategy
from ..importers.numeric import detect_currency, parse_integer, parse_numeric
from ..models.campaign import CampaignRecord, CampaignType, OperationType
from ..models.import_workflow import IngestionOutcome, PreparedBatch
from ..repositories.campaign_repository import CampaignRepository

logger = logging.getLogger(__name__)

REPORT_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def check_report_date(report_date: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Validate a batch report date.

    Returns:
        None when valid, otherwise an (error, message) pair for the caller
    """
    if not report_date:
        return 'Report date is required', 'Please provide a report date'

    if not isinstance(report_date, str) or not REPORT_DATE_PATTERN.match(report_date):
        return 'Invalid date format', 'reportDate must be in YYYY-MM-DD format'

    try:
        date.fromisoformat(report_date)
    except ValueError:
        return 'Invalid date format', 'reportDate must be in YYYY-MM-DD format'

    return None


class CampaignIngestionService(BaseService):
    """Validates and stores campaign performance batches for one report date."""

    def __init__(
        self,
        db_connection: DatabaseConnection,
        operation_log_service: OperationLogService,
        config: Optional[IngestionConfig] = None,
        column_vocabulary: Optional[ColumnVocabulary] = None,
        currency_vocabulary: Optional[CurrencyVocabulary] = None,
        include_diagnostics: bool = False,
        repository: Optional[CampaignRepository] = None,
    ):
        super().__init__(db_connection)
        self.config = config or IngestionConfig(
            default_currency="RM",
            upload_user_default="system",
            manual_user_default="manual_entry",
            log_user_default="unknown@unknown.com",
            log_limit_default=100,
        )
        self.operation_log = operation_log_service
        self.normalizer = ColumnNormalizer(column_vocabulary or DEFAULT_COLUMN_VOCABULARY)
        self.currency_vocabulary = currency_vocabulary or currency_vocabulary_for(
            self.config.default_currency
        )
        self.include_diagnostics = include_diagnostics
        self.repository = repository or CampaignRepository()
        self.executor = CampaignUpsertExecutor(db_connection, self.repository)

    # ========================================================================
    # Entry points
    # ========================================================================

    def ingest_workbook(
        self,
        source: ExcelSource,
        report_date: Optional[str],
        campaign_type: CampaignType,
        user_email: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> IngestionOutcome:
        """Ingest the first worksheet of an uploaded workbook."""
        date_problem = check_report_date(report_date)
        if date_problem:
            return IngestionOutcome.rejected(*date_problem)

        try:
            with ExcelReader(source, filename) as reader:
                raw_rows = reader.read_rows()
        except NoWorksheetError as e:
            logger.warning(f"Workbook {filename} has no sheets: {e}")
            return IngestionOutcome.rejected('No sheets found', 'The Excel file contains no sheets.')
        except ExcelReadError as e:
            logger.warning(f"Could not read workbook {filename}: {e}")
            return IngestionOutcome.rejected(
                'Invalid file format',
                'Could not read the Excel file. Please ensure it is a valid .xlsx or .xls file.',
            )

        return self.ingest_rows(raw_rows, report_date, campaign_type, user_email, filename)

    def ingest_rows(
        self,
        raw_rows: Sequence[Mapping[Any, Any]],
        report_date: Optional[str],
        campaign_type: CampaignType,
        user_email: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> IngestionOutcome:
        """Ingest spreadsheet-shaped rows keyed by their original headers."""
        date_problem = check_report_date(report_date)
        if date_problem:
            return IngestionOutcome.rejected(*date_problem)

        if not raw_rows:
            return IngestionOutcome.rejected(
                'Empty file',
                'The uploaded file contains no data. Please check that the first sheet has data rows.',
            )

        strategy = get_strategy(campaign_type)
        rows = [self.normalizer.normalize(raw) for raw in raw_rows]
        batch = self.prepare_rows(rows, strategy)

        logger.info(
            f"Prepared {campaign_type.value} batch for {report_date}: "
            f"{len(batch.records)} valid of {batch.total_rows} rows"
        )

        return self._commit_batch(
            batch,
            report_date,
            strategy,
            uploaded_by=self.config.upload_user_default,
            user_email=user_email,
            filename=filename,
            manual=False,
        )

    def ingest_manual_entries(
        self,
        entries: Any,
        report_date: Optional[str],
        campaign_type: CampaignType,
        user_email: Optional[str] = None,
    ) -> IngestionOutcome:
        """Ingest pre-structured rows that already use canonical field names."""
        if not report_date or not isinstance(entries, list):
            return IngestionOutcome.rejected('Invalid request', 'reportDate and data array are required')

        date_problem = check_report_date(report_date)
        if date_problem:
            return IngestionOutcome.rejected(*date_problem)

        if not entries:
            return IngestionOutcome.rejected('No data provided', 'At least one campaign record is required')

        rows = [dict(entry) if isinstance(entry, Mapping) else {} for entry in entries]
        strategy = get_strategy(campaign_type, manual=True)
        batch = self.prepare_rows(rows, strategy)

        return self._commit_batch(
            batch,
            report_date,
            strategy,
            uploaded_by=user_email or self.config.manual_user_default,
            user_email=user_email,
            filename=None,
            manual=True,
        )

    def delete_report_date(
        self,
        report_date: str,
        campaign_type: CampaignType,
        user_email: Optional[str] = None,
    ) -> int:
        """
        Delete every record of one pipeline for a date.

        Returns:
            Number of rows deleted
        """
        with self.safe_transaction() as conn:
            deleted = self.repository.delete_by_date(report_date, campaign_type, conn)

        logger.info(f"Deleted {deleted} {campaign_type.value} records for {report_date}")
        self.operation_log.log_operation(
            OperationType.DELETE,
            report_date,
            user_email,
            {'records_deleted': deleted, 'campaign_type': campaign_type.value},
        )
        return deleted

    # ========================================================================
    # Row preparation
    # ========================================================================

    def prepare_rows(
        self, rows: Sequence[Mapping[str, Any]], strategy: IngestionStrategy
    ) -> PreparedBatch:
        """
        Turn normalized rows into campaign records.

        Rows failing row-level checks are left out and described in the
        batch errors. Error messages number rows as the spreadsheet does:
        the first data row is row 2.
        """
        batch = PreparedBatch(total_rows=len(rows))

        base_names: List[str] = []
        if strategy.uses_base_names:
            base_names = collect_base_names(
                self._text(self.normalizer.resolve(row, 'campaign_name')) for row in rows
            )

        for index, row in enumerate(rows):
            record = self._prepare_row(row, index + 2, strategy, base_names, batch)
            if record is not None:
                batch.add_record(record)

        return batch

    def _prepare_row(
        self,
        row: Mapping[str, Any],
        row_number: int,
        strategy: IngestionStrategy,
        base_names: Sequence[str],
        batch: PreparedBatch,
    ) -> Optional[CampaignRecord]:
        raw_id = self.normalizer.resolve(row, 'campaign_id')
        campaign_name = self._text(self.normalizer.resolve(row, 'campaign_name'))

        if strategy.split_missing_errors:
            if raw_id is None:
                batch.add_error(f"Row {row_number}: Missing campaign ID")
                return None
            if not campaign_name:
                batch.add_error(f"Row {row_number}: Missing campaign name")
                return None
        elif raw_id is None or not campaign_name:
            columns = ", ".join(available_columns(row))
            batch.add_error(
                f"Row {row_number}: Missing campaign ID or name. Available columns: {columns}"
            )
            return None

        campaign_id, id_error = validate_campaign_id(raw_id)
        if id_error:
            batch.add_error(f"Row {row_number}: {id_error}")
            return None

        explicit_group = self._text(self.normalizer.resolve(row, 'campaign_group')) or None
        resolution = strategy.resolve_group(campaign_name, explicit_group, base_names)

        if resolution.warning:
            batch.add_warning(f"Row {row_number} ({campaign_name}): {resolution.warning}")

        if not resolution.is_resolved:
            batch.add_error(f"Row {row_number}: {resolution.error}")
            return None

        raw_cost = self.normalizer.resolve(row, 'cost')
        vocabulary = self.currency_vocabulary

        live_views = 0
        if 'live_views' in strategy.extra_fields:
            live_views = parse_integer(self.normalizer.resolve(row, 'live_views'), 'live_views', vocabulary)

        return CampaignRecord(
            campaign_id=campaign_id,
            campaign_group=resolution.group,
            campaign_name=resolution.campaign_name,
            cost=parse_numeric(raw_cost, 'cost', vocabulary),
            net_cost=parse_numeric(self.normalizer.resolve(row, 'net_cost'), 'net_cost', vocabulary),
            live_views=live_views,
            orders_sku=parse_integer(self.normalizer.resolve(row, 'orders_sku'), 'orders_sku', vocabulary),
            gross_revenue=parse_numeric(
                self.normalizer.resolve(row, 'gross_revenue'), 'gross_revenue', vocabulary
            ),
            roi=parse_numeric(self.normalizer.resolve(row, 'roi'), 'roi', vocabulary),
            currency=detect_currency(raw_cost, vocabulary),
            row_number=row_number,
        )

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    # ========================================================================
    # Batch validation and commit
    # ========================================================================

    def _commit_batch(
        self,
        batch: PreparedBatch,
        report_date: str,
        strategy: IngestionStrategy,
        uploaded_by: str,
        user_email: Optional[str],
        filename: Optional[str],
        manual: bool,
    ) -> IngestionOutcome:
        validation = validate_batch(batch.records)
        if not validation.is_valid:
            return IngestionOutcome.rejected(
                'Group conflicts detected',
                'The same campaign ID appears with different groups. '
                'Please ensure each campaign ID has a consistent group.',
                errors=batch.errors + validation.conflicts,
                conflicts=validation.conflicts,
            )

        if not batch.has_records:
            return IngestionOutcome.rejected(
                'No valid data',
                'No valid data found in the uploaded file',
                errors=list(batch.errors),
            )

        try:
            summary = self.executor.execute(
                batch.records, report_date, strategy.campaign_type, uploaded_by
            )
        except (sqlite3.Error, OverflowError) as e:
            logger.error(f"Storage failure for {strategy.campaign_type.value} batch {report_date}: {e}")
            diagnostics = traceback.format_exc() if self.include_diagnostics else None
            return IngestionOutcome.failed(str(e) or "An unknown error occurred", diagnostics)

        details: Dict[str, Any] = {
            'records_inserted': summary.inserted,
            'records_updated': summary.updated,
            'records_processed': summary.processed,
            'filename': filename,
            'errors': batch.errors,
            'warnings': batch.warnings,
        }
        self.operation_log.log_operation(
            operation_type_for_counts(summary.inserted, summary.updated, manual=manual),
            report_date,
            user_email,
            details,
        )

        message = None
        if manual:
            message = (
                f"Successfully processed {summary.processed} record(s): "
                f"{summary.inserted} inserted, {summary.updated} updated"
            )
        return IngestionOutcome.completed(summary, batch.errors, batch.warnings, message)
