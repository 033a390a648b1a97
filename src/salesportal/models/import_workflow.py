#!/usr/bin/env python3
"""
Import Workflow Models - Value objects for the campaign ingestion process.

These dataclasses carry state between the stages of the ingestion
workflow (row preparation, batch validation, upsert, reporting), making
data flow explicit and testable.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any

from .campaign import CampaignRecord


# ============================================================================
# Row Preparation Models
# ============================================================================

@dataclass
class PreparedBatch:
    """
    Mutable accumulator filled while raw rows are normalized and validated.

    Rows that fail row-level validation are dropped and described in
    ``errors``; rows that are kept but look suspicious add to ``warnings``.
    """
    records: List[CampaignRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_rows: int = 0

    def add_record(self, record: CampaignRecord) -> None:
        self.records.append(record)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def has_records(self) -> bool:
        return len(self.records) > 0


@dataclass(frozen=True)
class BatchValidation:
    """Immutable result of batch-level validation."""
    conflicts: List[str]

    @property
    def is_valid(self) -> bool:
        return len(self.conflicts) == 0


# ============================================================================
# Execution Models
# ============================================================================

@dataclass(frozen=True)
class UpsertSummary:
    """Insert/update accounting for one committed batch."""
    inserted: int
    updated: int

    @property
    def processed(self) -> int:
        return self.inserted + self.updated


# ============================================================================
# Outcome Model
# ============================================================================

@dataclass
class IngestionOutcome:
    """
    Result of one ingestion request, ready to serialize for the caller.

    Built through the ``completed``, ``rejected`` and ``failed`` factories;
    ``status_code`` is the HTTP status the web layer should answer with.
    """
    success: bool
    status_code: int
    message: str
    error: Optional[str] = None
    records_processed: int = 0
    records_inserted: int = 0
    records_updated: int = 0
    errors: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    conflicts: Optional[List[str]] = None
    details: Optional[str] = None

    @classmethod
    def completed(
        cls,
        summary: UpsertSummary,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        message: Optional[str] = None,
    ) -> 'IngestionOutcome':
        """Batch committed; row errors and warnings are reported alongside the counts."""
        return cls(
            success=True,
            status_code=200,
            message=message or f"Successfully processed {summary.processed} records",
            records_processed=summary.processed,
            records_inserted=summary.inserted,
            records_updated=summary.updated,
            errors=errors or None,
            warnings=warnings or None,
        )

    @classmethod
    def rejected(
        cls,
        error: str,
        message: str,
        errors: Optional[List[str]] = None,
        conflicts: Optional[List[str]] = None,
        status_code: int = 400,
    ) -> 'IngestionOutcome':
        """Request refused before anything was written."""
        return cls(
            success=False,
            status_code=status_code,
            message=message,
            error=error,
            errors=errors,
            conflicts=conflicts,
        )

    @classmethod
    def failed(cls, message: str, details: Optional[str] = None) -> 'IngestionOutcome':
        """Storage failed and the batch was rolled back."""
        return cls(
            success=False,
            status_code=500,
            message=message,
            error="Upload failed",
            details=details,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render the response body shape expected by API clients."""
        if self.success:
            body: Dict[str, Any] = {
                'success': True,
                'message': self.message,
                'recordsProcessed': self.records_processed,
                'recordsInserted': self.records_inserted,
                'recordsUpdated': self.records_updated,
            }
        else:
            body = {
                'success': False,
                'error': self.error,
                'message': self.message,
            }
            if self.conflicts is not None:
                body['conflicts'] = self.conflicts
            if self.details:
                body['details'] = self.details

        if self.errors is not None:
            body['errors'] = self.errors
        if self.warnings:
            body['warnings'] = self.warnings
        return body
