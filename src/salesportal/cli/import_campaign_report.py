#!/usr/bin/env python3
"""
Import a TikTok campaign performance workbook from disk.
Runs the same pipeline as the upload endpoint and prints the outcome.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.settings import get_settings
from ..database.connection import DatabaseConnection
from ..database.schema import initialize_schema
from ..models.campaign import CampaignType
from ..services.campaign_ingestion_service import CampaignIngestionService
from ..services.operation_log_service import OperationLogService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import a Live GMV or Product GMV workbook for one report date",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Live GMV export for 1 October
  salesportal-import exports/live_2025-10-01.xlsx --date 2025-10-01 --type live

  # Product GMV export into a specific database, creating tables first
  salesportal-import exports/product.xlsx --date 2025-10-01 --type product \\
      --db-path data/database/salesportal.db --init-db

Re-importing the same file for the same date is safe: existing rows are
updated in place and reported as updates.
        """
    )

    parser.add_argument("excel_file", help="Path to the .xlsx workbook (first sheet is read)")
    parser.add_argument("--date", required=True, dest="report_date",
                        help="Report date for every row (YYYY-MM-DD)")
    parser.add_argument("--type", required=True, choices=["live", "product"], dest="campaign_type",
                        help="Which pipeline to run")
    parser.add_argument("--user", default=None,
                        help="Email recorded in the operation log")
    parser.add_argument("--db-path", default=None,
                        help="Database path (default: from environment settings)")
    parser.add_argument("--init-db", action="store_true",
                        help="Create tables if they do not exist")
    parser.add_argument("--json", action="store_true",
                        help="Print the raw JSON outcome")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')

    excel_file = Path(args.excel_file)
    if not excel_file.exists():
        print(f"❌ Excel file not found: {excel_file}")
        return 1

    settings = get_settings()
    db_path = args.db_path or settings.database.db_path

    if not args.init_db and not Path(db_path).exists():
        print(f"❌ Database not found: {db_path}")
        print("Re-run with --init-db to create it")
        return 1

    db = DatabaseConnection(db_path)
    if args.init_db:
        with db.transaction() as conn:
            initialize_schema(conn)

    service = CampaignIngestionService(
        db,
        OperationLogService(db, default_user=settings.ingestion.log_user_default),
        config=settings.ingestion,
        include_diagnostics=args.verbose,
    )

    outcome = service.ingest_workbook(
        excel_file,
        args.report_date,
        CampaignType.from_value(args.campaign_type),
        user_email=args.user,
        filename=excel_file.name,
    )

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
        return 0 if outcome.success else 1

    if outcome.success:
        print(f"✅ {outcome.message}")
        print(f"   Inserted: {outcome.records_inserted}")
        print(f"   Updated:  {outcome.records_updated}")
    else:
        print(f"❌ {outcome.error}: {outcome.message}")

    for error in outcome.errors or []:
        print(f"   error: {error}")
    for warning in outcome.warnings or []:
        print(f"   warning: {warning}")

    return 0 if outcome.success else 1


if __name__ == "__main__":
    sys.exit(main())
