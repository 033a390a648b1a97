"""Integration tests for CampaignIngestionService against a temp SQLite database."""

import sqlite3
from unittest.mock import patch

import pytest

from salesportal.models.campaign import CampaignType
from salesportal.services.campaign_ingestion_service import (
    CampaignIngestionService,
    check_report_date,
)

REPORT_DATE = "2025-10-01"


def live_row(campaign_id, name, cost="RM 100.00", revenue="RM 1,234.50", **extra):
    row = {
        "Campaign ID": campaign_id,
        "Campaign Name": name,
        "Cost": cost,
        "Net Cost": "90",
        "Live Views": "1,000",
        "Orders (SKU)": "10",
        "Gross Revenue (RM)": revenue,
        "ROI": "2.5",
    }
    row.update(extra)
    return row


LIVE_ROWS = [
    live_row(101, "Samhan"),
    live_row("102", "Samhan Promo Oct", cost=50, revenue=500),
    live_row(103, "[HIM Wellness] Flash Sale", cost="$20", revenue=60),
]


class TestCheckReportDate:

    @pytest.mark.parametrize("value", ["2025/10/01", "2025-02-30", "01-10-2025", "2025-1-1", 20251001])
    def test_invalid(self, value):
        assert check_report_date(value)[0] == "Invalid date format"

    def test_missing(self):
        assert check_report_date(None)[0] == "Report date is required"
        assert check_report_date("")[0] == "Report date is required"

    def test_valid(self):
        assert check_report_date("2024-02-29") is None


class TestLiveIngestion:

    def test_first_upload_inserts_everything(self, ingestion_service, fetch_rows):
        outcome = ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        assert outcome.success
        assert outcome.status_code == 200
        assert outcome.message == "Successfully processed 3 records"
        assert (outcome.records_inserted, outcome.records_updated, outcome.records_processed) == (3, 0, 3)
        assert outcome.errors is None

        rows = fetch_rows(REPORT_DATE)
        assert set(rows) == {101, 102, 103}
        assert rows[101]["campaign_group"] == "Samhan"
        assert rows[101]["campaign_name"] == "[Samhan] Samhan"
        assert rows[101]["gross_revenue"] == pytest.approx(1234.5)
        assert rows[101]["live_views"] == 1000
        assert rows[101]["orders_sku"] == 10
        assert rows[101]["currency"] == "RM"
        assert rows[101]["roas"] == pytest.approx(12.345)
        assert rows[101]["campaign_type"] == "LIVE"
        assert rows[101]["uploaded_by"] == "system"
        assert rows[102]["campaign_group"] == "Samhan"
        assert rows[102]["campaign_name"] == "[Samhan] Samhan Promo Oct"
        assert rows[103]["campaign_group"] == "HIM Wellness"
        assert rows[103]["currency"] == "USD"

    def test_reupload_is_idempotent(self, ingestion_service, fetch_rows):
        ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)
        before = fetch_rows(REPORT_DATE)

        outcome = ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        assert outcome.success
        assert (outcome.records_inserted, outcome.records_updated) == (0, 3)
        after = fetch_rows(REPORT_DATE)
        assert len(after) == 3
        for campaign_id, row in after.items():
            assert row["gross_revenue"] == before[campaign_id]["gross_revenue"]
            assert row["campaign_group"] == before[campaign_id]["campaign_group"]

    def test_mixed_batch_counts(self, ingestion_service):
        existing = [live_row(i, f"[Grp] Existing {i}") for i in (1, 2, 3)]
        ingestion_service.ingest_rows(existing, REPORT_DATE, CampaignType.LIVE)

        batch = existing + [live_row(i, f"[Grp] New {i}") for i in (4, 5, 6, 7, 8)]
        outcome = ingestion_service.ingest_rows(batch, REPORT_DATE, CampaignType.LIVE)

        assert (outcome.records_inserted, outcome.records_updated, outcome.records_processed) == (5, 3, 8)

    def test_same_campaign_on_other_date_is_new(self, ingestion_service):
        ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)
        outcome = ingestion_service.ingest_rows(LIVE_ROWS, "2025-10-02", CampaignType.LIVE)
        assert outcome.records_inserted == 3

    def test_update_overwrites_measures(self, ingestion_service, fetch_rows):
        ingestion_service.ingest_rows([live_row(7, "[A] Promo")], REPORT_DATE, CampaignType.LIVE)
        ingestion_service.ingest_rows(
            [live_row(7, "[A] Promo", cost=0, revenue="RM 10")], REPORT_DATE, CampaignType.LIVE
        )
        row = fetch_rows(REPORT_DATE)[7]
        assert row["gross_revenue"] == 10
        assert row["cost"] == 0
        assert row["roas"] == 0

    def test_group_conflict_rejects_whole_batch(self, ingestion_service, fetch_rows):
        rows = [
            live_row(1, "[Fine] Campaign"),
            live_row(42, "[A] Promo"),
            live_row(42, "[B] Promo"),
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)

        assert not outcome.success
        assert outcome.status_code == 400
        assert outcome.error == "Group conflicts detected"
        assert outcome.conflicts == ['Campaign ID 42 has conflicting groups: "A" and "B"']
        assert fetch_rows() == {}

    def test_conflict_errors_include_row_errors(self, ingestion_service):
        rows = [
            live_row(42, "[A] Promo"),
            live_row("abc", "[A] Bad"),
            live_row(42, "[B] Promo"),
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)
        assert outcome.errors == [
            'Row 3: Invalid campaign ID "abc" - must be a positive number',
            'Campaign ID 42 has conflicting groups: "A" and "B"',
        ]

    def test_no_valid_rows(self, ingestion_service, fetch_rows):
        rows = [{"Campaign ID": 1, "Cost": 5}, {"Campaign ID": 2, "Cost": 6}]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)

        assert not outcome.success
        assert outcome.status_code == 400
        assert outcome.error == "No valid data"
        assert outcome.errors[0] == "Row 2: Missing campaign ID or name. Available columns: campaign_id, cost"
        assert len(outcome.errors) == 2
        assert fetch_rows() == {}

    def test_row_errors_reported_alongside_success(self, ingestion_service, fetch_rows):
        rows = [live_row(1, "[A] Good"), live_row(2, "Random Unmatched Text"), live_row(0, "[A] Zero")]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)

        assert outcome.success
        assert outcome.records_inserted == 1
        assert outcome.errors == [
            'Row 3: Cannot determine group for "Random Unmatched Text". '
            "Use [Group], (Group), or {Group} notation.",
            'Row 4: Invalid campaign ID "0" - must be a positive number',
        ]
        assert set(fetch_rows()) == {1}

    def test_marker_warning(self, ingestion_service):
        outcome = ingestion_service.ingest_rows(
            [live_row(1, "[A] (B) Promo")], REPORT_DATE, CampaignType.LIVE
        )
        assert outcome.warnings == [
            "Row 2 ([A] (B) Promo): Multiple group markers detected: [A], (B). "
            "Using precedence: brackets [] > parentheses () > curly braces {}."
        ]

    def test_revenue_keyword_fallback(self, ingestion_service, fetch_rows):
        rows = [{"Campaign ID": 5, "Campaign Name": "[A] Promo", "Total GMV (RM)": "RM 88"}]
        ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)
        assert fetch_rows()[5]["gross_revenue"] == 88

    def test_invalid_date_writes_nothing(self, ingestion_service, fetch_rows):
        outcome = ingestion_service.ingest_rows(LIVE_ROWS, "2025/10/01", CampaignType.LIVE)
        assert outcome.error == "Invalid date format"
        assert fetch_rows() == {}

    def test_empty_rows(self, ingestion_service):
        outcome = ingestion_service.ingest_rows([], REPORT_DATE, CampaignType.LIVE)
        assert outcome.error == "Empty file"
        assert outcome.status_code == 400


class TestProductIngestion:

    def test_product_rows(self, ingestion_service, fetch_rows):
        rows = [
            {"Campaign ID": 201, "Campaign Name": "Widget Sale", "Campaign Group": "Gadgets",
             "Cost": 10, "Live Views": 999, "GMV": 40},
            {"Campaign ID": 202, "Campaign Name": "Solo Item", "Cost": 5, "Revenue": 5},
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.PRODUCT)

        assert outcome.records_inserted == 2
        stored = fetch_rows()
        assert stored[201]["campaign_group"] == "Gadgets"
        assert stored[201]["campaign_name"] == "Widget Sale"
        assert stored[201]["live_views"] == 0
        assert stored[201]["campaign_type"] == "PRODUCT"
        assert stored[202]["campaign_group"] == "Solo Item"

    def test_product_missing_fields_reported_separately(self, ingestion_service):
        rows = [
            {"Campaign Name": "No Id"},
            {"Campaign ID": 3},
            {"Campaign ID": 4, "Campaign Name": "Fine"},
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.PRODUCT)
        assert outcome.errors == ["Row 2: Missing campaign ID", "Row 3: Missing campaign name"]
        assert outcome.records_inserted == 1

    def test_product_conflicts_detected(self, ingestion_service):
        rows = [
            {"Campaign ID": 9, "Campaign Name": "X", "Campaign Group": "A"},
            {"Campaign ID": 9, "Campaign Name": "X", "Campaign Group": "B"},
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.PRODUCT)
        assert outcome.error == "Group conflicts detected"


class TestWorkbookIngestion:

    def test_workbook_upload(self, ingestion_service, make_workbook, fetch_rows):
        content = make_workbook(
            ["Campaign ID", "Campaign Name", "Cost", "Gross Revenue (RM)"],
            [[1, "[A] Promo", "RM 10", "RM 30"], [None, None, None, None], [2, "[B] Promo", 5, 5]],
        )
        outcome = ingestion_service.ingest_workbook(
            content, REPORT_DATE, CampaignType.LIVE, filename="live.xlsx"
        )
        assert outcome.success
        assert outcome.records_inserted == 2
        assert fetch_rows()[1]["gross_revenue"] == 30

    def test_legacy_workbook_upload(self, ingestion_service, make_legacy_workbook, fetch_rows):
        content = make_legacy_workbook(
            ["Campaign ID", "Campaign Name", "Cost", "Live Views"],
            [[1, "[A] Promo", "RM 10", 250], [2, "Samhan", 5, 40]],
        )
        outcome = ingestion_service.ingest_workbook(
            content, REPORT_DATE, CampaignType.LIVE, filename="live.xls"
        )
        assert outcome.success
        assert outcome.records_inserted == 2
        assert fetch_rows()[1]["live_views"] == 250
        assert fetch_rows()[2]["campaign_group"] == "Samhan"

    def test_unreadable_workbook(self, ingestion_service):
        outcome = ingestion_service.ingest_workbook(
            b"garbage", REPORT_DATE, CampaignType.LIVE, filename="live.xlsx"
        )
        assert outcome.error == "Invalid file format"
        assert outcome.status_code == 400

    def test_header_only_workbook_is_empty(self, ingestion_service, make_workbook):
        content = make_workbook(["Campaign ID", "Campaign Name"], [])
        outcome = ingestion_service.ingest_workbook(
            content, REPORT_DATE, CampaignType.LIVE, filename="live.xlsx"
        )
        assert outcome.error == "Empty file"


class TestManualEntries:

    def test_manual_entries(self, ingestion_service, fetch_rows, log_service):
        entries = [
            {"campaign_id": 11, "campaign_name": "Promo Oct", "campaign_group": "Samhan",
             "cost": 10, "gross_revenue": 25, "live_views": 100},
            {"campaign_id": "12", "campaign_name": "[HIM] Flash", "cost": "RM 5"},
        ]
        outcome = ingestion_service.ingest_manual_entries(
            entries, REPORT_DATE, CampaignType.LIVE, user_email="Ops@Example.com"
        )

        assert outcome.success
        assert outcome.message == "Successfully processed 2 record(s): 2 inserted, 0 updated"
        stored = fetch_rows()
        assert stored[11]["campaign_name"] == "[Samhan] Promo Oct"
        assert stored[11]["campaign_group"] == "Samhan"
        assert stored[11]["uploaded_by"] == "Ops@Example.com"
        assert stored[12]["campaign_group"] == "HIM"

        logs = log_service.list_logs()
        assert logs[0]["operation_type"] == "manual_entry"
        assert logs[0]["user_email"] == "ops@example.com"

    def test_manual_default_uploader(self, ingestion_service, fetch_rows):
        ingestion_service.ingest_manual_entries(
            [{"campaign_id": 1, "campaign_name": "[A] x"}], REPORT_DATE, CampaignType.LIVE
        )
        assert fetch_rows()[1]["uploaded_by"] == "manual_entry"

    def test_invalid_request(self, ingestion_service):
        outcome = ingestion_service.ingest_manual_entries({"not": "a list"}, REPORT_DATE, CampaignType.LIVE)
        assert outcome.error == "Invalid request"
        outcome = ingestion_service.ingest_manual_entries([{}], None, CampaignType.LIVE)
        assert outcome.error == "Invalid request"

    def test_empty_list(self, ingestion_service):
        outcome = ingestion_service.ingest_manual_entries([], REPORT_DATE, CampaignType.LIVE)
        assert outcome.error == "No data provided"


class TestOperationLogging:

    def test_upload_then_update(self, ingestion_service, log_service):
        ingestion_service.ingest_rows(
            LIVE_ROWS, REPORT_DATE, CampaignType.LIVE, user_email="Ops@Example.com", filename="live.xlsx"
        )
        ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        logs = log_service.list_logs(REPORT_DATE)
        assert [log["operation_type"] for log in logs] == ["update", "upload"]

        first = logs[1]
        assert first["user_email"] == "ops@example.com"
        assert first["action_details"]["records_inserted"] == 3
        assert first["action_details"]["filename"] == "live.xlsx"
        assert "errors" not in first["action_details"]
        assert logs[0]["user_email"] == "unknown@unknown.com"

    def test_rejected_batch_is_not_logged(self, ingestion_service, log_service):
        ingestion_service.ingest_rows([{"Cost": 1}], REPORT_DATE, CampaignType.LIVE)
        assert log_service.list_logs() == []

    def test_log_failure_does_not_fail_upload(self, ingestion_service, log_service, fetch_rows):
        with patch.object(
            log_service.repository, "insert", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            outcome = ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        assert outcome.success
        assert outcome.records_inserted == 3
        assert len(fetch_rows()) == 3


class TestStorageFailure:

    def test_failure_rolls_back_whole_batch(self, ingestion_service, fetch_rows, log_service):
        repository = ingestion_service.executor.repository
        original_upsert = repository.upsert
        calls = []

        def flaky_upsert(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise sqlite3.OperationalError("database is locked")
            return original_upsert(*args, **kwargs)

        with patch.object(repository, "upsert", side_effect=flaky_upsert):
            outcome = ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        assert not outcome.success
        assert outcome.status_code == 500
        assert outcome.error == "Upload failed"
        assert outcome.message == "database is locked"
        assert "Traceback" in outcome.details
        assert fetch_rows() == {}
        assert log_service.list_logs() == []

    def test_diagnostics_hidden_when_disabled(self, db, log_service):
        service = CampaignIngestionService(db, log_service, include_diagnostics=False)
        with patch.object(
            service.executor.repository, "upsert", side_effect=sqlite3.OperationalError("boom")
        ):
            outcome = service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)

        assert outcome.status_code == 500
        assert outcome.details is None
        assert "details" not in outcome.to_dict()


class TestDeleteReportDate:

    def test_delete_only_touches_one_pipeline(self, ingestion_service, fetch_rows, log_service):
        ingestion_service.ingest_rows(LIVE_ROWS, REPORT_DATE, CampaignType.LIVE)
        ingestion_service.ingest_rows(
            [{"Campaign ID": 900, "Campaign Name": "Widget"}], REPORT_DATE, CampaignType.PRODUCT
        )

        deleted = ingestion_service.delete_report_date(REPORT_DATE, CampaignType.LIVE, "ops@example.com")

        assert deleted == 3
        assert set(fetch_rows()) == {900}
        latest = log_service.list_logs(limit=1)[0]
        assert latest["operation_type"] == "delete"
        assert latest["action_details"] == {"records_deleted": 3, "campaign_type": "LIVE"}

    def test_delete_nothing(self, ingestion_service):
        assert ingestion_service.delete_report_date(REPORT_DATE, CampaignType.LIVE) == 0


class TestOutOfRangeNumbers:

    def test_oversized_campaign_id_is_a_row_error(self, ingestion_service, fetch_rows):
        rows = [
            {"Campaign ID": "123456789012345678901", "Campaign Name": "[A] Promo"},
            {"Campaign ID": 5, "Campaign Name": "[A] Other"},
        ]
        outcome = ingestion_service.ingest_rows(rows, REPORT_DATE, CampaignType.LIVE)

        assert outcome.success
        assert outcome.errors == [
            'Row 2: Invalid campaign ID "123456789012345678901" - must be a positive number'
        ]
        assert set(fetch_rows()) == {5}

    def test_oversized_only_row_is_rejected_not_raised(self, ingestion_service):
        outcome = ingestion_service.ingest_rows(
            [{"Campaign ID": 2 ** 64, "Campaign Name": "[A] Promo"}], REPORT_DATE, CampaignType.LIVE
        )
        assert outcome.status_code == 400
        assert outcome.error == "No valid data"

    def test_huge_manual_measures_coerce_to_zero(self, ingestion_service, fetch_rows):
        outcome = ingestion_service.ingest_manual_entries(
            [{"campaign_id": 1, "campaign_name": "[A] Promo", "cost": 10 ** 400, "orders_sku": 1e30}],
            REPORT_DATE,
            CampaignType.LIVE,
        )
        assert outcome.success
        stored = fetch_rows()[1]
        assert stored["cost"] == 0
        assert stored["orders_sku"] == 0
