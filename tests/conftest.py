"""Shared pytest fixtures for the test suite."""

from io import BytesIO

import pytest
import xlwt
from openpyxl import Workbook

from salesportal.database.connection import DatabaseConnection
from salesportal.database.schema import initialize_schema
from salesportal.services.container import reset_container
from salesportal.services.campaign_ingestion_service import CampaignIngestionService
from salesportal.services.campaign_report_service import CampaignReportService
from salesportal.services.operation_log_service import OperationLogService


@pytest.fixture
def db(tmp_path):
    """Temp-file SQLite database with the schema applied."""
    connection = DatabaseConnection(str(tmp_path / "test.db"))
    with connection.connection() as conn:
        initialize_schema(conn)
    return connection


@pytest.fixture
def log_service(db):
    return OperationLogService(db)


@pytest.fixture
def ingestion_service(db, log_service):
    return CampaignIngestionService(db, log_service, include_diagnostics=True)


@pytest.fixture
def report_service(db):
    return CampaignReportService(db)


@pytest.fixture
def fetch_rows(db):
    """Return stored campaign rows keyed by campaign_id."""
    def _fetch(report_date=None):
        query = "SELECT * FROM campaign_performance"
        params = ()
        if report_date:
            query += " WHERE report_date = ?"
            params = (report_date,)
        with db.connection() as conn:
            return {row["campaign_id"]: dict(row) for row in conn.execute(query, params)}
    return _fetch


@pytest.fixture
def make_workbook():
    """Build an .xlsx in memory: make_workbook(headers, rows, extra_sheets=None) -> bytes."""
    def _make(headers, rows, extra_sheets=None):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Report"
        if headers:
            sheet.append(headers)
        for row in rows:
            sheet.append(row)
        for title, sheet_rows in (extra_sheets or {}).items():
            extra = workbook.create_sheet(title)
            for row in sheet_rows:
                extra.append(row)
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def make_legacy_workbook():
    """Build a BIFF .xls in memory: make_legacy_workbook(headers, rows) -> bytes."""
    def _make(headers, rows):
        workbook = xlwt.Workbook()
        sheet = workbook.add_sheet("Report")
        for row_idx, row in enumerate([headers] + list(rows)):
            for col_idx, value in enumerate(row):
                if value is not None:
                    sheet.write(row_idx, col_idx, value)
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Flask app bound to a fresh temp database."""
    monkeypatch.setenv("DB_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("FLASK_ENV", "testing")
    reset_container()

    from salesportal.web.app import create_app

    app = create_app("testing")
    app.config["TESTING"] = True
    yield app
    reset_container()


@pytest.fixture
def client(app):
    return app.test_client()
