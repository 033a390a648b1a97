# src/salesportal/web/routes/tiktok.py
"""
TikTok campaign performance API.

Every pipeline-specific endpoint lives under
``/api/tiktok/<pipeline>/`` where pipeline is ``live-gmv`` or ``product-gmv``.
"""

import logging
from io import BytesIO

from flask import Blueprint, request

from ...models.campaign import CampaignType
from ...services.container import get_container
from ...services.campaign_ingestion_service import check_report_date
from ...services.campaign_report_service import COMPARISON_PERIODS
from ..utils.request_helpers import (
    RequestValidationError,
    create_error_response,
    create_json_response,
    create_success_response,
    get_date_parameter,
    get_limit_parameter,
    handle_request_errors,
    log_requests,
    safe_get_service,
)

logger = logging.getLogger(__name__)

tiktok_bp = Blueprint("tiktok", __name__, url_prefix="/api/tiktok")


def _campaign_type(pipeline: str) -> CampaignType:
    for campaign_type in CampaignType:
        if campaign_type.slug == pipeline:
            return campaign_type
    raise RequestValidationError('Not found', f"Unknown pipeline: {pipeline}", 404)


def _ingestion_service():
    return safe_get_service(get_container(), "campaign_ingestion_service")


def _report_service():
    return safe_get_service(get_container(), "campaign_report_service")


# ============================================================
# Ingestion
# ============================================================


@tiktok_bp.route("/<pipeline>/upload", methods=["POST"])
@log_requests
@handle_request_errors
def upload(pipeline):
    """Upload a workbook for one report date (multipart: file, reportDate, userEmail)."""
    campaign_type = _campaign_type(pipeline)

    report_date = (request.form.get("reportDate") or "").strip()
    if not report_date:
        return create_error_response('Report date is required', 400, 'Please provide a report date')

    user_email = (request.form.get("userEmail") or "").strip() or None

    file = request.files.get("file")
    if file is None or not file.filename:
        return create_error_response('No file uploaded', 400, 'Please select a file to upload')

    logger.info(f"{campaign_type.value} upload of '{file.filename}' for {report_date}")
    outcome = _ingestion_service().ingest_workbook(
        BytesIO(file.read()),
        report_date,
        campaign_type,
        user_email=user_email,
        filename=file.filename,
    )
    return create_json_response(outcome.to_dict(), outcome.status_code)


@tiktok_bp.route("/<pipeline>/manual-entry", methods=["POST"])
@log_requests
@handle_request_errors
def manual_entry(pipeline):
    """Store pre-structured rows: JSON {reportDate, data: [...], userEmail?}."""
    campaign_type = _campaign_type(pipeline)
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}

    outcome = _ingestion_service().ingest_manual_entries(
        body.get("data"),
        body.get("reportDate"),
        campaign_type,
        user_email=body.get("userEmail") or None,
    )
    return create_json_response(outcome.to_dict(), outcome.status_code)


@tiktok_bp.route("/<pipeline>/records", methods=["DELETE"])
@log_requests
@handle_request_errors
def delete_records(pipeline):
    """Delete every record of the pipeline for ?date=YYYY-MM-DD."""
    campaign_type = _campaign_type(pipeline)
    report_date = (request.args.get("date") or "").strip()

    if not report_date:
        return create_error_response(
            'Date is required', 400, 'Please provide a date parameter (YYYY-MM-DD)'
        )
    if check_report_date(report_date):
        return create_error_response('Invalid date format', 400, 'Date must be in YYYY-MM-DD format')

    user_email = (request.args.get("userEmail") or "").strip() or None
    deleted = _ingestion_service().delete_report_date(report_date, campaign_type, user_email)

    return create_json_response({
        "success": True,
        "message": f"Successfully deleted {deleted} records for {report_date}",
        "deletedCount": deleted,
    })


# ============================================================
# Reports
# ============================================================


@tiktok_bp.route("/<pipeline>/campaigns")
@log_requests
@handle_request_errors
def campaigns(pipeline):
    """Campaign rows for ?date= (default today), optionally filtered by ?group=."""
    campaign_type = _campaign_type(pipeline)
    report_date = get_date_parameter("date", default_today=True)
    group = (request.args.get("group") or "").strip() or None

    rows = _report_service().get_campaigns(report_date, campaign_type, group)
    return create_success_response(rows, count=len(rows), date=report_date)


@tiktok_bp.route("/<pipeline>/groups")
@log_requests
@handle_request_errors
def groups(pipeline):
    """Per-group performance for ?date= (default today)."""
    campaign_type = _campaign_type(pipeline)
    report_date = get_date_parameter("date", default_today=True)

    rows = _report_service().get_group_performance(report_date, campaign_type)
    return create_success_response(rows, count=len(rows), date=report_date)


@tiktok_bp.route("/<pipeline>/metrics")
@log_requests
@handle_request_errors
def metrics(pipeline):
    """Daily KPIs with percentage change versus earlier dates."""
    campaign_type = _campaign_type(pipeline)
    report_date = get_date_parameter("date", default_today=True)

    comparison_period = request.args.get("comparisonPeriod", "all")
    if comparison_period not in COMPARISON_PERIODS:
        return create_error_response(
            'Invalid comparison period', 400, f"comparisonPeriod must be one of: {', '.join(COMPARISON_PERIODS)}"
        )

    custom_date = None
    if comparison_period == "customDate":
        custom_date = get_date_parameter("customDate")

    result = _report_service().get_daily_metrics(
        report_date, campaign_type, comparison_period, custom_date
    )
    if result is None:
        return create_error_response('No data found for specified date', 404)

    return create_success_response(result["data"], comparisons=result["comparisons"])


@tiktok_bp.route("/<pipeline>/dates")
@log_requests
@handle_request_errors
def report_dates(pipeline):
    """Every report date holding data, newest first."""
    campaign_type = _campaign_type(pipeline)
    rows = _report_service().get_report_dates(campaign_type)
    return create_success_response(rows, count=len(rows))


@tiktok_bp.route("/<pipeline>/latest-date")
@log_requests
@handle_request_errors
def latest_date(pipeline):
    campaign_type = _campaign_type(pipeline)
    latest = _report_service().get_latest_date(campaign_type)
    if latest is None:
        label = "Live GMV" if campaign_type is CampaignType.LIVE else "Product GMV"
        return create_error_response('No data found', 404, f"No {label} data found in database")
    return create_success_response({"latest_date": latest})


@tiktok_bp.route("/logs")
@log_requests
@handle_request_errors
def operation_logs():
    """Operation log, newest first; ?date= filters, ?limit= caps (default 100)."""
    container = get_container()
    report_date = get_date_parameter("date") if request.args.get("date") else None
    ingestion = container.get_config("INGESTION")
    default_limit = ingestion.log_limit_default if ingestion else 100

    log_service = safe_get_service(container, "operation_log_service")
    entries = log_service.list_logs(report_date, get_limit_parameter(default_limit))
    return create_success_response(entries, count=len(entries))
