# src/salesportal/web/utils/request_helpers.py
"""
Request and response helper utilities for Flask routes.
"""
import logging
from datetime import date
from typing import Any, Optional

from flask import request, jsonify, Response
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class RequestValidationError(Exception):
    """Raised when request parameters are invalid."""

    def __init__(self, error: str, message: Optional[str] = None, status_code: int = 400):
        super().__init__(message or error)
        self.error = error
        self.message = message or error
        self.status_code = status_code


def create_json_response(data: Any, status_code: int = 200) -> Response:
    """Create standardized JSON response."""
    response = jsonify(data)
    response.status_code = status_code
    return response


def create_success_response(data: Any, message: Optional[str] = None, **extra: Any) -> Response:
    """Create standardized success response."""
    response_data = {'success': True, 'data': data}
    if message:
        response_data['message'] = message
    response_data.update(extra)
    return create_json_response(response_data)


def create_error_response(
    error_message: str,
    status_code: int = 400,
    message: Optional[str] = None,
    error_code: Optional[str] = None,
) -> Response:
    """Create standardized error response."""
    response_data = {'success': False, 'error': error_message}
    if message:
        response_data['message'] = message
    if error_code:
        response_data['error_code'] = error_code
    return create_json_response(response_data, status_code)


def safe_get_service(container, service_name: str):
    """Safely get service from container."""
    try:
        service = container.get(service_name)
    except Exception as e:
        logger.error(f"Failed to get service '{service_name}': {e}")
        raise RequestValidationError(
            'Service unavailable', f"Service '{service_name}' is not available", 503
        ) from e
    if service is None:
        raise RequestValidationError(
            'Service unavailable', f"Service '{service_name}' is not available", 503
        )
    return service


def get_date_parameter(name: str = 'date', default_today: bool = False) -> Optional[str]:
    """
    Read an ISO date query parameter.

    Raises:
        RequestValidationError: If the parameter is missing (and no default) or malformed
    """
    value = (request.args.get(name) or '').strip()
    if not value:
        if default_today:
            return date.today().isoformat()
        raise RequestValidationError(
            'Date is required', f'Please provide a {name} parameter (YYYY-MM-DD)'
        )

    try:
        if len(value) != 10:
            raise ValueError(value)
        date.fromisoformat(value)
    except ValueError:
        raise RequestValidationError('Invalid date format', 'Date must be in YYYY-MM-DD format')
    return value


def get_limit_parameter(default: int = 100, maximum: int = 1000) -> int:
    """Get a positive, capped ``limit`` query parameter."""
    limit = request.args.get('limit', default, type=int)
    if limit is None or limit < 1:
        limit = default
    return min(limit, maximum)


# Simple decorators without conflicts
def log_requests(func):
    """Decorator to log request information."""
    # Don't use @wraps; the unique name keeps Flask endpoint names distinct
    def log_wrapper(*args, **kwargs):
        logger.debug(f"Request: {request.method} {request.path}")
        return func(*args, **kwargs)
    log_wrapper.__name__ = f"{func.__name__}_logged"
    return log_wrapper


def handle_request_errors(func):
    """Decorator to turn request and unexpected errors into JSON responses."""
    def error_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RequestValidationError as e:
            return create_error_response(e.error, e.status_code, e.message)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in {func.__name__}: {e}")
            return create_error_response(
                'Internal server error', 500, str(e) or 'Unknown error', 'INTERNAL_ERROR'
            )
    error_wrapper.__name__ = f"{func.__name__}_error_handled"
    return error_wrapper
