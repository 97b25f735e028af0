"""
Error handling for the reporting API.
Every error leaves as a JSON body: {"success": false, "message": ...}.
"""

import traceback
import json
from flask import request, jsonify
from flask_login import current_user
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException
from extensions import db
import logging

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = ['password', 'password_hash', 'csrf_token', 'secret']

MESSAGES = {
    400: 'Bad request.',
    401: 'Please log in to access this resource.',
    403: "You don't have permission to access this resource.",
    404: 'The resource you are looking for does not exist.',
    405: 'Method not allowed.',
    409: 'The request conflicts with existing data.',
    500: 'An internal server error occurred. Please try again later.',
}


def get_client_info():
    """Extract client information from the request."""
    return {
        'user_agent': request.headers.get('User-Agent', 'Unknown'),
        'ip_address': request.environ.get('HTTP_X_FORWARDED_FOR', request.environ.get('REMOTE_ADDR', 'Unknown')),
    }


def get_request_data():
    """Request form, JSON and query data with sensitive fields removed."""
    data = {}
    if request.form:
        for key, value in request.form.items():
            if key.lower() not in SENSITIVE_FIELDS:
                data[f'form_{key}'] = str(value)[:500]  # Limit length

    json_data = request.get_json(silent=True) if request.is_json else None
    if isinstance(json_data, dict):
        filtered_json = {k: v for k, v in json_data.items() if k.lower() not in SENSITIVE_FIELDS}
        data['json_data'] = str(filtered_json)[:1000]

    if request.args:
        data['query_params'] = dict(request.args)

    return json.dumps(data) if data else None


def error_response(status_code, message=None, **extra):
    body = {'success': False, 'message': message or MESSAGES.get(status_code, 'Request failed.')}
    body.update(extra)
    return jsonify(body), status_code


def log_server_error(error):
    """Log a 500 with the request context needed to reproduce it."""
    user_id = current_user.id if current_user and current_user.is_authenticated else None
    client = get_client_info()
    logger.error(
        "Server Error: %s | %s %s | user=%s ip=%s data=%s",
        error, request.method, request.path, user_id, client['ip_address'], get_request_data()
    )
    logger.error("Traceback: %s", traceback.format_exc())


def register_error_handlers(app):
    """Attach JSON error handlers to the app."""

    @app.errorhandler(400)
    def bad_request_error(error):
        return error_response(400, getattr(error, 'description', None))

    @app.errorhandler(401)
    def unauthorized_error(error):
        return error_response(401)

    @app.errorhandler(403)
    def forbidden_error(error):
        return error_response(403)

    @app.errorhandler(404)
    def not_found_error(error):
        return error_response(404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return error_response(405)

    @app.errorhandler(409)
    def conflict_error(error):
        return error_response(409, getattr(error, 'description', None))

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        log_server_error(error)
        return error_response(500)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        logger.warning("CSRF failure on %s: %s", request.path, error.description)
        return error_response(400, 'CSRF token missing or invalid. Please try again.')

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error_response(error.code, error.description)
        db.session.rollback()
        log_server_error(error)
        return error_response(500, 'An unexpected error occurred. Please try again later.')
