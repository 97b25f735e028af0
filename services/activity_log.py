"""
Activity logging for auditing: logins, report submissions, edits, comments
and admin changes.
"""

import json
from flask import current_app, request, has_request_context
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import ActivityLog

# Actions written by the routes
LOGIN = 'login'
LOGOUT = 'logout'
SUBMIT_REPORT = 'submit_report'
EDIT_REPORT = 'edit_report'
DELETE_REPORT = 'delete_report'
ADD_COMMENT = 'add_comment'
CREATE_USER = 'create_user'
UPDATE_USER = 'update_user'
DELETE_USER = 'delete_user'
CREATE_CLASS = 'create_class'
UPDATE_CLASS = 'update_class'
DELETE_CLASS = 'delete_class'
UPDATE_SETTINGS = 'update_settings'


def log_activity(user_id, action, details=None, ip_address=None, user_agent=None, success=True, error_message=None):
    """Log one activity entry. Client info is read from the request when not given."""
    if has_request_context():
        ip_address = ip_address or request.remote_addr
        user_agent = user_agent or request.headers.get('User-Agent')
    try:
        log_entry = ActivityLog()
        log_entry.user_id = user_id
        log_entry.action = action
        log_entry.ip_address = ip_address
        log_entry.user_agent = user_agent
        log_entry.success = success
        log_entry.error_message = error_message
        if details:
            log_entry.details = json.dumps(details, default=str)
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log activity: {str(e)}")


def get_user_activity_log(user_id=None, action=None, start_date=None, end_date=None, limit=100):
    """Retrieve activity log entries with optional filters."""
    query = ActivityLog.query
    if user_id:
        query = query.filter_by(user_id=user_id)
    if action:
        query = query.filter_by(action=action)
    if start_date:
        query = query.filter(ActivityLog.timestamp >= start_date)
    if end_date:
        query = query.filter(ActivityLog.timestamp <= end_date)
    return query.order_by(ActivityLog.timestamp.desc()).limit(limit).all()


def activity_to_dict(entry):
    return {
        'id': entry.id,
        'user_id': entry.user_id,
        'user_name': entry.user.full_name if entry.user else None,
        'action': entry.action,
        'details': json.loads(entry.details) if entry.details else None,
        'success': entry.success,
        'error_message': entry.error_message,
        'timestamp': entry.timestamp.isoformat() if entry.timestamp else None,
    }
