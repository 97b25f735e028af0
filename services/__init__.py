"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .activity_log import log_activity, get_user_activity_log
from .cache import get_cached, invalidate, invalidate_report_aggregates
from .compliance import calculate_compliance, load_compliance
from .absentees import parse_absentee_names, aggregate_absentees, build_alerts, absentee_report
from .summaries import weekly_summary, monthly_summary, daily_stats, director_stats
from .reports import (
    ReportError,
    ReportValidationError,
    DuplicateReportError,
    NoClassAssignedError,
    submit_report,
    update_report,
    add_comment,
)
from .users import UserAdminError
from .settings import get_settings, update_settings, SettingsError

__all__ = [
    'log_activity',
    'get_user_activity_log',
    'get_cached',
    'invalidate',
    'invalidate_report_aggregates',
    'calculate_compliance',
    'load_compliance',
    'parse_absentee_names',
    'aggregate_absentees',
    'build_alerts',
    'absentee_report',
    'weekly_summary',
    'monthly_summary',
    'daily_stats',
    'director_stats',
    'ReportError',
    'ReportValidationError',
    'DuplicateReportError',
    'NoClassAssignedError',
    'submit_report',
    'update_report',
    'add_comment',
    'UserAdminError',
    'get_settings',
    'update_settings',
    'SettingsError',
]
