"""
Review dashboards for headteachers and directors.
"""

from datetime import date

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from decorators import roles_required, HEADTEACHER_ROLE, DIRECTOR_ROLE, ADMIN_ROLE
from models import DailyReport
from services.cache import get_cached
from services.summaries import (
    report_row, report_status, attendance_band, daily_stats, filter_dashboard_reports,
    active_class_count, load_director_stats, default_director_range,
    DASHBOARD_FILTERS, FILTER_ALL, FILTER_ISSUES, FILTER_PENDING,
)
from utils.dates import parse_date
from utils.forms import arg_flag

bp = Blueprint('dashboard', __name__)


@bp.route('/headteacher')
@login_required
@roles_required(HEADTEACHER_ROLE, ADMIN_ROLE)
def headteacher_dashboard():
    """Reports for one day (?date=, default today) with the review filters."""
    try:
        selected = parse_date(request.args.get('date'), default=date.today())
    except ValueError:
        return jsonify({'success': False, 'message': 'date must use the YYYY-MM-DD format'}), 400

    status = (request.args.get('status') or FILTER_ALL).lower()
    if status not in DASHBOARD_FILTERS:
        return jsonify({'success': False,
                        'message': f"status must be one of: {', '.join(DASHBOARD_FILTERS)}"}), 400

    reports = DailyReport.query.filter_by(report_date=selected).order_by(DailyReport.id).all()
    rows = [report_row(r) for r in reports]

    items = []
    for report in reports:
        data = report.to_dict(include_comments=True)
        data['status'] = report_status(data)
        data['attendance_band'] = attendance_band(report.present_learners, report.total_learners)
        items.append(data)

    current_app.logger.debug(f"Headteacher dashboard for {selected}: {len(reports)} reports")
    return jsonify({
        'success': True,
        'date': selected.isoformat(),
        'status': status,
        'stats': daily_stats(rows, active_class_count()),
        'counts': {
            FILTER_ALL: len(items),
            FILTER_ISSUES: len(filter_dashboard_reports(items, FILTER_ISSUES)),
            FILTER_PENDING: len(filter_dashboard_reports(items, FILTER_PENDING)),
        },
        'reports': filter_dashboard_reports(items, status),
    })


@bp.route('/director')
@login_required
@roles_required(DIRECTOR_ROLE, ADMIN_ROLE)
def director_dashboard():
    """School-wide attendance over ?start=..&end=, default the last week."""
    default_start, default_end = default_director_range(
        date.today(), current_app.config.get('DIRECTOR_DEFAULT_RANGE_DAYS', 7)
    )
    try:
        start = parse_date(request.args.get('start'), default=default_start)
        end = parse_date(request.args.get('end'), default=default_end)
    except ValueError:
        return jsonify({'success': False, 'message': 'Dates must use the YYYY-MM-DD format.'}), 400
    if start > end:
        return jsonify({'success': False, 'message': 'start must be on or before end.'}), 400

    stats = get_cached(
        f"dashboard:director:{start}:{end}",
        lambda: load_director_stats(start, end),
        force_refresh=arg_flag('refresh'),
    )
    return jsonify({'success': True, **stats})
