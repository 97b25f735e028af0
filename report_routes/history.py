"""
Report history: paginated list with date, issue, grade and search filters.
"""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from models import db, Class
from services.reports import history_query
from services.summaries import report_status
from utils.dates import parse_date
from utils.forms import arg_flag, arg_int

bp = Blueprint('history', __name__)


@bp.route('/history')
@login_required
def report_history():
    """Teachers see their own reports; reviewers see every report."""
    try:
        date_from = parse_date(request.args.get('date_from'))
        date_to = parse_date(request.args.get('date_to'))
    except ValueError:
        return jsonify({'success': False, 'message': 'Dates must use the YYYY-MM-DD format.'}), 400

    page = arg_int('page', 1, minimum=1)
    per_page = current_app.config.get('HISTORY_PAGE_SIZE', 20)

    query = history_query(
        current_user,
        date_from=date_from,
        date_to=date_to,
        has_issues=arg_flag('has_issues'),
        grade=(request.args.get('grade') or '').strip() or None,
        search=(request.args.get('search') or '').strip() or None,
    )
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    reports = []
    for report in pagination.items:
        data = report.to_dict()
        data['status'] = report_status(data)
        reports.append(data)

    grades = [g for (g,) in db.session.query(Class.grade).distinct().order_by(Class.grade).all()]

    return jsonify({
        'success': True,
        'reports': reports,
        'grades': grades,
        'page': pagination.page,
        'per_page': per_page,
        'total': pagination.total,
        'has_next': pagination.has_next,
    })
