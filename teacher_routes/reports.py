"""
Daily report submission for teachers.
"""

from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from decorators import teacher_required
from services.reports import submit_report, ReportValidationError, ReportError
from services.activity_log import log_activity, SUBMIT_REPORT
from utils.forms import request_data

bp = Blueprint('reports', __name__)


@bp.route('/reports', methods=['POST'])
@login_required
@teacher_required
def create_report():
    """Submit the daily report for the teacher's assigned class."""
    try:
        report = submit_report(current_user, request_data())
    except ReportValidationError as e:
        return jsonify({'success': False, 'message': 'Please correct the highlighted fields.',
                        'errors': e.errors}), 400
    except ReportError as e:
        current_app.logger.warning(f"Report submission by {current_user.id} rejected: {e}")
        return jsonify({'success': False, 'message': str(e)}), e.status_code

    log_activity(
        user_id=current_user.id,
        action=SUBMIT_REPORT,
        details={'report_id': report.id, 'class_id': report.class_id,
                 'report_date': report.report_date.isoformat()},
    )
    return jsonify({
        'success': True,
        'message': 'Report submitted successfully.',
        'report': report.to_dict(),
        'incidents': [i.to_dict() for i in report.incidents],
    }), 201
