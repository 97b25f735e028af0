"""
Dashboard route for teachers.
"""

from datetime import date

from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from decorators import teacher_required
from models import DailyReport
from services.summaries import report_status, attendance_band

bp = Blueprint('dashboard', __name__)


@bp.route('/dashboard')
@login_required
@teacher_required
def teacher_dashboard():
    """The teacher's class, its recent reports and whether today's is in."""
    class_obj = current_user.assigned_class
    if class_obj is None:
        return jsonify({
            'success': True,
            'assigned_class': None,
            'recent_reports': [],
            'today_submitted': False,
            'message': 'No class has been assigned to you yet. Please contact the administrator.',
        })

    limit = current_app.config.get('TEACHER_RECENT_REPORTS', 10)
    reports = DailyReport.query.filter_by(class_id=class_obj.id).order_by(
        DailyReport.report_date.desc()
    ).limit(limit).all()

    today = date.today()
    today_report = DailyReport.query.filter_by(class_id=class_obj.id, report_date=today).first()

    recent = []
    for report in reports:
        data = report.to_dict()
        data['status'] = report_status(data)
        data['attendance_band'] = attendance_band(report.present_learners, report.total_learners)
        recent.append(data)

    return jsonify({
        'success': True,
        'assigned_class': class_obj.to_dict(),
        'recent_reports': recent,
        'today_submitted': today_report is not None,
        'today_report_id': today_report.id if today_report else None,
    })
