"""
Single-report routes: view, edit, comment, delete and PDF download.
"""

from flask import Blueprint, jsonify, abort, current_app
from flask_login import login_required, current_user
from decorators import admin_required
from models import db, DailyReport
from services.reports import (
    update_report, add_comment, delete_report, can_view, can_edit, can_comment,
    ReportValidationError,
)
from services.summaries import report_status, attendance_band
from services.settings import school_name
from services.activity_log import log_activity, EDIT_REPORT, ADD_COMMENT, DELETE_REPORT
from utils import pdf_export
from utils.forms import request_data

bp = Blueprint('detail', __name__)


def _get_report(report_id):
    report = db.session.get(DailyReport, report_id)
    if report is None:
        abort(404)
    return report


@bp.route('/<int:report_id>')
@login_required
def view_report(report_id):
    report = _get_report(report_id)
    if not can_view(current_user, report):
        abort(403)

    data = report.to_dict(include_comments=True)
    data['status'] = report_status(data)
    data['attendance_band'] = attendance_band(report.present_learners, report.total_learners)
    data['incidents'] = [i.to_dict() for i in report.incidents]
    return jsonify({
        'success': True,
        'report': data,
        'can_edit': can_edit(current_user, report),
        'can_comment': can_comment(current_user),
    })


@bp.route('/<int:report_id>/edit', methods=['POST'])
@login_required
def edit_report(report_id):
    report = _get_report(report_id)
    if not can_edit(current_user, report):
        abort(403)

    try:
        update_report(report, request_data())
    except ReportValidationError as e:
        db.session.rollback()
        return jsonify({'success': False, 'message': 'Please correct the highlighted fields.',
                        'errors': e.errors}), 400

    log_activity(
        user_id=current_user.id,
        action=EDIT_REPORT,
        details={'report_id': report.id},
    )
    return jsonify({'success': True, 'message': 'Report updated successfully.', 'report': report.to_dict()})


@bp.route('/<int:report_id>/comments', methods=['POST'])
@login_required
def comment_on_report(report_id):
    report = _get_report(report_id)
    if not can_comment(current_user):
        abort(403)

    try:
        comment = add_comment(report, current_user, request_data().get('comment'))
    except ReportValidationError as e:
        return jsonify({'success': False, 'message': 'Comment cannot be empty.', 'errors': e.errors}), 400

    log_activity(
        user_id=current_user.id,
        action=ADD_COMMENT,
        details={'report_id': report.id, 'comment_id': comment.id},
    )
    return jsonify({'success': True, 'message': 'Comment added.', 'comment': comment.to_dict()}), 201


@bp.route('/<int:report_id>/delete', methods=['POST'])
@login_required
@admin_required
def remove_report(report_id):
    report = _get_report(report_id)
    details = {'report_id': report.id, 'class_id': report.class_id,
               'report_date': report.report_date.isoformat()}
    delete_report(report)
    log_activity(user_id=current_user.id, action=DELETE_REPORT, details=details)
    return jsonify({'success': True, 'message': 'Report deleted.'})


@bp.route('/<int:report_id>/pdf')
@login_required
def report_pdf(report_id):
    """Download the daily report as a PDF."""
    report = _get_report(report_id)
    if not can_view(current_user, report):
        abort(403)

    html_content = pdf_export.render_report_html(report, school_name())
    try:
        pdf_bytes = pdf_export.html_to_pdf(html_content)
    except pdf_export.PDFExportError as e:
        current_app.logger.error(f'Error generating PDF for report {report.id}: {e}')
        return jsonify({'success': False, 'message': 'PDF generation is unavailable.'}), 500

    class_name = report.class_info.display_name.replace(' ', '') if report.class_info else 'Class'
    filename = f"report_{class_name}_{report.report_date.isoformat()}.pdf"
    return pdf_export.pdf_response(pdf_bytes, filename)
