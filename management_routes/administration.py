"""
Administration routes: user accounts, classes, the daily report overview,
school settings and the activity feed.
"""

from datetime import date

from flask import Blueprint, request, jsonify, abort, current_app
from flask_login import login_required, current_user
from decorators import admin_required
from models import db, User, Class, DailyReport
from services.users import (
    create_user, update_user, delete_user, list_users, list_classes_grouped,
    add_class, update_class, delete_class, activity_feed, UserAdminError,
)
from services.settings import get_settings, update_settings, SettingsError
from services.summaries import report_status, attendance_band
from services.activity_log import (
    log_activity, get_user_activity_log, activity_to_dict,
    CREATE_USER, UPDATE_USER, DELETE_USER, CREATE_CLASS, UPDATE_CLASS, DELETE_CLASS, UPDATE_SETTINGS,
)
from utils.dates import parse_date
from utils.forms import request_data, arg_int

bp = Blueprint('administration', __name__)

TRUE_VALUES = ('1', 'true', 'on', 'yes', 'y')


def _admin_error(error):
    current_app.logger.warning(f"Admin action by {current_user.id} rejected: {error.message}")
    return jsonify({'success': False, 'message': error.message}), error.status_code


def _get_or_404(model, object_id):
    obj = db.session.get(model, object_id)
    if obj is None:
        abort(404)
    return obj


# ---- Users ----

@bp.route('/users')
@login_required
@admin_required
def users():
    """All accounts with their assigned class, plus the classes to pick from."""
    classes = Class.query.order_by(Class.grade, Class.stream).all()
    return jsonify({
        'success': True,
        'users': [u.to_dict() for u in list_users()],
        'classes': [c.to_dict() for c in classes],
    })


@bp.route('/users', methods=['POST'])
@login_required
@admin_required
def add_user():
    form = request_data()
    try:
        user = create_user(
            email=form.get('email'),
            password=form.get('password'),
            full_name=form.get('full_name'),
            role=form.get('role'),
            class_id=form.get('class_id'),
        )
    except UserAdminError as e:
        return _admin_error(e)

    log_activity(
        user_id=current_user.id,
        action=CREATE_USER,
        details={'new_user_id': user.id, 'email': user.email, 'role': user.role},
    )
    return jsonify({'success': True, 'message': 'User created successfully.', 'user': user.to_dict()}), 201


@bp.route('/users/<int:user_id>', methods=['POST'])
@login_required
@admin_required
def edit_user(user_id):
    user = _get_or_404(User, user_id)
    form = request_data()
    try:
        update_user(user, full_name=form.get('full_name'), role=form.get('role'),
                    class_id=form.get('class_id'))
    except UserAdminError as e:
        db.session.rollback()
        return _admin_error(e)

    log_activity(
        user_id=current_user.id,
        action=UPDATE_USER,
        details={'target_user_id': user.id, 'role': user.role, 'class_id': form.get('class_id')},
    )
    return jsonify({'success': True, 'message': 'User updated successfully.', 'user': user.to_dict()})


@bp.route('/users/<int:user_id>/delete', methods=['POST'])
@login_required
@admin_required
def remove_user(user_id):
    user = _get_or_404(User, user_id)
    if user.id == current_user.id:
        return jsonify({'success': False, 'message': 'You cannot delete your own account.'}), 400

    details = {'deleted_user_id': user.id, 'email': user.email, 'role': user.role}
    delete_user(user)
    log_activity(user_id=current_user.id, action=DELETE_USER, details=details)
    return jsonify({'success': True, 'message': 'User deleted successfully.'})


@bp.route('/activity')
@login_required
@admin_required
def activity():
    """Recent submissions and registrations, plus the latest audit entries."""
    limit = arg_int('limit', 50, minimum=1)
    return jsonify({
        'success': True,
        'recent_activity': activity_feed(),
        'audit_log': [activity_to_dict(a) for a in get_user_activity_log(limit=limit)],
    })


# ---- Classes ----

@bp.route('/classes')
@login_required
@admin_required
def classes():
    return jsonify({'success': True, 'classes_by_grade': list_classes_grouped()})


@bp.route('/classes', methods=['POST'])
@login_required
@admin_required
def create_class():
    form = request_data()
    try:
        class_obj = add_class(form.get('grade'), form.get('stream'))
    except UserAdminError as e:
        return _admin_error(e)

    log_activity(
        user_id=current_user.id,
        action=CREATE_CLASS,
        details={'class_id': class_obj.id, 'name': class_obj.display_name},
    )
    return jsonify({'success': True, 'message': 'Class added successfully.', 'class': class_obj.to_dict()}), 201


@bp.route('/classes/<int:class_id>', methods=['POST'])
@login_required
@admin_required
def edit_class(class_id):
    class_obj = _get_or_404(Class, class_id)
    active = request_data().get('active')
    if active is None:
        return jsonify({'success': False, 'message': 'active is required.'}), 400
    if not isinstance(active, bool):
        active = str(active).strip().lower() in TRUE_VALUES

    update_class(class_obj, active)
    log_activity(
        user_id=current_user.id,
        action=UPDATE_CLASS,
        details={'class_id': class_obj.id, 'active': class_obj.active},
    )
    return jsonify({'success': True, 'message': 'Class updated successfully.', 'class': class_obj.to_dict()})


@bp.route('/classes/<int:class_id>/delete', methods=['POST'])
@login_required
@admin_required
def remove_class(class_id):
    class_obj = _get_or_404(Class, class_id)
    details = {'class_id': class_obj.id, 'name': class_obj.display_name}
    delete_class(class_obj)
    log_activity(user_id=current_user.id, action=DELETE_CLASS, details=details)
    return jsonify({'success': True, 'message': 'Class deleted successfully.'})


# ---- Reports ----

@bp.route('/reports')
@login_required
@admin_required
def reports():
    """Every report for ?date= (default today) with its status badge."""
    try:
        selected = parse_date(request.args.get('date'), default=date.today())
    except ValueError:
        return jsonify({'success': False, 'message': 'date must use the YYYY-MM-DD format'}), 400

    items = []
    for report in DailyReport.query.filter_by(report_date=selected).order_by(DailyReport.id).all():
        data = report.to_dict()
        data['status'] = report_status(data)
        data['attendance_band'] = attendance_band(report.present_learners, report.total_learners)
        items.append(data)
    return jsonify({'success': True, 'date': selected.isoformat(), 'reports': items})


# ---- Settings ----

@bp.route('/settings')
@login_required
@admin_required
def settings():
    return jsonify({'success': True, 'settings': get_settings().to_dict()})


@bp.route('/settings', methods=['POST'])
@login_required
@admin_required
def save_settings():
    school_settings = get_settings()
    try:
        update_settings(school_settings, request_data(), current_user)
    except SettingsError as e:
        return jsonify({'success': False, 'message': 'Please correct the highlighted fields.',
                        'errors': e.errors}), 400

    log_activity(
        user_id=current_user.id,
        action=UPDATE_SETTINGS,
        details={'fields': sorted(request_data().keys())},
    )
    return jsonify({'success': True, 'message': 'Settings saved successfully.',
                    'settings': school_settings.to_dict()})
