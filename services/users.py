"""
Account and class administration used by the admin blueprint.
"""

import logging

from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from extensions import db
from models import User, Class, TeacherClass, DailyReport, ROLES
from decorators import TEACHER_ROLE
from .cache import invalidate_report_aggregates

logger = logging.getLogger(__name__)

ACTIVITY_FEED_SIZE = 15
RECENT_REPORT_ENTRIES = 10
RECENT_USER_ENTRIES = 5


class UserAdminError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def _clean(value):
    """Submitted value as stripped text; JSON numbers arrive as int/float."""
    if value is None:
        return ''
    return str(value).strip()


def _resolve_class(class_id):
    if class_id in (None, ''):
        return None
    try:
        class_id = int(class_id)
    except (TypeError, ValueError):
        raise UserAdminError('Invalid class id.')
    class_obj = db.session.get(Class, class_id)
    if class_obj is None:
        raise UserAdminError('Class not found.', 404)
    return class_obj


def _assign_class(user, class_obj):
    """Replace any existing assignment with class_obj."""
    for assignment in list(user.class_assignments):
        user.class_assignments.remove(assignment)
    db.session.flush()
    user.class_assignments.append(TeacherClass(class_id=class_obj.id))


def create_user(email, password, full_name, role, class_id=None):
    email = _clean(email).lower()
    password = '' if password is None else str(password)
    full_name = _clean(full_name)
    role = _clean(role)
    if not email or not password or not full_name or not role:
        raise UserAdminError('Missing required fields')
    if role not in ROLES:
        raise UserAdminError('Invalid role')
    if User.query.filter_by(email=email).first():
        raise UserAdminError('A user with this email already exists.', 409)

    class_obj = _resolve_class(class_id) if role == TEACHER_ROLE else None

    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        full_name=full_name,
        role=role,
    )
    db.session.add(user)
    if class_obj is not None:
        user.class_assignments.append(TeacherClass(class_id=class_obj.id))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise UserAdminError('A user with this email already exists.', 409)

    invalidate_report_aggregates()
    logger.info("Created %s account %s", role, email)
    return user


def update_user(user, full_name=None, role=None, class_id=None):
    """Change name and role; a teacher given class_id is moved to that class."""
    full_name = _clean(full_name)
    role = _clean(role)
    if full_name:
        user.full_name = full_name
    if role:
        if role not in ROLES:
            raise UserAdminError('Invalid role')
        user.role = role

    class_obj = _resolve_class(class_id)
    if class_obj is not None and user.role == TEACHER_ROLE:
        _assign_class(user, class_obj)

    db.session.commit()
    invalidate_report_aggregates()
    return user


def delete_user(user):
    for assignment in list(user.class_assignments):
        db.session.delete(assignment)
    db.session.flush()
    db.session.delete(user)
    db.session.commit()
    invalidate_report_aggregates()
    logger.info("Deleted user %s", user.email)


def list_users():
    return User.query.order_by(User.full_name).all()


def list_classes_grouped():
    """Classes grouped by grade, each with its assigned teacher."""
    classes = Class.query.order_by(Class.grade, Class.stream).all()
    grouped = {}
    for class_obj in classes:
        data = class_obj.to_dict()
        teacher = class_obj.teacher
        data['teacher'] = {'id': teacher.id, 'full_name': teacher.full_name} if teacher else None
        grouped.setdefault(class_obj.grade, []).append(data)
    return grouped


def add_class(grade, stream):
    grade = _clean(grade)
    stream = _clean(stream)
    if not grade or not stream:
        raise UserAdminError('Grade and stream are required.')
    if Class.query.filter_by(grade=grade, stream=stream).first():
        raise UserAdminError(f"{grade} - {stream} already exists.", 409)

    class_obj = Class(grade=grade, stream=stream, active=True)
    db.session.add(class_obj)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise UserAdminError(f"{grade} - {stream} already exists.", 409)
    invalidate_report_aggregates()
    return class_obj


def update_class(class_obj, active):
    class_obj.active = bool(active)
    db.session.commit()
    invalidate_report_aggregates()
    return class_obj


def delete_class(class_obj):
    db.session.delete(class_obj)
    db.session.commit()
    invalidate_report_aggregates()


def activity_feed(limit=ACTIVITY_FEED_SIZE):
    """Recent report submissions merged with recent registrations, newest first."""
    entries = []
    reports = DailyReport.query.order_by(DailyReport.created_at.desc()).limit(RECENT_REPORT_ENTRIES).all()
    for report in reports:
        entries.append({
            'id': f"report-{report.id}",
            'user_name': report.teacher.full_name if report.teacher else 'Unknown',
            'action': 'Submitted Report',
            'details': report.class_info.display_name if report.class_info else 'Unknown',
            'timestamp': report.created_at,
        })

    users = User.query.order_by(User.created_at.desc()).limit(RECENT_USER_ENTRIES).all()
    for user in users:
        entries.append({
            'id': f"user-{user.id}",
            'user_name': 'System',
            'action': 'User Registered',
            'details': user.full_name,
            'timestamp': user.created_at,
        })

    entries.sort(key=lambda e: e['timestamp'], reverse=True)
    entries = entries[:limit]
    for entry in entries:
        entry['timestamp'] = entry['timestamp'].isoformat()
    return entries
