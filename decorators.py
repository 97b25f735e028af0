from functools import wraps
from flask import abort
from flask_login import current_user

TEACHER_ROLE = 'teacher'
HEADTEACHER_ROLE = 'headteacher'
DIRECTOR_ROLE = 'director'
ADMIN_ROLE = 'admin'

# Roles allowed to read every report and the analytics pages
REVIEWER_ROLES = [HEADTEACHER_ROLE, DIRECTOR_ROLE, ADMIN_ROLE]

# Roles allowed to leave feedback on a report
COMMENTER_ROLES = [HEADTEACHER_ROLE, ADMIN_ROLE]


def is_reviewer_role(role):
    """Check if a role may review all reports"""
    if not role:
        return False
    return role in REVIEWER_ROLES


def roles_required(*roles):
    """Restricts access to users whose role is one of ``roles``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)  # Unauthorized - not logged in
            if current_user.role not in roles:
                abort(403)  # Forbidden - wrong role
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Restricts access to users with the 'admin' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if current_user.role != ADMIN_ROLE:
            abort(403)
        return f(*args, **kwargs)
    return decorated_function


def teacher_required(f):
    """Restricts access to users with the 'teacher' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if current_user.role != TEACHER_ROLE:
            abort(403)
        return f(*args, **kwargs)
    return decorated_function


def reviewer_required(f):
    """Restricts access to headteachers, directors and admins."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not is_reviewer_role(current_user.role):
            abort(403)
        return f(*args, **kwargs)
    return decorated_function
