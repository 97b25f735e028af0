# Core Flask imports
from flask import Blueprint, redirect, url_for, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

# Database and model imports
from models import User

# Authentication and decorators
from decorators import TEACHER_ROLE, HEADTEACHER_ROLE, DIRECTOR_ROLE, ADMIN_ROLE

# Application imports
from services.activity_log import log_activity, LOGIN, LOGOUT
from utils.forms import request_data

# Werkzeug utilities
from werkzeug.security import check_password_hash

auth_blueprint = Blueprint('auth', __name__)


@auth_blueprint.route('/login', methods=['POST'])
def login():
    if current_user.is_authenticated:
        return jsonify({'success': True, 'user': current_user.to_dict(),
                        'redirect': url_for('auth.dashboard')})

    form = request_data()
    # JSON clients may send numbers; compare everything as text
    email = str(form.get('email') or '').strip().lower()
    password = form.get('password')
    if password is not None:
        password = str(password)

    if not email or not password:
        return jsonify({'success': False, 'message': 'Email and password are required.'}), 400

    user = User.query.filter_by(email=email).first()
    if user and check_password_hash(user.password_hash, password):
        remember = str(form.get('remember', '')).lower() in ('1', 'true', 'on', 'yes')
        login_user(user, remember=remember)

        # Log successful login
        log_activity(
            user_id=user.id,
            action=LOGIN,
            details={'role': user.role, 'remember': remember},
        )
        current_app.logger.info(f"User {user.id} logged in as {user.role}")
        return jsonify({'success': True, 'user': user.to_dict(), 'redirect': url_for('auth.dashboard')})

    # Log failed login attempt - invalid credentials
    log_activity(
        user_id=None,
        action='login_failed',
        details={'email': email, 'reason': 'invalid_credentials'},
        success=False,
        error_message='Invalid credentials'
    )
    current_app.logger.warning(f"Failed login for {email}")
    return jsonify({'success': False, 'message': 'Invalid email or password.'}), 401


@auth_blueprint.route('/logout', methods=['POST'])
@login_required
def logout():
    # Log logout activity
    log_activity(
        user_id=current_user.id,
        action=LOGOUT,
        details={'role': current_user.role},
    )
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_blueprint.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@auth_blueprint.route('/dashboard')
@login_required
def dashboard():
    """Redirects user to the appropriate dashboard based on their role."""
    if current_user.role == TEACHER_ROLE:
        return redirect(url_for('teacher.dashboard.teacher_dashboard'))
    elif current_user.role in [HEADTEACHER_ROLE, ADMIN_ROLE]:
        return redirect(url_for('management.dashboard.headteacher_dashboard'))
    elif current_user.role == DIRECTOR_ROLE:
        return redirect(url_for('management.dashboard.director_dashboard'))
    else:
        # Fallback for unknown roles
        return jsonify({'success': False, 'message': 'No dashboard for this role.'}), 403


@auth_blueprint.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header on POST requests."""
    return jsonify({'success': True, 'csrf_token': generate_csrf()})
