"""
Teacher Routes Package

Routes for teachers: their class dashboard and daily report submission.
"""

from flask import Blueprint

# Create the main teacher blueprint
teacher_blueprint = Blueprint('teacher', __name__)

# Import all route modules to register their routes
from . import (
    dashboard,
    reports,
)

# Register sub-blueprints with the main teacher blueprint
teacher_blueprint.register_blueprint(dashboard.bp, url_prefix='')
teacher_blueprint.register_blueprint(reports.bp, url_prefix='')
