"""
Management Routes Package

Routes for headteachers, directors and admins: the review dashboards and the
administration pages.
"""

from flask import Blueprint

# Create the main management blueprint
management_blueprint = Blueprint('management', __name__)

# Import all route modules to register their routes
from . import (
    dashboard,
    administration,
)

# Register all blueprints with the main management blueprint
management_blueprint.register_blueprint(dashboard.bp, url_prefix='')
management_blueprint.register_blueprint(administration.bp, url_prefix='/admin')
