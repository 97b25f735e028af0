"""
Report Routes Package

Report history, single-report views and the analytics pages shared by
teachers, headteachers, directors and admins.
"""

from flask import Blueprint

# Create the main report blueprint
report_blueprint = Blueprint('reports', __name__)

# Import all route modules to register their routes
from . import (
    history,
    analytics,
    detail,
)

# Register all blueprints with the main report blueprint
report_blueprint.register_blueprint(history.bp, url_prefix='')
report_blueprint.register_blueprint(analytics.bp, url_prefix='')
report_blueprint.register_blueprint(detail.bp, url_prefix='')
